"""Cart lookup and lifecycle: commands and handler.

A customer has at most one cart. It is created lazily the first time it is
read or written to.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.domain import ordering


def find_cart(customer_id) -> Cart | None:
    """The customer's cart, or ``None`` if they never had one."""
    repo = current_domain.repository_for(Cart)
    carts = repo._dao.query.filter(customer_id=str(customer_id)).all().items
    if not carts:
        return None
    return repo.get(carts[0].id)


def cart_for(customer_id) -> Cart:
    cart = find_cart(customer_id)
    if cart is None:
        raise ObjectNotFoundError(f"Cart for customer {customer_id} not found")
    return cart


def get_or_create_cart(customer_id) -> Cart:
    cart = find_cart(customer_id)
    if cart is None:
        cart = Cart.create(customer_id=str(customer_id))
        current_domain.repository_for(Cart).add(cart)
    return cart


@ordering.command(part_of="Cart")
class OpenCart:
    """Make sure the customer has a cart."""

    customer_id = Identifier(required=True)


@ordering.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        return str(get_or_create_cart(command.customer_id).id)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = cart_for(command.customer_id)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)
