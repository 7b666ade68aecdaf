"""Cart shipping address: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.management import cart_for
from ordering.domain import ordering


@ordering.command(part_of="Cart")
class SetCartShippingAddress:
    customer_id = Identifier(required=True)
    name = String(max_length=100)
    address = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    zip_code = String(max_length=20)
    country = String(max_length=100)
    phone = String(max_length=30)


@ordering.command_handler(part_of=Cart)
class CartShippingHandler:
    @handle(SetCartShippingAddress)
    def set_shipping_address(self, command):
        cart = cart_for(command.customer_id)
        cart.set_shipping_address(
            name=command.name,
            address=command.address,
            city=command.city,
            state=command.state,
            zip_code=command.zip_code,
            country=command.country,
            phone=command.phone,
        )
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)
