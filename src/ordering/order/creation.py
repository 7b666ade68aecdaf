"""Order placement: commands and handler.

Prices always come from the catalogue at placement time; whatever the
client believes an item costs is ignored. Stock is taken in the same unit
of work that saves the order.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.management import cart_for
from ordering.catalogue.product import Product
from ordering.domain import ordering
from ordering.inventory.adjuster import reserve_order_stock
from ordering.order.numbering import next_order_number
from ordering.order.order import Order
from ordering.pricing.coupons import get_coupon_repository

logger = structlog.get_logger(__name__)


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


def price_line_items(requested_items) -> list[dict]:
    """Snapshot catalogue data for each requested ``{product_id, quantity, color, size}``."""
    if not requested_items:
        raise ValidationError({"items": ["No order items"]})

    repo = current_domain.repository_for(Product)
    lines = []
    for requested in requested_items:
        product_id = requested.get("product_id")
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            raise ValidationError({"items": [f"Product {product_id} not found"]}) from None

        if not product.is_active:
            raise ValidationError({"items": [f"{product.name} is not available"]})

        color = requested.get("color") or None
        size = requested.get("size") or None
        if product.has_variants and not (color and size):
            raise ValidationError({"items": [f"Please select color and size for {product.name}"]})

        quantity = int(requested.get("quantity") or 0)
        if quantity < 1:
            raise ValidationError({"items": [f"Quantity for {product.name} must be at least 1"]})

        lines.append(
            {
                "product_id": str(product.id),
                "name": product.name,
                "price": product.price,
                "quantity": quantity,
                "color": color,
                "size": size,
                "image": product.image_url or "",
                "sku": product.sku,
            }
        )
    return lines


def resolve_coupon(code):
    if not code:
        return None
    coupon = get_coupon_repository().find(code)
    if coupon is None:
        raise ValidationError({"coupon_code": ["Invalid coupon code"]})
    return coupon


def place_order(requested_items, shipping_address, customer_id=None, coupon=None, **details) -> Order:
    lines = price_line_items(requested_items)

    order = Order.create(
        order_number=next_order_number(),
        items=lines,
        shipping_address=shipping_address,
        customer_id=customer_id,
        coupon=coupon,
        **details,
    )
    reserve_order_stock(order)
    current_domain.repository_for(Order).add(order)

    logger.info(
        "Order placed",
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(customer_id) if customer_id else None,
        total_price=order.total_price,
    )
    return order


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier()  # Empty for guest checkout
    items = Text(required=True)  # JSON: list of {product_id, quantity, color, size}
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict
    payment_info = Text()  # JSON: {payment_id, status, method, card_brand, last4}
    coupon_code = String(max_length=100)
    notes = Text()
    is_gift = Boolean(default=False)
    gift_message = String(max_length=500)


@ordering.command(part_of="Order")
class CheckoutCart:
    """Place an order from the customer's cart, then empty the cart."""

    customer_id = Identifier(required=True)
    email = String(required=True, max_length=254)
    shipping_address = Text()  # JSON; defaults to the address saved on the cart
    billing_address = Text()
    payment_info = Text()
    notes = Text()
    is_gift = Boolean(default=False)
    gift_message = String(max_length=500)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = place_order(
            requested_items=_loads(command.items),
            shipping_address=_loads(command.shipping_address),
            customer_id=command.customer_id,
            coupon=resolve_coupon(command.coupon_code),
            billing_address=_loads(command.billing_address),
            payment_info=_loads(command.payment_info),
            notes=command.notes,
            is_gift=command.is_gift,
            gift_message=command.gift_message,
        )
        return str(order.id)

    @handle(CheckoutCart)
    def checkout_cart(self, command):
        cart = cart_for(command.customer_id)
        if not cart.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        shipping_address = _loads(command.shipping_address)
        if not shipping_address:
            draft = cart.shipping_address
            if draft is None:
                raise ValidationError({"shipping_address": ["Shipping address is required"]})
            shipping_address = {
                "name": draft.name,
                "phone": draft.phone,
                "address": draft.address,
                "city": draft.city,
                "state": draft.state,
                "zip_code": draft.zip_code,
                "country": draft.country,
            }
        shipping_address = {**shipping_address, "email": command.email}

        order = place_order(
            requested_items=[
                {"product_id": item.product_id, "quantity": item.quantity, "color": item.color, "size": item.size}
                for item in cart.items
            ],
            shipping_address=shipping_address,
            customer_id=command.customer_id,
            coupon=cart.coupon,
            billing_address=_loads(command.billing_address),
            payment_info=_loads(command.payment_info),
            notes=command.notes,
            is_gift=command.is_gift,
            gift_message=command.gift_message,
        )

        cart.clear()
        current_domain.repository_for(Cart).add(cart)
        return str(order.id)
