"""Cart coupons: commands and handler.

Codes are resolved through the configured coupon repository; the cart only
stores the resolved code, value and kind.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.management import cart_for
from ordering.domain import ordering
from ordering.pricing.coupons import get_coupon_repository


@ordering.command(part_of="Cart")
class ApplyCouponToCart:
    customer_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=100)


@ordering.command(part_of="Cart")
class RemoveCouponFromCart:
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        coupon = get_coupon_repository().find(command.coupon_code)
        if coupon is None:
            raise ValidationError({"coupon_code": ["Invalid coupon code"]})

        cart = cart_for(command.customer_id)
        cart.apply_coupon(coupon)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        cart = cart_for(command.customer_id)
        cart.remove_coupon()
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)
