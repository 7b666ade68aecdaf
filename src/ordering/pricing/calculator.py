"""Pricing calculator: line items + optional coupon → cart/order totals.

Pure functions only. Every Cart and Order mutation that touches items or the
coupon re-runs ``calculate_totals`` rather than patching stored totals.

    subtotal = Σ price × quantity
    tax      = subtotal × tax_rate
    shipping = 0 when subtotal ≥ free_shipping_threshold, else flat fee
    discount = percentage or fixed coupon value, clamped to [0, subtotal]
    total    = subtotal + tax + shipping − discount

The total is not floored at zero.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from ordering.pricing.coupons import Coupon, CouponKind
from ordering.utils.config import custom_settings

DEFAULT_TAX_RATE = 0.085
DEFAULT_FREE_SHIPPING_THRESHOLD = 50.0
DEFAULT_FLAT_SHIPPING_FEE = 5.99


@dataclass(frozen=True)
class PricingPolicy:
    tax_rate: float = DEFAULT_TAX_RATE
    free_shipping_threshold: float = DEFAULT_FREE_SHIPPING_THRESHOLD
    flat_shipping_fee: float = DEFAULT_FLAT_SHIPPING_FEE

    @classmethod
    def from_settings(cls, custom: dict) -> "PricingPolicy":
        """Build a policy from the ``[custom]`` configuration section."""
        return cls(
            tax_rate=float(custom.get("TAX_RATE", DEFAULT_TAX_RATE)),
            free_shipping_threshold=float(custom.get("FREE_SHIPPING_THRESHOLD", DEFAULT_FREE_SHIPPING_THRESHOLD)),
            flat_shipping_fee=float(custom.get("FLAT_SHIPPING_FEE", DEFAULT_FLAT_SHIPPING_FEE)),
        )


DEFAULT_POLICY = PricingPolicy()


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    discount: float = 0.0
    total: float = 0.0

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping,
            "discount": self.discount,
            "total": self.total,
        }


def calculate_subtotal(items: Iterable) -> float:
    return sum(item.price * item.quantity for item in items)


def calculate_discount(subtotal: float, coupon: Coupon | None) -> float:
    """Discount for ``coupon`` against ``subtotal``; never negative, never above subtotal."""
    if coupon is None or not coupon.value or coupon.value <= 0:
        return 0.0

    if CouponKind(coupon.kind) == CouponKind.PERCENTAGE:
        discount = subtotal * (coupon.value / 100)
    else:
        discount = coupon.value

    return max(0.0, min(discount, subtotal))


def calculate_shipping(subtotal: float, policy: PricingPolicy = DEFAULT_POLICY) -> float:
    return 0.0 if subtotal >= policy.free_shipping_threshold else policy.flat_shipping_fee


def calculate_totals(
    items: Iterable,
    coupon: Coupon | None = None,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> PriceBreakdown:
    """Compute totals for ``items`` (anything with ``price`` and ``quantity``)."""
    items = list(items)
    subtotal = calculate_subtotal(items)
    tax = subtotal * policy.tax_rate
    shipping = calculate_shipping(subtotal, policy)
    discount = calculate_discount(subtotal, coupon)

    return PriceBreakdown(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        total=subtotal + tax + shipping - discount,
    )


def current_policy() -> PricingPolicy:
    """Policy configured on the active domain."""
    return PricingPolicy.from_settings(custom_settings())
