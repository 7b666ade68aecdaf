"""Cart aggregate (CQRS): one active cart per customer, priced on every change.

Line items are snapshots of the product at the time they were added (name,
price, image, sku). Totals are never edited directly: every mutation ends in
``recalculate()``, which derives them from the items and the applied coupon.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from ordering.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    CartShippingAddressSet,
)
from ordering.domain import ordering
from ordering.pricing.calculator import PriceBreakdown, calculate_totals, current_policy
from ordering.pricing.coupons import Coupon, CouponKind
from ordering.utils.config import custom_setting

DEFAULT_MAX_ITEM_QUANTITY = 10


def max_quantity_for(product, color=None, size=None) -> int:
    """Purchasable ceiling for one line: stock on hand capped at the per-line limit, at least 1."""
    limit = int(custom_setting("MAX_ITEM_QUANTITY", DEFAULT_MAX_ITEM_QUANTITY))
    return max(1, min(product.available_stock(color, size), limit))


def clamp_quantity(quantity, max_quantity) -> int:
    return max(1, min(int(quantity), int(max_quantity)))


@ordering.value_object(part_of="Cart")
class AddressDraft:
    """Shipping address captured on the cart ahead of checkout."""

    name = String(required=True, max_length=100)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)


@ordering.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    image = String(max_length=500)
    sku = String(max_length=50)
    color = String(max_length=50)
    size = String(max_length=20)
    quantity = Integer(required=True, min_value=1)
    max_quantity = Integer(default=DEFAULT_MAX_ITEM_QUANTITY, min_value=1)
    in_stock = Boolean(default=True)

    def matches(self, product_id, color=None, size=None) -> bool:
        return (
            str(self.product_id) == str(product_id)
            and (self.color or None) == (color or None)
            and (self.size or None) == (size or None)
        )


@ordering.aggregate
class Cart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    coupon_code = String(max_length=100)
    coupon_value = Float()
    coupon_kind = String(choices=CouponKind)
    shipping_address = ValueObject(AddressDraft)
    created_at = DateTime()
    last_updated = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, last_updated=now)

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    @property
    def coupon(self) -> Coupon | None:
        if not self.coupon_code:
            return None
        return Coupon(code=self.coupon_code, value=self.coupon_value or 0.0, kind=self.coupon_kind)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def recalculate(self):
        """Re-derive the stored totals from the items and coupon."""
        if self.items:
            totals = calculate_totals(self.items, self.coupon, current_policy())
        else:
            totals = PriceBreakdown()

        self.subtotal = totals.subtotal
        self.tax = totals.tax
        self.shipping = totals.shipping
        self.discount = totals.discount
        self.total = totals.total

    def summary(self) -> dict:
        return {
            "item_count": self.item_count,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping,
            "discount": self.discount,
            "total": self.total,
        }

    def _touch(self):
        self.recalculate()
        self.last_updated = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------
    def find_item(self, item_id) -> CartItem:
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError(f"Item {item_id} is not in the cart")
        return item

    def add_item(self, product, quantity=1, color=None, size=None):
        """Add ``quantity`` units of ``product``, merging into an identical line if there is one."""
        if not product.is_active:
            raise ValidationError({"product_id": ["Product is not available"]})

        existing = next((i for i in self.items if i.matches(product.id, color, size)), None)
        if existing is not None:
            existing.quantity = clamp_quantity(existing.quantity + quantity, existing.max_quantity)
            item = existing
        else:
            max_quantity = max_quantity_for(product, color, size)
            item = CartItem(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                image=product.image_url or "",
                sku=product.sku,
                color=color,
                size=size,
                quantity=clamp_quantity(quantity, max_quantity),
                max_quantity=max_quantity,
                in_stock=product.is_in_stock(color, size),
            )
            self.add_items(item)

        self._touch()
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                item_id=str(item.id),
                product_id=str(product.id),
                color=color,
                size=size,
                quantity=item.quantity,
                cart_total=self.total,
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity):
        item = self.find_item(item_id)
        previous_quantity = item.quantity
        item.quantity = clamp_quantity(quantity, item.max_quantity)

        self._touch()
        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=item.quantity,
                cart_total=self.total,
            )
        )

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        self.remove_items(item)

        self._touch()
        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                cart_total=self.total,
            )
        )

    def clear(self):
        """Drop every item and the coupon; totals fall to zero."""
        for item in list(self.items):
            self.remove_items(item)
        self._drop_coupon()

        self._touch()
        self.raise_(CartCleared(cart_id=str(self.id), customer_id=str(self.customer_id)))

    # -------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon: Coupon):
        self.coupon_code = coupon.code
        self.coupon_value = coupon.value
        self.coupon_kind = CouponKind(coupon.kind).value

        self._touch()
        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                coupon_code=coupon.code,
                discount=self.discount,
                cart_total=self.total,
            )
        )

    def remove_coupon(self):
        code = self.coupon_code
        self._drop_coupon()

        self._touch()
        if code:
            self.raise_(CartCouponRemoved(cart_id=str(self.id), coupon_code=code, cart_total=self.total))

    def _drop_coupon(self):
        self.coupon_code = None
        self.coupon_value = None
        self.coupon_kind = None

    # -------------------------------------------------------------------
    # Shipping
    # -------------------------------------------------------------------
    def set_shipping_address(self, **address):
        """Store a shipping address draft. Every field is required; totals do not change."""
        self.shipping_address = AddressDraft(**address)
        self.last_updated = datetime.now(UTC)

        self.raise_(
            CartShippingAddressSet(
                cart_id=str(self.id),
                city=self.shipping_address.city,
                country=self.shipping_address.country,
            )
        )
