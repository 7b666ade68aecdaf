"""Product aggregate: the catalogue record carts and orders look prices and stock up in.

A product has a top-level stock count and, optionally, color/size variants
that each carry their own stock. Line items that name a color and size
matching a variant draw on that variant; everything else draws on the
top-level count.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String

from ordering.catalogue.events import (
    ProductAvailabilityChanged,
    ProductListed,
    StockReleased,
    StockReserved,
    VariantAdded,
)
from ordering.domain import ordering


@ordering.entity(part_of="Product")
class Variant:
    """A color/size-specific stock-keeping unit of a product."""

    color = String(required=True, max_length=50)
    size = String(required=True, max_length=20)
    sku = String(max_length=50)
    stock = Integer(default=0, min_value=0)


@ordering.aggregate
class Product:
    name = String(required=True, max_length=100)
    sku = String(max_length=50)
    price = Float(required=True, min_value=0.0)
    image_url = String(max_length=500)
    stock = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    variants = HasMany(Variant)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, price, stock=0, sku=None, image_url=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=price,
            stock=stock,
            sku=sku,
            image_url=image_url or "",
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                name=name,
                sku=sku,
                price=price,
                stock=stock,
                listed_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------
    @property
    def has_variants(self) -> bool:
        return bool(self.variants)

    def find_variant(self, color, size):
        if not color or not size:
            return None
        return next((v for v in self.variants if v.color == color and v.size == size), None)

    def add_variant(self, color, size, stock=0, sku=None):
        if self.find_variant(color, size) is not None:
            raise ValidationError({"variant": [f"Variant {color}/{size} already exists"]})

        variant = Variant(color=color, size=size, stock=stock, sku=sku)
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantAdded(
                product_id=str(self.id),
                variant_id=str(variant.id),
                color=color,
                size=size,
                stock=stock,
            )
        )
        return variant

    # -------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------
    def activate(self):
        self._set_active(True)

    def deactivate(self):
        self._set_active(False)

    def _set_active(self, is_active):
        self.is_active = is_active
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ProductAvailabilityChanged(
                product_id=str(self.id),
                is_active="true" if is_active else "false",
                changed_at=now,
            )
        )

    def available_stock(self, color=None, size=None) -> int:
        variant = self.find_variant(color, size)
        if variant is not None:
            return variant.stock or 0
        return self.stock or 0

    def is_in_stock(self, color=None, size=None) -> bool:
        return self.available_stock(color, size) > 0

    # -------------------------------------------------------------------
    # Stock adjustment
    # -------------------------------------------------------------------
    def reserve_stock(self, quantity, color=None, size=None):
        """Take ``quantity`` units, floored at zero. Selling past availability is not blocked."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        remaining = self._adjust_stock(-quantity, color, size)
        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                color=color,
                size=size,
                remaining_stock=remaining,
            )
        )

    def release_stock(self, quantity, color=None, size=None):
        """Put ``quantity`` units back."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        remaining = self._adjust_stock(quantity, color, size)
        self.raise_(
            StockReleased(
                product_id=str(self.id),
                quantity=quantity,
                color=color,
                size=size,
                remaining_stock=remaining,
            )
        )

    def _adjust_stock(self, delta, color, size) -> int:
        variant = self.find_variant(color, size)
        if variant is not None:
            variant.stock = max((variant.stock or 0) + delta, 0)
            remaining = variant.stock
        else:
            self.stock = max((self.stock or 0) + delta, 0)
            remaining = self.stock

        self.updated_at = datetime.now(UTC)
        return remaining
