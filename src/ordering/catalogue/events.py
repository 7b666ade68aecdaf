"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Product")
class ProductListed:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    sku = String()
    price = Float(required=True)
    stock = Integer(required=True)
    listed_at = DateTime(required=True)


@ordering.event(part_of="Product")
class VariantAdded:
    """A color/size variant with its own stock count was added to a product."""

    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    color = String(required=True)
    size = String(required=True)
    stock = Integer(required=True)


@ordering.event(part_of="Product")
class ProductAvailabilityChanged:
    """A product was activated or deactivated for sale."""

    __version__ = 1

    product_id = Identifier(required=True)
    is_active = String(required=True)  # "true" / "false"
    changed_at = DateTime(required=True)


@ordering.event(part_of="Product")
class StockReserved:
    """Stock was taken for an order line item."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    color = String()
    size = String()
    remaining_stock = Integer(required=True)


@ordering.event(part_of="Product")
class StockReleased:
    """Stock held by a cancelled or deleted order was put back."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    color = String()
    size = String()
    remaining_stock = Integer(required=True)
