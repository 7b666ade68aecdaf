"""Domain events for the Order aggregate.

Every status change raises one of these. They feed the read models and the
customer notification handler; contact details travel on the event so that
handlers never have to load the order back.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A new order was placed, directly or by checking out a cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier()  # Empty for guest orders
    customer_name = String(required=True)
    customer_email = String(required=True)
    items = Text(required=True)  # JSON: list of line item dicts
    total_items = Integer(required=True)
    items_price = Float(required=True)
    tax_price = Float(required=True)
    shipping_price = Float(required=True)
    discount_amount = Float(required=True)
    total_price = Float(required=True)
    coupon_code = String()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """An administrator moved the order forward (or back) in fulfilment."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_name = String(required=True)
    customer_email = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String()
    carrier = String()
    tracking_number = String()
    estimated_delivery = DateTime()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_name = String(required=True)
    customer_email = String(required=True)
    previous_status = String(required=True)
    total_price = Float(required=True)
    note = String()
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class RefundRequested:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    amount = Float(required=True)
    reason = String(required=True)
    requested_at = DateTime(required=True)


@ordering.event(part_of="Order")
class RefundReviewed:
    """An administrator approved or rejected a pending refund request."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    refund_status = String(required=True)  # "approved" / "rejected"
    amount = Float(required=True)
    note = String()
    reviewed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderRefunded:
    """An approved refund was paid out through the gateway."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_name = String(required=True)
    customer_email = String(required=True)
    previous_status = String(required=True)
    amount = Float(required=True)
    gateway_refund_id = String()
    refunded_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDeleted:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    status = String(required=True)
    deleted_at = DateTime(required=True)
