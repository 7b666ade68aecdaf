"""Order summary: the row shown in customer order history and admin order lists."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderDeleted,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
    RefundRequested,
    RefundReviewed,
)
from ordering.order.order import Order


@ordering.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, max_length=20)
    customer_id = Identifier()
    customer_name = String(max_length=100)
    customer_email = String(max_length=254)
    status = String(required=True, max_length=20)
    refund_status = String(max_length=20)
    total_items = Integer(default=0)
    total_price = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()


def _update(order_id, at, **changes):
    repo = current_domain.repository_for(OrderSummary)
    summary = repo.get(order_id)
    for name, value in changes.items():
        setattr(summary, name, value)
    summary.updated_at = at
    repo.add(summary)


@ordering.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                customer_name=event.customer_name,
                customer_email=event.customer_email,
                status="pending",
                total_items=event.total_items,
                total_price=event.total_price,
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        _update(event.order_id, event.changed_at, status=event.new_status)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        _update(event.order_id, event.cancelled_at, status="cancelled")

    @on(RefundRequested)
    def on_refund_requested(self, event):
        _update(event.order_id, event.requested_at, refund_status="pending")

    @on(RefundReviewed)
    def on_refund_reviewed(self, event):
        _update(event.order_id, event.reviewed_at, refund_status=event.refund_status)

    @on(OrderRefunded)
    def on_order_refunded(self, event):
        _update(event.order_id, event.refunded_at, status="refunded", refund_status="completed")

    @on(OrderDeleted)
    def on_order_deleted(self, event):
        repo = current_domain.repository_for(OrderSummary)
        records = repo._dao.query.filter(order_id=event.order_id).all().items
        for record in records:
            repo._dao.delete(record)


def list_order_summaries(customer_id=None, status=None, page=1, limit=20) -> dict:
    """Newest first, one page at a time, optionally narrowed to a customer or a status."""
    page = max(int(page or 1), 1)
    limit = max(int(limit or 20), 1)

    query = current_domain.repository_for(OrderSummary)._dao.query
    if customer_id:
        query = query.filter(customer_id=str(customer_id))
    if status:
        query = query.filter(status=status)

    results = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
    total = results.total
    return {
        "orders": list(results.items),
        "count": len(results.items),
        "total": total,
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
    }
