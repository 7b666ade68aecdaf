"""Daily order stats: per-day counts and money in and out, keyed by YYYY-MM-DD."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import OrderCancelled, OrderPlaced, OrderRefunded
from ordering.order.order import Order


@ordering.projection
class DailyOrderStats:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    orders_placed = Integer(default=0)
    orders_cancelled = Integer(default=0)
    orders_refunded = Integer(default=0)
    total_revenue = Float(default=0.0)
    total_refunds = Float(default=0.0)


def _get_or_create(date_key):
    repo = current_domain.repository_for(DailyOrderStats)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return DailyOrderStats(
            date=date_key,
            orders_placed=0,
            orders_cancelled=0,
            orders_refunded=0,
            total_revenue=0.0,
            total_refunds=0.0,
        )


@ordering.projector(projector_for=DailyOrderStats, aggregates=[Order])
class DailyOrderStatsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_at.date().isoformat())
        record.orders_placed = (record.orders_placed or 0) + 1
        record.total_revenue = (record.total_revenue or 0.0) + (event.total_price or 0.0)
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create(event.cancelled_at.date().isoformat())
        record.orders_cancelled = (record.orders_cancelled or 0) + 1
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderRefunded)
    def on_order_refunded(self, event):
        record = _get_or_create(event.refunded_at.date().isoformat())
        record.orders_refunded = (record.orders_refunded or 0) + 1
        record.total_refunds = (record.total_refunds or 0.0) + (event.amount or 0.0)
        current_domain.repository_for(DailyOrderStats).add(record)
