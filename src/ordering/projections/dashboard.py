"""Admin dashboard figures, read from the order summaries and the catalogue."""

from collections import Counter
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.order.order import OrderStatus
from ordering.projections.daily_order_stats import DailyOrderStats
from ordering.projections.order_summary import OrderSummary


PAGE_SIZE = 100


def _all_records(query) -> list:
    records, offset = [], 0
    while True:
        page = query.offset(offset).limit(PAGE_SIZE).all()
        records.extend(page.items)
        offset += PAGE_SIZE
        if offset >= page.total:
            return records


def dashboard_stats(today=None) -> dict:
    summaries = _all_records(current_domain.repository_for(OrderSummary)._dao.query)
    products = current_domain.repository_for(Product)._dao.query.all()

    by_status = Counter(summary.status for summary in summaries)
    sales = sum(
        summary.total_price or 0.0
        for summary in summaries
        if summary.status not in (OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value)
    )

    day = (today or datetime.now(UTC).date()).isoformat()
    try:
        daily = current_domain.repository_for(DailyOrderStats).get(day)
        today_stats = {
            "orders_placed": daily.orders_placed or 0,
            "orders_cancelled": daily.orders_cancelled or 0,
            "orders_refunded": daily.orders_refunded or 0,
            "revenue": daily.total_revenue or 0.0,
            "refunds": daily.total_refunds or 0.0,
        }
    except ObjectNotFoundError:
        today_stats = {"orders_placed": 0, "orders_cancelled": 0, "orders_refunded": 0, "revenue": 0.0, "refunds": 0.0}

    return {
        "products": products.total,
        "orders": len(summaries),
        "sales": sales,
        "orders_by_status": {status.value: by_status.get(status.value, 0) for status in OrderStatus},
        "today": {"date": day, **today_stats},
    }
