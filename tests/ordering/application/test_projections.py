"""Application tests for the order summary, daily stats and dashboard read models."""

import json
from datetime import UTC, datetime

import pytest
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder
from ordering.order.refund import CompleteRefund, RequestRefund, ReviewRefund
from ordering.order.removal import DeleteOrder
from ordering.order.status import UpdateOrderStatus
from ordering.projections.daily_order_stats import DailyOrderStats
from ordering.projections.dashboard import dashboard_stats
from ordering.projections.order_summary import OrderSummary, list_order_summaries
from protean import current_domain
from protean.exceptions import ObjectNotFoundError


def _place(product, shipping_address, customer_id="cust-1", quantity=1):
    return current_domain.process(
        PlaceOrder(
            customer_id=customer_id,
            items=json.dumps([{"product_id": str(product.id), "quantity": quantity}]),
            shipping_address=json.dumps(shipping_address),
        ),
        asynchronous=False,
    )


def _set_status(order_id, status):
    current_domain.process(
        UpdateOrderStatus(order_id=order_id, status=status, requested_by_role="admin"), asynchronous=False
    )


def _refund(order_id):
    _set_status(order_id, "shipped")
    current_domain.process(
        RequestRefund(order_id=order_id, requested_by="cust-1", reason="Damaged"), asynchronous=False
    )
    current_domain.process(ReviewRefund(order_id=order_id, approve=True, requested_by_role="admin"), asynchronous=False)
    current_domain.process(CompleteRefund(order_id=order_id, requested_by_role="admin"), asynchronous=False)


def _summary(order_id):
    return current_domain.repository_for(OrderSummary).get(order_id)


def _today():
    return current_domain.repository_for(DailyOrderStats).get(datetime.now(UTC).date().isoformat())


class TestOrderSummaryProjection:
    def test_created_on_placement(self, make_product, shipping_address):
        order_id = _place(make_product(price=20.0), shipping_address, quantity=2)
        summary = _summary(order_id)

        assert summary.status == "pending"
        assert summary.customer_email == "jane@example.com"
        assert summary.total_items == 2
        assert summary.total_price == pytest.approx(49.39)

    def test_tracks_status(self, make_product, shipping_address):
        order_id = _place(make_product(), shipping_address)
        _set_status(order_id, "processing")
        assert _summary(order_id).status == "processing"

    def test_tracks_cancellation(self, make_product, shipping_address):
        order_id = _place(make_product(), shipping_address)
        current_domain.process(CancelOrder(order_id=order_id, requested_by="cust-1"), asynchronous=False)
        assert _summary(order_id).status == "cancelled"

    def test_tracks_refund(self, make_product, shipping_address):
        order_id = _place(make_product(), shipping_address)
        _refund(order_id)

        summary = _summary(order_id)
        assert summary.status == "refunded"
        assert summary.refund_status == "completed"

    def test_removed_on_delete(self, make_product, shipping_address):
        order_id = _place(make_product(), shipping_address)
        current_domain.process(DeleteOrder(order_id=order_id, requested_by="cust-1"), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            _summary(order_id)


class TestListOrderSummaries:
    def test_filters_by_customer(self, make_product, shipping_address):
        product = make_product(stock=20)
        _place(product, shipping_address, customer_id="cust-1")
        _place(product, shipping_address, customer_id="cust-2")

        result = list_order_summaries(customer_id="cust-1")
        assert result["total"] == 1
        assert str(result["orders"][0].customer_id) == "cust-1"

    def test_filters_by_status(self, make_product, shipping_address):
        product = make_product(stock=20)
        first = _place(product, shipping_address)
        _place(product, shipping_address)
        _set_status(first, "processing")

        result = list_order_summaries(status="processing")
        assert result["count"] == 1
        assert str(result["orders"][0].order_id) == first

    def test_pagination(self, make_product, shipping_address):
        product = make_product(stock=20)
        for _ in range(5):
            _place(product, shipping_address)

        result = list_order_summaries(page=2, limit=2)
        assert result["count"] == 2
        assert result["total"] == 5
        assert result["total_pages"] == 3
        assert result["current_page"] == 2

    def test_empty(self):
        assert list_order_summaries() == {"orders": [], "count": 0, "total": 0, "total_pages": 0, "current_page": 1}


class TestDailyOrderStats:
    def test_counts_placements_and_revenue(self, make_product, shipping_address):
        product = make_product(price=20.0, stock=20)
        _place(product, shipping_address, quantity=3)
        _place(product, shipping_address, quantity=3)

        stats = _today()
        assert stats.orders_placed == 2
        assert stats.total_revenue == pytest.approx(2 * 65.1)

    def test_counts_cancellations_and_refunds(self, make_product, shipping_address):
        product = make_product(price=20.0, stock=20)
        cancelled = _place(product, shipping_address)
        refunded = _place(product, shipping_address)
        current_domain.process(CancelOrder(order_id=cancelled, requested_by="cust-1"), asynchronous=False)
        _refund(refunded)

        stats = _today()
        assert stats.orders_cancelled == 1
        assert stats.orders_refunded == 1
        assert stats.total_refunds == pytest.approx(20.0 + 1.7 + 5.99)


class TestDashboard:
    def test_empty_store(self):
        stats = dashboard_stats()

        assert stats["products"] == 0
        assert stats["orders"] == 0
        assert stats["sales"] == 0
        assert stats["orders_by_status"]["pending"] == 0
        assert stats["today"]["orders_placed"] == 0

    def test_sales_exclude_cancelled_and_refunded(self, make_product, shipping_address):
        product = make_product(price=20.0, stock=20)
        kept = _place(product, shipping_address, quantity=3)
        cancelled = _place(product, shipping_address, quantity=3)
        refunded = _place(product, shipping_address, quantity=3)
        current_domain.process(CancelOrder(order_id=cancelled, requested_by="cust-1"), asynchronous=False)
        _refund(refunded)

        stats = dashboard_stats()
        assert stats["products"] == 1
        assert stats["orders"] == 3
        assert stats["sales"] == pytest.approx(_summary(kept).total_price)
        assert stats["orders_by_status"] == {
            "pending": 1,
            "processing": 0,
            "shipped": 0,
            "delivered": 0,
            "cancelled": 1,
            "refunded": 1,
        }
        assert stats["today"]["orders_placed"] == 3
        assert stats["today"]["date"] == datetime.now(UTC).date().isoformat()
