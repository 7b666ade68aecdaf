"""Application tests for requesting, reviewing and paying out refunds."""

import json

import pytest
from ordering.errors import NotAuthorizedError
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order, RefundStatus
from ordering.order.refund import CompleteRefund, RequestRefund, ReviewRefund
from ordering.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ValidationError


@pytest.fixture()
def shipped_order(make_product, shipping_address):
    product = make_product(price=30.0, stock=5)
    order_id = current_domain.process(
        PlaceOrder(
            customer_id="cust-1",
            items=json.dumps([{"product_id": str(product.id), "quantity": 2}]),
            shipping_address=json.dumps(shipping_address),
            payment_info=json.dumps({"payment_id": "pi_123", "status": "succeeded", "method": "card"}),
        ),
        asynchronous=False,
    )
    current_domain.process(
        UpdateOrderStatus(order_id=order_id, status="shipped", requested_by_role="admin"), asynchronous=False
    )
    return order_id


def _request(order_id, requested_by="cust-1", **kwargs):
    return current_domain.process(
        RequestRefund(order_id=order_id, requested_by=requested_by, reason="Damaged", **kwargs),
        asynchronous=False,
    )


def _review(order_id, approve=True, role="admin"):
    return current_domain.process(
        ReviewRefund(order_id=order_id, approve=approve, requested_by_role=role), asynchronous=False
    )


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestRequestRefund:
    def test_owner_requests_refund(self, shipped_order):
        assert _request(shipped_order) == RefundStatus.PENDING.value
        assert _order(shipped_order).refund_info.amount == pytest.approx(_order(shipped_order).total_price)

    def test_partial_amount(self, shipped_order):
        _request(shipped_order, amount=25.0)
        assert _order(shipped_order).refund_info.amount == 25.0

    def test_other_customer_rejected(self, shipped_order):
        with pytest.raises(NotAuthorizedError):
            _request(shipped_order, requested_by="cust-2")

    def test_second_request_rejected(self, shipped_order):
        _request(shipped_order)
        with pytest.raises(ValidationError):
            _request(shipped_order)


class TestReviewRefund:
    def test_admin_approves(self, shipped_order):
        _request(shipped_order)
        assert _review(shipped_order) == RefundStatus.APPROVED.value

    def test_admin_rejects(self, shipped_order):
        _request(shipped_order)
        assert _review(shipped_order, approve=False) == RefundStatus.REJECTED.value
        assert _order(shipped_order).status == "shipped"

    def test_customer_cannot_review(self, shipped_order):
        _request(shipped_order)
        with pytest.raises(NotAuthorizedError):
            _review(shipped_order, role="customer")


class TestCompleteRefund:
    def test_pays_out_through_gateway(self, shipped_order, gateway):
        _request(shipped_order, amount=25.0)
        _review(shipped_order)
        status = current_domain.process(
            CompleteRefund(order_id=shipped_order, requested_by_role="admin"), asynchronous=False
        )

        order = _order(shipped_order)
        assert status == "refunded"
        assert order.refund_info.status == RefundStatus.COMPLETED.value
        assert order.refund_info.gateway_refund_id.startswith("re_fake_")
        assert gateway.calls[-1]["payment_id"] == "pi_123"
        assert gateway.calls[-1]["amount"] == 2500

    def test_status_update_to_refunded_pays_out(self, shipped_order, gateway):
        _request(shipped_order)
        _review(shipped_order)
        current_domain.process(
            UpdateOrderStatus(order_id=shipped_order, status="refunded", requested_by_role="admin"),
            asynchronous=False,
        )

        assert _order(shipped_order).status == "refunded"
        assert gateway.calls[-1]["method"] == "create_refund"

    def test_gateway_failure_leaves_order_unchanged(self, shipped_order, gateway):
        _request(shipped_order)
        _review(shipped_order)
        gateway.configure(should_succeed=False, failure_reason="Charge already refunded")

        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                CompleteRefund(order_id=shipped_order, requested_by_role="admin"), asynchronous=False
            )
        assert exc.value.messages == {"refund": ["Charge already refunded"]}

        order = _order(shipped_order)
        assert order.status == "shipped"
        assert order.refund_info.status == RefundStatus.APPROVED.value

    def test_unapproved_refund_not_paid(self, shipped_order, gateway):
        _request(shipped_order)
        with pytest.raises(ValidationError):
            current_domain.process(
                CompleteRefund(order_id=shipped_order, requested_by_role="admin"), asynchronous=False
            )
        assert gateway.calls == []

    def test_customer_cannot_complete(self, shipped_order):
        with pytest.raises(NotAuthorizedError):
            current_domain.process(
                CompleteRefund(order_id=shipped_order, requested_by_role="customer"), asynchronous=False
            )
