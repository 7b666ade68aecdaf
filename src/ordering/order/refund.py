"""Refunds: request, review and pay-out commands and handler.

A customer asks, an administrator approves or rejects, and an approved
refund is paid back through the payment gateway, which moves the order to
``refunded``.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import ensure_admin, ensure_owner
from ordering.order.order import Order
from ordering.payment import get_gateway

logger = structlog.get_logger(__name__)


def pay_out_refund(order, note=None):
    """Send the approved refund to the gateway and record it on ``order``."""
    order.assert_refund_payable()

    payment_id = order.payment_info.payment_id if order.payment_info else None
    result = get_gateway().create_refund(
        payment_id=payment_id,
        amount=order.refund_info.amount,
        reason=order.refund_info.reason or "Customer refund",
    )
    if not result.success:
        logger.warning(
            "Gateway refused refund",
            order_number=order.order_number,
            amount=order.refund_info.amount,
            reason=result.failure_reason,
        )
        raise ValidationError({"refund": [result.failure_reason or "Refund was declined by the payment gateway"]})

    order.complete_refund(gateway_refund_id=result.gateway_refund_id, note=note)
    logger.info(
        "Refund completed",
        order_number=order.order_number,
        amount=order.refund_info.amount,
        gateway_refund_id=result.gateway_refund_id,
    )


@ordering.command(part_of="Order")
class RequestRefund:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    reason = String(required=True, max_length=500)
    amount = Float(min_value=0.0)  # Defaults to the order total


@ordering.command(part_of="Order")
class ReviewRefund:
    order_id = Identifier(required=True)
    approve = Boolean(required=True)
    note = String(max_length=500)
    requested_by_role = String(max_length=20)


@ordering.command(part_of="Order")
class CompleteRefund:
    order_id = Identifier(required=True)
    note = String(max_length=500)
    requested_by_role = String(max_length=20)


@ordering.command_handler(part_of=Order)
class RefundHandler:
    @handle(RequestRefund)
    def request_refund(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_owner(order.customer_id, command.requested_by, "request a refund for this order")

        order.request_refund(reason=command.reason, amount=command.amount)
        repo.add(order)
        return order.refund_info.status

    @handle(ReviewRefund)
    def review_refund(self, command):
        ensure_admin(command.requested_by_role, "review refunds")

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.review_refund(approve=command.approve, note=command.note)
        repo.add(order)
        return order.refund_info.status

    @handle(CompleteRefund)
    def complete_refund(self, command):
        ensure_admin(command.requested_by_role, "complete refunds")

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        pay_out_refund(order, command.note)
        repo.add(order)
        return order.status
