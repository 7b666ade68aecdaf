"""Customer email on order lifecycle events.

Delivery is fire-and-forget: a failed send is logged and dropped, and the
order change that triggered it stands.
"""

import json

import structlog
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.notification import get_email_channel
from ordering.notification.templates import (
    OrderCancellationTemplate,
    OrderConfirmationTemplate,
    RefundTemplate,
    StatusUpdateTemplate,
    wrap_html,
)
from ordering.order.events import OrderCancelled, OrderPlaced, OrderRefunded, OrderStatusChanged
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


def send_customer_email(to, template, context: dict) -> bool:
    """Render ``template`` and send it to ``to``. Returns whether the send went through."""
    if not to:
        logger.info("No customer email on event, skipping notification", order_number=context.get("order_number"))
        return False

    rendered = template.render(context)
    try:
        result = get_email_channel().send(
            to=to,
            subject=rendered["subject"],
            body=rendered["body"],
            html_body=wrap_html(rendered["subject"], rendered["body"]),
        )
    except Exception as exc:
        logger.error(
            "Customer email failed",
            order_number=context.get("order_number"),
            subject=rendered["subject"],
            error=str(exc),
        )
        return False

    if result.get("status") != "sent":
        logger.warning(
            "Customer email not delivered",
            order_number=context.get("order_number"),
            subject=rendered["subject"],
            error=result.get("error"),
        )
        return False

    logger.info("Customer email sent", order_number=context.get("order_number"), subject=rendered["subject"])
    return True


@ordering.event_handler(part_of=Order)
class OrderNotificationHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        send_customer_email(
            event.customer_email,
            OrderConfirmationTemplate,
            {
                "order_number": event.order_number,
                "customer_name": event.customer_name,
                "items": json.loads(event.items) if isinstance(event.items, str) else event.items,
                "items_price": event.items_price,
                "tax_price": event.tax_price,
                "shipping_price": event.shipping_price,
                "discount_amount": event.discount_amount,
                "total_price": event.total_price,
            },
        )

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        send_customer_email(
            event.customer_email,
            StatusUpdateTemplate,
            {
                "order_number": event.order_number,
                "status": event.new_status,
                "note": event.note,
                "carrier": event.carrier,
                "tracking_number": event.tracking_number,
                "estimated_delivery": event.estimated_delivery.date().isoformat() if event.estimated_delivery else None,
            },
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        send_customer_email(event.customer_email, OrderCancellationTemplate, {"order_number": event.order_number})

    @handle(OrderRefunded)
    def on_order_refunded(self, event: OrderRefunded) -> None:
        send_customer_email(
            event.customer_email,
            RefundTemplate,
            {"order_number": event.order_number, "amount": event.amount},
        )
