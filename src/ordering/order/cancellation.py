"""Order cancellation: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import ensure_owner
from ordering.inventory.adjuster import release_order_stock
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


def cancel_order(order, note=None):
    """Cancel ``order`` and put its stock back. Persisting is up to the caller."""
    order.cancel(note)
    release_order_stock(order)
    logger.info("Order cancelled", order_id=str(order.id), order_number=order.order_number)


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    note = String(max_length=500)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_owner(order.customer_id, command.requested_by, "cancel this order")

        cancel_order(order, command.note)
        repo.add(order)
        return order.status
