"""Order deletion: command and handler.

Customers may delete their own orders while the order could still be
cancelled. Any stock the order holds goes back first.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import ensure_owner
from ordering.inventory.adjuster import release_order_stock
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        ensure_owner(order.customer_id, command.requested_by, "delete this order")

        order.mark_deleted()
        release_order_stock(order)
        repo.add(order)
        repo._dao.delete(order)

        logger.info("Order deleted", order_id=str(order.id), order_number=order.order_number)
        return str(order.id)
