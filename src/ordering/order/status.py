"""Administrative status updates: command and handler.

``cancelled`` is routed through the cancellation path so stock goes back on
the shelf; ``refunded`` only happens by completing an approved refund.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import ensure_admin
from ordering.order.cancellation import cancel_order
from ordering.order.order import Order, OrderStatus, parse_status
from ordering.order.refund import pay_out_refund


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = String(max_length=500)
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=500)
    requested_by_role = String(max_length=20)


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        ensure_admin(command.requested_by_role, "update order status")
        target = parse_status(command.status)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if target == OrderStatus.CANCELLED:
            cancel_order(order, command.note)
        elif target == OrderStatus.REFUNDED:
            pay_out_refund(order, command.note)
        else:
            order.update_status(
                target.value,
                note=command.note,
                carrier=command.carrier,
                tracking_number=command.tracking_number,
                tracking_url=command.tracking_url,
            )

        repo.add(order)
        return order.status
