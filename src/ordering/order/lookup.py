"""Finding orders by their customer-facing number."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.order.order import Order


def order_by_number(order_number) -> Order:
    repo = current_domain.repository_for(Order)
    matches = repo._dao.query.filter(order_number=str(order_number)).all().items
    if not matches:
        raise ObjectNotFoundError(f"Order {order_number} not found")
    return repo.get(matches[0].id)
