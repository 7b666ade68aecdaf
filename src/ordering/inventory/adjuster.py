"""Stock bookkeeping for orders.

Placing an order takes its line items off the shelf; cancelling or deleting
it puts them back. Both run inside the command handler that changes the
order, so the order and product writes commit together. ``stock_reserved``
on the order makes each direction happen at most once.
"""

import structlog
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product

logger = structlog.get_logger(__name__)


def reserve_order_stock(order) -> bool:
    """Decrement stock for every line item. Returns False if already reserved."""
    if order.stock_reserved:
        return False

    _adjust(order, reserve=True)
    order.stock_reserved = True
    return True


def release_order_stock(order) -> bool:
    """Put back the stock held by the order. Returns False if nothing is held."""
    if not order.stock_reserved:
        return False

    _adjust(order, reserve=False)
    order.stock_reserved = False
    return True


def _adjust(order, reserve):
    repo = current_domain.repository_for(Product)
    products = {}
    for item in order.items:
        key = str(item.product_id)
        if key not in products:
            products[key] = repo.get(key)
        product = products[key]

        if reserve:
            product.reserve_stock(item.quantity, color=item.color, size=item.size)
        else:
            product.release_stock(item.quantity, color=item.color, size=item.size)

        logger.info(
            "Stock reserved" if reserve else "Stock released",
            order_number=order.order_number,
            product_id=key,
            quantity=item.quantity,
            color=item.color,
            size=item.size,
        )

    for product in products.values():
        repo.add(product)
