"""Ordering bounded context: Shopping Cart, Orders and the stock they hold.

Handles cart pricing, checkout, the order status lifecycle, refunds and the
inventory adjustments that accompany order placement and cancellation.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
