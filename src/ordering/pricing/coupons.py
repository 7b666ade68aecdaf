"""Coupon lookup: the port the cart uses to resolve a code into a discount.

``get_coupon_repository()`` / ``set_coupon_repository()`` swap the
implementation the same way the payment gateway and email channel do.
The default ``StaticCouponRepository`` carries the storefront's fixed codes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class CouponKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class Coupon:
    code: str
    value: float
    kind: str = CouponKind.PERCENTAGE.value


class CouponRepository(ABC):
    """Abstract coupon lookup."""

    @abstractmethod
    def find(self, code: str) -> Coupon | None:
        """Return the coupon for ``code``, or None when the code is not valid."""
        ...


class StaticCouponRepository(CouponRepository):
    """Coupon lookup backed by an in-memory table."""

    DEFAULT_COUPONS = {
        "SAVE10": Coupon(code="SAVE10", value=10, kind=CouponKind.PERCENTAGE.value),
        "SAVE20": Coupon(code="SAVE20", value=20, kind=CouponKind.PERCENTAGE.value),
        "FREESHIP": Coupon(code="FREESHIP", value=5.99, kind=CouponKind.FIXED.value),
    }

    def __init__(self, coupons: dict[str, Coupon] | None = None) -> None:
        self.coupons = dict(self.DEFAULT_COUPONS if coupons is None else coupons)

    def find(self, code: str) -> Coupon | None:
        if not code:
            return None
        return self.coupons.get(code.strip())


_current_repository: CouponRepository | None = None


def get_coupon_repository() -> CouponRepository:
    """Return the active coupon repository. Defaults to the static table."""
    global _current_repository
    if _current_repository is None:
        _current_repository = StaticCouponRepository()
    return _current_repository


def set_coupon_repository(repository: CouponRepository) -> None:
    global _current_repository
    _current_repository = repository


def reset_coupon_repository() -> None:
    global _current_repository
    _current_repository = None
