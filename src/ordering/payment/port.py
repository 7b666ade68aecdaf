"""Payment gateway port.

The ordering core needs three things from a gateway: a client secret the
browser can confirm a card payment with, a way to pay back an approved
refund, and a check that an incoming webhook really came from the gateway.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


def to_minor_units(amount: float) -> int:
    """Dollars to cents, as gateways expect."""
    return int(round(amount * 100))


@dataclass(frozen=True)
class PaymentIntentResult:
    success: bool
    intent_id: str | None = None
    client_secret: str | None = None
    amount: int = 0  # minor units
    currency: str = "usd"
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    success: bool
    gateway_refund_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(self, amount: float, currency: str = "usd", metadata: dict | None = None) -> PaymentIntentResult:
        """Authorize ``amount`` (major units) and return a client secret."""
        ...

    @abstractmethod
    def create_refund(self, payment_id: str | None, amount: float, reason: str) -> RefundResult:
        """Pay ``amount`` back against the original payment."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        ...
