"""Payment gateway factory.

``get_gateway()`` returns the Stripe adapter when ``STRIPE_SECRET_KEY`` is
set and the fake gateway otherwise. ``set_gateway()`` overrides either.
"""

import os

from ordering.payment.fake_adapter import FakeGateway
from ordering.payment.port import PaymentGateway
from ordering.payment.stripe_adapter import StripeGateway

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        api_key = os.environ.get("STRIPE_SECRET_KEY")
        if api_key:
            _current_gateway = StripeGateway(api_key, os.environ.get("STRIPE_WEBHOOK_SECRET", ""))
        else:
            _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
