"""Stripe payment gateway adapter.

Webhook signatures are checked against the endpoint's signing secret using
Stripe's ``t=<timestamp>,v1=<hmac>`` header scheme. Intents and refunds
still need the stripe-python SDK wired in.
"""

import hashlib
import hmac
import time

from ordering.payment.port import PaymentGateway, PaymentIntentResult, RefundResult

SIGNATURE_TOLERANCE_SECONDS = 300


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def create_payment_intent(self, amount: float, currency: str = "usd", metadata: dict | None = None) -> PaymentIntentResult:
        raise NotImplementedError(
            "StripeGateway.create_payment_intent() is not yet implemented. Integrate stripe-python SDK here."
        )

    def create_refund(self, payment_id: str | None, amount: float, reason: str) -> RefundResult:
        raise NotImplementedError(
            "StripeGateway.create_refund() is not yet implemented. Integrate stripe-python SDK here."
        )

    def verify_webhook_signature(self, payload: str, signature: str, now: float | None = None) -> bool:
        if not self.webhook_secret or not signature:
            return False

        parts = {}
        for element in signature.split(","):
            key, _, value = element.partition("=")
            parts.setdefault(key.strip(), []).append(value.strip())

        try:
            timestamp = int(parts["t"][0])
        except (KeyError, ValueError):
            return False

        current = time.time() if now is None else now
        if abs(current - timestamp) > SIGNATURE_TOLERANCE_SECONDS:
            return False

        signed = f"{timestamp}.{payload}".encode()
        expected = hmac.new(self.webhook_secret.encode(), signed, hashlib.sha256).hexdigest()
        return any(hmac.compare_digest(expected, candidate) for candidate in parts.get("v1", []))
