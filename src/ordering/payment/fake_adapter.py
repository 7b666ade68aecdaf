"""Configurable fake payment gateway for development and testing.

No network calls. ``configure()`` flips it between succeeding and failing,
and ``calls`` records every request so tests can assert on what was sent.
"""

from uuid import uuid4

from ordering.payment.port import PaymentGateway, PaymentIntentResult, RefundResult, to_minor_units

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_payment_intent(self, amount: float, currency: str = "usd", metadata: dict | None = None) -> PaymentIntentResult:
        minor = to_minor_units(amount)
        self.calls.append(
            {
                "method": "create_payment_intent",
                "amount": minor,
                "currency": currency,
                "metadata": dict(metadata or {}),
            }
        )

        if not self.should_succeed:
            return PaymentIntentResult(success=False, amount=minor, currency=currency, failure_reason=self.failure_reason)

        intent_id = f"pi_fake_{uuid4().hex[:12]}"
        return PaymentIntentResult(
            success=True,
            intent_id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            amount=minor,
            currency=currency,
        )

    def create_refund(self, payment_id: str | None, amount: float, reason: str) -> RefundResult:
        self.calls.append(
            {
                "method": "create_refund",
                "payment_id": payment_id,
                "amount": to_minor_units(amount),
                "reason": reason,
            }
        )

        if self.should_succeed:
            return RefundResult(
                success=True,
                gateway_refund_id=f"re_fake_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )
        return RefundResult(success=False, failure_reason=self.failure_reason)

    def verify_webhook_signature(self, payload: str, signature: str) -> bool:  # noqa: ARG002
        return signature == TEST_SIGNATURE
