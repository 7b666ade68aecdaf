"""Tests for the email adapters, registry and templates."""

import smtplib
from unittest.mock import patch

from ordering.notification import get_email_channel, reset_email_channel, set_email_channel
from ordering.notification.fake_email import FakeEmailAdapter
from ordering.notification.smtp_email import SmtpEmailAdapter
from ordering.notification.templates import (
    OrderCancellationTemplate,
    OrderConfirmationTemplate,
    RefundTemplate,
    StatusUpdateTemplate,
    wrap_html,
)


class TestFakeEmailAdapter:
    def test_send_records_message(self):
        adapter = FakeEmailAdapter()
        result = adapter.send("jane@example.com", "Hello", "Body")

        assert result["status"] == "sent"
        assert adapter.sent_emails[0]["to"] == "jane@example.com"
        assert adapter.sent_emails[0]["message_id"] == result["message_id"]

    def test_configured_failure(self):
        adapter = FakeEmailAdapter()
        adapter.configure(should_succeed=False, failure_reason="Mailbox full")
        result = adapter.send("jane@example.com", "Hello", "Body")

        assert result == {"message_id": None, "status": "failed", "error": "Mailbox full"}
        assert adapter.sent_emails == []

    def test_reset(self):
        adapter = FakeEmailAdapter()
        adapter.send("jane@example.com", "Hello", "Body")
        adapter.configure(should_succeed=False)
        adapter.reset()

        assert adapter.sent_emails == []
        assert adapter.should_succeed is True


class TestSmtpEmailAdapter:
    def test_build_message(self):
        adapter = SmtpEmailAdapter(host="smtp.example.com", from_email="shop@example.com", from_name="Shop")
        message = adapter.build_message("jane@example.com", "Hello", "Plain", "<p>Rich</p>")

        assert message["To"] == "jane@example.com"
        assert message["From"] == "Shop <shop@example.com>"
        assert message["Subject"] == "Hello"
        assert message.is_multipart()

    @patch("smtplib.SMTP")
    def test_send_uses_tls_and_login(self, mock_smtp):
        adapter = SmtpEmailAdapter(host="smtp.example.com", port=2525, username="user", password="pw")
        result = adapter.send("jane@example.com", "Hello", "Body")

        session = mock_smtp.return_value.__enter__.return_value
        mock_smtp.assert_called_once_with("smtp.example.com", 2525, timeout=10.0)
        session.starttls.assert_called_once()
        session.login.assert_called_once_with("user", "pw")
        session.send_message.assert_called_once()
        assert result["status"] == "sent"

    @patch("smtplib.SMTP")
    def test_send_without_tls_or_credentials(self, mock_smtp):
        adapter = SmtpEmailAdapter(host="localhost", port=25, use_tls=False)
        adapter.send("jane@example.com", "Hello", "Body")

        session = mock_smtp.return_value.__enter__.return_value
        session.starttls.assert_not_called()
        session.login.assert_not_called()

    @patch("smtplib.SMTP")
    def test_send_failure_reported(self, mock_smtp):
        mock_smtp.return_value.__enter__.return_value.send_message.side_effect = smtplib.SMTPException("boom")
        result = SmtpEmailAdapter(host="smtp.example.com").send("jane@example.com", "Hello", "Body")

        assert result["status"] == "failed"
        assert "boom" in result["error"]

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("EMAIL_HOST", "smtp.example.com")
        monkeypatch.setenv("EMAIL_PORT", "465")
        monkeypatch.setenv("EMAIL_USE_TLS", "false")
        adapter = SmtpEmailAdapter.from_environment()

        assert adapter.host == "smtp.example.com"
        assert adapter.port == 465
        assert adapter.use_tls is False


class TestEmailRegistry:
    def test_fake_without_host(self, monkeypatch):
        monkeypatch.delenv("EMAIL_HOST", raising=False)
        reset_email_channel()
        assert isinstance(get_email_channel(), FakeEmailAdapter)

    def test_smtp_with_host(self, monkeypatch):
        monkeypatch.setenv("EMAIL_HOST", "smtp.example.com")
        reset_email_channel()
        assert isinstance(get_email_channel(), SmtpEmailAdapter)

    def test_override(self):
        channel = FakeEmailAdapter()
        set_email_channel(channel)
        assert get_email_channel() is channel


class TestTemplates:
    def test_confirmation(self):
        rendered = OrderConfirmationTemplate.render(
            {
                "order_number": "240615001",
                "customer_name": "Jane",
                "items": [{"name": "Tee", "quantity": 2, "price": 20.0}],
                "total_price": 49.39,
            }
        )
        assert rendered["subject"] == "Order Confirmation - 240615001"
        assert "Tee x 2: $40.00" in rendered["body"]
        assert "Total: $49.39" in rendered["body"]

    def test_status_update_with_tracking(self):
        rendered = StatusUpdateTemplate.render(
            {"order_number": "240615001", "status": "shipped", "carrier": "UPS", "tracking_number": "1Z999"}
        )
        assert rendered["subject"] == "Order Status Updated - 240615001"
        assert rendered["body"].startswith("Your order status is now: shipped.")
        assert "Tracking Number: 1Z999" in rendered["body"]

    def test_cancellation(self):
        assert OrderCancellationTemplate.render({"order_number": "1"})["subject"] == "Order Cancelled - 1"

    def test_refund(self):
        rendered = RefundTemplate.render({"order_number": "1", "amount": 12.5})
        assert rendered["subject"] == "Refund Processed - 1"
        assert "$12.50" in rendered["body"]

    def test_wrap_html_escapes(self):
        markup = wrap_html("Hi", "<b>bold</b>\nnext")
        assert "&lt;b&gt;bold&lt;/b&gt;<br/>next" in markup
