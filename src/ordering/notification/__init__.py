"""Email adapter registry.

``get_email_channel()`` returns the SMTP adapter when ``EMAIL_HOST`` is set
and the in-memory fake otherwise. ``set_email_channel()`` overrides either.
"""

import os

from ordering.notification.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    global _email_channel
    if _email_channel is None:
        if os.environ.get("EMAIL_HOST"):
            from ordering.notification.smtp_email import SmtpEmailAdapter

            _email_channel = SmtpEmailAdapter.from_environment()
        else:
            from ordering.notification.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_email_channel() -> None:
    """Drop the cached adapter (useful for testing)."""
    global _email_channel
    _email_channel = None
