"""SMTP email adapter, configured from ``EMAIL_*`` / ``FROM_*`` environment variables."""

import os
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from ordering.notification.email_port import EmailPort


class SmtpEmailAdapter(EmailPort):
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        from_email: str = "noreply@example.com",
        from_name: str = "Storefront",
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_environment(cls) -> "SmtpEmailAdapter":
        return cls(
            host=os.environ["EMAIL_HOST"],
            port=int(os.environ.get("EMAIL_PORT", "587")),
            username=os.environ.get("EMAIL_USER"),
            password=os.environ.get("EMAIL_PASS"),
            from_email=os.environ.get("FROM_EMAIL", "noreply@example.com"),
            from_name=os.environ.get("FROM_NAME", "Storefront"),
            use_tls=os.environ.get("EMAIL_USE_TLS", "true").lower() != "false",
        )

    def build_message(self, to: str, subject: str, body: str, html_body: str | None = None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.from_name, self.from_email))
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        message = self.build_message(to, subject, body, html_body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            return {"message_id": None, "status": "failed", "error": str(exc)}

        return {"message_id": message["Message-ID"], "status": "sent"}
