"""
Email adapter for the facescan backend.

The default implementation uses SMTP, reading credentials from Settings.
"""

from __future__ import annotations

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging
import smtplib
import ssl

from .config import Settings

logger = logging.getLogger(__name__)


class MailDeliveryError(RuntimeError):
    """Raised when the SMTP server refuses or drops a message."""


class SMTPMailer:
    def __init__(self, settings: Settings) -> None:
        self.host = settings.smtp_host
        self.port = settings.smtp_port or 587
        self.user = settings.smtp_user
        self.password = settings.smtp_password
        self.sender = settings.smtp_from

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password and self.sender)

    def send(self, subject: str, to_email: str, html_body: str, text_body: str | None = None) -> bool:
        """
        Send a multipart message. Returns False without sending when SMTP is
        not configured; raises MailDeliveryError when the transport fails.
        """
        if not self.configured:
            logger.warning("SMTP not configured; skipping email to %s (%s)", to_email, subject)
            return False
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to_email
        msg.attach(MIMEText(text_body or html_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        try:
            if self.port == 465:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(self.host, self.port, context=context) as server:
                    server.login(self.user, self.password)
                    server.sendmail(self.sender, [to_email], msg.as_string())
            else:
                with smtplib.SMTP(self.host, self.port) as server:
                    server.ehlo()
                    server.starttls(context=ssl.create_default_context())
                    server.login(self.user, self.password)
                    server.sendmail(self.sender, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            raise MailDeliveryError(f"Could not deliver email to {to_email}") from exc
        logger.info("Email sent to %s (%s)", to_email, subject)
        return True
