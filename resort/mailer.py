import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from resort.config import Settings, settings

logger = logging.getLogger(__name__)


class Mailer:
    """Sends plain-text e-mail through the configured SMTP relay.

    When no ``SMTP_HOST`` is configured (local development) messages are
    written to the log instead of being sent.
    """

    def __init__(self, config: Settings = settings):
        self.config = config

    def send(self, to: str, subject: str, body: str):
        message = EmailMessage()
        message["From"] = self.config.MAIL_FROM
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        if not self.config.SMTP_HOST:
            logger.info("SMTP not configured, mail to %s not sent: %s", to, subject)
            return

        with smtplib.SMTP(self.config.SMTP_HOST, self.config.SMTP_PORT, timeout=10) as smtp:
            if self.config.SMTP_USE_TLS:
                smtp.starttls()
            if self.config.SMTP_USER:
                smtp.login(self.config.SMTP_USER, self.config.SMTP_PASSWORD or "")
            smtp.send_message(message)

        logger.info("Sent mail to %s: %s", to, subject)


_mailer: Optional[Mailer] = None

def get_mailer() -> Mailer:
    global _mailer
    if _mailer is None:
        _mailer = Mailer()
    return _mailer
