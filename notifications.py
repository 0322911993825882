import logging
import smtplib
from email.message import EmailMessage

from hotel_settings import SmtpSettings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 15


class EmailNotifier:
    """Sends guest emails over SMTP, or logs them when SMTP is not configured.

    Delivery is best effort: failures are logged and never reach the caller.
    """

    def __init__(self, smtp: SmtpSettings):
        self.smtp = smtp

    def notify(self, to: str, subject: str, html_body: str) -> bool:
        if not self.smtp.enabled:
            logger.info("[EMAIL MOCK] To: %s | Subject: %s", to, subject)
            return True

        try:
            self._send(to, subject, html_body)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s (%s)", to, subject)
            return False
        return True

    def _send(self, to: str, subject: str, html_body: str) -> None:
        message = EmailMessage()
        message["From"] = self.smtp.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html_body, subtype="html")

        with smtplib.SMTP(self.smtp.host, self.smtp.port, timeout=SMTP_TIMEOUT_SECONDS) as client:
            client.ehlo()
            if client.has_extn("starttls"):
                client.starttls()
                client.ehlo()
            client.login(self.smtp.user, self.smtp.password)
            client.send_message(message)
