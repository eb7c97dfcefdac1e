"""Gmail API client for sending invitation emails."""
import base64
import logging
from email.header import Header
from email.mime.text import MIMEText
from functools import cached_property

from google.oauth2.credentials import Credentials

from event_manager.google.client import build_service, upstream_call

logger = logging.getLogger(__name__)


def build_raw_message(sender: str, to: str, subject: str, html: str) -> str:
    """Encode an HTML email as the base64url RFC 2822 string Gmail expects."""
    message = MIMEText(html, "html", "utf-8")
    message["From"] = sender
    message["To"] = to
    message["Subject"] = Header(subject, "utf-8")
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii")


class GmailBackend:
    """Sends mail as the signed-in organizer."""

    def __init__(self, credentials: Credentials):
        self.credentials = credentials

    @cached_property
    def service(self):
        return build_service("gmail", "v1", self.credentials)

    def send(self, sender: str, to: str, subject: str, html: str) -> str:
        """Send one message. Returns the Gmail message id."""
        raw = build_raw_message(sender, to, subject, html)
        with upstream_call(f"send email to {to}"):
            result = (
                self.service.users()
                .messages()
                .send(userId="me", body={"raw": raw})
                .execute()
            )
        logger.debug(f"Email sent to {to}: {result.get('id')}")
        return result.get("id", "")
