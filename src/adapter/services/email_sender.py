"""Email Sender Implementations

Provides concrete implementations for delivering transactional email.
"""

import logging
from typing import List, Optional
import httpx
from src.app.services.email_sender import EmailSender, EmailResult

logger = logging.getLogger(__name__)


class LoggingEmailSender(EmailSender):
    """
    Email sender that only logs messages

    Useful for development and testing, or when no provider is configured.
    """

    async def send(
        self,
        to: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> EmailResult:
        logger.info(f"[EMAIL] To: {to}, Subject: {subject}")
        logger.debug(text_body)
        return EmailResult(sent=True, message_id=None)


class ResendEmailSender(EmailSender):
    """
    Email sender backed by the Resend HTTP API

    Sends a JSON payload with a bearer API key. Provider and network
    failures are returned as ``EmailResult(sent=False)``.
    """

    def __init__(
        self,
        api_key: str,
        from_address: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
    ):
        """
        Initialize the Resend sender

        Args:
            api_key: Resend API key
            from_address: Sender, e.g. "Company <hello@example.com>"
            api_url: Send endpoint
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.from_address = from_address
        self.api_url = api_url
        self.timeout = timeout

    async def send(
        self,
        to: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> EmailResult:
        payload = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "text": text_body,
        }
        if html_body:
            payload["html"] = html_body

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                )
                response.raise_for_status()
                message_id = response.json().get("id")
                logger.info(f"Email sent to {to} (id={message_id}): {subject}")
                return EmailResult(sent=True, message_id=message_id)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return EmailResult(sent=False, error=str(e))
        except Exception as e:
            logger.error(f"Unexpected error sending email to {to}: {e}")
            return EmailResult(sent=False, error=str(e))


class CompositeEmailSender(EmailSender):
    """
    Email sender that delegates to multiple senders

    Reports success if at least one sender delivered the message.
    """

    def __init__(self, senders: List[EmailSender]):
        self.senders = senders

    async def send(
        self,
        to: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> EmailResult:
        delivered: Optional[EmailResult] = None
        errors = []
        for sender in self.senders:
            try:
                result = await sender.send(to, subject, text_body, html_body)
            except Exception as e:
                logger.error(f"Email sender {type(sender).__name__} failed: {e}")
                errors.append(str(e))
                continue
            if result.sent:
                if delivered is None or (delivered.message_id is None and result.message_id):
                    delivered = result
            elif result.error:
                errors.append(result.error)

        if delivered is not None:
            return delivered
        return EmailResult(sent=False, error="; ".join(errors) or "No email sender delivered the message")


def create_email_sender(
    provider: str = "log",
    api_key: Optional[str] = None,
    from_address: Optional[str] = None,
    api_url: Optional[str] = None,
) -> EmailSender:
    """
    Factory function to create the configured email sender

    Args:
        provider: "log" or "resend"
        api_key: Provider API key; without one only logging is used

    Returns:
        Configured EmailSender
    """
    if provider != "resend" or not api_key:
        if provider == "resend":
            logger.warning("EMAIL_PROVIDER is resend but no EMAIL_API_KEY is set, logging emails only")
        return LoggingEmailSender()

    kwargs = {"api_key": api_key, "from_address": from_address or ""}
    if api_url:
        kwargs["api_url"] = api_url
    return CompositeEmailSender([LoggingEmailSender(), ResendEmailSender(**kwargs)])
