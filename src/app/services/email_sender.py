"""Email Sender Interface

Defines the contract for delivering transactional email.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class EmailResult:
    """Outcome of one send attempt"""

    sent: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class EmailSender(ABC):
    """
    Abstract transactional email sender

    Implementations must never raise on provider failure: a failed
    delivery is reported as ``EmailResult(sent=False, error=...)`` so
    callers can log it and move on to the next recipient.
    """

    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> EmailResult:
        """
        Send one message

        Args:
            to: Recipient address
            subject: Subject line
            text_body: Plain-text body
            html_body: Optional HTML body

        Returns:
            EmailResult with sent flag and provider id or error
        """
        pass
