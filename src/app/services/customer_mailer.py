"""Send a customer email and record it in the communication log"""

import logging
from typing import Optional
from src.app.repositories.communication_repository import CommunicationRepository
from src.app.services.email_sender import EmailSender, EmailResult
from src.app.services.email_templates import EmailMessage
from src.domain.communication import Communication, CommunicationStatus, CommunicationType
from src.domain.customer import Customer

logger = logging.getLogger(__name__)


class CustomerMailer:
    """
    Delivers one message to a customer and appends a Communication row

    A failed or impossible send (no email on file) is still logged, with
    status=failed, so it can be followed up manually. The caller owns the
    transaction.
    """

    def __init__(self, email_sender: EmailSender, communication_repo: CommunicationRepository):
        self.email_sender = email_sender
        self.communication_repo = communication_repo

    async def deliver(
        self,
        customer: Customer,
        message: EmailMessage,
        booking_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
        log_subject: Optional[str] = None,
    ) -> EmailResult:
        if not customer.email:
            result = EmailResult(sent=False, error="CUSTOMER_EMAIL_MISSING")
        else:
            result = await self.email_sender.send(
                customer.email, message.subject, message.text_body, message.html_body
            )

        if not result.sent:
            logger.error(
                f"Email '{message.subject}' to customer {customer.id} not sent: {result.error}"
            )

        await self.communication_repo.create(
            Communication(
                customer_id=customer.id,
                booking_id=booking_id,
                invoice_id=invoice_id,
                type=CommunicationType.EMAIL,
                direction="outbound",
                subject=log_subject or message.subject,
                content=message.text_body,
                status=CommunicationStatus.SENT if result.sent else CommunicationStatus.FAILED,
                error=result.error,
            )
        )
        return result
