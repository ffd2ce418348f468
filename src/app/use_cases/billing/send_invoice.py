"""SendInvoice Use Case"""

import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.email_sender import EmailSender
from src.app.services.broadcaster import Broadcaster
from src.app.services.customer_mailer import CustomerMailer
from src.app.services import email_templates
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.communication_repository import CommunicationRepository
from src.domain.invoice import InvoiceStatus, SENDABLE_STATUSES
from .dtos import InvoiceResponseDTO, SendInvoiceResponseDTO

logger = logging.getLogger(__name__)


class SendInvoice:
    """
    Use Case: Email an invoice to its customer

    Business Rules:
    1. Only draft, sent or viewed invoices can be (re)sent
    2. status becomes sent and sent_at is stamped only after the email
       was accepted by the provider
    3. The attempt is logged as a communication either way
    4. Email failure -> EMAIL_NOT_SENT, status unchanged
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        customer_repo: CustomerRepository,
        communication_repo: CommunicationRepository,
        email_sender: EmailSender,
        company_name: str,
        frontend_url: Optional[str] = None,
        broadcaster: Optional[Broadcaster] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.customer_repo = customer_repo
        self.company_name = company_name
        self.frontend_url = frontend_url.rstrip("/") if frontend_url else None
        self.broadcaster = broadcaster
        self.mailer = CustomerMailer(email_sender, communication_repo)

    async def execute(self, invoice_id: str) -> Result[SendInvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {invoice_id} not found",
                    )
                )

            status = InvoiceStatus(invoice.status)
            if status not in SENDABLE_STATUSES:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="INVALID_INVOICE_STATUS",
                        message=f"Invoice {invoice.invoice_number} is {status.value} and cannot be sent",
                    )
                )

            customer = await self.customer_repo.get_by_id(invoice.customer_id)
            if not customer:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {invoice.customer_id} not found",
                    )
                )
            if not customer.email:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="CUSTOMER_EMAIL_MISSING",
                        message=f"Customer {customer.id} has no email address",
                    )
                )

            pay_url = f"{self.frontend_url}/pay/{invoice.id}" if self.frontend_url else None
            message = email_templates.invoice_message(customer, invoice, self.company_name, pay_url)
            result = await self.mailer.deliver(customer, message, invoice_id=invoice.id)

            if not result.sent:
                # Keep the failed communication row
                await self.uow.commit()
                return Return.err(
                    Error(
                        code="EMAIL_NOT_SENT",
                        message=f"Invoice {invoice.invoice_number} email was not delivered",
                        reason=result.error,
                    )
                )

            invoice.status = InvoiceStatus.SENT
            invoice.sent_at = datetime.utcnow()
            invoice = await self.invoice_repo.update(invoice)
            await self.uow.commit()

            response = SendInvoiceResponseDTO(
                invoice=InvoiceResponseDTO.from_entity(invoice),
                message_id=result.message_id,
            )
            logger.info(f"Invoice {invoice.invoice_number} sent to {customer.email}")

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SEND_INVOICE_FAILED",
                    message="Failed to send invoice",
                    reason=str(e),
                )
            )

        if self.broadcaster is not None:
            self.broadcaster.publish("invoice:sent", response.invoice.model_dump(mode="json"))

        return Return.ok(response)
