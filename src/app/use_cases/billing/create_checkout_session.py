"""CreateCheckoutSession Use Case"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.payment_processor import PaymentProcessor, PaymentProcessorError
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.invoice import InvoiceStatus, TERMINAL_STATUSES
from .dtos import CheckoutSessionResponseDTO

logger = logging.getLogger(__name__)


class CreateCheckoutSession:
    """
    Use Case: Open a hosted card checkout for an invoice's amount due

    The customer is registered with the processor on first checkout and
    the processor customer id is kept on the customer row.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        customer_repo: CustomerRepository,
        processor: Optional[PaymentProcessor],
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.customer_repo = customer_repo
        self.processor = processor

    async def execute(
        self, invoice_id: str, customer_id: Optional[str] = None
    ) -> Result[CheckoutSessionResponseDTO]:
        if self.processor is None:
            return Return.err(
                Error(
                    code="PAYMENTS_NOT_CONFIGURED",
                    message="Online payments are not configured",
                )
            )

        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice or (customer_id is not None and invoice.customer_id != customer_id):
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {invoice_id} not found",
                    )
                )

            status = InvoiceStatus(invoice.status)
            if status == InvoiceStatus.PAID or invoice.amount_due <= 0:
                return Return.err(
                    Error(
                        code="INVOICE_ALREADY_PAID",
                        message=f"Invoice {invoice.invoice_number} is already paid",
                    )
                )
            if status in TERMINAL_STATUSES:
                return Return.err(
                    Error(
                        code="INVALID_INVOICE_STATUS",
                        message=f"Invoice {invoice.invoice_number} is {status.value}",
                    )
                )

            customer = await self.customer_repo.get_by_id(invoice.customer_id)
            if not customer:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {invoice.customer_id} not found",
                    )
                )

            if not customer.stripe_customer_id and customer.email:
                customer.stripe_customer_id = await self.processor.create_customer(customer)
                await self.customer_repo.update(customer)
                await self.uow.commit()

            session = await self.processor.create_checkout_session(invoice, customer)

            logger.info(f"Checkout session {session.session_id} opened for invoice {invoice.id}")
            return Return.ok(
                CheckoutSessionResponseDTO(
                    invoice_id=invoice.id,
                    session_id=session.session_id,
                    url=session.url,
                    amount_due=invoice.amount_due,
                )
            )

        except PaymentProcessorError as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="PROCESSOR_ERROR",
                    message="Payment processor rejected the request",
                    reason=str(e),
                )
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_CHECKOUT_FAILED",
                    message="Failed to create checkout session",
                    reason=str(e),
                )
            )
