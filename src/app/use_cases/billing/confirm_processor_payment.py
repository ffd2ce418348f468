"""ConfirmProcessorPayment Use Case

Applies a completed card checkout reported by the processor webhook.
"""

import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.broadcaster import Broadcaster
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.invoice import InvoiceStatus, TERMINAL_STATUSES
from src.domain.payment import Payment, PaymentMethod, PaymentStatus
from .dtos import ConfirmProcessorPaymentCommandDTO, ProcessorConfirmationResponseDTO, InvoiceResponseDTO

logger = logging.getLogger(__name__)


class ConfirmProcessorPayment:
    """
    Use Case: Confirm a processor checkout session

    Business Rules:
    1. Checkout is full-payment-or-nothing: the whole remaining amount due
       is applied and the invoice becomes paid
    2. Idempotent under webhook redelivery: a session already recorded as
       a payment is a no-op (lookup by processor reference, backed by a
       unique index)
    3. A cancelled/refunded invoice is not credited
    4. Payment, invoice and customer spend are committed together

    Flow:
    1. Acquire the invoice lock
    2. Return the invoice unchanged if the session is already recorded
    3. Get invoice with row lock
    4. Settle the outstanding balance
    5. Create card payment record, update invoice and customer spend
    6. Commit transaction
    7. Publish payment:received
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        customer_repo: CustomerRepository,
        locks: InvoiceLockRegistry,
        broadcaster: Optional[Broadcaster] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.customer_repo = customer_repo
        self.locks = locks
        self.broadcaster = broadcaster

    async def execute(
        self, command: ConfirmProcessorPaymentCommandDTO
    ) -> Result[ProcessorConfirmationResponseDTO]:
        if not command.invoice_id:
            return Return.err(
                Error(
                    code="INVOICE_NOT_FOUND",
                    message=f"Checkout session {command.session_id} carries no invoice id",
                )
            )

        async with self.locks.lock_for(command.invoice_id):
            result = await self._confirm(command)

        if result.is_ok() and not result.value.duplicate and self.broadcaster is not None:
            self.broadcaster.publish(
                "payment:received",
                {
                    "invoice_id": command.invoice_id,
                    "amount": str(result.value.invoice.amount_paid),
                    "status": result.value.invoice.status,
                    "method": PaymentMethod.CARD.value,
                },
            )
        return result

    async def _confirm(
        self, command: ConfirmProcessorPaymentCommandDTO
    ) -> Result[ProcessorConfirmationResponseDTO]:
        try:
            # Step 2: Webhook redelivery is a no-op
            existing = await self.payment_repo.get_by_processor_reference(command.session_id)
            if existing:
                logger.info(
                    f"Checkout session {command.session_id} already recorded as payment {existing.id}"
                )
                return await self._duplicate(existing.invoice_id, existing.id)

            # Step 3: Get invoice with pessimistic lock
            invoice = await self.invoice_repo.get_by_id(command.invoice_id, for_update=True)
            if not invoice:
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {command.invoice_id} not found",
                    )
                )

            status = InvoiceStatus(invoice.status)
            if status in TERMINAL_STATUSES:
                logger.warning(
                    f"Checkout session {command.session_id} completed for {status.value} "
                    f"invoice {invoice.id}; needs manual review"
                )
                return Return.err(
                    Error(
                        code="INVALID_INVOICE_STATUS",
                        message=f"Invoice {invoice.invoice_number} is {status.value}",
                    )
                )

            if invoice.amount_due <= 0:
                logger.warning(
                    f"Checkout session {command.session_id} completed for already paid "
                    f"invoice {invoice.id}; possible double charge"
                )
                return Return.err(
                    Error(
                        code="INVOICE_ALREADY_PAID",
                        message=f"Invoice {invoice.invoice_number} has no amount due",
                    )
                )

            # Step 4: Settle in full
            outstanding = invoice.settle_in_full(command.today)

            # Step 5: Record the card payment
            payment = await self.payment_repo.create(
                Payment(
                    invoice_id=invoice.id,
                    customer_id=invoice.customer_id,
                    amount=outstanding,
                    method=PaymentMethod.CARD,
                    status=PaymentStatus.COMPLETED,
                    processor_reference=command.session_id,
                    processor_payment_id=command.payment_intent,
                )
            )

            invoice.payment_method = PaymentMethod.CARD.value
            invoice.processor_payment_intent = command.payment_intent
            invoice = await self.invoice_repo.update(invoice)
            await self.customer_repo.adjust_total_spent(invoice.customer_id, outstanding)

            # Step 6: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Invoice {invoice.invoice_number} paid by card: {outstanding} "
                f"(session {command.session_id})"
            )

            return Return.ok(
                ProcessorConfirmationResponseDTO(
                    invoice=InvoiceResponseDTO.from_entity(invoice),
                    payment_id=payment.id,
                    duplicate=False,
                )
            )

        except IntegrityError as e:
            # Lost a race with another delivery of the same session
            await self.uow.rollback()
            existing = await self.payment_repo.get_by_processor_reference(command.session_id)
            if existing is None:
                return Return.err(
                    Error(
                        code="CONFIRM_PAYMENT_FAILED",
                        message="Failed to confirm processor payment",
                        reason=str(e),
                    )
                )
            return await self._duplicate(existing.invoice_id, existing.id)
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CONFIRM_PAYMENT_FAILED",
                    message="Failed to confirm processor payment",
                    reason=str(e),
                )
            )

    async def _duplicate(
        self, invoice_id: str, payment_id: str
    ) -> Result[ProcessorConfirmationResponseDTO]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        response = ProcessorConfirmationResponseDTO(
            invoice=InvoiceResponseDTO.from_entity(invoice),
            payment_id=payment_id,
            duplicate=True,
        )
        await self.uow.rollback()
        return Return.ok(response)
