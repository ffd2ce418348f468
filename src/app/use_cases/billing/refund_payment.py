"""RefundPayment Use Case

Refunds a completed payment in full.
"""

import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.broadcaster import Broadcaster
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.app.services.payment_processor import PaymentProcessor, PaymentProcessorError
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.invoice import InvoiceValidationError
from src.domain.payment import PaymentMethod, PaymentStatus
from .dtos import RefundPaymentCommandDTO, RefundResponseDTO, PaymentResponseDTO, InvoiceResponseDTO

logger = logging.getLogger(__name__)


class RefundPayment:
    """
    Use Case: Refund a payment

    Business Rules:
    1. Only completed payments can be refunded, and only once
    2. Card payments with a processor payment id are refunded at the
       processor first; a processor failure changes nothing locally
    3. The payment row is kept and marked refunded (amount stays > 0)
    4. Invoice: amount_paid -= amount, amount_due += amount; refunded when
       nothing remains paid, partial otherwise
    5. Customer lifetime spend -= amount in the same transaction

    Flow:
    1. Resolve payment, acquire invoice lock, re-read both with row locks
    2. Refund at processor (card only)
    3. Reverse invoice balance and mark payment refunded
    4. Update customer spend
    5. Commit transaction
    6. Publish payment:refunded
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        customer_repo: CustomerRepository,
        locks: InvoiceLockRegistry,
        processor: Optional[PaymentProcessor] = None,
        broadcaster: Optional[Broadcaster] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.customer_repo = customer_repo
        self.locks = locks
        self.processor = processor
        self.broadcaster = broadcaster

    async def execute(self, command: RefundPaymentCommandDTO) -> Result[RefundResponseDTO]:
        try:
            payment = await self.payment_repo.get_by_id(command.payment_id)
            if not payment:
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_FOUND",
                        message=f"Payment {command.payment_id} not found",
                    )
                )
            invoice_id = payment.invoice_id
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="REFUND_PAYMENT_FAILED", message="Failed to refund payment", reason=str(e))
            )

        async with self.locks.lock_for(invoice_id):
            result = await self._refund(command, invoice_id)

        if result.is_ok() and self.broadcaster is not None:
            self.broadcaster.publish(
                "payment:refunded",
                {
                    "payment_id": command.payment_id,
                    "invoice_id": invoice_id,
                    "amount": str(result.value.payment.amount),
                },
            )
        return result

    async def _refund(
        self, command: RefundPaymentCommandDTO, invoice_id: str
    ) -> Result[RefundResponseDTO]:
        refund_id = None
        try:
            # Step 1: Re-read under row locks
            payment = await self.payment_repo.get_by_id(command.payment_id, for_update=True)
            if PaymentStatus(payment.status) != PaymentStatus.COMPLETED:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="PAYMENT_NOT_REFUNDABLE",
                        message=f"Payment {payment.id} is {PaymentStatus(payment.status).value}",
                    )
                )

            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                await self.uow.rollback()
                return Return.err(
                    Error(code="INVOICE_NOT_FOUND", message=f"Invoice {invoice_id} not found")
                )

            # Step 2: Refund card payments at the processor
            if PaymentMethod(payment.method) == PaymentMethod.CARD and payment.processor_payment_id:
                if self.processor is None:
                    await self.uow.rollback()
                    return Return.err(
                        Error(
                            code="PAYMENTS_NOT_CONFIGURED",
                            message="Card refunds need a configured payment processor",
                        )
                    )
                refund = await self.processor.create_refund(
                    payment.processor_payment_id, payment.amount
                )
                refund_id = refund.refund_id

            # Step 3: Reverse the balance, keep the payment row
            invoice.reverse_payment(payment.amount)
            invoice = await self.invoice_repo.update(invoice)

            payment.status = PaymentStatus.REFUNDED
            payment.refunded_at = datetime.utcnow()
            payment.refund_reference = refund_id
            if command.reason:
                refund_note = f"Refund: {command.reason}"
                payment.notes = f"{payment.notes}\n{refund_note}" if payment.notes else refund_note
            payment = await self.payment_repo.update(payment)

            # Step 4: Customer aggregate
            await self.customer_repo.adjust_total_spent(invoice.customer_id, -payment.amount)

            # Step 5: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Payment {payment.id} refunded ({payment.amount}); invoice "
                f"{invoice.invoice_number} now {invoice.status}"
            )

            return Return.ok(
                RefundResponseDTO(
                    payment=PaymentResponseDTO.from_entity(payment),
                    invoice=InvoiceResponseDTO.from_entity(invoice),
                    processor_refund_id=refund_id,
                )
            )

        except PaymentProcessorError as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="PROCESSOR_ERROR", message="Processor refund failed", reason=str(e))
            )
        except InvoiceValidationError as e:
            await self.uow.rollback()
            if refund_id:
                logger.error(
                    f"Processor refund {refund_id} issued but invoice {invoice_id} was not updated: {e}"
                )
            return Return.err(Error(code=e.code, message=str(e)))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="REFUND_PAYMENT_FAILED", message="Failed to refund payment", reason=str(e))
            )
