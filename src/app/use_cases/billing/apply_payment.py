"""ApplyPayment Use Case

Records a manual payment (cash, check, transfer, ...) against an invoice.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.broadcaster import Broadcaster
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.domain.invoice import InvoiceValidationError
from src.domain.money import quantize_money
from src.domain.payment import Payment, PaymentStatus
from .dtos import (
    ApplyPaymentCommandDTO,
    PaymentAppliedResponseDTO,
    PaymentResponseDTO,
    InvoiceResponseDTO,
)

logger = logging.getLogger(__name__)


class ApplyPayment:
    """
    Use Case: Apply a payment to an invoice

    Business Rules:
    1. amount > 0 and amount <= amount_due; overpayment is rejected and
       leaves the invoice unchanged
    2. amount_paid += amount, amount_due = total - amount_paid
    3. Status: fully paid -> paid (paid_date = today), partly -> partial
    4. Payment row, invoice balance and customer lifetime spend are
       committed together or not at all
    5. Payments on the same invoice are serialized (invoice lock +
       SELECT FOR UPDATE)

    Flow:
    1. Acquire the invoice lock
    2. Get invoice with row lock
    3. Apply amount to the balance (validates)
    4. Create payment record
    5. Update invoice and customer spend
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

    async def execute(self, command: ApplyPaymentCommandDTO) -> Result[PaymentAppliedResponseDTO]:
        async with self.locks.lock_for(command.invoice_id):
            result = await self._apply(command)

        if result.is_ok() and self.broadcaster is not None:
            self.broadcaster.publish(
                "payment:received",
                {
                    "invoice_id": command.invoice_id,
                    "amount": str(result.value.payment.amount),
                    "status": result.value.invoice.status,
                },
            )
        return result

    async def _apply(self, command: ApplyPaymentCommandDTO) -> Result[PaymentAppliedResponseDTO]:
        try:
            # Step 2: Get invoice with pessimistic lock
            invoice = await self.invoice_repo.get_by_id(command.invoice_id, for_update=True)
            if not invoice:
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {command.invoice_id} not found",
                    )
                )

            # Step 3: Validate and apply (raises before touching the balance)
            amount = quantize_money(command.amount)
            invoice.apply_payment(amount, command.today)

            # Step 4: Create payment record
            payment = await self.payment_repo.create(
                Payment(
                    invoice_id=invoice.id,
                    customer_id=invoice.customer_id,
                    amount=amount,
                    method=command.method,
                    status=PaymentStatus.COMPLETED,
                    reference_number=command.reference_number,
                    notes=command.notes,
                )
            )

            # Step 5: Update invoice balance and customer aggregate
            invoice.payment_method = command.method.value
            invoice = await self.invoice_repo.update(invoice)
            await self.customer_repo.adjust_total_spent(invoice.customer_id, amount)

            # Step 6: Commit transaction
            await self.uow.commit()

            logger.info(
                f"Payment {payment.id} of {amount} applied to invoice {invoice.invoice_number}: "
                f"paid={invoice.amount_paid}, due={invoice.amount_due}, status={invoice.status}"
            )

            return Return.ok(
                PaymentAppliedResponseDTO(
                    payment=PaymentResponseDTO.from_entity(payment),
                    invoice=InvoiceResponseDTO.from_entity(invoice),
                )
            )

        except InvoiceValidationError as e:
            await self.uow.rollback()
            return Return.err(Error(code=e.code, message=str(e)))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="APPLY_PAYMENT_FAILED",
                    message="Failed to apply payment",
                    reason=str(e),
                )
            )
