"""CreateInvoice Use Case

Creates a draft invoice from line items.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.broadcaster import Broadcaster
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.booking_repository import BookingRepository
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem
from src.domain.money import ZERO, quantize_money
from .dtos import CreateInvoiceCommandDTO, InvoiceResponseDTO

logger = logging.getLogger(__name__)


class CreateInvoice:
    """
    Use Case: Create draft invoice

    Business Rules:
    1. subtotal = sum(quantity * unit_price), each line rounded to cents
    2. Discount cannot exceed the subtotal
    3. tax = (subtotal - discount) * tax_rate, rounded half-up to cents
    4. total = subtotal - discount + tax; amount_due starts at total
    5. Invoice number is prefix + next sequence (e.g., INV-1001)
    6. Due date defaults to issue date + due_days
    7. At most one invoice per booking

    Flow:
    1. Validate customer and booking
    2. Compute totals
    3. Generate invoice number
    4. Create invoice (status=draft) and its items
    5. Commit transaction
    6. Publish invoice:created
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        item_repo: InvoiceItemRepository,
        customer_repo: CustomerRepository,
        booking_repo: BookingRepository,
        tax_rate: Decimal,
        due_days: int = 14,
        invoice_prefix: str = "INV-",
        start_number: int = 1001,
        broadcaster: Optional[Broadcaster] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.item_repo = item_repo
        self.customer_repo = customer_repo
        self.booking_repo = booking_repo
        self.tax_rate = Decimal(tax_rate)
        self.due_days = due_days
        self.invoice_prefix = invoice_prefix
        self.start_number = start_number
        self.broadcaster = broadcaster

    async def execute(self, command: CreateInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice creation

        Args:
            command: CreateInvoiceCommandDTO with customer, line items and discount

        Returns:
            Result[InvoiceResponseDTO]: Success with invoice details or error
        """
        try:
            # Step 1: Validate references
            customer = await self.customer_repo.get_by_id(command.customer_id)
            if not customer:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {command.customer_id} not found",
                    )
                )

            if command.booking_id:
                booking = await self.booking_repo.get_by_id(command.booking_id)
                if not booking or booking.customer_id != customer.id:
                    return Return.err(
                        Error(
                            code="BOOKING_NOT_FOUND",
                            message=f"Booking {command.booking_id} not found for customer {customer.id}",
                        )
                    )
                if await self.invoice_repo.exists_for_booking(command.booking_id):
                    return Return.err(
                        Error(
                            code="INVOICE_ALREADY_EXISTS",
                            message=f"Booking {command.booking_id} is already invoiced",
                            reason="Duplicate invoice prevention",
                        )
                    )

            # Step 2: Compute totals
            line_totals = [
                quantize_money(line.unit_price * line.quantity) for line in command.line_items
            ]
            subtotal = quantize_money(sum(line_totals, ZERO))
            discount = quantize_money(command.discount_amount)
            if discount > subtotal:
                return Return.err(
                    Error(
                        code="INVALID_DISCOUNT",
                        message=f"Discount {discount} exceeds subtotal {subtotal}",
                    )
                )
            tax_amount = quantize_money((subtotal - discount) * self.tax_rate)
            total = quantize_money(subtotal - discount + tax_amount)

            # Step 3: Generate invoice number
            invoice_number = await self.invoice_repo.generate_invoice_number(
                self.invoice_prefix, self.start_number
            )

            # Step 4: Create invoice with status=draft
            invoice = await self.invoice_repo.create(
                Invoice(
                    invoice_number=invoice_number,
                    customer_id=customer.id,
                    booking_id=command.booking_id,
                    subtotal=subtotal,
                    tax_rate=self.tax_rate,
                    tax_amount=tax_amount,
                    discount_amount=discount,
                    total=total,
                    amount_paid=ZERO,
                    amount_due=total,
                    status=InvoiceStatus.DRAFT,
                    issue_date=command.issue_date,
                    due_date=command.due_date or command.issue_date + timedelta(days=self.due_days),
                    notes=command.notes,
                )
            )

            items = await self.item_repo.create_many([
                InvoiceItem(
                    invoice_id=invoice.id,
                    description=line.description,
                    quantity=line.quantity,
                    unit_price=quantize_money(line.unit_price),
                    total=line_total,
                )
                for line, line_total in zip(command.line_items, line_totals)
            ])

            # Step 5: Commit transaction
            await self.uow.commit()

            response = InvoiceResponseDTO.from_entity(invoice, items)
            logger.info(
                f"Invoice {invoice.invoice_number} created for customer {customer.id}: total {total}"
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_INVOICE_FAILED",
                    message="Failed to create invoice",
                    reason=str(e),
                )
            )

        # Step 6: Notify dashboards
        if self.broadcaster is not None:
            self.broadcaster.publish("invoice:created", response.model_dump(mode="json"))

        return Return.ok(response)
