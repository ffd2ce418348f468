"""Invoice Domain Entity

Tracks customer invoices, their payment balance and status.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, Numeric, String
from src.domain.base import BaseModel, generate_uuid
from src.domain.money import ZERO, quantize_money
from src.domain.recurrence import is_overdue


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    PAID = "paid"
    PARTIAL = "partial"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# States that are never recomputed from the balance
TERMINAL_STATUSES = (InvoiceStatus.CANCELLED, InvoiceStatus.REFUNDED)

# States an invoice may be (re)sent from
SENDABLE_STATUSES = (InvoiceStatus.DRAFT, InvoiceStatus.SENT, InvoiceStatus.VIEWED)


class InvoiceValidationError(ValueError):
    code = "INVOICE_VALIDATION_ERROR"


class InvalidAmountError(InvoiceValidationError):
    code = "INVALID_AMOUNT"


class OverpaymentError(InvoiceValidationError):
    code = "OVERPAYMENT"


class InvalidInvoiceStatusError(InvoiceValidationError):
    code = "INVALID_INVOICE_STATUS"


def derive_invoice_status(
    current: InvoiceStatus,
    amount_paid: Decimal,
    total: Decimal,
) -> InvoiceStatus:
    """
    Status implied by the balance

    cancelled/refunded always win. Fully paid -> paid, partly paid ->
    partial, otherwise the current status is kept.
    """
    current = InvoiceStatus(current)
    if current in TERMINAL_STATUSES:
        return current
    if total > 0 and amount_paid >= total:
        return InvoiceStatus.PAID
    if 0 < amount_paid < total:
        return InvoiceStatus.PARTIAL
    return current


class Invoice(BaseModel, table=True):
    """
    Invoice - Bill addressed to one customer

    Domain Rules:
    - invoice_number is unique
    - amount_paid + amount_due == total, amount_due >= 0
    - Overpayment is rejected, never clamped
    - Balance and status change only through the methods below
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index("ix_invoices_customer_id", "customer_id"),
        Index("ix_invoices_status", "status"),
        Index("ix_invoices_booking_id", "booking_id"),
        Index("ix_invoices_invoice_number", "invoice_number", unique=True),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Invoice identifier (UUID)"
    )

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Human readable sequential number (e.g., INV-1001)"
    )

    customer_id: str = Field(foreign_key="customers.id")
    booking_id: Optional[str] = Field(default=None, foreign_key="bookings.id")

    subtotal: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    tax_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(6, 4), nullable=False, default=0),
    )
    tax_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )
    discount_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )
    total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    amount_paid: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )
    amount_due: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT)

    issue_date: date = Field(
        default_factory=date.today,
        sa_column=Column(Date, nullable=False),
    )
    due_date: Optional[date] = Field(default=None, sa_column=Column(Date, nullable=True))
    paid_date: Optional[date] = Field(default=None, sa_column=Column(Date, nullable=True))
    sent_at: Optional[datetime] = Field(default=None)
    viewed_at: Optional[datetime] = Field(default=None)

    payment_method: Optional[str] = Field(default=None)
    processor_payment_intent: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def apply_payment(self, amount: Decimal, today: date) -> InvoiceStatus:
        """
        Credit ``amount`` against the invoice balance

        Returns:
            The new invoice status

        Raises:
            InvalidAmountError: amount is not positive
            InvalidInvoiceStatusError: invoice is cancelled or refunded
            OverpaymentError: amount exceeds amount_due
        """
        amount = quantize_money(amount)
        if amount <= 0:
            raise InvalidAmountError(f"Payment amount must be greater than 0, got {amount}")
        if InvoiceStatus(self.status) in TERMINAL_STATUSES:
            raise InvalidInvoiceStatusError(
                f"Cannot record a payment on a {InvoiceStatus(self.status).value} invoice"
            )
        if amount > self.amount_due:
            raise OverpaymentError(
                f"Payment exceeds amount due. Amount: {amount}, Due: {self.amount_due}"
            )

        self._set_paid(quantize_money(self.amount_paid + amount))
        new_status = derive_invoice_status(self.status, self.amount_paid, self.total)
        if new_status == InvoiceStatus.PAID and self.status != InvoiceStatus.PAID:
            self.paid_date = today
        self.status = new_status
        return new_status

    def settle_in_full(self, today: date) -> Decimal:
        """
        Mark the whole remaining balance as paid

        Returns:
            The amount that was outstanding
        """
        if InvoiceStatus(self.status) in TERMINAL_STATUSES:
            raise InvalidInvoiceStatusError(
                f"Cannot settle a {InvoiceStatus(self.status).value} invoice"
            )
        outstanding = quantize_money(self.amount_due)
        self._set_paid(quantize_money(self.total))
        if self.status != InvoiceStatus.PAID:
            self.paid_date = today
        self.status = InvoiceStatus.PAID
        return outstanding

    def reverse_payment(self, amount: Decimal) -> InvoiceStatus:
        """
        Take a refunded amount back off the paid balance

        The invoice becomes refunded once nothing remains paid, partial
        otherwise.
        """
        amount = quantize_money(amount)
        if amount <= 0 or amount > self.amount_paid:
            raise InvalidAmountError(
                f"Refund amount {amount} must be between 0 and amount paid {self.amount_paid}"
            )
        self._set_paid(quantize_money(self.amount_paid - amount))
        self.paid_date = None
        self.status = InvoiceStatus.REFUNDED if self.amount_paid == 0 else InvoiceStatus.PARTIAL
        return self.status

    def mark_overdue(self, today: date) -> bool:
        """Move a sent, unpaid, past-due invoice to overdue"""
        if InvoiceStatus(self.status) != InvoiceStatus.SENT:
            return False
        if not is_overdue(self.due_date, today, self.amount_due):
            return False
        self.status = InvoiceStatus.OVERDUE
        return True

    def _set_paid(self, amount_paid: Decimal) -> None:
        self.amount_paid = amount_paid
        self.amount_due = max(ZERO, quantize_money(self.total - amount_paid))
