"""Data Transfer Objects for Billing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem
from src.domain.payment import Payment, PaymentMethod, PaymentStatus


class InvoiceLineItemDTO(BaseModel):
    description: str = Field(..., min_length=1)

    quantity: int = Field(default=1, ge=1)

    unit_price: Decimal = Field(
        ...,
        ge=0,
        description="Price per unit (precision: 12,2)"
    )


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating an invoice

    Used as input to CreateInvoice use case.
    """

    customer_id: str = Field(..., description="Customer identifier")

    booking_id: Optional[str] = Field(
        default=None,
        description="Originating booking; at most one invoice per booking"
    )

    line_items: List[InvoiceLineItemDTO] = Field(..., min_length=1)

    discount_amount: Decimal = Field(
        default=Decimal("0.00"),
        ge=0,
        description="Discount applied before tax"
    )

    issue_date: date = Field(default_factory=date.today)

    due_date: Optional[date] = Field(
        default=None,
        description="Defaults to issue date + configured due days"
    )

    notes: Optional[str] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "0b8e6f8a-3c61-4b1c-9a53-6f0e2f1f8d11",
                "line_items": [
                    {"description": "Deep Cleaning", "quantity": 1, "unit_price": "179.00"},
                    {"description": "Inside oven", "quantity": 1, "unit_price": "25.00"},
                ],
                "discount_amount": "10.00",
                "notes": "Thank you for your business",
            }
        }


class CreateInvoiceFromBookingCommandDTO(BaseModel):
    booking_id: str = Field(..., description="Completed booking to invoice")

    issue_date: date = Field(default_factory=date.today)


class InvoiceItemResponseDTO(BaseModel):
    item_id: str
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal

    @classmethod
    def from_entity(cls, item: InvoiceItem) -> "InvoiceItemResponseDTO":
        return cls(
            item_id=item.id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total=item.total,
        )


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for invoice operations

    Invariant: amount_paid + amount_due == total
    """

    invoice_id: str
    invoice_number: str
    customer_id: str
    booking_id: Optional[str] = None
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal
    amount_paid: Decimal
    amount_due: Decimal
    status: str
    issue_date: date
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    sent_at: Optional[datetime] = None
    notes: Optional[str] = None
    items: List[InvoiceItemResponseDTO] = Field(default_factory=list)
    created_at: datetime

    @classmethod
    def from_entity(
        cls, invoice: Invoice, items: Optional[List[InvoiceItem]] = None
    ) -> "InvoiceResponseDTO":
        return cls(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            customer_id=invoice.customer_id,
            booking_id=invoice.booking_id,
            subtotal=invoice.subtotal,
            tax_rate=invoice.tax_rate,
            tax_amount=invoice.tax_amount,
            discount_amount=invoice.discount_amount,
            total=invoice.total,
            amount_paid=invoice.amount_paid,
            amount_due=invoice.amount_due,
            status=InvoiceStatus(invoice.status).value,
            issue_date=invoice.issue_date,
            due_date=invoice.due_date,
            paid_date=invoice.paid_date,
            sent_at=invoice.sent_at,
            notes=invoice.notes,
            items=[InvoiceItemResponseDTO.from_entity(i) for i in (items or [])],
            created_at=invoice.created_at,
        )


class ApplyPaymentCommandDTO(BaseModel):
    """
    Command DTO for recording a manual payment

    Used as input to ApplyPayment use case. Amount is validated by the
    use case so a non-positive amount is reported as INVALID_AMOUNT.
    """

    invoice_id: str = Field(..., description="Invoice identifier")

    amount: Decimal = Field(..., description="Amount received (must be > 0 and <= amount due)")

    method: PaymentMethod = Field(default=PaymentMethod.CASH)

    reference_number: Optional[str] = Field(
        default=None,
        description="Check number, transfer reference, ..."
    )

    notes: Optional[str] = Field(default=None)

    today: date = Field(default_factory=date.today)

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": "5d7c2a8e-1f4b-4d0e-a3d1-0f6e9b2c7a10",
                "amount": "50.00",
                "method": "check",
                "reference_number": "1042",
            }
        }


class PaymentResponseDTO(BaseModel):
    payment_id: str
    invoice_id: str
    customer_id: str
    amount: Decimal
    method: str
    status: str
    processor_reference: Optional[str] = None
    reference_number: Optional[str] = None
    processed_at: datetime
    refunded_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, payment: Payment) -> "PaymentResponseDTO":
        return cls(
            payment_id=payment.id,
            invoice_id=payment.invoice_id,
            customer_id=payment.customer_id,
            amount=payment.amount,
            method=PaymentMethod(payment.method).value,
            status=PaymentStatus(payment.status).value,
            processor_reference=payment.processor_reference,
            reference_number=payment.reference_number,
            processed_at=payment.processed_at,
            refunded_at=payment.refunded_at,
        )


class PaymentAppliedResponseDTO(BaseModel):
    payment: PaymentResponseDTO
    invoice: InvoiceResponseDTO


class ConfirmProcessorPaymentCommandDTO(BaseModel):
    """
    Command DTO built from a verified checkout.session.completed event

    Used as input to ConfirmProcessorPayment use case.
    """

    session_id: str = Field(..., description="Processor checkout session id")

    invoice_id: Optional[str] = Field(
        default=None,
        description="Invoice id carried in the session metadata"
    )

    payment_intent: Optional[str] = Field(default=None)

    today: date = Field(default_factory=date.today)


class ProcessorConfirmationResponseDTO(BaseModel):
    invoice: InvoiceResponseDTO
    payment_id: Optional[str] = None
    duplicate: bool = Field(
        default=False,
        description="True when this session was already recorded (webhook redelivery)"
    )


class SweepOverdueCommandDTO(BaseModel):
    today: date = Field(default_factory=date.today)


class OverdueSweepResultDTO(BaseModel):
    """
    Summary of an overdue sweep

    Produced by SweepOverdue use case.
    """

    invoices_checked: int
    transitioned: int = Field(..., description="Invoices moved to overdue")
    transitioned_invoice_ids: List[str] = Field(default_factory=list)
    notices_sent: int = 0
    notice_failures: List[str] = Field(
        default_factory=list,
        description="Invoice ids whose overdue notice was not delivered"
    )
    errors: List[str] = Field(
        default_factory=list,
        description="Invoice ids that could not be processed"
    )


class SendInvoiceResponseDTO(BaseModel):
    invoice: InvoiceResponseDTO
    message_id: Optional[str] = None


class CheckoutSessionResponseDTO(BaseModel):
    invoice_id: str
    session_id: str
    url: str
    amount_due: Decimal


class RefundPaymentCommandDTO(BaseModel):
    payment_id: str = Field(..., description="Completed payment to refund in full")

    reason: Optional[str] = Field(default=None)


class RefundResponseDTO(BaseModel):
    payment: PaymentResponseDTO
    invoice: InvoiceResponseDTO
    processor_refund_id: Optional[str] = None
