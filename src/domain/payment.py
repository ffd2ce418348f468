"""Payment Domain Entity

One monetary transaction applied to exactly one invoice.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric, String
from src.domain.base import BaseModel, generate_uuid


class PaymentMethod(str, Enum):
    CASH = "cash"
    CHECK = "check"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Payment(BaseModel, table=True):
    """
    Payment - Immutable record of money received

    Domain Rules:
    - amount > 0
    - processor_reference (checkout session id) is unique, which makes
      webhook redelivery a no-op
    - Only status may change, and only to refunded; rows are never deleted
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="payment_amount_positive"),
        Index("ix_payments_invoice_id", "invoice_id"),
        Index("ix_payments_processor_reference", "processor_reference", unique=True),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    invoice_id: str = Field(foreign_key="invoices.id")
    customer_id: str = Field(foreign_key="customers.id")

    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Amount applied (precision: 12,2)"
    )

    method: PaymentMethod = Field(description="cash, check, card, bank_transfer, other")
    status: PaymentStatus = Field(default=PaymentStatus.COMPLETED)

    processor_reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Card processor checkout session id"
    )

    processor_payment_id: Optional[str] = Field(
        default=None,
        description="Card processor payment id, used for refunds"
    )

    reference_number: Optional[str] = Field(default=None, description="Check number, transfer ref, ...")
    notes: Optional[str] = Field(default=None)

    refund_reference: Optional[str] = Field(default=None)
    refunded_at: Optional[datetime] = Field(default=None)

    processed_at: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)
