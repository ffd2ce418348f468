"""Invoice Item Domain Entity

One billed line on an invoice.
"""

from datetime import datetime
from decimal import Decimal
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric
from src.domain.base import BaseModel, generate_uuid


class InvoiceItem(BaseModel, table=True):
    """
    InvoiceItem - Line item of an invoice

    Domain Rules:
    - total = quantity * unit_price
    - Immutable once the invoice is created
    """

    __tablename__ = "invoice_items"
    __table_args__ = (
        Index("ix_invoice_items_invoice_id", "invoice_id"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    invoice_id: str = Field(foreign_key="invoices.id")
    description: str = Field()
    quantity: int = Field(default=1)
    unit_price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    total: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)
