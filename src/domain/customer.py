"""Customer Domain Entity

A household or business that books cleanings and receives invoices.
Customers are soft-deactivated, never deleted.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, generate_uuid


class Customer(BaseModel, table=True):
    """
    Customer - Owner of bookings and invoices

    Domain Rules:
    - email is unique and stored lower-cased
    - total_spent is the lifetime sum of completed payments minus refunds,
      updated in the same transaction as the payment row
    - total_jobs counts completed bookings
    """

    __tablename__ = "customers"
    __table_args__ = (
        Index("ix_customers_email", "email", unique=True),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Customer identifier (UUID)"
    )

    email: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Lower-cased email address"
    )

    first_name: str = Field(description="First name")
    last_name: str = Field(default="", description="Last name")
    phone: Optional[str] = Field(default=None, description="Phone number")
    address: Optional[str] = Field(default=None, description="Street address")
    city: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    zip_code: Optional[str] = Field(default=None)
    source: str = Field(default="website", description="website, phone, referral, other")

    stripe_customer_id: Optional[str] = Field(
        default=None,
        description="Customer id at the card processor"
    )

    total_spent: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
        description="Lifetime spend aggregate (precision: 12,2)"
    )

    total_jobs: int = Field(default=0, description="Number of completed bookings")
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
