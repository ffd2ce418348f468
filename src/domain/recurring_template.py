"""Recurring Template Domain Entity

A standing instruction to generate bookings on a cadence.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, Numeric, String
from src.domain.base import BaseModel, generate_uuid


class RecurringTemplate(BaseModel, table=True):
    """
    RecurringTemplate - Source of generated booking occurrences

    Domain Rules:
    - frequency is stored as text so a legacy/unknown value can be read and
      reported instead of breaking the whole generation run
    - next_date is the earliest date not yet materialized; it never moves back
    - anchor_day pins monthly schedules to a day of month (clamped per month)
    - Deactivated (is_active=False) rather than deleted
    """

    __tablename__ = "recurring_templates"
    __table_args__ = (
        Index("ix_recurring_templates_active_next", "is_active", "next_date"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    customer_id: str = Field(foreign_key="customers.id")
    service_id: str = Field(foreign_key="services.id")

    frequency: str = Field(
        sa_column=Column(String(20), nullable=False),
        description="weekly, biweekly or monthly"
    )

    anchor_day: Optional[int] = Field(
        default=None,
        description="Preferred day of month (1-31) for monthly schedules"
    )

    preferred_time: Optional[str] = Field(default=None, description="Time slot label")

    address: str = Field()
    city: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    zip_code: Optional[str] = Field(default=None)
    sqft: Optional[int] = Field(default=None)
    bedrooms: Optional[int] = Field(default=None)
    bathrooms: Optional[int] = Field(default=None)

    base_price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    notes: Optional[str] = Field(default=None)

    is_active: bool = Field(default=True)

    next_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Earliest date not yet materialized into a booking"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
