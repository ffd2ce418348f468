"""Booking Domain Entity

One scheduled (or completed/cancelled) cleaning job, plus the booking
status state machine and price invariant.
"""

from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid
from src.domain.money import ZERO, quantize_money


# Bookable start times, in display order
TIME_SLOTS = [
    "8:00 AM", "9:00 AM", "10:00 AM", "11:00 AM",
    "1:00 PM", "2:00 PM", "3:00 PM", "4:00 PM",
]

DEFAULT_TIME_SLOT = "9:00 AM"


class BookingStatus(str, Enum):
    """Booking lifecycle states"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class BookingFrequency(str, Enum):
    """How often the customer asked to be cleaned"""
    ONCE = "once"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


# Statuses whose time slot no longer counts as taken
RELEASED_STATUSES = (BookingStatus.CANCELLED, BookingStatus.NO_SHOW)

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
        BookingStatus.NO_SHOW,
    },
    BookingStatus.CONFIRMED: {
        BookingStatus.IN_PROGRESS,
        BookingStatus.CANCELLED,
        BookingStatus.NO_SHOW,
    },
    BookingStatus.IN_PROGRESS: {BookingStatus.COMPLETED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
    BookingStatus.NO_SHOW: set(),
}


class BookingValidationError(ValueError):
    code = "BOOKING_VALIDATION_ERROR"


class InvalidStatusTransition(BookingValidationError):
    code = "INVALID_STATUS_TRANSITION"


class CancellationReasonRequired(BookingValidationError):
    code = "CANCELLATION_REASON_REQUIRED"


class InvalidPriceError(BookingValidationError):
    code = "INVALID_PRICE"


def price_total(
    base_price: Decimal,
    addons_price: Decimal = ZERO,
    discount_amount: Decimal = ZERO,
    tax_amount: Decimal = ZERO,
) -> Decimal:
    """
    total = base + addons - discount + tax

    Raises:
        InvalidPriceError: the resulting total would be negative
    """
    total = quantize_money(base_price + addons_price - discount_amount + tax_amount)
    if total < 0:
        raise InvalidPriceError(
            f"Booking total cannot be negative (base={base_price}, addons={addons_price}, "
            f"discount={discount_amount}, tax={tax_amount})"
        )
    return total


class Booking(BaseModel, table=True):
    """
    Booking - A scheduled cleaning job

    Domain Rules:
    - total_price = base_price + addons_price - discount_amount + tax_amount, >= 0
    - (recurring_template_id, scheduled_date) is unique: one occurrence per date
    - confirmed_at/started_at/completed_at/cancelled_at are set once, on first entry
    - Bookings are never deleted; cancellation is a status
    """

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_customer_id", "customer_id"),
        Index("ix_bookings_scheduled_date", "scheduled_date"),
        Index("ix_bookings_status", "status"),
        UniqueConstraint(
            "recurring_template_id", "scheduled_date",
            name="uq_bookings_template_date",
        ),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Booking identifier (UUID)"
    )

    customer_id: str = Field(foreign_key="customers.id")
    service_id: str = Field(foreign_key="services.id")
    assigned_to: Optional[str] = Field(default=None, foreign_key="users.id")

    scheduled_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date of the cleaning"
    )

    scheduled_time: str = Field(
        default=DEFAULT_TIME_SLOT,
        sa_column=Column(String(20), nullable=False),
        description="Time slot label, e.g. '9:00 AM'"
    )

    estimated_duration: int = Field(default=120, description="Minutes")

    address: str = Field(description="Street address of the property")
    city: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    zip_code: Optional[str] = Field(default=None)
    access_notes: Optional[str] = Field(default=None)

    sqft: Optional[int] = Field(default=None)
    bedrooms: Optional[int] = Field(default=None)
    bathrooms: Optional[int] = Field(default=None)

    base_price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    addons_price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )
    discount_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )
    tax_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
    )
    total_price: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))

    status: BookingStatus = Field(default=BookingStatus.PENDING)
    cancellation_reason: Optional[str] = Field(default=None)

    is_recurring: bool = Field(default=False)
    recurring_template_id: Optional[str] = Field(
        default=None,
        foreign_key="recurring_templates.id",
        description="Template this occurrence was generated from"
    )
    frequency: BookingFrequency = Field(default=BookingFrequency.ONCE)

    confirmed_at: Optional[datetime] = Field(default=None)
    started_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)
    cancelled_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def transition_to(
        self,
        new_status: BookingStatus,
        cancellation_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Move the booking to ``new_status``

        Re-entering the current status is a no-op that never overwrites a
        lifecycle timestamp.

        Returns:
            True if the status changed, False on idempotent re-entry

        Raises:
            CancellationReasonRequired: cancelling without a reason
            InvalidStatusTransition: transition not allowed from current status
        """
        new_status = BookingStatus(new_status)
        current = BookingStatus(self.status)
        if new_status == current:
            return False

        if new_status == BookingStatus.CANCELLED and not (cancellation_reason or "").strip():
            raise CancellationReasonRequired("A cancellation reason is required")

        if new_status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransition(
                f"Cannot move booking from {current.value} to {new_status.value}"
            )

        now = now or datetime.utcnow()
        if new_status == BookingStatus.CONFIRMED and self.confirmed_at is None:
            self.confirmed_at = now
        elif new_status == BookingStatus.IN_PROGRESS and self.started_at is None:
            self.started_at = now
        elif new_status == BookingStatus.COMPLETED and self.completed_at is None:
            self.completed_at = now
        elif new_status == BookingStatus.CANCELLED and self.cancelled_at is None:
            self.cancelled_at = now
            self.cancellation_reason = cancellation_reason.strip()

        self.status = new_status
        return True


# Public booking form service keys
SERVICE_KEYS = {
    "regular": "svc_regular",
    "deep": "svc_deep",
    "moveout": "svc_moveout",
}

DEFAULT_SERVICE_ID = "svc_regular"

BASELINE_SQFT = 1000
SQFT_RATE = Decimal("0.03")
EXTRA_BEDROOM_PRICE = Decimal("15")
EXTRA_BATHROOM_PRICE = Decimal("20")


def resolve_service_id(service_key: Optional[str]) -> str:
    """Map a booking form key to a service id, regular cleaning by default"""
    return SERVICE_KEYS.get((service_key or "").lower(), DEFAULT_SERVICE_ID)


def estimate_price(
    base_price: Decimal,
    sqft: Optional[int] = None,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[int] = None,
) -> Decimal:
    """
    Quote for a public booking, rounded half-up to whole currency units

    base + (sqft over 1000) * 0.03 + 15 per bedroom after the first
    + 20 per bathroom after the first
    """
    size_adjustment = max(Decimal("0"), Decimal(sqft or BASELINE_SQFT) - BASELINE_SQFT) * SQFT_RATE
    rooms_adjustment = (
        max(0, (bedrooms or 1) - 1) * EXTRA_BEDROOM_PRICE
        + max(0, (bathrooms or 1) - 1) * EXTRA_BATHROOM_PRICE
    )
    quote = Decimal(base_price) + size_adjustment + rooms_adjustment
    return quantize_money(quote.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
