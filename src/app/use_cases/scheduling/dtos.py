"""Data Transfer Objects for Scheduling Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from src.domain.booking import Booking, BookingStatus, BookingFrequency, DEFAULT_TIME_SLOT
from src.domain.recurring_template import RecurringTemplate


class CreateBookingCommandDTO(BaseModel):
    """
    Command DTO for a public booking submission

    Used as input to CreateBooking use case.
    """

    customer_email: str = Field(
        ...,
        min_length=3,
        description="Customer email (matched case-insensitively)"
    )

    customer_name: Optional[str] = Field(
        default=None,
        description="Full name; first word is the first name"
    )

    customer_phone: Optional[str] = Field(default=None)

    service: Optional[str] = Field(
        default="regular",
        description="regular, deep or moveout (defaults to regular)"
    )

    scheduled_date: date = Field(..., description="Date of the cleaning")

    scheduled_time: str = Field(
        default=DEFAULT_TIME_SLOT,
        description="Time slot label, e.g. '9:00 AM'"
    )

    address: Optional[str] = Field(default=None)
    city: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    zip_code: Optional[str] = Field(default=None)
    access_notes: Optional[str] = Field(default=None)

    sqft: Optional[int] = Field(default=None, ge=0)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)

    price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Explicit quoted price; computed from the property when omitted"
    )

    frequency: BookingFrequency = Field(
        default=BookingFrequency.ONCE,
        description="once, weekly, biweekly or monthly"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "customer_email": "jane@example.com",
                "customer_name": "Jane Doe",
                "customer_phone": "555-0100",
                "service": "deep",
                "scheduled_date": "2026-11-03",
                "scheduled_time": "10:00 AM",
                "address": "12 Orange Grove Rd",
                "sqft": 1800,
                "bedrooms": 3,
                "bathrooms": 2,
                "frequency": "biweekly",
            }
        }


class BookingResponseDTO(BaseModel):
    """Response DTO for a booking"""

    booking_id: str
    customer_id: str
    service_id: str
    scheduled_date: date
    scheduled_time: str
    address: str
    sqft: Optional[int] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    base_price: Decimal
    addons_price: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_price: Decimal
    status: str
    cancellation_reason: Optional[str] = None
    frequency: str
    is_recurring: bool
    recurring_template_id: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingResponseDTO":
        return cls(
            booking_id=booking.id,
            customer_id=booking.customer_id,
            service_id=booking.service_id,
            scheduled_date=booking.scheduled_date,
            scheduled_time=booking.scheduled_time,
            address=booking.address,
            sqft=booking.sqft,
            bedrooms=booking.bedrooms,
            bathrooms=booking.bathrooms,
            base_price=booking.base_price,
            addons_price=booking.addons_price,
            discount_amount=booking.discount_amount,
            tax_amount=booking.tax_amount,
            total_price=booking.total_price,
            status=BookingStatus(booking.status).value,
            cancellation_reason=booking.cancellation_reason,
            frequency=BookingFrequency(booking.frequency).value,
            is_recurring=booking.is_recurring,
            recurring_template_id=booking.recurring_template_id,
            confirmed_at=booking.confirmed_at,
            started_at=booking.started_at,
            completed_at=booking.completed_at,
            cancelled_at=booking.cancelled_at,
            created_at=booking.created_at,
        )


class UpdateBookingStatusCommandDTO(BaseModel):
    """
    Command DTO for a staff status change

    Used as input to UpdateBookingStatus use case.
    """

    booking_id: str = Field(..., description="Booking identifier")

    status: BookingStatus = Field(..., description="Target status")

    cancellation_reason: Optional[str] = Field(
        default=None,
        description="Required when status is cancelled"
    )

    today: date = Field(default_factory=date.today)


class BookingStatusResponseDTO(BaseModel):
    """Response DTO for a status change"""

    booking: BookingResponseDTO
    changed: bool = Field(..., description="False when the booking already had this status")
    invoice_id: Optional[str] = Field(
        default=None,
        description="Invoice created on completion, if any"
    )


class AvailabilityResponseDTO(BaseModel):
    scheduled_date: date
    available_slots: List[str]
    booked_slots: List[str]


class ListBookingsQueryDTO(BaseModel):
    scheduled_date: Optional[date] = None
    status: Optional[BookingStatus] = None
    customer_id: Optional[str] = None
    limit: int = Field(default=100, ge=1, le=500)
    offset: int = Field(default=0, ge=0)


class CreateRecurringTemplateCommandDTO(BaseModel):
    """
    Command DTO for a standing recurring schedule

    Used as input to CreateRecurringTemplate use case.
    """

    customer_id: str = Field(..., description="Customer identifier")
    service_id: str = Field(..., description="Service identifier")

    frequency: str = Field(..., description="weekly, biweekly or monthly")

    start_date: date = Field(..., description="First date to generate a booking for")

    preferred_time: Optional[str] = Field(default=DEFAULT_TIME_SLOT)

    address: Optional[str] = Field(
        default=None,
        description="Property address; defaults to the customer's address"
    )
    city: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    zip_code: Optional[str] = Field(default=None)

    sqft: Optional[int] = Field(default=None, ge=0)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)

    base_price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Price per visit; defaults to the service base price"
    )

    notes: Optional[str] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "0b8e6f8a-3c61-4b1c-9a53-6f0e2f1f8d11",
                "service_id": "svc_regular",
                "frequency": "monthly",
                "start_date": "2026-01-31",
                "preferred_time": "9:00 AM",
                "base_price": "129.00",
            }
        }


class RecurringTemplateResponseDTO(BaseModel):
    template_id: str
    customer_id: str
    service_id: str
    frequency: str
    anchor_day: Optional[int] = None
    preferred_time: Optional[str] = None
    address: str
    base_price: Decimal
    is_active: bool
    next_date: Optional[date] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, template: RecurringTemplate) -> "RecurringTemplateResponseDTO":
        return cls(
            template_id=template.id,
            customer_id=template.customer_id,
            service_id=template.service_id,
            frequency=template.frequency,
            anchor_day=template.anchor_day,
            preferred_time=template.preferred_time,
            address=template.address,
            base_price=template.base_price,
            is_active=template.is_active,
            next_date=template.next_date,
            created_at=template.created_at,
        )


class GenerateOccurrencesCommandDTO(BaseModel):
    """
    Command DTO for one recurring generation run

    ``today`` is injectable so runs are reproducible in tests.
    """

    horizon_days: int = Field(default=14, ge=0, le=366)

    today: date = Field(default_factory=date.today)


class TemplateIssueDTO(BaseModel):
    """A template that was skipped or failed during a generation run"""

    template_id: str
    code: str
    reason: str


class GenerationResultDTO(BaseModel):
    """
    Summary of a generation run

    Produced by GenerateOccurrences use case.
    """

    templates_processed: int = Field(..., description="Templates selected for this run")
    bookings_created: List[BookingResponseDTO] = Field(default_factory=list)
    skipped: List[TemplateIssueDTO] = Field(
        default_factory=list,
        description="Templates skipped without changes (e.g., unknown frequency)"
    )
    failed: List[TemplateIssueDTO] = Field(
        default_factory=list,
        description="Templates whose processing raised and was rolled back"
    )
    past_dates_skipped: int = Field(
        default=0,
        description="Backlog dates before today that were not materialized"
    )
    horizon_end: date
    execution_time_ms: int


class SendRemindersCommandDTO(BaseModel):
    today: date = Field(default_factory=date.today)


class ReminderSweepResultDTO(BaseModel):
    """Summary of a reminder sweep"""

    target_date: date
    bookings_found: int
    sent: int
    already_sent: int
    failed: int
    failed_booking_ids: List[str] = Field(default_factory=list)
