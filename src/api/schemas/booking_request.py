"""Request schemas for Booking API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from src.domain.booking import BookingFrequency, BookingStatus, DEFAULT_TIME_SLOT


class CreateBookingRequestSchema(BaseModel):
    """
    Request schema for the public booking form

    Used for POST /bookings endpoint.
    """

    email: str = Field(..., min_length=3, description="Customer email (required)")
    name: Optional[str] = Field(default=None, description="Full name")
    phone: Optional[str] = Field(default=None)

    service: Optional[str] = Field(
        default="regular",
        description="regular, deep or moveout"
    )

    scheduled_date: date = Field(..., description="Requested cleaning date")
    scheduled_time: str = Field(default=DEFAULT_TIME_SLOT, description="Time slot, e.g. '10:00 AM'")

    address: str = Field(..., min_length=1)
    city: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    zip_code: Optional[str] = Field(default=None)
    access_notes: Optional[str] = Field(default=None)

    sqft: Optional[int] = Field(default=None, ge=0)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)

    price: Optional[Decimal] = Field(
        default=None,
        description="Quoted price; estimated from the property when omitted"
    )

    frequency: BookingFrequency = Field(default=BookingFrequency.ONCE)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v.strip()

    @field_validator("price")
    @classmethod
    def validate_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane@example.com",
                "name": "Jane Doe",
                "phone": "555-0100",
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


class UpdateBookingStatusRequestSchema(BaseModel):
    """
    Request schema for changing booking status

    Used for PATCH /bookings/{booking_id}/status endpoint.
    """

    status: BookingStatus = Field(..., description="Target status")

    cancellation_reason: Optional[str] = Field(
        default=None,
        description="Required when status is 'cancelled'"
    )

    class Config:
        json_schema_extra = {
            "example": {"status": "cancelled", "cancellation_reason": "Customer travelling"}
        }


class CreateRecurringTemplateRequestSchema(BaseModel):
    """
    Request schema for creating a recurring schedule

    Used for POST /recurring-templates endpoint.
    """

    customer_id: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1)
    frequency: str = Field(..., description="weekly, biweekly or monthly")
    start_date: date = Field(..., description="First date to book")
    preferred_time: Optional[str] = Field(default=DEFAULT_TIME_SLOT)
    address: Optional[str] = Field(
        default=None,
        description="Defaults to the customer's address"
    )
    city: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    zip_code: Optional[str] = Field(default=None)
    sqft: Optional[int] = Field(default=None, ge=0)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    base_price: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None)
