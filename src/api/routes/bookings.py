"""Booking API Routes

Public booking form, availability and staff booking management.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.auth import get_claims, require_staff, customer_scope
from src.api.error import raise_for_error
from src.api.schemas.booking_request import (
    CreateBookingRequestSchema,
    UpdateBookingStatusRequestSchema,
)
from src.app.services.authenticator import Claims
from src.app.use_cases.scheduling.dtos import (
    AvailabilityResponseDTO,
    BookingResponseDTO,
    BookingStatusResponseDTO,
    CreateBookingCommandDTO,
    ListBookingsQueryDTO,
    UpdateBookingStatusCommandDTO,
)
from src.app.use_cases.scheduling.create_booking import CreateBooking
from src.app.use_cases.scheduling.get_availability import GetAvailability
from src.app.use_cases.scheduling.list_bookings import ListBookings, GetBooking
from src.app.use_cases.scheduling.update_booking_status import UpdateBookingStatus
from src.app.use_cases.billing.create_invoice import CreateInvoice
from src.app.use_cases.billing.create_invoice_from_booking import CreateInvoiceFromBooking
from src.adapter.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyCommunicationRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyInvoiceItemRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyRecurringTemplateRepository,
    SqlAlchemyServiceRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.booking import BookingStatus
from src.depends import (
    get_session,
    get_config,
    get_tax_rate,
    get_email_sender,
    get_broadcaster,
)

router = APIRouter(tags=["Bookings"])


@router.get(
    "/availability",
    response_model=AvailabilityResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_availability(
    date: date = Query(..., description="Date to check (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session),
):
    """
    List free and taken time slots for a date.

    Cancelled and no-show bookings do not hold their slot.
    """
    use_case = GetAvailability(SqlAlchemyBookingRepository(session))
    result = await use_case.execute(date)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/bookings",
    response_model=BookingResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Time slot already taken",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "SLOT_UNAVAILABLE",
                            "message": "10:00 AM on 2026-11-03 is already booked"
                        }
                    }
                }
            }
        },
        400: {
            "description": "Validation error",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "VALIDATION_ERROR",
                            "message": "email: Invalid email address"
                        }
                    }
                }
            }
        }
    }
)
async def create_booking(
    request: CreateBookingRequestSchema,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
    email_sender=Depends(get_email_sender),
    broadcaster=Depends(get_broadcaster),
):
    """
    Submit the public booking form.

    Finds or creates the customer by email, prices the job from the
    property size unless a price is given, and for a weekly/biweekly/
    monthly frequency also starts a recurring schedule. Confirmation
    emails are best effort.

    **Returns:**
    - 201: Booking created
    - 409: Time slot already booked
    - 400: Invalid request parameters
    """
    uow = SqlAlchemyUnitOfWork(session)

    command = CreateBookingCommandDTO(
        customer_email=request.email,
        customer_name=request.name,
        customer_phone=request.phone,
        service=request.service,
        scheduled_date=request.scheduled_date,
        scheduled_time=request.scheduled_time,
        address=request.address,
        city=request.city,
        state=request.state,
        zip_code=request.zip_code,
        access_notes=request.access_notes,
        sqft=request.sqft,
        bedrooms=request.bedrooms,
        bathrooms=request.bathrooms,
        price=request.price,
        frequency=request.frequency,
    )

    use_case = CreateBooking(
        uow=uow,
        booking_repo=SqlAlchemyBookingRepository(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        service_repo=SqlAlchemyServiceRepository(session),
        template_repo=SqlAlchemyRecurringTemplateRepository(session),
        communication_repo=SqlAlchemyCommunicationRepository(session),
        email_sender=email_sender,
        broadcaster=broadcaster,
        company_name=config.COMPANY_NAME,
        business_email=config.BUSINESS_NOTIFICATION_EMAIL,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/bookings",
    response_model=List[BookingResponseDTO],
    status_code=status.HTTP_200_OK,
)
async def list_bookings(
    date: Optional[date] = Query(default=None, description="Only bookings on this date"),
    status_filter: Optional[BookingStatus] = Query(default=None, alias="status"),
    customer_id: Optional[str] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
    claims: Claims = Depends(require_staff),
):
    """List bookings, newest scheduled date first (staff only)."""
    use_case = ListBookings(SqlAlchemyBookingRepository(session))
    result = await use_case.execute(
        ListBookingsQueryDTO(
            scheduled_date=date,
            status=status_filter,
            customer_id=customer_id,
            limit=limit,
            offset=offset,
        )
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/bookings/{booking_id}",
    response_model=BookingResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_booking(
    booking_id: str,
    session: AsyncSession = Depends(get_session),
    claims: Claims = Depends(get_claims),
):
    """Get one booking. Customers can only read their own bookings."""
    use_case = GetBooking(SqlAlchemyBookingRepository(session))
    result = await use_case.execute(booking_id, customer_id=customer_scope(claims))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch(
    "/bookings/{booking_id}/status",
    response_model=BookingStatusResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Transition not allowed",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_STATUS_TRANSITION",
                            "message": "Cannot move booking from completed to pending"
                        }
                    }
                }
            }
        },
        404: {
            "description": "Booking not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "BOOKING_NOT_FOUND",
                            "message": "Booking 123 not found"
                        }
                    }
                }
            }
        }
    }
)
async def update_booking_status(
    booking_id: str,
    request: UpdateBookingStatusRequestSchema,
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
    tax_rate=Depends(get_tax_rate),
    broadcaster=Depends(get_broadcaster),
    claims: Claims = Depends(require_staff),
):
    """
    Move a booking through its lifecycle (staff only).

    pending -> confirmed -> in_progress -> completed, with cancelled and
    no_show reachable before work starts. Completing a booking can issue
    its invoice automatically.
    """
    uow = SqlAlchemyUnitOfWork(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    customer_repo = SqlAlchemyCustomerRepository(session)

    invoice_from_booking = None
    if config.AUTO_INVOICE_ON_COMPLETION:
        invoice_from_booking = CreateInvoiceFromBooking(
            create_invoice=CreateInvoice(
                uow=uow,
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                item_repo=SqlAlchemyInvoiceItemRepository(session),
                customer_repo=customer_repo,
                booking_repo=booking_repo,
                tax_rate=tax_rate,
                due_days=config.INVOICE_DUE_DAYS,
                invoice_prefix=config.INVOICE_PREFIX,
                start_number=config.INVOICE_START_NUMBER,
                broadcaster=broadcaster,
            ),
            booking_repo=booking_repo,
            service_repo=SqlAlchemyServiceRepository(session),
        )

    use_case = UpdateBookingStatus(
        uow=uow,
        booking_repo=booking_repo,
        customer_repo=customer_repo,
        broadcaster=broadcaster,
        invoice_from_booking=invoice_from_booking,
    )
    result = await use_case.execute(
        UpdateBookingStatusCommandDTO(
            booking_id=booking_id,
            status=request.status,
            cancellation_reason=request.cancellation_reason,
        )
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value
