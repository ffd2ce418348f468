"""ListBookings and GetBooking Use Cases"""

from typing import List, Optional
from libs.result import Result, Return, Error
from src.app.repositories.booking_repository import BookingRepository
from .dtos import ListBookingsQueryDTO, BookingResponseDTO


class ListBookings:
    """Use Case: Staff booking list filtered by date, status and customer"""

    def __init__(self, booking_repo: BookingRepository):
        self.booking_repo = booking_repo

    async def execute(self, query: ListBookingsQueryDTO) -> Result[List[BookingResponseDTO]]:
        try:
            bookings = await self.booking_repo.list(
                scheduled_date=query.scheduled_date,
                status=query.status,
                customer_id=query.customer_id,
                limit=query.limit,
                offset=query.offset,
            )
            return Return.ok([BookingResponseDTO.from_entity(b) for b in bookings])
        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_BOOKINGS_FAILED",
                    message="Failed to list bookings",
                    reason=str(e),
                )
            )


class GetBooking:
    """
    Use Case: Read one booking

    When ``customer_id`` is given (customer caller) the booking must belong
    to that customer; a foreign booking is reported as not found.
    """

    def __init__(self, booking_repo: BookingRepository):
        self.booking_repo = booking_repo

    async def execute(
        self, booking_id: str, customer_id: Optional[str] = None
    ) -> Result[BookingResponseDTO]:
        try:
            booking = await self.booking_repo.get_by_id(booking_id)
            if not booking or (customer_id is not None and booking.customer_id != customer_id):
                return Return.err(
                    Error(
                        code="BOOKING_NOT_FOUND",
                        message=f"Booking {booking_id} not found",
                    )
                )
            return Return.ok(BookingResponseDTO.from_entity(booking))
        except Exception as e:
            return Return.err(
                Error(
                    code="GET_BOOKING_FAILED",
                    message="Failed to load booking",
                    reason=str(e),
                )
            )
