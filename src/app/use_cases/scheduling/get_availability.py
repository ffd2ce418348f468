"""GetAvailability Use Case"""

from datetime import date
from libs.result import Result, Return, Error
from src.app.repositories.booking_repository import BookingRepository
from src.domain.booking import TIME_SLOTS
from .dtos import AvailabilityResponseDTO


class GetAvailability:
    """
    Use Case: Free time slots on a date

    A slot is taken by any booking on that date that is not cancelled or
    a no-show.
    """

    def __init__(self, booking_repo: BookingRepository):
        self.booking_repo = booking_repo

    async def execute(self, scheduled_date: date) -> Result[AvailabilityResponseDTO]:
        try:
            taken = set(await self.booking_repo.get_booked_slots(scheduled_date))

            return Return.ok(
                AvailabilityResponseDTO(
                    scheduled_date=scheduled_date,
                    available_slots=[slot for slot in TIME_SLOTS if slot not in taken],
                    booked_slots=[slot for slot in TIME_SLOTS if slot in taken],
                )
            )
        except Exception as e:
            return Return.err(
                Error(
                    code="GET_AVAILABILITY_FAILED",
                    message="Failed to load availability",
                    reason=str(e),
                )
            )
