"""Booking Repository Interface

Defines the contract for booking ledger persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List, Sequence
from src.domain.booking import Booking, BookingStatus


class BookingRepository(ABC):
    """
    Repository interface for Booking persistence

    Bookings are never deleted; there is no delete operation.
    """

    @abstractmethod
    async def create(self, booking: Booking) -> Booking:
        """
        Create a new booking

        Args:
            booking: Booking entity to persist

        Returns:
            Created Booking
        """
        pass

    @abstractmethod
    async def get_by_id(self, booking_id: str, for_update: bool = False) -> Optional[Booking]:
        """
        Retrieve booking by ID

        Args:
            booking_id: Booking ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Booking if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, booking: Booking) -> Booking:
        """Persist changed fields of an existing booking"""
        pass

    @abstractmethod
    async def exists_for_template_date(self, template_id: str, scheduled_date: date) -> bool:
        """
        Check if an occurrence already exists for a recurring template on a date

        This is the de-duplication key of recurring generation.

        Args:
            template_id: RecurringTemplate ID
            scheduled_date: Occurrence date

        Returns:
            True if a booking exists, False otherwise
        """
        pass

    @abstractmethod
    async def list(
        self,
        scheduled_date: Optional[date] = None,
        status: Optional[BookingStatus] = None,
        customer_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Booking]:
        """
        List bookings by exact-match filters

        Ordered by scheduled_date descending.
        """
        pass

    @abstractmethod
    async def get_booked_slots(self, scheduled_date: date) -> List[str]:
        """
        Time slots taken on a date

        Cancelled and no-show bookings release their slot.
        """
        pass

    @abstractmethod
    async def get_scheduled_for(
        self, scheduled_date: date, statuses: Sequence[BookingStatus]
    ) -> List[Booking]:
        """Bookings on a date whose status is one of ``statuses``"""
        pass
