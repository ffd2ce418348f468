"""SQLAlchemy Booking Repository Implementation

Implements booking ledger persistence using SQLAlchemy async session.
"""

from datetime import date, datetime
from typing import Optional, List, Sequence
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.booking_repository import BookingRepository
from src.domain.booking import Booking, BookingStatus, RELEASED_STATUSES


class SqlAlchemyBookingRepository(BookingRepository):
    """
    SQLAlchemy implementation of BookingRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, booking: Booking) -> Booking:
        self.session.add(booking)
        await self.session.flush()
        await self.session.refresh(booking)
        return booking

    async def get_by_id(self, booking_id: str, for_update: bool = False) -> Optional[Booking]:
        """
        Retrieve booking by ID with optional row-level locking

        Args:
            booking_id: Booking ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Booking if found, None otherwise
        """
        statement = select(Booking).where(Booking.id == booking_id)

        if for_update:
            # Refresh rows already in the identity map with what was just locked
            statement = statement.with_for_update().execution_options(populate_existing=True)

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def update(self, booking: Booking) -> Booking:
        booking.updated_at = datetime.utcnow()
        self.session.add(booking)
        await self.session.flush()
        await self.session.refresh(booking)
        return booking

    async def exists_for_template_date(self, template_id: str, scheduled_date: date) -> bool:
        statement = (
            select(func.count())
            .select_from(Booking)
            .where(Booking.recurring_template_id == template_id)
            .where(Booking.scheduled_date == scheduled_date)
        )
        result = await self.session.execute(statement)
        count = result.scalar_one()
        return count > 0

    async def list(
        self,
        scheduled_date: Optional[date] = None,
        status: Optional[BookingStatus] = None,
        customer_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Booking]:
        statement = select(Booking)

        if scheduled_date:
            statement = statement.where(Booking.scheduled_date == scheduled_date)
        if status:
            statement = statement.where(Booking.status == status)
        if customer_id:
            statement = statement.where(Booking.customer_id == customer_id)

        statement = statement.order_by(Booking.scheduled_date.desc(), Booking.scheduled_time)
        statement = statement.limit(limit).offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_booked_slots(self, scheduled_date: date) -> List[str]:
        statement = (
            select(Booking.scheduled_time)
            .where(Booking.scheduled_date == scheduled_date)
            .where(Booking.status.not_in(RELEASED_STATUSES))
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_scheduled_for(
        self, scheduled_date: date, statuses: Sequence[BookingStatus]
    ) -> List[Booking]:
        statement = (
            select(Booking)
            .where(Booking.scheduled_date == scheduled_date)
            .where(Booking.status.in_(list(statuses)))
            .order_by(Booking.scheduled_time)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())
