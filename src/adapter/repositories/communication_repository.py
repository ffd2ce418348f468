"""SQLAlchemy Communication Log Repository Implementation"""

from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.communication_repository import CommunicationRepository
from src.domain.communication import Communication, CommunicationStatus


class SqlAlchemyCommunicationRepository(CommunicationRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, communication: Communication) -> Communication:
        self.session.add(communication)
        await self.session.flush()
        return communication

    async def exists_sent(self, booking_id: str, subject: str) -> bool:
        statement = (
            select(func.count())
            .select_from(Communication)
            .where(Communication.booking_id == booking_id)
            .where(Communication.subject == subject)
            .where(Communication.status == CommunicationStatus.SENT)
        )
        result = await self.session.execute(statement)
        return result.scalar_one() > 0
