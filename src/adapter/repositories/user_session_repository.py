"""SQLAlchemy Login Session Repository Implementation"""

from datetime import datetime
from sqlmodel import delete
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.user_session_repository import UserSessionRepository
from src.domain.user_session import UserSession


class SqlAlchemyUserSessionRepository(UserSessionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def delete_expired(self, now: datetime) -> int:
        statement = delete(UserSession).where(UserSession.expires_at < now)
        result = await self.session.execute(statement)
        await self.session.flush()
        return result.rowcount or 0
