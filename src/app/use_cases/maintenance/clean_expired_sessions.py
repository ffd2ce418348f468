"""CleanExpiredSessions Use Case"""

import logging
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.user_session_repository import UserSessionRepository
from .dtos import SessionCleanupResultDTO

logger = logging.getLogger(__name__)


class CleanExpiredSessions:
    """Use Case: Delete login sessions whose expires_at has passed"""

    def __init__(self, uow: UnitOfWork, session_repo: UserSessionRepository):
        self.uow = uow
        self.session_repo = session_repo

    async def execute(self, now: Optional[datetime] = None) -> Result[SessionCleanupResultDTO]:
        cutoff = now or datetime.utcnow()
        try:
            deleted = await self.session_repo.delete_expired(cutoff)
            await self.uow.commit()

            if deleted:
                logger.info(f"Cleaned up {deleted} expired sessions")
            return Return.ok(SessionCleanupResultDTO(deleted=deleted, cutoff=cutoff))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SESSION_CLEANUP_FAILED",
                    message="Failed to clean expired sessions",
                    reason=str(e),
                )
            )
