"""Maintenance Workers

Hourly expired-session cleanup and weekly low-inventory alert.
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.orm import sessionmaker

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyInventoryRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyUserSessionRepository,
)
from src.adapter.services.email_sender import create_email_sender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.email_sender import EmailSender
from src.app.use_cases.maintenance import (
    CleanExpiredSessions,
    CheckLowInventory,
    SessionCleanupResultDTO,
    LowInventoryResultDTO,
)
from src.worker.base import BaseWorker, run_worker_main

logger = logging.getLogger(__name__)


class SessionCleanupWorker(BaseWorker):

    default_interval_seconds = ApplicationConfig.SESSION_CLEANUP_INTERVAL_SECONDS

    async def run_once(self) -> SessionCleanupResultDTO:
        async with self.async_session_factory() as session:
            use_case = CleanExpiredSessions(
                uow=SqlAlchemyUnitOfWork(session),
                session_repo=SqlAlchemyUserSessionRepository(session),
            )
            result = await use_case.execute()

            if result.is_err():
                logger.error(f"Session cleanup failed: {result.error.message}")
                raise RuntimeError(f"Session cleanup failed: {result.error.message}")
            return result.value

    def describe(self, result: SessionCleanupResultDTO) -> str:
        return f"Deleted {result.deleted} expired sessions"


class InventoryCheckWorker(BaseWorker):

    default_interval_seconds = ApplicationConfig.INVENTORY_CHECK_INTERVAL_SECONDS

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory: Optional[sessionmaker] = None,
        email_sender: Optional[EmailSender] = None,
    ):
        super().__init__(db_uri=db_uri, session_factory=session_factory)
        self.email_sender = email_sender or create_email_sender(
            provider=ApplicationConfig.EMAIL_PROVIDER,
            api_key=ApplicationConfig.EMAIL_API_KEY,
            from_address=ApplicationConfig.EMAIL_FROM,
            api_url=ApplicationConfig.EMAIL_API_URL,
        )

    async def run_once(self) -> LowInventoryResultDTO:
        async with self.async_session_factory() as session:
            use_case = CheckLowInventory(
                inventory_repo=SqlAlchemyInventoryRepository(session),
                user_repo=SqlAlchemyUserRepository(session),
                email_sender=self.email_sender,
            )
            result = await use_case.execute()

            if result.is_err():
                logger.error(f"Inventory check failed: {result.error.message}")
                raise RuntimeError(f"Inventory check failed: {result.error.message}")
            return result.value

    def describe(self, result: LowInventoryResultDTO) -> str:
        return (
            f"{len(result.low_stock_items)} items low on stock, "
            f"{result.admins_notified} admins notified"
        )


async def main():
    import sys

    if "--inventory" in sys.argv:
        sys.argv.remove("--inventory")
        await run_worker_main(InventoryCheckWorker(), "Low Inventory Check Worker")
    else:
        await run_worker_main(SessionCleanupWorker(), "Expired Session Cleanup Worker")


if __name__ == "__main__":
    asyncio.run(main())
