"""Overdue Invoice Sweep Worker

Marks sent, past-due, unpaid invoices overdue and emails a notice.
Runs daily.
"""

import asyncio
import logging
from datetime import date
from typing import Optional
from sqlalchemy.orm import sessionmaker

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyCommunicationRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyInvoiceRepository,
)
from src.adapter.services.email_sender import create_email_sender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.email_sender import EmailSender
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.app.use_cases.billing import SweepOverdue, SweepOverdueCommandDTO, OverdueSweepResultDTO
from src.worker.base import BaseWorker, run_worker_main

logger = logging.getLogger(__name__)


class OverdueSweeperWorker(BaseWorker):

    default_interval_seconds = ApplicationConfig.OVERDUE_INTERVAL_SECONDS

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory: Optional[sessionmaker] = None,
        email_sender: Optional[EmailSender] = None,
        locks: Optional[InvoiceLockRegistry] = None,
    ):
        super().__init__(db_uri=db_uri, session_factory=session_factory)
        self.email_sender = email_sender or create_email_sender(
            provider=ApplicationConfig.EMAIL_PROVIDER,
            api_key=ApplicationConfig.EMAIL_API_KEY,
            from_address=ApplicationConfig.EMAIL_FROM,
            api_url=ApplicationConfig.EMAIL_API_URL,
        )
        self.locks = locks if locks is not None else InvoiceLockRegistry()

    async def run_once(self, today: Optional[date] = None) -> OverdueSweepResultDTO:
        async with self.async_session_factory() as session:
            use_case = SweepOverdue(
                uow=SqlAlchemyUnitOfWork(session),
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                customer_repo=SqlAlchemyCustomerRepository(session),
                communication_repo=SqlAlchemyCommunicationRepository(session),
                email_sender=self.email_sender,
                locks=self.locks,
            )

            result = await use_case.execute(SweepOverdueCommandDTO(today=today or date.today()))

            if result.is_err():
                logger.error(f"Overdue sweep failed: {result.error.message}")
                raise RuntimeError(f"Overdue sweep failed: {result.error.message}")

            response = result.value
            if response.notice_failures:
                logger.error(
                    f"Overdue notices not delivered for invoices: {', '.join(response.notice_failures)}"
                )
            return response

    def describe(self, result: OverdueSweepResultDTO) -> str:
        return (
            f"Checked {result.invoices_checked} invoices, {result.transitioned} marked overdue, "
            f"{result.notices_sent} notices sent, {len(result.notice_failures)} notices failed"
        )


async def main():
    await run_worker_main(OverdueSweeperWorker(), "Overdue Invoice Sweep Worker")


if __name__ == "__main__":
    asyncio.run(main())
