"""Booking Reminder Worker

Emails customers whose cleaning is scheduled for tomorrow. Runs nightly.
"""

import asyncio
import logging
from datetime import date
from typing import Optional
from sqlalchemy.orm import sessionmaker

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyCommunicationRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyServiceRepository,
)
from src.adapter.services.email_sender import create_email_sender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.email_sender import EmailSender
from src.app.use_cases.scheduling import (
    SendBookingReminders,
    SendRemindersCommandDTO,
    ReminderSweepResultDTO,
)
from src.worker.base import BaseWorker, run_worker_main

logger = logging.getLogger(__name__)


class ReminderSenderWorker(BaseWorker):

    default_interval_seconds = ApplicationConfig.REMINDER_INTERVAL_SECONDS

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

    async def run_once(self, today: Optional[date] = None) -> ReminderSweepResultDTO:
        async with self.async_session_factory() as session:
            use_case = SendBookingReminders(
                uow=SqlAlchemyUnitOfWork(session),
                booking_repo=SqlAlchemyBookingRepository(session),
                customer_repo=SqlAlchemyCustomerRepository(session),
                service_repo=SqlAlchemyServiceRepository(session),
                communication_repo=SqlAlchemyCommunicationRepository(session),
                email_sender=self.email_sender,
                company_name=ApplicationConfig.COMPANY_NAME,
            )

            result = await use_case.execute(SendRemindersCommandDTO(today=today or date.today()))

            if result.is_err():
                logger.error(f"Reminder sweep failed: {result.error.message}")
                raise RuntimeError(f"Reminder sweep failed: {result.error.message}")

            response = result.value
            if response.failed_booking_ids:
                logger.error(
                    f"Reminders need manual follow-up for bookings: "
                    f"{', '.join(response.failed_booking_ids)}"
                )
            return response

    def describe(self, result: ReminderSweepResultDTO) -> str:
        return (
            f"{result.bookings_found} bookings on {result.target_date.isoformat()}: "
            f"{result.sent} sent, {result.already_sent} already sent, {result.failed} failed"
        )


async def main():
    await run_worker_main(ReminderSenderWorker(), "Booking Reminder Worker")


if __name__ == "__main__":
    asyncio.run(main())
