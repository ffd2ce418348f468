"""Recurring Booking Generation Worker

Materializes bookings from active recurring templates for the rolling
horizon. Runs nightly.
"""

import asyncio
import logging
from datetime import date
from typing import Optional
from sqlalchemy.orm import sessionmaker

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyRecurringTemplateRepository,
    SqlAlchemyServiceRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.scheduling import (
    GenerateOccurrences,
    GenerateOccurrencesCommandDTO,
    GenerationResultDTO,
)
from src.worker.base import BaseWorker, run_worker_main

logger = logging.getLogger(__name__)


class RecurringGeneratorWorker(BaseWorker):
    """
    Background worker for recurring booking generation

    Features:
    - Idempotent: a doubled run creates no duplicate bookings
    - Per-template isolation: one broken template never blocks the others
    - Reports skipped (unknown frequency) and failed templates
    """

    default_interval_seconds = ApplicationConfig.RECURRING_INTERVAL_SECONDS

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory: Optional[sessionmaker] = None,
        horizon_days: Optional[int] = None,
    ):
        super().__init__(db_uri=db_uri, session_factory=session_factory)
        self.horizon_days = (
            horizon_days if horizon_days is not None else ApplicationConfig.RECURRING_HORIZON_DAYS
        )

    async def run_once(self, today: Optional[date] = None) -> GenerationResultDTO:
        """
        Run generation once

        Returns:
            GenerationResultDTO with created bookings and template issues
        """
        async with self.async_session_factory() as session:
            use_case = GenerateOccurrences(
                uow=SqlAlchemyUnitOfWork(session),
                template_repo=SqlAlchemyRecurringTemplateRepository(session),
                booking_repo=SqlAlchemyBookingRepository(session),
                customer_repo=SqlAlchemyCustomerRepository(session),
                service_repo=SqlAlchemyServiceRepository(session),
            )

            result = await use_case.execute(
                GenerateOccurrencesCommandDTO(
                    horizon_days=self.horizon_days,
                    today=today or date.today(),
                )
            )

            if result.is_err():
                logger.error(f"Recurring generation failed: {result.error.message}")
                raise RuntimeError(f"Recurring generation failed: {result.error.message}")

            response = result.value
            for issue in response.skipped:
                logger.warning(f"  - Skipped template {issue.template_id}: {issue.reason}")
            for issue in response.failed:
                logger.error(f"  - Failed template {issue.template_id} [{issue.code}]: {issue.reason}")

            return response

    def describe(self, result: GenerationResultDTO) -> str:
        return (
            f"Processed {result.templates_processed} templates, "
            f"created {len(result.bookings_created)} bookings, "
            f"skipped {len(result.skipped)}, failed {len(result.failed)} "
            f"in {result.execution_time_ms}ms"
        )


async def main():
    await run_worker_main(RecurringGeneratorWorker(), "Recurring Booking Generation Worker")


if __name__ == "__main__":
    asyncio.run(main())
