"""GenerateOccurrences Use Case

Expands active recurring templates into concrete bookings for a rolling
horizon. Invoked once per scheduler tick.
"""

import logging
import time
from datetime import date, timedelta
from typing import List, Tuple
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.booking_repository import BookingRepository
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.service_repository import ServiceRepository
from src.app.repositories.recurring_template_repository import RecurringTemplateRepository
from src.domain.booking import Booking, BookingFrequency, BookingStatus, DEFAULT_TIME_SLOT, price_total
from src.domain.recurrence import Frequency, UnknownFrequencyError, advance_occurrence, parse_frequency
from src.domain.recurring_template import RecurringTemplate
from .dtos import (
    GenerateOccurrencesCommandDTO,
    GenerationResultDTO,
    BookingResponseDTO,
    TemplateIssueDTO,
)

logger = logging.getLogger(__name__)


class TemplateReferenceError(Exception):
    """Template points at a customer or service that no longer exists"""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


class GenerateOccurrences:
    """
    Use Case: Materialize recurring bookings

    Business Rules:
    1. Selects active templates with next_date null or within the horizon
    2. Occurrences are generated in increasing date order, never past
       today + horizon_days
    3. Dates before today are not materialized (an engine outage does not
       flood-generate a backlog)
    4. A (template, date) pair gets at most one booking; the per-date
       existence check is the de-duplication key
    5. next_date is saved as the first date not yet handled and never
       moves backwards
    6. Each template is committed on its own: a failure rolls back that
       template only and the run continues
    7. Unknown frequencies are skipped and reported, never defaulted

    Flow:
    1. Load due templates
    2. For each template: validate frequency and references
    3. Walk the cursor up to the horizon, creating missing bookings
    4. Persist next_date and commit
    5. Return run summary
    """

    def __init__(
        self,
        uow: UnitOfWork,
        template_repo: RecurringTemplateRepository,
        booking_repo: BookingRepository,
        customer_repo: CustomerRepository,
        service_repo: ServiceRepository,
    ):
        self.uow = uow
        self.template_repo = template_repo
        self.booking_repo = booking_repo
        self.customer_repo = customer_repo
        self.service_repo = service_repo

    async def execute(
        self, command: GenerateOccurrencesCommandDTO
    ) -> Result[GenerationResultDTO]:
        start = time.monotonic()
        today = command.today
        horizon_end = today + timedelta(days=command.horizon_days)

        try:
            # Step 1: Load due templates (ids first, objects are re-read per template)
            due = await self.template_repo.get_due(horizon_end)
            template_ids = [template.id for template in due]
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="GENERATE_OCCURRENCES_FAILED",
                    message="Failed to load recurring templates",
                    reason=str(e),
                )
            )

        logger.info(
            f"Generating occurrences for {len(template_ids)} templates "
            f"through {horizon_end.isoformat()}"
        )

        created: List[BookingResponseDTO] = []
        skipped: List[TemplateIssueDTO] = []
        failed: List[TemplateIssueDTO] = []
        past_dates_skipped = 0

        for template_id in template_ids:
            try:
                template = await self.template_repo.get_by_id(template_id)
                if template is None or not template.is_active:
                    continue

                # Step 2: Unknown frequency is reported, not defaulted
                try:
                    frequency = parse_frequency(template.frequency)
                except UnknownFrequencyError as e:
                    logger.warning(f"Skipping recurring template {template_id}: {e}")
                    skipped.append(
                        TemplateIssueDTO(template_id=template_id, code=e.code, reason=str(e))
                    )
                    await self.uow.rollback()
                    continue

                # Step 3-4: Materialize and commit this template only
                template_created, template_past = await self._generate_for_template(
                    template, frequency, today, horizon_end
                )
                await self.uow.commit()

                created.extend(template_created)
                past_dates_skipped += template_past

            except Exception as e:
                await self.uow.rollback()
                code = getattr(e, "code", "TEMPLATE_PROCESSING_FAILED")
                logger.error(f"Recurring template {template_id} failed: {e}")
                failed.append(TemplateIssueDTO(template_id=template_id, code=code, reason=str(e)))

        execution_time_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"Recurring generation complete: {len(created)} bookings created, "
            f"{len(skipped)} templates skipped, {len(failed)} failed in {execution_time_ms}ms"
        )

        return Return.ok(
            GenerationResultDTO(
                templates_processed=len(template_ids),
                bookings_created=created,
                skipped=skipped,
                failed=failed,
                past_dates_skipped=past_dates_skipped,
                horizon_end=horizon_end,
                execution_time_ms=execution_time_ms,
            )
        )

    async def _generate_for_template(
        self,
        template: RecurringTemplate,
        frequency: Frequency,
        today: date,
        horizon_end: date,
    ) -> Tuple[List[BookingResponseDTO], int]:
        customer = await self.customer_repo.get_by_id(template.customer_id)
        if customer is None:
            raise TemplateReferenceError(
                "CUSTOMER_NOT_FOUND", f"Customer {template.customer_id} not found"
            )
        service = await self.service_repo.get_by_id(template.service_id)
        if service is None:
            raise TemplateReferenceError(
                "SERVICE_NOT_FOUND", f"Service {template.service_id} not found"
            )

        cursor = template.next_date or today
        created: List[BookingResponseDTO] = []

        # Backlog before today is fast-forwarded, not booked
        past_dates = 0
        while cursor < today:
            past_dates += 1
            cursor = advance_occurrence(cursor, frequency, anchor_day=template.anchor_day)
        if past_dates:
            logger.warning(
                f"Recurring template {template.id} skipped {past_dates} past occurrences"
            )

        while cursor <= horizon_end:
            if not await self.booking_repo.exists_for_template_date(template.id, cursor):
                booking = await self.booking_repo.create(
                    Booking(
                        customer_id=template.customer_id,
                        service_id=template.service_id,
                        scheduled_date=cursor,
                        scheduled_time=template.preferred_time or DEFAULT_TIME_SLOT,
                        estimated_duration=service.duration_minutes,
                        address=template.address,
                        city=template.city,
                        state=template.state,
                        zip_code=template.zip_code,
                        sqft=template.sqft,
                        bedrooms=template.bedrooms,
                        bathrooms=template.bathrooms,
                        base_price=template.base_price,
                        total_price=price_total(template.base_price),
                        status=BookingStatus.PENDING,
                        is_recurring=True,
                        recurring_template_id=template.id,
                        frequency=BookingFrequency(frequency.value),
                    )
                )
                created.append(BookingResponseDTO.from_entity(booking))
            cursor = advance_occurrence(cursor, frequency, anchor_day=template.anchor_day)

        if template.next_date is None or cursor > template.next_date:
            template.next_date = cursor
            await self.template_repo.update(template)

        return created, past_dates
