"""CreateRecurringTemplate Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.customer_repository import CustomerRepository
from src.app.repositories.service_repository import ServiceRepository
from src.app.repositories.recurring_template_repository import RecurringTemplateRepository
from src.domain.money import quantize_money
from src.domain.recurrence import Frequency, UnknownFrequencyError, parse_frequency
from src.domain.recurring_template import RecurringTemplate
from .dtos import CreateRecurringTemplateCommandDTO, RecurringTemplateResponseDTO

logger = logging.getLogger(__name__)


class CreateRecurringTemplate:
    """
    Use Case: Staff creates a standing recurring schedule

    Business Rules:
    1. Customer and service must exist
    2. Frequency must be weekly, biweekly or monthly
    3. Monthly schedules are pinned to the start date's day of month
    4. next_date starts at start_date; the generation run materializes it
    """

    def __init__(
        self,
        uow: UnitOfWork,
        template_repo: RecurringTemplateRepository,
        customer_repo: CustomerRepository,
        service_repo: ServiceRepository,
    ):
        self.uow = uow
        self.template_repo = template_repo
        self.customer_repo = customer_repo
        self.service_repo = service_repo

    async def execute(
        self, command: CreateRecurringTemplateCommandDTO
    ) -> Result[RecurringTemplateResponseDTO]:
        try:
            frequency = parse_frequency(command.frequency)

            customer = await self.customer_repo.get_by_id(command.customer_id)
            if not customer:
                return Return.err(
                    Error(
                        code="CUSTOMER_NOT_FOUND",
                        message=f"Customer {command.customer_id} not found",
                    )
                )

            service = await self.service_repo.get_by_id(command.service_id)
            if not service:
                return Return.err(
                    Error(
                        code="SERVICE_NOT_FOUND",
                        message=f"Service {command.service_id} not found",
                    )
                )

            address = command.address or customer.address
            if not address:
                return Return.err(
                    Error(
                        code="ADDRESS_REQUIRED",
                        message="A service address is required",
                        reason="Customer has no address on file",
                    )
                )

            base_price = (
                command.base_price if command.base_price is not None else service.base_price
            )

            template = await self.template_repo.create(
                RecurringTemplate(
                    customer_id=customer.id,
                    service_id=service.id,
                    frequency=frequency.value,
                    anchor_day=command.start_date.day if frequency == Frequency.MONTHLY else None,
                    preferred_time=command.preferred_time,
                    address=address,
                    city=command.city or customer.city,
                    state=command.state or customer.state,
                    zip_code=command.zip_code or customer.zip_code,
                    sqft=command.sqft,
                    bedrooms=command.bedrooms,
                    bathrooms=command.bathrooms,
                    base_price=quantize_money(base_price),
                    notes=command.notes,
                    next_date=command.start_date,
                )
            )

            await self.uow.commit()

            logger.info(
                f"Recurring template {template.id} ({frequency.value}) created for "
                f"customer {customer.id} starting {command.start_date.isoformat()}"
            )
            return Return.ok(RecurringTemplateResponseDTO.from_entity(template))

        except UnknownFrequencyError as e:
            await self.uow.rollback()
            return Return.err(Error(code=e.code, message=str(e)))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_RECURRING_TEMPLATE_FAILED",
                    message="Failed to create recurring template",
                    reason=str(e),
                )
            )
