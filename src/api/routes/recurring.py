"""Recurring Schedule API Routes"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.auth import require_staff
from src.api.error import raise_for_error
from src.api.schemas.booking_request import CreateRecurringTemplateRequestSchema
from src.app.services.authenticator import Claims
from src.app.use_cases.scheduling.dtos import (
    CreateRecurringTemplateCommandDTO,
    RecurringTemplateResponseDTO,
)
from src.app.use_cases.scheduling.create_recurring_template import CreateRecurringTemplate
from src.adapter.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyRecurringTemplateRepository,
    SqlAlchemyServiceRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session

router = APIRouter(prefix="/recurring-templates", tags=["Recurring"])


@router.post(
    "",
    response_model=RecurringTemplateResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Unknown frequency",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "UNKNOWN_FREQUENCY",
                            "message": "Unknown frequency 'fortnightly'"
                        }
                    }
                }
            }
        }
    }
)
async def create_recurring_template(
    request: CreateRecurringTemplateRequestSchema,
    session: AsyncSession = Depends(get_session),
    claims: Claims = Depends(require_staff),
):
    """
    Start a recurring cleaning schedule (staff only).

    The nightly generator books occurrences from ``start_date`` onwards.
    Monthly schedules keep the day of month of ``start_date``, clamped to
    the last day in shorter months.
    """
    use_case = CreateRecurringTemplate(
        uow=SqlAlchemyUnitOfWork(session),
        template_repo=SqlAlchemyRecurringTemplateRepository(session),
        customer_repo=SqlAlchemyCustomerRepository(session),
        service_repo=SqlAlchemyServiceRepository(session),
    )
    result = await use_case.execute(
        CreateRecurringTemplateCommandDTO(**request.model_dump())
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value
