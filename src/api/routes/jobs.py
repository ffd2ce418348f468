"""Background job API Routes

Manual triggers go through the same JobRunner as the schedule, so a job
already in flight is skipped rather than run twice.
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from libs.result import Error
from src.api.auth import require_admin
from src.api.error import ClientError
from src.app.services.authenticator import Claims
from src.worker.scheduler import UnknownJobError
from src.depends import get_job_runner

router = APIRouter(prefix="/jobs", tags=["Jobs"])


class JobRunResponseSchema(BaseModel):
    name: str
    ran: bool
    error: Optional[str] = None
    result: Optional[Any] = None


class JobStatusSchema(BaseModel):
    name: str
    interval_seconds: int
    is_running: bool
    last_run_at: Optional[str] = None
    last_error: Optional[str] = None


@router.get("", response_model=List[JobStatusSchema], status_code=status.HTTP_200_OK)
async def list_jobs(
    runner=Depends(get_job_runner),
    claims: Claims = Depends(require_admin),
):
    """List scheduled jobs and their last run (admin only)."""
    return runner.status()


@router.post(
    "/{name}/run",
    response_model=JobRunResponseSchema,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "Unknown job",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "JOB_NOT_FOUND",
                            "message": "No job named 'cleanup'"
                        }
                    }
                }
            }
        }
    }
)
async def run_job(
    name: str,
    runner=Depends(get_job_runner),
    claims: Claims = Depends(require_admin),
):
    """
    Run a job now and wait for it (admin only).

    Jobs: reminders, recurring, overdue, session_cleanup, inventory_check.
    ``ran`` is false when the job was already running.
    """
    try:
        outcome = await runner.trigger(name)
    except UnknownJobError:
        raise ClientError(
            Error(code="JOB_NOT_FOUND", message=f"No job named '{name}'"),
            status_code=status.HTTP_404_NOT_FOUND,
        )

    result = outcome.result
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json")

    return JobRunResponseSchema(
        name=outcome.name, ran=outcome.ran, error=outcome.error, result=result
    )
