"""In-process job scheduler

Runs the periodic jobs (reminders, recurring generation, overdue sweep,
session cleanup, inventory check) inside the API process, or standalone:

    python -m src.worker.scheduler
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional
from sqlalchemy.orm import sessionmaker

from config import ApplicationConfig
from src.app.services.email_sender import EmailSender
from src.app.services.invoice_locks import InvoiceLockRegistry
from src.worker.maintenance import SessionCleanupWorker, InventoryCheckWorker
from src.worker.overdue_sweeper import OverdueSweeperWorker
from src.worker.recurring_generator import RecurringGeneratorWorker
from src.worker.reminder_sender import ReminderSenderWorker

logger = logging.getLogger(__name__)


@dataclass
class ScheduledJob:
    """A named periodic job and its run state"""

    name: str
    interval_seconds: int
    func: Callable[[], Awaitable[Any]]
    run_on_start: bool = False
    is_running: bool = False
    last_run_at: Optional[datetime] = None
    last_error: Optional[str] = None
    last_result: Any = field(default=None, repr=False)

    def is_due(self, now: datetime) -> bool:
        if self.last_run_at is None:
            return self.run_on_start
        return (now - self.last_run_at).total_seconds() >= self.interval_seconds


@dataclass
class JobRun:
    """Outcome of a manual trigger"""

    name: str
    ran: bool
    result: Any = None
    error: Optional[str] = None


class UnknownJobError(KeyError):
    code = "JOB_NOT_FOUND"


class JobRunner:
    """
    Runs registered jobs on their interval

    Rules:
    - A job never overlaps itself: a tick or trigger that finds it
      running skips it
    - A failing job is logged and recorded; other jobs keep running
    """

    def __init__(self, jobs: Optional[List[ScheduledJob]] = None, poll_seconds: float = 30):
        self.jobs: Dict[str, ScheduledJob] = {}
        self.poll_seconds = poll_seconds
        self._tasks: set = set()
        self._loop_task: Optional[asyncio.Task] = None
        self._started_at: Optional[datetime] = None
        for job in jobs or []:
            self.register(job)

    def register(self, job: ScheduledJob) -> None:
        self.jobs[job.name] = job

    def get(self, name: str) -> ScheduledJob:
        try:
            return self.jobs[name]
        except KeyError:
            raise UnknownJobError(name)

    async def _run(self, job: ScheduledJob) -> JobRun:
        job.is_running = True
        started = datetime.utcnow()
        try:
            result = await job.func()
            job.last_result = result
            job.last_error = None
            logger.info(f"Job {job.name} finished in {(datetime.utcnow() - started).total_seconds():.2f}s")
            return JobRun(name=job.name, ran=True, result=result)
        except Exception as e:
            job.last_error = str(e)
            logger.error(f"Job {job.name} failed: {e}")
            return JobRun(name=job.name, ran=True, error=str(e))
        finally:
            job.last_run_at = started
            job.is_running = False

    async def trigger(self, name: str) -> JobRun:
        """
        Run a job now and wait for it

        Returns JobRun(ran=False) if the job is already in flight.

        Raises:
            UnknownJobError: no job registered under ``name``
        """
        job = self.get(name)
        if job.is_running:
            logger.warning(f"Job {name} is already running; trigger skipped")
            return JobRun(name=name, ran=False)
        return await self._run(job)

    def tick(self, now: Optional[datetime] = None) -> List[str]:
        """
        Launch every due job that is not already running

        Returns:
            Names of the jobs launched
        """
        now = now or datetime.utcnow()
        launched = []
        for job in self.jobs.values():
            if job.is_running or not self._due(job, now):
                continue
            # Set before the task first runs so a second tick cannot double launch
            job.is_running = True
            task = asyncio.create_task(self._launch(job))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            launched.append(job.name)
        return launched

    def _due(self, job: ScheduledJob, now: datetime) -> bool:
        if job.last_run_at is None and not job.run_on_start and self._started_at is not None:
            return (now - self._started_at).total_seconds() >= job.interval_seconds
        return job.is_due(now)

    async def _launch(self, job: ScheduledJob) -> None:
        await self._run(job)

    async def wait_idle(self) -> None:
        """Wait for every launched job to finish"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run_forever(self) -> None:
        self._started_at = self._started_at or datetime.utcnow()
        logger.info(f"Job runner started with jobs: {', '.join(self.jobs)}")
        while True:
            try:
                self.tick()
            except Exception as e:
                logger.error(f"Job runner tick failed: {e}")
            await asyncio.sleep(self.poll_seconds)

    def start(self) -> None:
        """Start the polling loop in the background"""
        if self._loop_task is None or self._loop_task.done():
            self._started_at = datetime.utcnow()
            self._loop_task = asyncio.create_task(self.run_forever())

    async def shutdown(self) -> None:
        """Stop polling and wait for running jobs"""
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        await self.wait_idle()
        logger.info("Job runner shutdown complete")

    def status(self) -> List[dict]:
        return [
            {
                "name": job.name,
                "interval_seconds": job.interval_seconds,
                "is_running": job.is_running,
                "last_run_at": job.last_run_at.isoformat() if job.last_run_at else None,
                "last_error": job.last_error,
            }
            for job in self.jobs.values()
        ]


def build_job_runner(
    session_factory: sessionmaker,
    config=ApplicationConfig,
    email_sender: Optional[EmailSender] = None,
    locks: Optional[InvoiceLockRegistry] = None,
) -> JobRunner:
    """Wire the standard jobs against a shared session factory"""
    reminders = ReminderSenderWorker(session_factory=session_factory, email_sender=email_sender)
    recurring = RecurringGeneratorWorker(
        session_factory=session_factory, horizon_days=config.RECURRING_HORIZON_DAYS
    )
    overdue = OverdueSweeperWorker(
        session_factory=session_factory, email_sender=email_sender, locks=locks
    )
    sessions = SessionCleanupWorker(session_factory=session_factory)
    inventory = InventoryCheckWorker(session_factory=session_factory, email_sender=email_sender)

    return JobRunner(
        jobs=[
            ScheduledJob("reminders", config.REMINDER_INTERVAL_SECONDS, reminders.run_once),
            ScheduledJob("recurring", config.RECURRING_INTERVAL_SECONDS, recurring.run_once, run_on_start=True),
            ScheduledJob("overdue", config.OVERDUE_INTERVAL_SECONDS, overdue.run_once),
            ScheduledJob("session_cleanup", config.SESSION_CLEANUP_INTERVAL_SECONDS, sessions.run_once),
            ScheduledJob("inventory_check", config.INVENTORY_CHECK_INTERVAL_SECONDS, inventory.run_once),
        ]
    )


async def main():
    """
    Main entry point for running the scheduler standalone

    Usage:
        python -m src.worker.scheduler
        python -m src.worker.scheduler --run overdue
    """
    import argparse
    from src.depends import AsyncSessionLocal, engine

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Background job scheduler")
    parser.add_argument("--run", type=str, default=None, help="Run a single job once and exit")
    parser.add_argument(
        "--poll", type=float, default=30, help="Seconds between scheduler ticks (default: 30)"
    )
    args = parser.parse_args()

    runner = build_job_runner(AsyncSessionLocal)
    runner.poll_seconds = args.poll

    try:
        if args.run:
            outcome = await runner.trigger(args.run)
            print(outcome.error or outcome.result)
        else:
            await runner.run_forever()
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await runner.shutdown()
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
