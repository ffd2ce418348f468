"""Background workers for the cleaning service"""
from .recurring_generator import RecurringGeneratorWorker
from .overdue_sweeper import OverdueSweeperWorker
from .reminder_sender import ReminderSenderWorker
from .maintenance import SessionCleanupWorker, InventoryCheckWorker
from .scheduler import JobRunner, ScheduledJob, JobRun, UnknownJobError, build_job_runner

__all__ = [
    "RecurringGeneratorWorker",
    "OverdueSweeperWorker",
    "ReminderSenderWorker",
    "SessionCleanupWorker",
    "InventoryCheckWorker",
    "JobRunner",
    "ScheduledJob",
    "JobRun",
    "UnknownJobError",
    "build_job_runner",
]
