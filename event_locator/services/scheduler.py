"""Background job scheduler for periodic tasks."""

from datetime import datetime, timezone
from typing import Any, Callable, Optional
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.job import Job

logger = logging.getLogger(__name__)

ENRICHMENT_JOB_ID = "address_enrichment"
DUE_CHECK_JOB_ID = "due_check"


class LocatorScheduler:
    """Manages the recurring enrichment and due-check jobs."""

    def __init__(self):
        """Initialize the scheduler."""
        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._running = False

    def start(self):
        """Start the scheduler."""
        if not self._running:
            self.scheduler.start()
            self._running = True
            logger.info("Scheduler started")

    def shutdown(self, wait: bool = False):
        """Shutdown the scheduler."""
        if self._running:
            self.scheduler.shutdown(wait=wait)
            self._running = False
            logger.info("Scheduler shutdown")

    def schedule_interval(
        self,
        job_func: Callable,
        name: str,
        seconds: float,
        run_immediately: bool = False,
        **kwargs: Any
    ) -> Job:
        """Schedule a job to run every ``seconds``.

        At most one instance of a job runs at a time; missed runs are
        coalesced into one.

        Args:
            job_func: Async function to run
            name: Unique name for the job
            seconds: Interval between runs
            run_immediately: Also run once as soon as the scheduler starts
            **kwargs: Additional arguments to pass to the job

        Returns:
            The scheduled job
        """
        options = {}
        if run_immediately:
            options["next_run_time"] = datetime.now(timezone.utc)

        job = self.scheduler.add_job(
            job_func,
            trigger=IntervalTrigger(seconds=seconds),
            id=name,
            name=name,
            kwargs=kwargs,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **options
        )

        logger.info(
            f"Scheduled {name} to run every {seconds}s",
            extra={"job_id": job.id, "run_immediately": run_immediately},
        )

        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a scheduled job by ID.

        Args:
            job_id: ID of job to get

        Returns:
            The job if found, None otherwise
        """
        return self.scheduler.get_job(job_id)

    @property
    def running(self) -> bool:
        """Whether the scheduler is running."""
        return self._running
