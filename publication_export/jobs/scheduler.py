"""Single-flight scheduler driving publication jobs through their lifecycle."""

from __future__ import annotations

import logging
import threading

from publication_export.db import PublicationJobRecord, PublicationJobRepositoryPort
from publication_export.domain import JOB_STATUS_FAILURE, JOB_STATUS_ONGOING, JOB_STATUS_SUCCESS

from .interfaces import PublicationPipelinePort, SchedulerPort

logger = logging.getLogger(__name__)


class PublicationJobScheduler(SchedulerPort):
    """Scheduler executing at most one publication job at a time per process.

    `scheduler_run_next` and `scheduler_retry_failed` share one non-blocking
    lock. A call that finds the lock held returns immediately with zero
    executed jobs. Across processes the compare-and-swap claim in the
    repository keeps a job from being executed twice.
    """

    def __init__(
        self,
        job_repository: PublicationJobRepositoryPort,
        pipeline: PublicationPipelinePort,
        max_retry_count: int = 5,
    ):
        """Initialize scheduler.

        Args:
            job_repository: Repository persisting job state.
            pipeline: Export pipeline executed per job.
            max_retry_count: Retry bound for failed jobs.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when max_retry_count is negative.
        """

        if max_retry_count < 0:
            raise ValueError("max_retry_count must be >= 0")
        self._job_repository = job_repository
        self._pipeline = pipeline
        self._max_retry_count = max_retry_count
        self._lock = threading.Lock()

    def scheduler_is_busy(self) -> bool:
        """Return whether a drain or retry sweep is in progress."""

        return self._lock.locked()

    def scheduler_run_next(self) -> int:
        """Claim and execute scheduled jobs until none is eligible.

        Returns:
            int: Number of executed jobs, 0 when busy or idle.
        """

        if not self._lock.acquire(blocking=False):
            logger.debug("Scheduler is busy, skipping run")
            return 0
        executed = 0
        try:
            while True:
                try:
                    job = self._job_repository.db_publication_job_claim_next_scheduled()
                except RuntimeError:
                    logger.exception("Unexpected error while claiming next scheduled job")
                    break
                if job is None:
                    logger.debug("No scheduled job eligible for execution")
                    break
                logger.info("Found next scheduled job <%s>, executing...", job.uri)
                if not self._scheduler_execute(job):
                    break
                executed += 1
        finally:
            self._lock.release()
        return executed

    def scheduler_retry_failed(self) -> int:
        """Re-execute failed jobs whose retry count is below the bound.

        Returns:
            int: Number of re-executed jobs, 0 when busy or nothing is retryable.
        """

        if not self._lock.acquire(blocking=False):
            logger.debug("Scheduler is busy, skipping retry of failed jobs")
            return 0
        executed = 0
        try:
            try:
                failed_jobs = self._job_repository.db_publication_job_list_retryable_failed(self._max_retry_count)
            except RuntimeError:
                logger.exception("Unexpected error while listing failed jobs")
                return 0

            for job in failed_jobs:
                try:
                    claimed_job = self._job_repository.db_publication_job_claim_failed_for_retry(
                        job.job_id, self._max_retry_count
                    )
                except RuntimeError:
                    logger.exception("Unexpected error while preparing retry of job <%s>", job.uri)
                    break
                if claimed_job is None:
                    logger.info("Job <%s> could not be claimed for retry, skipping", job.uri)
                    continue
                logger.info(
                    "Retrying failed job <%s>... [%d/%d]",
                    claimed_job.uri,
                    claimed_job.retry_count,
                    self._max_retry_count,
                )
                if not self._scheduler_execute(claimed_job):
                    break
                executed += 1
        finally:
            self._lock.release()
        return executed

    def _scheduler_execute(self, job: PublicationJobRecord) -> bool:
        """Run the pipeline for an ongoing job and record its outcome.

        Args:
            job: Job already transitioned to `ongoing`.

        Returns:
            bool: False when the outcome could not be persisted.
        """

        try:
            publication_uri = self._pipeline.pipeline_export(job)
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Execution of job <%s> failed", job.uri)
            return self._scheduler_finish(job, JOB_STATUS_FAILURE)

        if publication_uri is None:
            logger.info("Job <%s> finished without generating a publication", job.uri)
        else:
            logger.info("Job <%s> generated publication activity <%s>", job.uri, publication_uri)
        return self._scheduler_finish(job, JOB_STATUS_SUCCESS)

    def _scheduler_finish(self, job: PublicationJobRecord, status: str) -> bool:
        try:
            transitioned = self._job_repository.db_publication_job_transition(job.job_id, JOB_STATUS_ONGOING, status)
        except RuntimeError:
            logger.exception("Unexpected error while marking job <%s> as %s", job.uri, status)
            return False
        if not transitioned:
            logger.warning("Job <%s> was no longer ongoing when marking it as %s", job.uri, status)
        else:
            logger.info("Job <%s> finished with status %s", job.uri, status)
        return True
