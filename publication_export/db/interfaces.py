"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Sequence

from publication_export.domain import HealthStatus


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


@dataclass(frozen=True)
class PublicationJobRecord:
    """Persistence model for one publication job.

    Attributes:
        job_id: Job UUID.
        uri: Job URI.
        meeting_uri: URI of the meeting to publish.
        scope: Export facets in enumeration order.
        origin_activity: Optional URI of the triggering source publication activity.
        status: Job status (`scheduled`, `ongoing`, `success`, `failure`).
        retry_count: Number of automatic retries already attempted.
        created_at: Creation timestamp in UTC.
        modified_at: Last status change timestamp in UTC.
        generated: Produced resource URIs in the order they were recorded.
    """

    job_id: str
    uri: str
    meeting_uri: str
    scope: tuple[str, ...]
    origin_activity: str | None
    status: str
    retry_count: int
    created_at: datetime
    modified_at: datetime
    generated: tuple[str, ...] = ()


class PublicationJobRepositoryPort(Protocol):
    """Port definition for publication job lifecycle persistence and reads."""

    def db_publication_job_create(
        self,
        meeting_uri: str,
        scope: Sequence[str],
        origin_activity: str | None = None,
    ) -> PublicationJobRecord:
        """Create one scheduled job.

        Args:
            meeting_uri: URI of the meeting to publish.
            scope: Requested export facets.
            origin_activity: Optional triggering source publication activity.

        Returns:
            PublicationJobRecord: Created job.

        Raises:
            InvalidScopeError: Raised when the scope is inconsistent.
            RuntimeError: Raised when persistence fails.
        """

    def db_publication_job_get_by_id(self, job_id: str) -> PublicationJobRecord | None:
        """Fetch one job by id.

        Args:
            job_id: Job UUID.

        Returns:
            PublicationJobRecord | None: Matching job or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """

    def db_publication_job_claim_next_scheduled(self) -> PublicationJobRecord | None:
        """Move the oldest scheduled job to `ongoing` when no job is ongoing.

        Returns:
            PublicationJobRecord | None: Claimed job, None when nothing is eligible or the claim was lost.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

    def db_publication_job_transition(self, job_id: str, from_status: str, to_status: str) -> bool:
        """Apply a conditional status transition.

        Args:
            job_id: Job UUID.
            from_status: Status the job must currently have.
            to_status: Target status.

        Returns:
            bool: True when the transition was applied.

        Raises:
            ValueError: Raised when a status is unknown.
            RuntimeError: Raised when persistence fails.
        """

    def db_publication_job_list_retryable_failed(self, max_retry_count: int) -> list[PublicationJobRecord]:
        """List failed jobs whose retry count is below a bound.

        Args:
            max_retry_count: Exclusive upper bound on retry count.

        Returns:
            list[PublicationJobRecord]: Jobs ordered by creation time.

        Raises:
            RuntimeError: Raised when database read fails.
        """

    def db_publication_job_claim_failed_for_retry(
        self,
        job_id: str,
        max_retry_count: int,
    ) -> PublicationJobRecord | None:
        """Move a failed job back to `ongoing` and count the retry.

        The claim only applies when no job is ongoing, the job is still failed
        and its retry count is below the bound.

        Args:
            job_id: Job UUID.
            max_retry_count: Exclusive upper bound on retry count.

        Returns:
            PublicationJobRecord | None: Claimed job with its incremented retry count, None when not claimed.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

    def db_publication_job_add_generated(self, job_id: str, resource_uri: str) -> None:
        """Append one produced resource reference to a job.

        Args:
            job_id: Job UUID.
            resource_uri: Produced resource URI.

        Returns:
            None: Reference is stored as side effect.

        Raises:
            LookupError: Raised when job is not found.
            RuntimeError: Raised when persistence fails.
        """

    def db_publication_job_exists_for_origin(self, origin_activity: str) -> bool:
        """Return whether a job already references a source publication activity.

        Args:
            origin_activity: URI of the source publication activity.

        Returns:
            bool: True when at least one job references it.

        Raises:
            RuntimeError: Raised when database read fails.
        """

    def db_publication_job_count_by_status(self) -> dict[str, int]:
        """Count jobs per status.

        Returns:
            dict[str, int]: Count for each of the four statuses, zero included.

        Raises:
            RuntimeError: Raised when database read fails.
        """
