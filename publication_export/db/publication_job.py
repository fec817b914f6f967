"""Database service for publication job lifecycle persistence and claim enforcement."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Sequence
from uuid import uuid4

from sqlalchemy import DateTime, Engine, bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from publication_export.domain import (
    JOB_STATUS_FAILURE,
    JOB_STATUS_ONGOING,
    JOB_STATUS_SCHEDULED,
    JOB_STATUSES,
    domain_ensure_utc,
    domain_normalize_scope,
    domain_publication_job_uri,
    domain_utc_now,
)

from .interfaces import PublicationJobRecord, PublicationJobRepositoryPort

_TIMESTAMP_TYPE = DateTime(timezone=True)

_JOB_COLUMNS_SQL = (
    "SELECT id, uri, meeting_uri, origin_activity, status, retry_count, created_at, modified_at "
    "FROM publication_job "
)


class SQLAlchemyPublicationJobRepository(PublicationJobRepositoryPort):
    """SQLAlchemy-backed publication job repository.

    The claim of a scheduled job is a conditional update on the prior status,
    so two scheduler processes sharing one database never run the same job.
    """

    def __init__(self, engine: Engine, clock: Callable[[], datetime] | None = None):
        """Initialize publication job repository.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.
            clock: Optional UTC clock used for created/modified timestamps.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine
        self._clock = clock or domain_utc_now

    def db_publication_job_create(
        self,
        meeting_uri: str,
        scope: Sequence[str],
        origin_activity: str | None = None,
    ) -> PublicationJobRecord:
        """Create one scheduled job with its scope.

        Args:
            meeting_uri: URI of the meeting to publish.
            scope: Requested export facets, aliases accepted.
            origin_activity: Optional triggering source publication activity.

        Returns:
            PublicationJobRecord: Created job.

        Raises:
            InvalidScopeError: Raised when the scope is inconsistent.
            ValueError: Raised when meeting URI is blank.
            RuntimeError: Raised when persistence fails.
        """

        normalized_meeting_uri = self._validate_non_empty_text(meeting_uri, "meeting_uri")
        normalized_scope = domain_normalize_scope(scope)
        normalized_origin = origin_activity.strip() if origin_activity and origin_activity.strip() else None
        job_id = str(uuid4())
        now = self._clock()

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO publication_job ("
                        "id, uri, meeting_uri, origin_activity, status, retry_count, created_at, modified_at"
                        ") VALUES ("
                        ":job_id, :uri, :meeting_uri, :origin_activity, :status, 0, :created_at, :modified_at"
                        ")"
                    ).bindparams(
                        bindparam("created_at", type_=_TIMESTAMP_TYPE),
                        bindparam("modified_at", type_=_TIMESTAMP_TYPE),
                    ),
                    {
                        "job_id": job_id,
                        "uri": domain_publication_job_uri(job_id),
                        "meeting_uri": normalized_meeting_uri,
                        "origin_activity": normalized_origin,
                        "status": JOB_STATUS_SCHEDULED,
                        "created_at": now,
                        "modified_at": now,
                    },
                )
                for position, facet in enumerate(normalized_scope):
                    connection.execute(
                        text(
                            "INSERT INTO publication_job_scope (job_id, position, facet) "
                            "VALUES (:job_id, :position, :facet)"
                        ),
                        {"job_id": job_id, "position": position, "facet": facet},
                    )
                return self._db_fetch_job_by_id_or_raise(connection=connection, job_id=job_id)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to create publication job") from error

    def db_publication_job_get_by_id(self, job_id: str) -> PublicationJobRecord | None:
        """Fetch one job by id.

        Args:
            job_id: Job UUID.

        Returns:
            PublicationJobRecord | None: Matching job or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                return self._db_fetch_job_by_id(connection=connection, job_id=job_id)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch publication job by id") from error

    def db_publication_job_claim_next_scheduled(self) -> PublicationJobRecord | None:
        """Move the oldest scheduled job to `ongoing` when no job is ongoing.

        Returns:
            PublicationJobRecord | None: Claimed job, None when nothing is eligible or the claim was lost.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            with self._engine.begin() as connection:
                ongoing_row = connection.execute(
                    text("SELECT id FROM publication_job WHERE status = :status LIMIT 1"),
                    {"status": JOB_STATUS_ONGOING},
                ).first()
                if ongoing_row is not None:
                    return None

                candidate_row = connection.execute(
                    text(
                        "SELECT id FROM publication_job "
                        "WHERE status = :status "
                        "ORDER BY created_at ASC, id ASC "
                        "LIMIT 1"
                    ),
                    {"status": JOB_STATUS_SCHEDULED},
                ).mappings().first()
                if candidate_row is None:
                    return None

                claimed = self._db_update_status(
                    connection=connection,
                    job_id=candidate_row["id"],
                    from_status=JOB_STATUS_SCHEDULED,
                    to_status=JOB_STATUS_ONGOING,
                )
                if not claimed:
                    return None
                return self._db_fetch_job_by_id_or_raise(connection=connection, job_id=candidate_row["id"])
        except SQLAlchemyError as error:
            raise RuntimeError("failed to claim next scheduled publication job") from error

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

        for status in (from_status, to_status):
            if status not in JOB_STATUSES:
                raise ValueError(f"status must be one of: {', '.join(JOB_STATUSES)}")

        try:
            with self._engine.begin() as connection:
                return self._db_update_status(
                    connection=connection,
                    job_id=job_id,
                    from_status=from_status,
                    to_status=to_status,
                )
        except SQLAlchemyError as error:
            raise RuntimeError("failed to transition publication job status") from error

    def db_publication_job_list_retryable_failed(self, max_retry_count: int) -> list[PublicationJobRecord]:
        """List failed jobs whose retry count is below a bound.

        Args:
            max_retry_count: Exclusive upper bound on retry count.

        Returns:
            list[PublicationJobRecord]: Jobs ordered by creation time.

        Raises:
            ValueError: Raised when the bound is negative.
            RuntimeError: Raised when database read fails.
        """

        if max_retry_count < 0:
            raise ValueError("max_retry_count must be >= 0")

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        "SELECT id FROM publication_job "
                        "WHERE status = :status AND retry_count < :max_retry_count "
                        "ORDER BY created_at ASC, id ASC"
                    ),
                    {"status": JOB_STATUS_FAILURE, "max_retry_count": max_retry_count},
                ).mappings().all()
                return [self._db_fetch_job_by_id_or_raise(connection=connection, job_id=row["id"]) for row in rows]
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list failed publication jobs") from error

    def db_publication_job_claim_failed_for_retry(
        self,
        job_id: str,
        max_retry_count: int,
    ) -> PublicationJobRecord | None:
        """Move a failed job back to `ongoing` and count the retry.

        Args:
            job_id: Job UUID.
            max_retry_count: Exclusive upper bound on retry count.

        Returns:
            PublicationJobRecord | None: Claimed job with its incremented retry count, None when
                another job is ongoing, the job is no longer failed or its retries are exhausted.

        Raises:
            ValueError: Raised when the bound is negative.
            RuntimeError: Raised when persistence fails.
        """

        if max_retry_count < 0:
            raise ValueError("max_retry_count must be >= 0")

        try:
            with self._engine.begin() as connection:
                ongoing_row = connection.execute(
                    text("SELECT id FROM publication_job WHERE status = :status LIMIT 1"),
                    {"status": JOB_STATUS_ONGOING},
                ).first()
                if ongoing_row is not None:
                    return None

                result = connection.execute(
                    text(
                        "UPDATE publication_job "
                        "SET status = :to_status, retry_count = retry_count + 1, modified_at = :modified_at "
                        "WHERE id = :job_id AND status = :from_status AND retry_count < :max_retry_count"
                    ).bindparams(bindparam("modified_at", type_=_TIMESTAMP_TYPE)),
                    {
                        "job_id": job_id,
                        "from_status": JOB_STATUS_FAILURE,
                        "to_status": JOB_STATUS_ONGOING,
                        "max_retry_count": max_retry_count,
                        "modified_at": self._clock(),
                    },
                )
                if result.rowcount != 1:
                    return None
                return self._db_fetch_job_by_id_or_raise(connection=connection, job_id=job_id)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to claim failed publication job for retry") from error

    def db_publication_job_add_generated(self, job_id: str, resource_uri: str) -> None:
        """Append one produced resource reference to a job.

        Args:
            job_id: Job UUID.
            resource_uri: Produced resource URI.

        Returns:
            None: Reference is stored as side effect.

        Raises:
            LookupError: Raised when job is not found.
            ValueError: Raised when resource URI is blank.
            RuntimeError: Raised when persistence fails.
        """

        normalized_resource_uri = self._validate_non_empty_text(resource_uri, "resource_uri")

        try:
            with self._engine.begin() as connection:
                job_row = connection.execute(
                    text("SELECT id FROM publication_job WHERE id = :job_id"),
                    {"job_id": job_id},
                ).first()
                if job_row is None:
                    raise LookupError("publication job not found")

                next_position = connection.execute(
                    text(
                        "SELECT COALESCE(MAX(position), -1) + 1 "
                        "FROM publication_job_generated "
                        "WHERE job_id = :job_id"
                    ),
                    {"job_id": job_id},
                ).scalar_one()
                connection.execute(
                    text(
                        "INSERT INTO publication_job_generated (job_id, position, resource_uri) "
                        "VALUES (:job_id, :position, :resource_uri)"
                    ),
                    {"job_id": job_id, "position": int(next_position), "resource_uri": normalized_resource_uri},
                )
        except SQLAlchemyError as error:
            raise RuntimeError("failed to record generated resource of publication job") from error

    def db_publication_job_exists_for_origin(self, origin_activity: str) -> bool:
        """Return whether a job already references a source publication activity.

        Args:
            origin_activity: URI of the source publication activity.

        Returns:
            bool: True when at least one job references it.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text("SELECT id FROM publication_job WHERE origin_activity = :origin_activity LIMIT 1"),
                    {"origin_activity": origin_activity},
                ).first()
                return row is not None
        except SQLAlchemyError as error:
            raise RuntimeError("failed to look up publication job by origin activity") from error

    def db_publication_job_count_by_status(self) -> dict[str, int]:
        """Count jobs per status.

        Returns:
            dict[str, int]: Count for each of the four statuses, zero included.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text("SELECT status, COUNT(*) AS job_count FROM publication_job GROUP BY status")
                ).mappings().all()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to count publication jobs by status") from error

        counts = {status: 0 for status in JOB_STATUSES}
        for row in rows:
            if row["status"] in counts:
                counts[row["status"]] = int(row["job_count"])
        return counts

    def _db_update_status(self, connection, job_id: str, from_status: str, to_status: str) -> bool:
        """Update status only when the current status matches.

        Args:
            connection: Active SQLAlchemy connection.
            job_id: Job UUID.
            from_status: Expected current status.
            to_status: Target status.

        Returns:
            bool: True when exactly one row was updated.
        """

        result = connection.execute(
            text(
                "UPDATE publication_job SET status = :to_status, modified_at = :modified_at "
                "WHERE id = :job_id AND status = :from_status"
            ).bindparams(bindparam("modified_at", type_=_TIMESTAMP_TYPE)),
            {
                "job_id": job_id,
                "from_status": from_status,
                "to_status": to_status,
                "modified_at": self._clock(),
            },
        )
        return result.rowcount == 1

    def _db_fetch_job_by_id(self, connection, job_id: str) -> PublicationJobRecord | None:
        """Fetch one job with its scope and generated references.

        Args:
            connection: Active SQLAlchemy connection.
            job_id: Job UUID.

        Returns:
            PublicationJobRecord | None: Matching job or None.
        """

        row = connection.execute(
            text(f"{_JOB_COLUMNS_SQL}WHERE id = :job_id").columns(
                created_at=_TIMESTAMP_TYPE,
                modified_at=_TIMESTAMP_TYPE,
            ),
            {"job_id": job_id},
        ).mappings().first()
        if row is None:
            return None

        scope_rows = connection.execute(
            text("SELECT facet FROM publication_job_scope WHERE job_id = :job_id ORDER BY position ASC"),
            {"job_id": job_id},
        ).all()
        generated_rows = connection.execute(
            text(
                "SELECT resource_uri FROM publication_job_generated "
                "WHERE job_id = :job_id "
                "ORDER BY position ASC"
            ),
            {"job_id": job_id},
        ).all()
        return self._map_publication_job_record(
            row=row,
            scope=tuple(scope_row[0] for scope_row in scope_rows),
            generated=tuple(generated_row[0] for generated_row in generated_rows),
        )

    def _db_fetch_job_by_id_or_raise(self, connection, job_id: str) -> PublicationJobRecord:
        """Fetch one job inside an active transaction and raise when missing.

        Args:
            connection: Active SQLAlchemy connection.
            job_id: Job UUID.

        Returns:
            PublicationJobRecord: Matching job.

        Raises:
            LookupError: Raised when job cannot be found.
        """

        record = self._db_fetch_job_by_id(connection=connection, job_id=job_id)
        if record is None:
            raise LookupError("publication job not found")
        return record

    def _map_publication_job_record(
        self,
        row: Any,
        scope: tuple[str, ...],
        generated: tuple[str, ...],
    ) -> PublicationJobRecord:
        """Map SQLAlchemy row mapping to typed job record.

        SQLite drops timezone information, stored values are UTC.

        Args:
            row: SQLAlchemy mapping row.
            scope: Scope facets of the job.
            generated: Generated resource URIs of the job.

        Returns:
            PublicationJobRecord: Typed job record.
        """

        return PublicationJobRecord(
            job_id=row["id"],
            uri=row["uri"],
            meeting_uri=row["meeting_uri"],
            scope=scope,
            origin_activity=row["origin_activity"],
            status=row["status"],
            retry_count=int(row["retry_count"]),
            created_at=domain_ensure_utc(row["created_at"]),
            modified_at=domain_ensure_utc(row["modified_at"]),
            generated=generated,
        )

    def _validate_non_empty_text(self, value: str, field_name: str) -> str:
        """Validate required text input and return stripped value.

        Args:
            value: Candidate string value.
            field_name: Field name for error reporting.

        Returns:
            str: Stripped non-empty value.

        Raises:
            ValueError: Raised when value is blank.
        """

        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError(f"{field_name} must not be blank")
        return stripped_value
