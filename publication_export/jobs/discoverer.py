"""Discovery of due publication requests in the source store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from publication_export.db import PublicationJobRecord, PublicationJobRepositoryPort
from publication_export.domain import InvalidScopeError, domain_ensure_utc, domain_utc_now
from publication_export.mapping import PublicationSourcePort

from .acceptance import InvalidSourceUriError, MeetingNotFoundError, PublicationRequestService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicationCandidate:
    """Publication request that is due and has no job yet.

    Attributes:
        activity_uri: URI of the source publication activity.
        meeting_uri: URI of the meeting to publish.
        meeting_id: UUID of the meeting to publish.
        planned_start: Planned start of the publication.
        scope: Scope labels as stored in the source.
    """

    activity_uri: str
    meeting_uri: str
    meeting_id: str
    planned_start: datetime
    scope: tuple[str, ...]


class PublicationRequestDiscoverer:
    """Poller turning due publication activities into scheduled jobs."""

    def __init__(
        self,
        source: PublicationSourcePort,
        job_repository: PublicationJobRepositoryPort,
        acceptance: PublicationRequestService,
        window_seconds: int,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize discoverer.

        Args:
            source: Field-mapping adapter listing publication activities.
            job_repository: Repository used to skip already handled activities.
            acceptance: Service creating jobs for candidates.
            window_seconds: Length of the sliding discovery window.
            clock: Optional provider of the current time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when window_seconds is not positive.
        """

        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self._source = source
        self._job_repository = job_repository
        self._acceptance = acceptance
        self._window = timedelta(seconds=window_seconds)
        self._clock = clock or domain_utc_now

    def discoverer_poll(self, now: datetime | None = None) -> list[PublicationCandidate]:
        """List due publication activities without a job.

        Args:
            now: Optional upper bound of the window, defaults to the clock.

        Returns:
            list[PublicationCandidate]: Candidates ordered by planned start.

        Raises:
            StoreAdapterError: Raised when the source store is unreachable.
            RuntimeError: Raised when the job lookup fails.
        """

        window_end = domain_ensure_utc(now) if now is not None else self._clock()
        window_start = window_end - self._window
        requests = self._source.mapping_list_publication_requests(window_start, window_end)

        candidates: list[PublicationCandidate] = []
        for request in requests:
            if self._job_repository.db_publication_job_exists_for_origin(request.uri):
                continue
            candidates.append(
                PublicationCandidate(
                    activity_uri=request.uri,
                    meeting_uri=request.meeting_uri,
                    meeting_id=request.meeting_id,
                    planned_start=request.planned_start,
                    scope=self._source.mapping_list_publication_request_scope(request.uri),
                )
            )
        return candidates

    def discoverer_trigger_publications(self) -> list[PublicationJobRecord]:
        """Create a job for every due publication activity.

        Returns:
            list[PublicationJobRecord]: Created jobs.

        Raises:
            StoreAdapterError: Raised when the source store is unreachable.
            RuntimeError: Raised when the job lookup fails.
        """

        candidates = self.discoverer_poll()
        if not candidates:
            logger.info("Nothing to publish right now.")
            return []

        logger.info("Found %d new publication activities in Kaleidos", len(candidates))
        created: list[PublicationJobRecord] = []
        for candidate in candidates:
            logger.info(
                "Trigger publication for meeting <%s>, planned at %s",
                candidate.meeting_uri,
                candidate.planned_start.isoformat(),
            )
            try:
                job = self._acceptance.acceptance_create_job(
                    meeting_id=candidate.meeting_id,
                    scope=candidate.scope,
                    source=candidate.activity_uri,
                )
            except (InvalidScopeError, InvalidSourceUriError, MeetingNotFoundError) as error:
                logger.warning(
                    "Something went wrong while triggering publication for meeting <%s>: %s",
                    candidate.meeting_uri,
                    error,
                )
                continue
            created.append(job)
        return created
