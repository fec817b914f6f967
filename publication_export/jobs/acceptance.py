"""Validation and creation of publication jobs from publication requests."""

from __future__ import annotations

import logging
from typing import Sequence
from urllib.parse import urlparse

from publication_export.db import PublicationJobRecord, PublicationJobRepositoryPort
from publication_export.domain import domain_normalize_scope
from publication_export.mapping import PublicationSourcePort

logger = logging.getLogger(__name__)


class MeetingNotFoundError(LookupError):
    """Raised when the requested meeting does not exist in the source store."""


class InvalidSourceUriError(ValueError):
    """Raised when the origin publication activity is not an absolute URI."""


class PublicationRequestService:
    """Service accepting publication requests and scheduling jobs for them."""

    def __init__(self, source: PublicationSourcePort, job_repository: PublicationJobRepositoryPort):
        """Initialize request service.

        Args:
            source: Field-mapping adapter used to resolve meetings.
            job_repository: Repository persisting created jobs.

        Returns:
            None: Initializer does not return a value.
        """

        self._source = source
        self._job_repository = job_repository

    def acceptance_create_job(
        self,
        meeting_id: str,
        scope: Sequence[str] | None,
        source: str | None = None,
    ) -> PublicationJobRecord:
        """Validate a publication request and create a scheduled job.

        Args:
            meeting_id: UUID of the meeting in the source store.
            scope: Requested facets, source labels accepted.
            source: Optional URI of the originating publication activity.

        Returns:
            PublicationJobRecord: Created job in `scheduled` status.

        Raises:
            InvalidScopeError: Raised when the scope is inconsistent or unknown.
            InvalidSourceUriError: Raised when the source is not an absolute URI.
            MeetingNotFoundError: Raised when the meeting does not exist.
            RuntimeError: Raised when persistence fails.
        """

        normalized_scope = domain_normalize_scope(scope)
        if source:
            acceptance_validate_source_uri(source)

        meeting = self._source.mapping_get_meeting(meeting_id=meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(f"Could not find meeting with uuid {meeting_id} in Kaleidos")

        job = self._job_repository.db_publication_job_create(
            meeting_uri=meeting.uri,
            scope=normalized_scope,
            origin_activity=source or None,
        )
        logger.info("Scheduled job <%s> for meeting <%s> with scope %s", job.uri, meeting.uri, list(job.scope))
        return job


def acceptance_validate_source_uri(source: str) -> str:
    """Check that an origin activity is an absolute URI.

    Args:
        source: Candidate URI.

    Returns:
        str: The unchanged URI.

    Raises:
        InvalidSourceUriError: Raised when scheme or authority is missing.
    """

    try:
        parsed = urlparse(source)
    except ValueError as error:
        raise InvalidSourceUriError("Invalid source URI") from error
    if not parsed.scheme or not parsed.netloc or any(character.isspace() for character in source):
        raise InvalidSourceUriError("Invalid source URI")
    return source
