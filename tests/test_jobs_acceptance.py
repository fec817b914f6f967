"""Tests for publication request acceptance and discovery."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from publication_export.db import PublicationJobRecord
from publication_export.domain import InvalidScopeError, MeetingRecord
from publication_export.jobs import (
    InvalidSourceUriError,
    MeetingNotFoundError,
    PublicationRequestDiscoverer,
    PublicationRequestService,
    acceptance_validate_source_uri,
)
from publication_export.mapping import PublicationRequestRecord

_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class _SourceStub:
    """Source stub knowing one meeting and a list of publication requests."""

    def __init__(self, requests: list[PublicationRequestRecord] | None = None, scopes=None):
        self.requests = requests or []
        self.scopes = scopes or {}
        self.windows: list[tuple[datetime, datetime]] = []
        self.scope_lookups: list[str] = []

    def mapping_get_meeting(self, meeting_uri=None, meeting_id=None):
        if meeting_id in {"m1", "m2"}:
            return MeetingRecord(
                uri=f"http://themis.vlaanderen.be/id/zitting/{meeting_id}",
                planned_start=_NOW,
                meeting_id=meeting_id,
            )
        return None

    def mapping_list_publication_requests(self, window_start: datetime, window_end: datetime):
        self.windows.append((window_start, window_end))
        return list(self.requests)

    def mapping_list_publication_request_scope(self, request_uri: str) -> tuple[str, ...]:
        self.scope_lookups.append(request_uri)
        return self.scopes.get(request_uri, ())


class _JobRepositoryStub:
    """Repository stub creating jobs in memory."""

    def __init__(self, known_origins: set[str] | None = None):
        self.known_origins = known_origins or set()
        self.created: list[PublicationJobRecord] = []

    def db_publication_job_create(self, meeting_uri, scope, origin_activity=None) -> PublicationJobRecord:
        job_id = f"job{len(self.created) + 1}"
        job = PublicationJobRecord(
            job_id=job_id,
            uri=f"http://data.kaleidos.vlaanderen.be/public-export-jobs/{job_id}",
            meeting_uri=meeting_uri,
            scope=tuple(scope),
            origin_activity=origin_activity,
            status="scheduled",
            retry_count=0,
            created_at=_NOW,
            modified_at=_NOW,
        )
        self.created.append(job)
        if origin_activity:
            self.known_origins.add(origin_activity)
        return job

    def db_publication_job_exists_for_origin(self, origin_activity: str) -> bool:
        return origin_activity in self.known_origins


def _request(name: str, meeting_id: str) -> PublicationRequestRecord:
    return PublicationRequestRecord(
        uri=f"http://themis.vlaanderen.be/id/publicatie-activiteit/{name}",
        meeting_uri=f"http://themis.vlaanderen.be/id/zitting/{meeting_id}",
        meeting_id=meeting_id,
        planned_start=_NOW,
    )


def test_create_job_normalizes_scope_and_resolves_meeting() -> None:
    """Create a scheduled job for a known meeting.

    Returns:
        None: Assertions validate the created job.

    Raises:
        AssertionError: Raised when job fields differ.
    """

    repository = _JobRepositoryStub()
    service = PublicationRequestService(source=_SourceStub(), job_repository=repository)

    job = service.acceptance_create_job(
        meeting_id="m1",
        scope=["newsitems", "documents"],
        source="http://themis.vlaanderen.be/id/publicatie-activiteit/1",
    )

    assert job.meeting_uri == "http://themis.vlaanderen.be/id/zitting/m1"
    assert job.scope == ("items", "attachments")
    assert job.origin_activity == "http://themis.vlaanderen.be/id/publicatie-activiteit/1"


def test_create_job_rejects_invalid_input_before_persisting() -> None:
    repository = _JobRepositoryStub()
    service = PublicationRequestService(source=_SourceStub(), job_repository=repository)

    with pytest.raises(InvalidScopeError):
        service.acceptance_create_job(meeting_id="m1", scope=["documents"])
    with pytest.raises(InvalidSourceUriError):
        service.acceptance_create_job(meeting_id="m1", scope=["newsitems"], source="not a uri")
    with pytest.raises(MeetingNotFoundError):
        service.acceptance_create_job(meeting_id="unknown", scope=["newsitems"])
    assert repository.created == []


def test_create_job_treats_empty_source_as_absent() -> None:
    repository = _JobRepositoryStub()
    service = PublicationRequestService(source=_SourceStub(), job_repository=repository)

    job = service.acceptance_create_job(meeting_id="m1", scope=["newsitems"], source="")

    assert job.origin_activity is None
    assert [created.job_id for created in repository.created] == [job.job_id]


@pytest.mark.parametrize("source", ["http://example.org/a", "https://example.org/b?c=d"])
def test_valid_source_uris_are_accepted(source: str) -> None:
    assert acceptance_validate_source_uri(source) == source


@pytest.mark.parametrize("source", ["", "example.org/a", "http://", "http://exa mple.org"])
def test_invalid_source_uris_are_rejected(source: str) -> None:
    with pytest.raises(InvalidSourceUriError):
        acceptance_validate_source_uri(source)


def test_poll_skips_activities_that_already_have_a_job() -> None:
    """Return only unpublished activities with their scope, within the window."""

    source = _SourceStub(
        requests=[_request("done", "m1"), _request("new", "m2")],
        scopes={"http://themis.vlaanderen.be/id/publicatie-activiteit/new": ("newsitems",)},
    )
    repository = _JobRepositoryStub(known_origins={"http://themis.vlaanderen.be/id/publicatie-activiteit/done"})
    discoverer = PublicationRequestDiscoverer(
        source=source,
        job_repository=repository,
        acceptance=PublicationRequestService(source=source, job_repository=repository),
        window_seconds=3600,
    )

    candidates = discoverer.discoverer_poll(now=_NOW)

    assert [candidate.activity_uri for candidate in candidates] == [
        "http://themis.vlaanderen.be/id/publicatie-activiteit/new"
    ]
    assert candidates[0].scope == ("newsitems",)
    assert source.windows == [(datetime(2026, 10, 19, 11, 0, tzinfo=timezone.utc), _NOW)]
    assert source.scope_lookups == ["http://themis.vlaanderen.be/id/publicatie-activiteit/new"]


def test_trigger_publications_creates_jobs_and_skips_rejected_candidates() -> None:
    """Create jobs for valid candidates and keep going after a rejection."""

    source = _SourceStub(
        requests=[_request("bad", "m1"), _request("unknown", "missing"), _request("good", "m2")],
        scopes={
            "http://themis.vlaanderen.be/id/publicatie-activiteit/bad": ("documents",),
            "http://themis.vlaanderen.be/id/publicatie-activiteit/unknown": ("newsitems",),
            "http://themis.vlaanderen.be/id/publicatie-activiteit/good": ("newsitems", "documents"),
        },
    )
    repository = _JobRepositoryStub()
    discoverer = PublicationRequestDiscoverer(
        source=source,
        job_repository=repository,
        acceptance=PublicationRequestService(source=source, job_repository=repository),
        window_seconds=3600,
        clock=lambda: _NOW,
    )

    created = discoverer.discoverer_trigger_publications()

    assert [job.origin_activity for job in created] == ["http://themis.vlaanderen.be/id/publicatie-activiteit/good"]
    assert created[0].scope == ("items", "attachments")
    assert discoverer.discoverer_poll(now=_NOW)[0].activity_uri.endswith("/bad")
    assert discoverer.discoverer_trigger_publications() == []


def test_trigger_publications_with_nothing_due_returns_empty_list() -> None:
    source = _SourceStub()
    repository = _JobRepositoryStub()
    discoverer = PublicationRequestDiscoverer(
        source=source,
        job_repository=repository,
        acceptance=PublicationRequestService(source=source, job_repository=repository),
        window_seconds=60,
        clock=lambda: _NOW,
    )

    assert discoverer.discoverer_trigger_publications() == []
