"""Tests for the SQLAlchemy publication job repository on a migrated SQLite database."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import Engine, inspect

from publication_export.db import SQLAlchemyPublicationJobRepository, db_create_engine
from publication_export.domain import (
    JOB_STATUS_FAILURE,
    JOB_STATUS_ONGOING,
    JOB_STATUS_SCHEDULED,
    JOB_STATUS_SUCCESS,
    InvalidScopeError,
)
from publication_export.jobs import PublicationJobScheduler

_ALEMBIC_INI_PATH = Path(__file__).resolve().parents[1] / "alembic.ini"


class _SteppingClock:
    """Clock advancing one second per call for deterministic creation order."""

    def __init__(self):
        self._current = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._current += timedelta(seconds=1)
        return self._current


@pytest.fixture(name="engine")
def _engine_fixture(tmp_path, monkeypatch) -> Engine:
    """Create a SQLite engine with the Alembic schema applied.

    Returns:
        Engine: Engine bound to a migrated temporary database.
    """

    database_url = f"sqlite:///{tmp_path / 'jobs.db'}"
    monkeypatch.setenv("DATABASE_URL", database_url)
    command.upgrade(Config(str(_ALEMBIC_INI_PATH)), "head")
    engine = db_create_engine(database_url)
    yield engine
    engine.dispose()


@pytest.fixture(name="repository")
def _repository_fixture(engine: Engine) -> SQLAlchemyPublicationJobRepository:
    return SQLAlchemyPublicationJobRepository(engine=engine, clock=_SteppingClock())


def test_migration_creates_job_tables(engine: Engine) -> None:
    """Apply the baseline migration and verify job tables exist."""

    table_names = set(inspect(engine).get_table_names())

    assert {"publication_job", "publication_job_scope", "publication_job_generated"}.issubset(table_names)


def test_create_persists_scheduled_job_with_normalized_scope(repository) -> None:
    """Create a job from source scope labels and read it back.

    Returns:
        None: Assertions validate persisted job fields.

    Raises:
        AssertionError: Raised when persisted fields differ.
    """

    created = repository.db_publication_job_create(
        meeting_uri="http://themis.vlaanderen.be/id/zitting/1",
        scope=["newsitems", "documents"],
        origin_activity="http://themis.vlaanderen.be/id/publicatie-activiteit/1",
    )

    loaded = repository.db_publication_job_get_by_id(created.job_id)

    assert loaded == created
    assert loaded.status == JOB_STATUS_SCHEDULED
    assert loaded.scope == ("items", "attachments")
    assert loaded.retry_count == 0
    assert loaded.generated == ()
    assert loaded.uri == f"http://data.kaleidos.vlaanderen.be/public-export-jobs/{created.job_id}"
    assert loaded.created_at.tzinfo is not None


def test_create_rejects_attachments_without_items(repository, engine: Engine) -> None:
    """Reject inconsistent scope before anything is persisted."""

    with pytest.raises(InvalidScopeError):
        repository.db_publication_job_create(meeting_uri="http://example.org/meeting", scope=["attachments"])

    assert repository.db_publication_job_count_by_status()[JOB_STATUS_SCHEDULED] == 0


def test_get_by_id_returns_none_for_unknown_job(repository) -> None:
    assert repository.db_publication_job_get_by_id("00000000-0000-0000-0000-000000000000") is None


def test_claim_takes_oldest_scheduled_job_and_blocks_while_ongoing(repository) -> None:
    """Claim in creation order and refuse a second claim while one job is ongoing.

    Returns:
        None: Assertions validate claim ordering and exclusivity.

    Raises:
        AssertionError: Raised when claim semantics differ.
    """

    first = repository.db_publication_job_create(meeting_uri="http://example.org/meeting/1", scope=["items"])
    second = repository.db_publication_job_create(meeting_uri="http://example.org/meeting/2", scope=["items"])

    claimed = repository.db_publication_job_claim_next_scheduled()

    assert claimed is not None
    assert claimed.job_id == first.job_id
    assert claimed.status == JOB_STATUS_ONGOING
    assert repository.db_publication_job_claim_next_scheduled() is None

    assert repository.db_publication_job_transition(first.job_id, JOB_STATUS_ONGOING, JOB_STATUS_SUCCESS)
    next_claimed = repository.db_publication_job_claim_next_scheduled()

    assert next_claimed is not None
    assert next_claimed.job_id == second.job_id


def test_claim_returns_none_when_nothing_is_scheduled(repository) -> None:
    assert repository.db_publication_job_claim_next_scheduled() is None


def test_transition_is_conditional_on_current_status(repository) -> None:
    """Apply a transition only when the job has the expected prior status."""

    job = repository.db_publication_job_create(meeting_uri="http://example.org/meeting", scope=[])

    assert not repository.db_publication_job_transition(job.job_id, JOB_STATUS_FAILURE, JOB_STATUS_ONGOING)
    assert repository.db_publication_job_transition(job.job_id, JOB_STATUS_SCHEDULED, JOB_STATUS_ONGOING)
    assert not repository.db_publication_job_transition(job.job_id, JOB_STATUS_SCHEDULED, JOB_STATUS_ONGOING)
    assert repository.db_publication_job_get_by_id(job.job_id).status == JOB_STATUS_ONGOING


def test_transition_rejects_unknown_status(repository) -> None:
    job = repository.db_publication_job_create(meeting_uri="http://example.org/meeting", scope=[])

    with pytest.raises(ValueError):
        repository.db_publication_job_transition(job.job_id, JOB_STATUS_SCHEDULED, "cancelled")


def test_list_retryable_failed_respects_retry_bound(repository) -> None:
    """List failed jobs below the bound and exclude jobs at the bound.

    Returns:
        None: Assertions validate retry filtering.

    Raises:
        AssertionError: Raised when filtering differs.
    """

    retryable = repository.db_publication_job_create(meeting_uri="http://example.org/meeting/1", scope=[])
    exhausted = repository.db_publication_job_create(meeting_uri="http://example.org/meeting/2", scope=[])
    for job in (retryable, exhausted):
        repository.db_publication_job_transition(job.job_id, JOB_STATUS_SCHEDULED, JOB_STATUS_ONGOING)
        repository.db_publication_job_transition(job.job_id, JOB_STATUS_ONGOING, JOB_STATUS_FAILURE)
    for _ in range(2):
        assert repository.db_publication_job_claim_failed_for_retry(exhausted.job_id, max_retry_count=2) is not None
        repository.db_publication_job_transition(exhausted.job_id, JOB_STATUS_ONGOING, JOB_STATUS_FAILURE)

    failed_jobs = repository.db_publication_job_list_retryable_failed(max_retry_count=2)

    assert [job.job_id for job in failed_jobs] == [retryable.job_id]


def test_claim_failed_for_retry_moves_job_to_ongoing_and_counts_the_attempt(repository) -> None:
    job = repository.db_publication_job_create(meeting_uri="http://example.org/meeting", scope=[])
    repository.db_publication_job_transition(job.job_id, JOB_STATUS_SCHEDULED, JOB_STATUS_FAILURE)

    claimed = repository.db_publication_job_claim_failed_for_retry(job.job_id, max_retry_count=1)

    assert claimed is not None
    assert claimed.status == JOB_STATUS_ONGOING
    assert claimed.retry_count == 1
    repository.db_publication_job_transition(job.job_id, JOB_STATUS_ONGOING, JOB_STATUS_FAILURE)
    assert repository.db_publication_job_claim_failed_for_retry(job.job_id, max_retry_count=1) is None
    assert repository.db_publication_job_get_by_id(job.job_id).retry_count == 1


def test_claim_failed_for_retry_refuses_while_another_job_is_ongoing(repository) -> None:
    """Leave a failed job untouched while another job holds the ongoing slot.

    Returns:
        None: Assertions validate the refused claim.

    Raises:
        AssertionError: Raised when the claim bypasses the ongoing job.
    """

    failed = repository.db_publication_job_create(meeting_uri="http://example.org/meeting/1", scope=[])
    repository.db_publication_job_transition(failed.job_id, JOB_STATUS_SCHEDULED, JOB_STATUS_FAILURE)
    repository.db_publication_job_create(meeting_uri="http://example.org/meeting/2", scope=[])
    assert repository.db_publication_job_claim_next_scheduled() is not None

    assert repository.db_publication_job_claim_failed_for_retry(failed.job_id, max_retry_count=5) is None

    stored = repository.db_publication_job_get_by_id(failed.job_id)
    assert stored.status == JOB_STATUS_FAILURE
    assert stored.retry_count == 0


def test_claim_failed_for_retry_ignores_jobs_that_are_not_failed(repository) -> None:
    job = repository.db_publication_job_create(meeting_uri="http://example.org/meeting", scope=[])

    assert repository.db_publication_job_claim_failed_for_retry(job.job_id, max_retry_count=5) is None
    assert repository.db_publication_job_claim_failed_for_retry("missing", max_retry_count=5) is None
    with pytest.raises(ValueError):
        repository.db_publication_job_claim_failed_for_retry(job.job_id, max_retry_count=-1)
    assert repository.db_publication_job_get_by_id(job.job_id).status == JOB_STATUS_SCHEDULED


def test_scheduler_never_runs_two_jobs_while_one_is_stuck_ongoing(repository) -> None:
    """Run the scheduler against the database while a stale job is ongoing."""

    failed = repository.db_publication_job_create(meeting_uri="http://example.org/meeting/1", scope=[])
    repository.db_publication_job_transition(failed.job_id, JOB_STATUS_SCHEDULED, JOB_STATUS_FAILURE)
    repository.db_publication_job_create(meeting_uri="http://example.org/meeting/2", scope=[])
    assert repository.db_publication_job_claim_next_scheduled() is not None
    repository.db_publication_job_create(meeting_uri="http://example.org/meeting/3", scope=[])

    ongoing_counts: list[int] = []

    class _CountingPipeline:
        def pipeline_export(self, job):
            ongoing_counts.append(repository.db_publication_job_count_by_status()[JOB_STATUS_ONGOING])
            return None

    scheduler = PublicationJobScheduler(job_repository=repository, pipeline=_CountingPipeline(), max_retry_count=5)

    assert scheduler.scheduler_run_next() == 0
    assert scheduler.scheduler_retry_failed() == 0
    assert all(count <= 1 for count in ongoing_counts)
    stored = repository.db_publication_job_get_by_id(failed.job_id)
    assert stored.status == JOB_STATUS_FAILURE
    assert stored.retry_count == 0


def test_add_generated_keeps_append_order(repository) -> None:
    """Append generated references and read them back in order."""

    job = repository.db_publication_job_create(meeting_uri="http://example.org/meeting", scope=["items"])

    repository.db_publication_job_add_generated(job.job_id, "http://mu.semte.ch/graphs/tmp/20261019080000000")
    repository.db_publication_job_add_generated(job.job_id, "http://themis.vlaanderen.be/id/publicatie-activiteit/1")

    assert repository.db_publication_job_get_by_id(job.job_id).generated == (
        "http://mu.semte.ch/graphs/tmp/20261019080000000",
        "http://themis.vlaanderen.be/id/publicatie-activiteit/1",
    )
    with pytest.raises(LookupError):
        repository.db_publication_job_add_generated("missing", "http://example.org/resource")


def test_exists_for_origin_and_count_by_status(repository) -> None:
    """Look up jobs by origin activity and summarize statuses with zero counts."""

    job = repository.db_publication_job_create(
        meeting_uri="http://example.org/meeting",
        scope=["items"],
        origin_activity="http://example.org/activity/1",
    )
    repository.db_publication_job_create(meeting_uri="http://example.org/meeting", scope=["items"])
    repository.db_publication_job_transition(job.job_id, JOB_STATUS_SCHEDULED, JOB_STATUS_ONGOING)

    assert repository.db_publication_job_exists_for_origin("http://example.org/activity/1")
    assert not repository.db_publication_job_exists_for_origin("http://example.org/activity/2")
    assert repository.db_publication_job_count_by_status() == {
        JOB_STATUS_SCHEDULED: 1,
        JOB_STATUS_ONGOING: 1,
        JOB_STATUS_SUCCESS: 0,
        JOB_STATUS_FAILURE: 0,
    }
