"""Publication API router for job creation, detail and summary endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, status
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from publication_export.db import PublicationJobRecord, PublicationJobRepositoryPort
from publication_export.domain import InvalidScopeError
from publication_export.jobs import (
    InvalidSourceUriError,
    MeetingNotFoundError,
    PublicationRequestService,
    SchedulerPort,
)

logger = logging.getLogger(__name__)


class PublicationActivityAttributes(BaseModel):
    """Attributes of a publication request."""

    scope: list[str] | None = None
    source: str | None = None


class PublicationActivityData(BaseModel):
    """JSON:API resource object of a publication request."""

    type: str = "publication-activity"
    attributes: PublicationActivityAttributes = Field(default_factory=PublicationActivityAttributes)


class PublicationActivityRequest(BaseModel):
    """JSON:API document wrapping a publication request."""

    data: PublicationActivityData = Field(default_factory=PublicationActivityData)


def api_create_publication_router(
    job_repository: PublicationJobRepositoryPort,
    request_service: PublicationRequestService,
    scheduler: SchedulerPort,
) -> APIRouter:
    """Create publication router exposing job creation and inspection endpoints.

    Args:
        job_repository: DB-layer publication job repository.
        request_service: Service validating requests and creating jobs.
        scheduler: Scheduler triggered after a job was accepted.

    Returns:
        APIRouter: Router exposing publication APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if job_repository is None:
        raise ValueError("job_repository must not be None")
    if request_service is None:
        raise ValueError("request_service must not be None")
    if scheduler is None:
        raise ValueError("scheduler must not be None")

    router = APIRouter(tags=["publication"])

    @router.post("/meetings/{meeting_id}/publication-activities")
    def api_publication_activity_create(
        meeting_id: str,
        background_tasks: BackgroundTasks,
        request: PublicationActivityRequest | None = None,
    ) -> Response:
        """Accept a publication request for a meeting and schedule a job.

        Args:
            meeting_id: UUID of the meeting in Kaleidos.
            background_tasks: Request-scoped background task queue.
            request: Optional JSON:API body with scope and source.

        Returns:
            Response: 202 with job location, 400 on invalid input, 404 on unknown meeting.
        """

        attributes = (request or PublicationActivityRequest()).data.attributes
        logger.info("Received publication request for meeting %s: %s", meeting_id, attributes.model_dump())
        try:
            job = request_service.acceptance_create_job(
                meeting_id=meeting_id,
                scope=attributes.scope,
                source=attributes.source,
            )
        except (InvalidScopeError, InvalidSourceUriError) as error:
            return JSONResponse(content={"error": str(error)}, status_code=status.HTTP_400_BAD_REQUEST)
        except MeetingNotFoundError as error:
            return JSONResponse(content={"error": str(error)}, status_code=status.HTTP_404_NOT_FOUND)

        background_tasks.add_task(scheduler.scheduler_run_next)
        return Response(
            status_code=status.HTTP_202_ACCEPTED,
            headers={"Location": f"/public-export-jobs/{job.job_id}"},
        )

    @router.get("/public-export-jobs/summary")
    def api_publication_job_summary() -> JSONResponse:
        """Return the number of jobs per status.

        Returns:
            JSONResponse: Summary payload.
        """

        return JSONResponse(
            content={"data": job_repository.db_publication_job_count_by_status()},
            status_code=status.HTTP_200_OK,
        )

    @router.get("/public-export-jobs/{job_id}")
    def api_publication_job_detail(job_id: str) -> JSONResponse:
        """Return one publication job.

        Args:
            job_id: Job UUID.

        Returns:
            JSONResponse: Job resource payload, or 404 when unknown.
        """

        job = job_repository.db_publication_job_get_by_id(job_id)
        if job is None:
            return JSONResponse(
                content={"error": f"Could not find public-export-job with uuid {job_id}"},
                status_code=status.HTTP_404_NOT_FOUND,
            )
        return JSONResponse(content={"data": api_serialize_publication_job(job)}, status_code=status.HTTP_200_OK)

    return router


def api_serialize_publication_job(job: PublicationJobRecord) -> dict[str, object]:
    """Serialize a job into its JSON:API resource object.

    Args:
        job: Persisted job.

    Returns:
        dict[str, object]: Resource object payload.
    """

    return {
        "type": "public-export-job",
        "id": job.job_id,
        "attributes": {
            "uri": job.uri,
            "meeting": job.meeting_uri,
            "status": job.status,
            "created": job.created_at.isoformat(),
            "modified": job.modified_at.isoformat(),
            "scope": list(job.scope),
            "source": job.origin_activity,
            "retry-count": job.retry_count,
            "generated": list(job.generated),
        },
    }
