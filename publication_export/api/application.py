"""FastAPI application factory for the publication export service."""

from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from publication_export.config import AppSettings
from publication_export.db import DatabaseHealthPort, PublicationJobRepositoryPort
from publication_export.jobs import PeriodicPublicationTrigger, PublicationRequestService, SchedulerPort

from .routers import api_create_health_router, api_create_publication_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    job_repository: PublicationJobRepositoryPort,
    request_service: PublicationRequestService,
    scheduler: SchedulerPort,
    trigger: PeriodicPublicationTrigger | None = None,
    on_shutdown: Callable[[], None] | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        job_repository: Publication job repository for detail and summary APIs.
        request_service: Service accepting publication requests.
        scheduler: Scheduler triggered after accepted requests.
        trigger: Optional periodic trigger started and stopped with the application.
        on_shutdown: Optional callback releasing resources after the trigger stopped.

    Returns:
        FastAPI: Framework application instance.
    """

    @asynccontextmanager
    async def api_lifespan(_: FastAPI):
        if trigger is not None:
            trigger.start()
        try:
            yield
        finally:
            if trigger is not None:
                trigger.stop()
            if on_shutdown is not None:
                on_shutdown()

    application = FastAPI(title="Publication Export", lifespan=api_lifespan)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal service identification response.

        Returns:
            dict[str, str]: Service name and environment.
        """

        return {
            "service": "publication-export",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(
        api_create_publication_router(
            job_repository=job_repository,
            request_service=request_service,
            scheduler=scheduler,
        )
    )

    return application
