"""Application bootstrap wiring for startup validation and dependency assembly."""

import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import FastAPI

from publication_export.adapters import SparqlStoreClient
from publication_export.api import create_api_application
from publication_export.config import AppSettings, config_configure_logging, config_load_settings
from publication_export.db import (
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyPublicationJobRepository,
    db_create_engine,
)
from publication_export.jobs import (
    GraphBulkExporter,
    PeriodicPublicationTrigger,
    PublicationExportPipeline,
    PublicationJobScheduler,
    PublicationPipelineConfig,
    PublicationRequestDiscoverer,
    PublicationRequestService,
    SparqlGraphPromotion,
    TtlToDeltaNotifier,
)
from publication_export.mapping import KaleidosPublicationSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicationComponents:
    """Wired runtime components shared by the HTTP and CLI surfaces.

    Attributes:
        settings: Validated runtime settings.
        db_health_service: Job database health service.
        job_repository: Publication job repository.
        request_service: Service accepting publication requests.
        scheduler: Single-flight job scheduler.
        discoverer: Poller for due publication requests.
        trigger: Periodic trigger thread.
        stores: SPARQL store clients owning pooled HTTP connections.
    """

    settings: AppSettings
    db_health_service: SQLAlchemyDatabaseHealthService
    job_repository: SQLAlchemyPublicationJobRepository
    request_service: PublicationRequestService
    scheduler: PublicationJobScheduler
    discoverer: PublicationRequestDiscoverer
    trigger: PeriodicPublicationTrigger
    stores: tuple[SparqlStoreClient, ...] = ()


def bootstrap_create_components(settings: AppSettings | None = None) -> PublicationComponents:
    """Assemble runtime components after validating startup configuration.

    Args:
        settings: Optional preloaded settings, loaded from the environment when omitted.

    Returns:
        PublicationComponents: Fully wired components.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = settings or config_load_settings()
    config_configure_logging(settings.log_level)

    engine = db_create_engine(database_url=settings.database_url)
    db_health_service = SQLAlchemyDatabaseHealthService(engine=engine)
    job_repository = SQLAlchemyPublicationJobRepository(engine=engine)

    store_options = {
        "retry_attempts": settings.store_retry_attempts,
        "retry_backoff_seconds": settings.store_retry_backoff_seconds,
        "request_timeout_seconds": settings.store_request_timeout_seconds,
    }
    source_store = SparqlStoreClient(endpoint=settings.source_sparql_endpoint, **store_options)
    export_store = SparqlStoreClient(endpoint=settings.export_sparql_endpoint, **store_options)
    notification_store = SparqlStoreClient(
        endpoint=settings.notification_sparql_endpoint,
        extra_headers={"mu-auth-sudo": "true"},
        **store_options,
    )
    logger.info(
        "Using SPARQL stores source=<%s> export=<%s> notification=<%s>",
        source_store.store_endpoint_label(),
        export_store.store_endpoint_label(),
        notification_store.store_endpoint_label(),
    )

    export_directory = Path(settings.export_directory)
    source = KaleidosPublicationSource(
        source_store=source_store,
        export_store=export_store,
        public_graph=settings.export_public_graph,
    )
    pipeline = PublicationExportPipeline(
        source=source,
        job_repository=job_repository,
        exporter=GraphBulkExporter(
            store=export_store,
            target_graph=settings.export_public_graph,
            batch_size=settings.export_batch_size,
        ),
        promotion=SparqlGraphPromotion(store=export_store),
        notifier=TtlToDeltaNotifier(store=notification_store, export_directory=export_directory),
        config=PublicationPipelineConfig(
            export_directory=export_directory,
            public_graph=settings.export_public_graph,
            historic_date_items=settings.historic_date_items,
            historic_date_announcements=settings.historic_date_announcements,
            historic_date_attachments=settings.historic_date_attachments,
        ),
    )
    scheduler = PublicationJobScheduler(
        job_repository=job_repository,
        pipeline=pipeline,
        max_retry_count=settings.job_max_retry_count,
    )
    request_service = PublicationRequestService(source=source, job_repository=job_repository)
    discoverer = PublicationRequestDiscoverer(
        source=source,
        job_repository=job_repository,
        acceptance=request_service,
        window_seconds=settings.publication_window_seconds,
    )
    trigger = PeriodicPublicationTrigger(
        discoverer=discoverer,
        scheduler=scheduler,
        interval_seconds=settings.polling_interval_seconds,
    )
    return PublicationComponents(
        settings=settings,
        db_health_service=db_health_service,
        job_repository=job_repository,
        request_service=request_service,
        scheduler=scheduler,
        discoverer=discoverer,
        trigger=trigger,
        stores=(source_store, export_store, notification_store),
    )


def bootstrap_close_components(components: PublicationComponents) -> None:
    """Release connection pools held by wired components.

    Args:
        components: Components returned by `bootstrap_create_components`.
    """

    for store in components.stores:
        store.store_close()
    logger.debug("Closed %d SPARQL store client(s)", len(components.stores))


def bootstrap_create_application(components: PublicationComponents | None = None) -> FastAPI:
    """Assemble the runtime application.

    Args:
        components: Optional prebuilt components.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    components = components or bootstrap_create_components()
    return create_api_application(
        settings=components.settings,
        db_health_service=components.db_health_service,
        job_repository=components.job_repository,
        request_service=components.request_service,
        scheduler=components.scheduler,
        trigger=components.trigger if components.settings.scheduler_autostart else None,
        on_shutdown=lambda: bootstrap_close_components(components),
    )
