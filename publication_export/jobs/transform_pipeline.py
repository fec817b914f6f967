"""Job-layer export pipeline assembling the public snapshot of one meeting."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Callable

from publication_export.db import PublicationJobRecord, PublicationJobRepositoryPort
from publication_export.domain import (
    AGENDA_ITEM_KIND_ANNOUNCEMENT,
    SCOPE_ATTACHMENTS,
    SCOPE_ITEMS,
    AgendaItemRecord,
    MeetingRecord,
    PublicAgendaItemRecord,
    domain_compact_timestamp,
    domain_is_before_date,
    domain_utc_now,
)
from publication_export.mapping import PublicationSourcePort, vocabulary_staging_graph_uri
from publication_export.ordering import ordering_sort_agenda_items

from .interfaces import (
    DeltaNotificationPort,
    ExportContractError,
    GraphExporterPort,
    GraphPromotionPort,
    PublicationPipelinePort,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicationPipelineConfig:
    """Configuration values for publication export execution.

    Attributes:
        export_directory: Directory receiving exported Turtle files.
        public_graph: Public baseline graph receiving promoted snapshots.
        historic_date_items: Earliest meeting date for which anything is exported.
        historic_date_announcements: Earliest meeting date for which announcements are exported.
        historic_date_attachments: Earliest meeting date for which documents are exported.
    """

    export_directory: Path
    public_graph: str
    historic_date_items: date
    historic_date_announcements: date
    historic_date_attachments: date


class PublicationExportPipeline(PublicationPipelinePort):
    """Pipeline copying, filtering and ordering one meeting into a public snapshot.

    Staging and publication activity URIs are appended to the job's generated
    references as soon as they exist, so a failed export still tells which
    staging graph was left behind.
    """

    def __init__(
        self,
        source: PublicationSourcePort,
        job_repository: PublicationJobRepositoryPort,
        exporter: GraphExporterPort,
        promotion: GraphPromotionPort,
        notifier: DeltaNotificationPort,
        config: PublicationPipelineConfig,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize export pipeline dependencies.

        Args:
            source: Field-mapping adapter for source reads and staging writes.
            job_repository: Repository recording generated references.
            exporter: Writer of the staging graph to a file.
            promotion: Merger of staging into the public baseline.
            notifier: Downstream notification of produced files.
            config: Export configuration.
            clock: Optional provider of the export timestamp.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        if not config.public_graph.strip():
            raise ValueError("config.public_graph must not be blank")
        self._source = source
        self._job_repository = job_repository
        self._exporter = exporter
        self._promotion = promotion
        self._notifier = notifier
        self._config = config
        self._clock = clock or domain_utc_now

    def pipeline_export(self, job: PublicationJobRecord) -> str | None:
        """Assemble, write and promote the public snapshot of one job.

        Args:
            job: Job being executed.

        Returns:
            str | None: Publication activity URI, None when the meeting predates the public export.

        Raises:
            ExportContractError: Raised when the meeting or its agenda cannot be found.
            StoreAdapterError: Raised when a store request fails after retries.
            OSError: Raised when the export file cannot be written.
        """

        meeting = self._source.mapping_get_meeting(meeting_uri=job.meeting_uri)
        if meeting is None:
            raise ExportContractError(f"meeting <{job.meeting_uri}> not found in source store")
        logger.info(
            "Generating export for meeting <%s> of %s with scope %s",
            meeting.uri,
            meeting.planned_start.isoformat(),
            list(job.scope),
        )

        if domain_is_before_date(meeting.planned_start, self._config.historic_date_items):
            logger.info(
                "Public export didn't exist yet on %s. Nothing will be exported.",
                meeting.planned_start.isoformat(),
            )
            return None

        timestamp = domain_compact_timestamp(self._clock())
        graph = vocabulary_staging_graph_uri(timestamp)
        self._job_repository.db_publication_job_add_generated(job.job_id, graph)

        self._source.mapping_copy_meeting(meeting.uri, graph)
        publication = self._source.mapping_insert_publication_activity(meeting.uri, graph)
        self._job_repository.db_publication_job_add_generated(job.job_id, publication.uri)

        public_agenda_items = self._pipeline_publish_agenda(meeting, publication.uri, graph)

        if SCOPE_ITEMS in job.scope:
            self._pipeline_publish_news_items(public_agenda_items, graph)
            if SCOPE_ATTACHMENTS in job.scope:
                if domain_is_before_date(meeting.planned_start, self._config.historic_date_attachments):
                    logger.info(
                        "Public export didn't include documents yet on %s. Documents will not be exported.",
                        meeting.planned_start.isoformat(),
                    )
                else:
                    self._pipeline_publish_documents(public_agenda_items, graph)

        self._source.mapping_fix_namespaces(graph)

        file_name = f"{timestamp[:14]}-{timestamp[14:]}-{job.job_id}-{domain_compact_timestamp(meeting.planned_start)}.ttl"
        exported_file = self._exporter.exporter_write_graph(graph, self._config.export_directory / file_name)
        self._promotion.promotion_merge_graph(graph, self._config.public_graph)
        self._promotion.promotion_drop_graph(graph)
        self._notifier.notification_register_files([exported_file] if exported_file is not None else [])
        return publication.uri

    def _pipeline_publish_agenda(
        self,
        meeting: MeetingRecord,
        publication_uri: str,
        graph: str,
    ) -> list[PublicAgendaItemRecord]:
        """Insert the public agenda and its ordered agenda items.

        Args:
            meeting: Meeting being exported.
            publication_uri: Publication activity generating the agenda.
            graph: Staging graph URI.

        Returns:
            list[PublicAgendaItemRecord]: Inserted agenda items in public order.

        Raises:
            ExportContractError: Raised when the meeting has no agenda.
        """

        previous_publication_uri = self._source.mapping_get_previous_publication_activity(meeting.uri)
        if previous_publication_uri is not None:
            logger.info("Found a previous publication activity <%s> for this meeting", previous_publication_uri)

        agenda = self._source.mapping_get_latest_agenda(meeting.uri)
        if agenda is None:
            raise ExportContractError(f"no agenda found for meeting <{meeting.uri}>")
        logger.info(
            "Latest agenda found is agenda %s (<%s>). This agenda will be used as basis for the export.",
            agenda.serial_number or "",
            agenda.uri,
        )

        public_agenda = self._source.mapping_insert_public_agenda(
            agenda, meeting.uri, publication_uri, previous_publication_uri, graph
        )

        agenda_items = self._source.mapping_list_agenda_items(agenda)
        if domain_is_before_date(meeting.planned_start, self._config.historic_date_announcements):
            logger.info(
                "Public export didn't include announcements yet on %s. Announcements will not be exported.",
                meeting.planned_start.isoformat(),
            )
            agenda_items = [item for item in agenda_items if item.kind != AGENDA_ITEM_KIND_ANNOUNCEMENT]
        logger.info("Found %d agendaitems with a newsitem to publish", len(agenda_items))

        agenda_items_with_mandatees: list[AgendaItemRecord] = [
            dataclasses.replace(item, mandatees=self._source.mapping_list_agenda_item_mandatees(item))
            for item in agenda_items
        ]
        ordered_items = ordering_sort_agenda_items(agenda_items_with_mandatees)
        public_agenda_items = self._source.mapping_insert_public_agenda_items(
            ordered_items, public_agenda, publication_uri, previous_publication_uri, graph
        )

        logger.info("Public agenda <%s>", public_agenda.uri)
        for public_item in public_agenda_items:
            logger.info(
                "[%d] %s (%s)",
                public_item.sequence,
                public_item.source.short_title or public_item.source.title or "",
                public_item.source.uri,
            )
        return public_agenda_items

    def _pipeline_publish_news_items(self, public_agenda_items: list[PublicAgendaItemRecord], graph: str) -> None:
        """Insert the news item of every public agenda item.

        Args:
            public_agenda_items: Inserted agenda items in public order.
            graph: Staging graph URI.

        Returns:
            None: Triples are written as side effect.

        Raises:
            ExportContractError: Raised when a news item is missing.
        """

        for public_item in public_agenda_items:
            news_item = self._source.mapping_get_news_item(public_item.source)
            if news_item is None:
                raise ExportContractError(
                    f"news item <{public_item.source.newsletter_info_uri}> of agenda item "
                    f"<{public_item.source.uri}> not found"
                )
            news_item = dataclasses.replace(
                news_item,
                mandatees=tuple(mandatee.uri for mandatee in public_item.source.mandatees),
            )
            self._source.mapping_insert_news_item(news_item, public_item, graph)
        logger.info("Copied %d newsitems", len(public_agenda_items))

    def _pipeline_publish_documents(self, public_agenda_items: list[PublicAgendaItemRecord], graph: str) -> None:
        for public_item in public_agenda_items:
            piece_uris = self._source.mapping_list_public_documents(public_item.source)
            if piece_uris:
                logger.info(
                    "Copying %d public documents of agenda item <%s>", len(piece_uris), public_item.source.uri
                )
                self._source.mapping_insert_documents(piece_uris, public_item, graph)
