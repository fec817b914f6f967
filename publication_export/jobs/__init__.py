"""Job-layer package for publication job execution and export orchestration."""

from .acceptance import (
	InvalidSourceUriError,
	MeetingNotFoundError,
	PublicationRequestService,
	acceptance_validate_source_uri,
)
from .bulk_export import GraphBulkExporter
from .delta_notification import TtlToDeltaNotifier
from .discoverer import PublicationCandidate, PublicationRequestDiscoverer
from .graph_promotion import SparqlGraphPromotion
from .interfaces import (
	DeltaNotificationPort,
	ExportContractError,
	GraphExporterPort,
	GraphPromotionPort,
	PublicationPipelinePort,
	SchedulerPort,
)
from .scheduler import PublicationJobScheduler
from .timer import PeriodicPublicationTrigger
from .transform_pipeline import PublicationExportPipeline, PublicationPipelineConfig

__all__ = [
	"DeltaNotificationPort",
	"ExportContractError",
	"GraphBulkExporter",
	"GraphExporterPort",
	"GraphPromotionPort",
	"InvalidSourceUriError",
	"MeetingNotFoundError",
	"PeriodicPublicationTrigger",
	"PublicationCandidate",
	"PublicationExportPipeline",
	"PublicationJobScheduler",
	"PublicationPipelineConfig",
	"PublicationPipelinePort",
	"PublicationRequestDiscoverer",
	"PublicationRequestService",
	"SchedulerPort",
	"SparqlGraphPromotion",
	"TtlToDeltaNotifier",
	"acceptance_validate_source_uri",
]
