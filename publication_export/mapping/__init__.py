"""Mapping layer package for SPARQL field mapping between source and staging graphs."""

from .interfaces import PublicationRequestRecord, PublicationSourcePort
from .kaleidos_source import KaleidosPublicationSource
from .sparql_escape import sparql_escape_datetime, sparql_escape_int, sparql_escape_string, sparql_escape_uri
from .vocabulary import (
	KALEIDOS_GRAPH_PUBLIC,
	STAGING_GRAPH_URI_BASE,
	TTL_TO_DELTA_STATUS_NOT_STARTED,
	vocabulary_public_resource_uri,
	vocabulary_staging_graph_uri,
)

__all__ = [
	"KaleidosPublicationSource",
	"PublicationRequestRecord",
	"PublicationSourcePort",
	"KALEIDOS_GRAPH_PUBLIC",
	"STAGING_GRAPH_URI_BASE",
	"TTL_TO_DELTA_STATUS_NOT_STARTED",
	"sparql_escape_datetime",
	"sparql_escape_int",
	"sparql_escape_string",
	"sparql_escape_uri",
	"vocabulary_public_resource_uri",
	"vocabulary_staging_graph_uri",
]
