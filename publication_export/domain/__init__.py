"""Domain models used across application layer boundaries."""

from .models import (
	AGENDA_ITEM_KIND_ANNOUNCEMENT,
	AGENDA_ITEM_KIND_PRIMARY,
	EXPORT_SCOPES,
	JOB_STATUS_FAILURE,
	JOB_STATUS_ONGOING,
	JOB_STATUS_SCHEDULED,
	JOB_STATUS_SUCCESS,
	JOB_STATUSES,
	PUBLICATION_JOB_URI_BASE,
	SCOPE_ATTACHMENTS,
	SCOPE_ITEMS,
	AgendaItemRecord,
	AgendaRecord,
	HealthStatus,
	Mandatee,
	MeetingRecord,
	NewsItemRecord,
	OrderedAgendaItem,
	PublicAgendaItemRecord,
	PublicResourceReference,
	domain_publication_job_uri,
)
from .scope import InvalidScopeError, domain_normalize_scope
from .timestamps import (
	domain_compact_timestamp,
	domain_ensure_utc,
	domain_is_before_date,
	domain_parse_datetime_literal,
	domain_utc_now,
)

__all__ = [
	"AGENDA_ITEM_KIND_ANNOUNCEMENT",
	"AGENDA_ITEM_KIND_PRIMARY",
	"EXPORT_SCOPES",
	"JOB_STATUS_FAILURE",
	"JOB_STATUS_ONGOING",
	"JOB_STATUS_SCHEDULED",
	"JOB_STATUS_SUCCESS",
	"JOB_STATUSES",
	"PUBLICATION_JOB_URI_BASE",
	"SCOPE_ATTACHMENTS",
	"SCOPE_ITEMS",
	"AgendaItemRecord",
	"AgendaRecord",
	"HealthStatus",
	"InvalidScopeError",
	"Mandatee",
	"MeetingRecord",
	"NewsItemRecord",
	"OrderedAgendaItem",
	"PublicAgendaItemRecord",
	"PublicResourceReference",
	"domain_compact_timestamp",
	"domain_ensure_utc",
	"domain_is_before_date",
	"domain_normalize_scope",
	"domain_parse_datetime_literal",
	"domain_publication_job_uri",
	"domain_utc_now",
]
