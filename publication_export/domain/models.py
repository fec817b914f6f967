"""Typed domain models shared across runtime layers.

This module provides the job status and scope vocabularies together with the
plain data contracts that travel between the mapping adapter, the ordering
engine and the transform pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

JOB_STATUS_SCHEDULED: Final[str] = "scheduled"
JOB_STATUS_ONGOING: Final[str] = "ongoing"
JOB_STATUS_SUCCESS: Final[str] = "success"
JOB_STATUS_FAILURE: Final[str] = "failure"
JOB_STATUSES: Final[tuple[str, ...]] = (
    JOB_STATUS_SCHEDULED,
    JOB_STATUS_ONGOING,
    JOB_STATUS_SUCCESS,
    JOB_STATUS_FAILURE,
)

SCOPE_ITEMS: Final[str] = "items"
SCOPE_ATTACHMENTS: Final[str] = "attachments"
EXPORT_SCOPES: Final[tuple[str, ...]] = (SCOPE_ITEMS, SCOPE_ATTACHMENTS)

AGENDA_ITEM_KIND_PRIMARY: Final[str] = "primary"
AGENDA_ITEM_KIND_ANNOUNCEMENT: Final[str] = "announcement"


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class PublicResourceReference:
    """Identity of one resource minted in the public namespace.

    Attributes:
        resource_id: Generated UUID of the public resource.
        uri: Public URI of the resource.
    """

    resource_id: str
    uri: str


@dataclass(frozen=True)
class MeetingRecord:
    """Source meeting used to gate which facets are eligible for export.

    Attributes:
        uri: Meeting URI in the source store.
        planned_start: Planned start of the meeting.
        meeting_id: Optional meeting UUID in the source store.
        meeting_type: Optional meeting type concept URI.
        location: Optional location text.
    """

    uri: str
    planned_start: datetime
    meeting_id: str | None = None
    meeting_type: str | None = None
    location: str | None = None


@dataclass(frozen=True)
class AgendaRecord:
    """Latest agenda version of a meeting.

    Attributes:
        uri: Agenda URI in the source store.
        serial_number: Optional agenda version label.
        title: Optional agenda title.
    """

    uri: str
    serial_number: str | None = None
    title: str | None = None


@dataclass(frozen=True)
class Mandatee:
    """Approving party attached to an agenda item.

    Attributes:
        uri: Mandatee URI.
        priority: Optional rank, lower values take precedence.
    """

    uri: str
    priority: int | None = None


@dataclass(frozen=True)
class AgendaItemRecord:
    """Agenda item with a news item flagged for publication.

    Attributes:
        uri: Agenda item URI in the source store.
        kind: `primary` or `announcement`.
        number: Position of the item in the source agenda.
        newsletter_info_uri: URI of the source news item (newsletter info).
        title: Optional title.
        short_title: Optional short title.
        mandatees: Mandatees assigned to the item.
    """

    uri: str
    kind: str
    number: int
    newsletter_info_uri: str
    title: str | None = None
    short_title: str | None = None
    mandatees: tuple[Mandatee, ...] = ()


@dataclass(frozen=True)
class PublicAgendaItemRecord:
    """Agenda item as written into the staging graph.

    Attributes:
        public: Public identity of the agenda item.
        source: Source agenda item the public item was derived from.
        sequence: 1-based position in the public agenda.
    """

    public: PublicResourceReference
    source: AgendaItemRecord
    sequence: int


@dataclass(frozen=True)
class NewsItemRecord:
    """Externally visible content derived from an agenda item.

    Attributes:
        uri: News item URI (kept from the source store).
        news_item_id: News item UUID.
        title: News item title.
        richtext: Optional HTML content.
        text: Optional plain text content.
        alternative: Optional alternative title.
        themes: Theme concept URIs.
        mandatees: Mandatee URIs associated with the news item.
    """

    uri: str
    news_item_id: str
    title: str | None = None
    richtext: str | None = None
    text: str | None = None
    alternative: str | None = None
    themes: tuple[str, ...] = ()
    mandatees: tuple[str, ...] = ()


@dataclass(frozen=True)
class OrderedAgendaItem:
    """Agenda item placed in the final public order.

    Attributes:
        item: Source agenda item.
        sequence: 1-based position across the full public agenda.
        predecessor_index: Index of the preceding item in the ordered sequence, None for chain heads.
    """

    item: AgendaItemRecord
    sequence: int
    predecessor_index: int | None

PUBLICATION_JOB_URI_BASE: Final[str] = "http://data.kaleidos.vlaanderen.be/public-export-jobs/"


def domain_publication_job_uri(job_id: str) -> str:
    """Build the URI of a publication job.

    Args:
        job_id: Job UUID.

    Returns:
        str: Job URI.
    """

    return f"{PUBLICATION_JOB_URI_BASE}{job_id}"
