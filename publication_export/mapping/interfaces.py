"""Typed interfaces for the field-mapping adapter between source and staging graphs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Sequence

from publication_export.domain import (
    AgendaItemRecord,
    AgendaRecord,
    Mandatee,
    MeetingRecord,
    NewsItemRecord,
    OrderedAgendaItem,
    PublicAgendaItemRecord,
    PublicResourceReference,
)


@dataclass(frozen=True)
class PublicationRequestRecord:
    """Publication request flagged in the source system.

    Attributes:
        uri: URI of the source publication activity.
        meeting_uri: URI of the meeting to publish.
        meeting_id: UUID of the meeting to publish.
        planned_start: Planned start of the publication.
    """

    uri: str
    meeting_uri: str
    meeting_id: str
    planned_start: datetime


class PublicationSourcePort(Protocol):
    """Port definition for reading source records and writing their public counterparts."""

    def mapping_get_meeting(
        self,
        meeting_uri: str | None = None,
        meeting_id: str | None = None,
    ) -> MeetingRecord | None:
        """Resolve one meeting by URI or by UUID.

        Args:
            meeting_uri: Optional meeting URI.
            meeting_id: Optional meeting UUID, used when no URI is given.

        Returns:
            MeetingRecord | None: Meeting when found.

        Raises:
            ValueError: Raised when neither identifier is provided.
        """

    def mapping_copy_meeting(self, meeting_uri: str, graph: str) -> None:
        """Copy meeting core and optional fields into a staging graph.

        Args:
            meeting_uri: Meeting URI.
            graph: Staging graph URI.

        Returns:
            None: Triples are written as side effect.
        """

    def mapping_insert_publication_activity(self, meeting_uri: str, graph: str) -> PublicResourceReference:
        """Insert a new publication activity for a meeting.

        Args:
            meeting_uri: Meeting URI.
            graph: Staging graph URI.

        Returns:
            PublicResourceReference: Identity of the inserted activity.
        """

    def mapping_get_previous_publication_activity(self, meeting_uri: str) -> str | None:
        """Return the latest publication activity of a meeting in the public graph.

        Args:
            meeting_uri: Meeting URI.

        Returns:
            str | None: Activity URI when the meeting was published before.
        """

    def mapping_get_latest_agenda(self, meeting_uri: str) -> AgendaRecord | None:
        """Resolve the latest agenda version of a meeting.

        Args:
            meeting_uri: Meeting URI.

        Returns:
            AgendaRecord | None: Agenda when one exists.
        """

    def mapping_insert_public_agenda(
        self,
        agenda: AgendaRecord,
        meeting_uri: str,
        publication_uri: str,
        previous_publication_uri: str | None,
        graph: str,
    ) -> PublicResourceReference:
        """Insert the public agenda and its revision link.

        Args:
            agenda: Source agenda.
            meeting_uri: Meeting URI.
            publication_uri: Publication activity generating the agenda.
            previous_publication_uri: Previous publication activity, if any.
            graph: Staging graph URI.

        Returns:
            PublicResourceReference: Identity of the public agenda.
        """

    def mapping_list_agenda_items(self, agenda: AgendaRecord) -> list[AgendaItemRecord]:
        """List agenda items of an agenda that carry a news item flagged for publication.

        Args:
            agenda: Source agenda.

        Returns:
            list[AgendaItemRecord]: Agenda items without mandatees.
        """

    def mapping_list_agenda_item_mandatees(self, agenda_item: AgendaItemRecord) -> tuple[Mandatee, ...]:
        """List mandatees of an agenda item with their optional priority.

        Args:
            agenda_item: Source agenda item.

        Returns:
            tuple[Mandatee, ...]: Mandatees sorted by URI.
        """

    def mapping_insert_public_agenda_items(
        self,
        ordered_items: Sequence[OrderedAgendaItem],
        public_agenda: PublicResourceReference,
        publication_uri: str,
        previous_publication_uri: str | None,
        graph: str,
    ) -> list[PublicAgendaItemRecord]:
        """Insert public agenda items with position, predecessor and revision links.

        Args:
            ordered_items: Agenda items in final public order.
            public_agenda: Public agenda owning the items.
            publication_uri: Publication activity generating the items.
            previous_publication_uri: Previous publication activity, if any.
            graph: Staging graph URI.

        Returns:
            list[PublicAgendaItemRecord]: Inserted items in public order.
        """

    def mapping_get_news_item(self, agenda_item: AgendaItemRecord) -> NewsItemRecord | None:
        """Fetch the news item content and themes of an agenda item.

        Args:
            agenda_item: Source agenda item.

        Returns:
            NewsItemRecord | None: News item when it exists.
        """

    def mapping_insert_news_item(
        self,
        news_item: NewsItemRecord,
        public_agenda_item: PublicAgendaItemRecord,
        graph: str,
    ) -> None:
        """Insert a news item at the sequence of its public agenda item.

        Args:
            news_item: News item content.
            public_agenda_item: Public agenda item the news item derives from.
            graph: Staging graph URI.

        Returns:
            None: Triples are written as side effect.
        """

    def mapping_list_public_documents(self, agenda_item: AgendaItemRecord) -> tuple[str, ...]:
        """List pieces of an agenda item that pass the public access-level check.

        Args:
            agenda_item: Source agenda item.

        Returns:
            tuple[str, ...]: Piece URIs.
        """

    def mapping_insert_documents(
        self,
        piece_uris: Sequence[str],
        public_agenda_item: PublicAgendaItemRecord,
        graph: str,
    ) -> None:
        """Copy pieces with containers and files, and link them to the news item.

        Args:
            piece_uris: Piece URIs to copy.
            public_agenda_item: Public agenda item the owning news item derives from.
            graph: Staging graph URI.

        Returns:
            None: Triples are written as side effect.
        """

    def mapping_fix_namespaces(self, graph: str) -> None:
        """Rewrite legacy `http://` besluitvorming terms to `https://` in a graph.

        Args:
            graph: Staging graph URI.

        Returns:
            None: Triples are rewritten as side effect.
        """

    def mapping_list_publication_requests(
        self,
        window_start: datetime,
        window_end: datetime,
    ) -> list[PublicationRequestRecord]:
        """List publication requests planned inside a time window.

        Args:
            window_start: Inclusive lower bound.
            window_end: Inclusive upper bound.

        Returns:
            list[PublicationRequestRecord]: Requests ordered by planned start ascending.
        """

    def mapping_list_publication_request_scope(self, request_uri: str) -> tuple[str, ...]:
        """Return the raw scope labels of one publication request.

        Args:
            request_uri: URI of the source publication activity.

        Returns:
            tuple[str, ...]: Scope labels as stored in the source system.
        """
