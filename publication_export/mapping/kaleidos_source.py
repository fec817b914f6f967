"""SPARQL field mapping between the Kaleidos source store and the export staging graphs.

Reads run against the source store. Every write targets the export store
directly so that assembling a staging graph does not emit delta messages.
Source triples are copied by running a CONSTRUCT on the source store and
inserting the resulting N-Triples into the staging graph.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Final, Sequence
from uuid import uuid4

from publication_export.adapters import SparqlStorePort, StoreAdapterError
from publication_export.domain import (
    AGENDA_ITEM_KIND_ANNOUNCEMENT,
    AGENDA_ITEM_KIND_PRIMARY,
    AgendaItemRecord,
    AgendaRecord,
    Mandatee,
    MeetingRecord,
    NewsItemRecord,
    OrderedAgendaItem,
    PublicAgendaItemRecord,
    PublicResourceReference,
    domain_parse_datetime_literal,
    domain_utc_now,
)

from .interfaces import PublicationRequestRecord, PublicationSourcePort
from .sparql_escape import sparql_escape_datetime, sparql_escape_int, sparql_escape_string, sparql_escape_uri
from .vocabulary import (
    ACCESS_LEVEL_PUBLIC,
    ACTIVITY_TYPE_PUBLICATION,
    AGENDA_ITEM_TYPE_ANNOUNCEMENT,
    AGENDA_ITEM_TYPE_NOTA,
    AGENDA_STATUS_PUBLIC,
    DOCUMENT_TYPE_NEWS_ITEM,
    GOVERNING_BODY,
    KALEIDOS_GRAPH_KANSELARIJ,
    KALEIDOS_GRAPH_PUBLIC,
    LEGACY_BESLUITVORMING_NAMESPACE,
    PREFIXES,
    vocabulary_public_resource_uri,
)

logger = logging.getLogger(__name__)

_TYPED_TRUE: Final[str] = '"true"^^<http://mu.semte.ch/vocabularies/typed-literals/boolean>'

_AGENDA_ITEM_KIND_BY_TYPE: Final[dict[str, str]] = {
    AGENDA_ITEM_TYPE_NOTA: AGENDA_ITEM_KIND_PRIMARY,
    AGENDA_ITEM_TYPE_ANNOUNCEMENT: AGENDA_ITEM_KIND_ANNOUNCEMENT,
}
_AGENDA_ITEM_TYPE_BY_KIND: Final[dict[str, str]] = {
    kind: type_uri for type_uri, kind in _AGENDA_ITEM_KIND_BY_TYPE.items()
}


class KaleidosPublicationSource(PublicationSourcePort):
    """Mapping adapter reading Kaleidos resources and writing public resources to staging."""

    _NTRIPLES_MEDIA_TYPE: Final[str] = "text/plain"
    _OPTIONAL_MEETING_PROPERTIES: Final[tuple[tuple[str, str], ...]] = (
        ("http://purl.org/dc/terms/type", "http://purl.org/dc/terms/type"),
        ("http://www.w3.org/ns/prov#atLocation", "http://www.w3.org/ns/prov#atLocation"),
        ("http://mu.semte.ch/vocabularies/ext/numberRepresentation", "http://purl.org/dc/terms/identifier"),
    )

    def __init__(
        self,
        source_store: SparqlStorePort,
        export_store: SparqlStorePort,
        public_graph: str,
        id_factory: Callable[[], str] | None = None,
    ):
        """Initialize mapping adapter.

        Args:
            source_store: Store holding the Kaleidos source data.
            export_store: Store holding staging graphs and the public baseline graph.
            public_graph: URI of the public baseline graph.
            id_factory: Optional generator of resource UUIDs.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when public graph URI is blank.
        """

        if not public_graph.strip():
            raise ValueError("public_graph must not be blank")
        self._source_store = source_store
        self._export_store = export_store
        self._public_graph = public_graph.strip()
        self._id_factory = id_factory or (lambda: str(uuid4()))

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

        if meeting_uri:
            subject_statement = f"BIND({sparql_escape_uri(meeting_uri)} AS ?uri)"
        elif meeting_id:
            subject_statement = f"?uri mu:uuid {sparql_escape_string(meeting_id)} ."
        else:
            raise ValueError("meeting_uri or meeting_id is required")

        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT ?uri ?uuid ?plannedStart ?location ?type
WHERE {{
  GRAPH {sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)} {{
    {subject_statement}
    ?uri a besluit:Vergaderactiviteit ;
      besluit:geplandeStart ?plannedStart .
    OPTIONAL {{ ?uri mu:uuid ?uuid . }}
    OPTIONAL {{ ?uri prov:atLocation ?location . }}
    OPTIONAL {{ ?uri dct:type ?type . }}
  }}
}} LIMIT 1"""
        )
        if not rows or not rows[0]["uri"] or not rows[0]["plannedStart"]:
            return None
        row = rows[0]
        return MeetingRecord(
            uri=row["uri"],
            planned_start=domain_parse_datetime_literal(row["plannedStart"]),
            meeting_id=row["uuid"],
            meeting_type=row["type"],
            location=row["location"],
        )

    def mapping_copy_meeting(self, meeting_uri: str, graph: str) -> None:
        """Copy meeting core and optional fields into a staging graph.

        Args:
            meeting_uri: Meeting URI.
            graph: Staging graph URI.

        Returns:
            None: Triples are written as side effect.

        Raises:
            StoreAdapterError: Raised when a store request fails.
        """

        meeting = sparql_escape_uri(meeting_uri)
        kanselarij = sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)
        self._mapping_copy_to_staging(
            f"""{PREFIXES}
CONSTRUCT {{
  {meeting} a besluit:Vergaderactiviteit ;
    mu:uuid ?uuid ;
    besluit:geplandeStart ?plannedStart ;
    besluitvorming:isGehoudenDoor {sparql_escape_uri(GOVERNING_BODY)} .
}}
WHERE {{
  GRAPH {kanselarij} {{
    {meeting} a besluit:Vergaderactiviteit ;
      mu:uuid ?uuid ;
      besluit:geplandeStart ?plannedStart .
  }}
}}""",
            graph,
        )

        for source_predicate, target_predicate in self._OPTIONAL_MEETING_PROPERTIES:
            self._mapping_copy_to_staging(
                f"""CONSTRUCT {{
  {meeting} {sparql_escape_uri(target_predicate)} ?value .
}}
WHERE {{
  GRAPH {kanselarij} {{
    {meeting} {sparql_escape_uri(source_predicate)} ?value .
  }}
}}""",
                graph,
            )

        # Only the documents-scoped request carries the planned documents publication date.
        self._mapping_copy_to_staging(
            f"""{PREFIXES}
CONSTRUCT {{
  {meeting} themis:geplandePublicatieDatumDocumenten ?documentsPublicationDate .
}}
WHERE {{
  GRAPH {kanselarij} {{
    {meeting} ^prov:used ?publicationRequest .
    ?publicationRequest a ext:ThemisPublicationActivity ;
      generiek:geplandeStart ?documentsPublicationDate ;
      ext:scope "documents" .
  }}
}} LIMIT 1""",
            graph,
        )

    def mapping_insert_publication_activity(self, meeting_uri: str, graph: str) -> PublicResourceReference:
        """Insert a new publication activity for a meeting.

        Args:
            meeting_uri: Meeting URI.
            graph: Staging graph URI.

        Returns:
            PublicResourceReference: Identity of the inserted activity.

        Raises:
            StoreAdapterError: Raised when the store update fails.
        """

        activity_id = self._id_factory()
        activity_uri = vocabulary_public_resource_uri("publicatie-activiteit", activity_id)
        self._export_store.store_update(
            f"""{PREFIXES}
INSERT DATA {{
  GRAPH {sparql_escape_uri(graph)} {{
    {sparql_escape_uri(activity_uri)} a prov:Activity ;
      mu:uuid {sparql_escape_string(activity_id)} ;
      prov:startedAtTime {sparql_escape_datetime(domain_utc_now())} ;
      dct:type {sparql_escape_uri(ACTIVITY_TYPE_PUBLICATION)} ;
      prov:used {sparql_escape_uri(meeting_uri)} .
  }}
}}"""
        )
        return PublicResourceReference(resource_id=activity_id, uri=activity_uri)

    def mapping_get_previous_publication_activity(self, meeting_uri: str) -> str | None:
        """Return the latest publication activity of a meeting in the public graph.

        Args:
            meeting_uri: Meeting URI.

        Returns:
            str | None: Activity URI when the meeting was published before.
        """

        rows = self._export_store.store_select(
            f"""{PREFIXES}
SELECT ?uri ?start
WHERE {{
  GRAPH {sparql_escape_uri(self._public_graph)} {{
    ?uri a prov:Activity ;
      prov:startedAtTime ?start ;
      dct:type {sparql_escape_uri(ACTIVITY_TYPE_PUBLICATION)} ;
      prov:used {sparql_escape_uri(meeting_uri)} .
  }}
}} ORDER BY DESC(?start) LIMIT 1"""
        )
        return rows[0]["uri"] if rows else None

    def mapping_get_latest_agenda(self, meeting_uri: str) -> AgendaRecord | None:
        """Resolve the latest agenda version of a meeting.

        Falls back to the agenda flagged as final version, which is how
        agendas imported from the system predating Kaleidos are marked.

        Args:
            meeting_uri: Meeting URI.

        Returns:
            AgendaRecord | None: Agenda when one exists.
        """

        meeting = sparql_escape_uri(meeting_uri)
        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT ?uri ?serialNumber ?title
WHERE {{
  ?uri besluitvorming:isAgendaVoor {meeting} ;
    besluitvorming:volgnummer ?serialNumber ;
    dct:title ?title .
}} ORDER BY DESC(?serialNumber) LIMIT 1"""
        )
        if rows:
            return AgendaRecord(uri=rows[0]["uri"], serial_number=rows[0]["serialNumber"], title=rows[0]["title"])

        logger.info("No agenda found, trying pre-Kaleidos lookup for meeting <%s>", meeting_uri)
        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT ?uri
WHERE {{
  ?uri besluitvorming:isAgendaVoor {meeting} ;
    ext:finaleVersie {_TYPED_TRUE} .
}} LIMIT 1"""
        )
        if rows:
            return AgendaRecord(uri=rows[0]["uri"])
        return None

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

        Raises:
            StoreAdapterError: Raised when a store update fails.
        """

        agenda_id = self._id_factory()
        agenda_uri = vocabulary_public_resource_uri("agenda", agenda_id)
        title = f"Publieke {agenda.title}" if agenda.title else "Publieke agenda"
        now = domain_utc_now()
        self._export_store.store_update(
            f"""{PREFIXES}
INSERT DATA {{
  GRAPH {sparql_escape_uri(graph)} {{
    {sparql_escape_uri(agenda_uri)} a besluitvorming:Agenda ;
      mu:uuid {sparql_escape_string(agenda_id)} ;
      dct:created {sparql_escape_datetime(now)} ;
      dct:modified {sparql_escape_datetime(now)} ;
      dct:title {sparql_escape_string(title)} ;
      besluitvorming:agendaStatus {sparql_escape_uri(AGENDA_STATUS_PUBLIC)} ;
      besluitvorming:isAgendaVoor {sparql_escape_uri(meeting_uri)} ;
      prov:wasDerivedFrom {sparql_escape_uri(agenda.uri)} .
    {sparql_escape_uri(publication_uri)} prov:generated {sparql_escape_uri(agenda_uri)} .
  }}
}}"""
        )

        if previous_publication_uri:
            self._export_store.store_update(
                f"""{PREFIXES}
INSERT {{
  GRAPH {sparql_escape_uri(graph)} {{
    {sparql_escape_uri(agenda_uri)} prov:wasRevisionOf ?previousPublicAgenda .
  }}
}} WHERE {{
  GRAPH {sparql_escape_uri(self._public_graph)} {{
    {sparql_escape_uri(previous_publication_uri)} prov:generated ?previousPublicAgenda .
    ?previousPublicAgenda a besluitvorming:Agenda .
  }}
}}"""
            )
        return PublicResourceReference(resource_id=agenda_id, uri=agenda_uri)

    def mapping_list_agenda_items(self, agenda: AgendaRecord) -> list[AgendaItemRecord]:
        """List agenda items of an agenda that carry a news item flagged for publication.

        Items with an agenda item type other than nota or announcement are
        skipped.

        Args:
            agenda: Source agenda.

        Returns:
            list[AgendaItemRecord]: Agenda items without mandatees, sorted by number then URI.
        """

        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT ?uri ?number ?title ?shortTitle ?type ?newsletterInfo
WHERE {{
  GRAPH {sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)} {{
    {sparql_escape_uri(agenda.uri)} dct:hasPart ?uri .
    ?uri schema:position ?number .
    ?agendaItemTreatment dct:subject ?uri .
    ?newsletterInfo prov:wasDerivedFrom ?agendaItemTreatment ;
      ext:inNieuwsbrief {_TYPED_TRUE} .
    OPTIONAL {{ ?uri dct:title ?title . }}
    OPTIONAL {{ ?uri besluitvorming:korteTitel ?shortTitle . }}
    OPTIONAL {{ ?uri dct:type ?type . }}
  }}
}}"""
        )

        agenda_items: dict[str, AgendaItemRecord] = {}
        for row in rows:
            item_uri = row["uri"]
            if not item_uri or item_uri in agenda_items:
                continue
            kind = _AGENDA_ITEM_KIND_BY_TYPE.get(row["type"] or "")
            if kind is None:
                logger.warning("Skipping agenda item <%s> with unsupported type <%s>", item_uri, row["type"])
                continue
            agenda_items[item_uri] = AgendaItemRecord(
                uri=item_uri,
                kind=kind,
                number=int(row["number"] or 0),
                newsletter_info_uri=row["newsletterInfo"] or "",
                title=row["title"],
                short_title=row["shortTitle"],
            )
        return sorted(agenda_items.values(), key=lambda agenda_item: (agenda_item.number, agenda_item.uri))

    def mapping_list_agenda_item_mandatees(self, agenda_item: AgendaItemRecord) -> tuple[Mandatee, ...]:
        """List mandatees of an agenda item with their optional priority.

        Args:
            agenda_item: Source agenda item.

        Returns:
            tuple[Mandatee, ...]: Mandatees sorted by URI.
        """

        item = sparql_escape_uri(agenda_item.uri)
        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT ?uri ?priority
WHERE {{
  GRAPH {sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)} {{
    {sparql_escape_uri(agenda_item.newsletter_info_uri)} prov:wasDerivedFrom ?agendaItemTreatment .
    ?agendaItemTreatment dct:subject {item} .
    ?agendaActivity besluitvorming:genereertAgendapunt {item} ;
      besluitvorming:vindtPlaatsTijdens ?subcase .
    ?subcase ext:heeftBevoegde ?uri .
  }}
  GRAPH {sparql_escape_uri(KALEIDOS_GRAPH_PUBLIC)} {{
    OPTIONAL {{ ?uri mandaat:rangorde ?priority . }}
  }}
}}"""
        )

        priorities: dict[str, int | None] = {}
        for row in rows:
            mandatee_uri = row["uri"]
            if not mandatee_uri:
                continue
            priority = _parse_priority(row["priority"])
            current = priorities.get(mandatee_uri)
            if mandatee_uri not in priorities or (priority is not None and (current is None or priority < current)):
                priorities[mandatee_uri] = priority
        return tuple(Mandatee(uri=uri, priority=priorities[uri]) for uri in sorted(priorities))

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

        Raises:
            StoreAdapterError: Raised when a store update fails.
        """

        public_items: list[PublicAgendaItemRecord] = []
        for ordered_item in ordered_items:
            item_id = self._id_factory()
            public_items.append(
                PublicAgendaItemRecord(
                    public=PublicResourceReference(
                        resource_id=item_id,
                        uri=vocabulary_public_resource_uri("agendapunt", item_id),
                    ),
                    source=ordered_item.item,
                    sequence=ordered_item.sequence,
                )
            )

        target_graph = sparql_escape_uri(graph)
        for ordered_item, public_item in zip(ordered_items, public_items):
            public_uri = sparql_escape_uri(public_item.public.uri)
            optional_statements: list[str] = []
            if public_item.source.title:
                optional_statements.append(f"{public_uri} dct:title {sparql_escape_string(public_item.source.title)} .")
            if public_item.source.short_title:
                optional_statements.append(
                    f"{public_uri} besluitvorming:korteTitel {sparql_escape_string(public_item.source.short_title)} ."
                )
            if ordered_item.predecessor_index is not None:
                predecessor_uri = public_items[ordered_item.predecessor_index].public.uri
                optional_statements.append(f"{public_uri} besluit:aangebrachtNa {sparql_escape_uri(predecessor_uri)} .")
            optional_block = "\n    ".join(optional_statements)
            now = domain_utc_now()

            self._export_store.store_update(
                f"""{PREFIXES}
INSERT DATA {{
  GRAPH {target_graph} {{
    {public_uri} a besluit:Agendapunt ;
      mu:uuid {sparql_escape_string(public_item.public.resource_id)} ;
      dct:created {sparql_escape_datetime(now)} ;
      dct:modified {sparql_escape_datetime(now)} ;
      schema:position {sparql_escape_int(public_item.sequence)} ;
      besluit:Agendapunt.type {sparql_escape_uri(_AGENDA_ITEM_TYPE_BY_KIND[public_item.source.kind])} ;
      prov:wasDerivedFrom {sparql_escape_uri(public_item.source.uri)} .
    {optional_block}
    {sparql_escape_uri(publication_uri)} prov:generated {public_uri} .
    {sparql_escape_uri(public_agenda.uri)} dct:hasPart {public_uri} .
  }}
}}"""
            )

            if previous_publication_uri:
                self._export_store.store_update(
                    f"""{PREFIXES}
INSERT {{
  GRAPH {target_graph} {{
    {public_uri} prov:wasRevisionOf ?previousPublicAgendaItem .
  }}
}} WHERE {{
  GRAPH {sparql_escape_uri(self._public_graph)} {{
    {sparql_escape_uri(previous_publication_uri)} prov:generated ?previousPublicAgendaItem .
    ?previousPublicAgendaItem a besluit:Agendapunt ;
      prov:wasDerivedFrom {sparql_escape_uri(public_item.source.uri)} .
  }}
}}"""
                )
        return public_items

    def mapping_get_news_item(self, agenda_item: AgendaItemRecord) -> NewsItemRecord | None:
        """Fetch the news item content and themes of an agenda item.

        Args:
            agenda_item: Source agenda item.

        Returns:
            NewsItemRecord | None: News item without mandatees when it exists.
        """

        news_item = sparql_escape_uri(agenda_item.newsletter_info_uri)
        kanselarij = sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)
        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT ?id ?title ?richtext ?text ?alternative
WHERE {{
  GRAPH {kanselarij} {{
    {news_item} dct:title ?title ;
      mu:uuid ?id .
    OPTIONAL {{ {news_item} nie:htmlContent ?richtext . }}
    OPTIONAL {{ {news_item} prov:value ?text . }}
    OPTIONAL {{ {news_item} dct:alternative ?alternative . }}
  }}
}} LIMIT 1"""
        )
        if not rows or not rows[0]["id"]:
            return None

        theme_rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT DISTINCT ?uri
WHERE {{
  GRAPH {kanselarij} {{
    {news_item} dct:subject ?uri .
  }}
}}"""
        )
        row = rows[0]
        return NewsItemRecord(
            uri=agenda_item.newsletter_info_uri,
            news_item_id=row["id"],
            title=row["title"],
            richtext=row["richtext"],
            text=row["text"],
            alternative=row["alternative"],
            themes=tuple(sorted(theme["uri"] for theme in theme_rows if theme["uri"])),
        )

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

        Raises:
            StoreAdapterError: Raised when the store update fails.
        """

        subject = sparql_escape_uri(news_item.uri)
        optional_statements: list[str] = []
        if news_item.richtext:
            optional_statements.append(f"{subject} nie:htmlContent {sparql_escape_string(news_item.richtext)} .")
        if news_item.text:
            optional_statements.append(f"{subject} prov:value {sparql_escape_string(news_item.text)} .")
        if news_item.title:
            optional_statements.append(f"{subject} dct:title {sparql_escape_string(news_item.title)} .")
        if news_item.alternative:
            optional_statements.append(f"{subject} dct:alternative {sparql_escape_string(news_item.alternative)} .")
        optional_statements.extend(f"{subject} dct:subject {sparql_escape_uri(theme)} ." for theme in news_item.themes)
        optional_statements.extend(
            f"{subject} prov:qualifiedAssociation {sparql_escape_uri(mandatee)} ." for mandatee in news_item.mandatees
        )
        optional_block = "\n    ".join(optional_statements)

        self._export_store.store_update(
            f"""{PREFIXES}
INSERT DATA {{
  GRAPH {sparql_escape_uri(graph)} {{
    {subject} a dossier:Stuk ;
      mu:uuid {sparql_escape_string(news_item.news_item_id)} ;
      dct:issued {sparql_escape_datetime(domain_utc_now())} ;
      schema:position {sparql_escape_int(public_agenda_item.sequence)} ;
      dct:type {sparql_escape_uri(DOCUMENT_TYPE_NEWS_ITEM)} ;
      prov:wasDerivedFrom {sparql_escape_uri(public_agenda_item.public.uri)} .
    {optional_block}
  }}
}}"""
        )

    def mapping_list_public_documents(self, agenda_item: AgendaItemRecord) -> tuple[str, ...]:
        """List pieces of an agenda item that pass the public access-level check.

        Args:
            agenda_item: Source agenda item.

        Returns:
            tuple[str, ...]: Piece URIs sorted ascending.
        """

        item = sparql_escape_uri(agenda_item.uri)
        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT DISTINCT ?uri
WHERE {{
  GRAPH {sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)} {{
    {sparql_escape_uri(agenda_item.newsletter_info_uri)} prov:wasDerivedFrom ?agendaItemTreatment .
    ?agendaItemTreatment dct:subject {item} .
    ?agendaActivity besluitvorming:genereertAgendapunt {item} .
    {item} besluitvorming:geagendeerdStuk ?uri .
    ?uri besluitvorming:vertrouwelijkheidsniveau {sparql_escape_uri(ACCESS_LEVEL_PUBLIC)} .
  }}
}}"""
        )
        return tuple(sorted(row["uri"] for row in rows if row["uri"]))

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

        Raises:
            StoreAdapterError: Raised when a store request fails.
        """

        kanselarij = sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)
        target_graph = sparql_escape_uri(graph)
        for piece_uri in piece_uris:
            piece = sparql_escape_uri(piece_uri)

            self._mapping_copy_to_staging(
                f"""{PREFIXES}
CONSTRUCT {{
  {piece} a dossier:Stuk ;
    mu:uuid ?uuid ;
    dct:title ?title ;
    dct:issued {sparql_escape_datetime(domain_utc_now())} .
}}
WHERE {{
  GRAPH {kanselarij} {{
    {piece} a dossier:Stuk ;
      mu:uuid ?uuid ;
      dct:title ?title .
  }}
}}""",
                graph,
            )

            self._mapping_copy_to_staging(
                f"""{PREFIXES}
CONSTRUCT {{
  ?dossier a dossier:Dossier ;
    mu:uuid ?uuid ;
    dossier:Dossier.bestaatUit {piece} .
}}
WHERE {{
  GRAPH {kanselarij} {{
    ?dossier a dossier:Dossier ;
      mu:uuid ?uuid ;
      dossier:Dossier.bestaatUit {piece} .
  }}
}}""",
                graph,
            )

            self._mapping_copy_to_staging(
                f"""{PREFIXES}
CONSTRUCT {{
  ?documentContainer a dossier:Serie ;
    mu:uuid ?documentContainerUuid ;
    dossier:Collectie.bestaatUit {piece} .
}}
WHERE {{
  GRAPH {kanselarij} {{
    ?documentContainer a dossier:Serie ;
      dossier:Collectie.bestaatUit {piece} ;
      mu:uuid ?documentContainerUuid .
  }}
}}""",
                graph,
            )

            self._mapping_copy_to_staging(
                f"""{PREFIXES}
CONSTRUCT {{
  ?documentContainer dct:type ?documentType .
}}
WHERE {{
  GRAPH {kanselarij} {{
    ?documentContainer a dossier:Serie ;
      dossier:Collectie.bestaatUit {piece} ;
      dct:type ?documentType .
  }}
}}""",
                graph,
            )

            self._export_store.store_update(
                f"""{PREFIXES}
INSERT {{
  GRAPH {target_graph} {{
    ?newsItem besluitvorming:heeftBijlage {piece} .
  }}
}} WHERE {{
  GRAPH {target_graph} {{
    ?newsItem prov:wasDerivedFrom {sparql_escape_uri(public_agenda_item.public.uri)} .
  }}
}}"""
            )

            self._mapping_copy_to_staging(
                f"""{PREFIXES}
CONSTRUCT {{
  {piece} prov:value ?uploadFile .
  ?uploadFile a nfo:FileDataObject ;
    mu:uuid ?uuidUploadFile ;
    nfo:fileName ?fileNameUploadFile ;
    nfo:fileSize ?sizeUploadFile ;
    dbpedia:fileExtension ?extensionUploadFile ;
    dct:format ?format .
  ?physicalFile a nfo:FileDataObject ;
    mu:uuid ?uuidPhysicalFile ;
    nfo:fileName ?fileNamePhysicalFile ;
    nfo:fileSize ?sizePhysicalFile ;
    dbpedia:fileExtension ?extensionPhysicalFile ;
    nie:dataSource ?uploadFile .
}}
WHERE {{
  GRAPH {kanselarij} {{
    {piece} a dossier:Stuk ;
      prov:value ?uploadFile .
    ?uploadFile a nfo:FileDataObject ;
      mu:uuid ?uuidUploadFile ;
      nfo:fileName ?fileNameUploadFile ;
      nfo:fileSize ?sizeUploadFile ;
      dbpedia:fileExtension ?extensionUploadFile ;
      dct:format ?format ;
      ^nie:dataSource ?physicalFile .
    ?physicalFile a nfo:FileDataObject ;
      mu:uuid ?uuidPhysicalFile ;
      nfo:fileName ?fileNamePhysicalFile ;
      nfo:fileSize ?sizePhysicalFile ;
      dbpedia:fileExtension ?extensionPhysicalFile .
  }}
}}""",
                graph,
            )

            self._mapping_copy_to_staging(
                f"""{PREFIXES}
CONSTRUCT {{
  ?derivedFile a nfo:FileDataObject ;
    mu:uuid ?uuidDerivedFile ;
    nfo:fileName ?fileNameDerivedFile ;
    nfo:fileSize ?sizeDerivedFile ;
    dbpedia:fileExtension ?extensionDerivedFile ;
    dct:format ?format ;
    prov:hadPrimarySource ?sourceFile .
  ?physicalFile a nfo:FileDataObject ;
    mu:uuid ?uuidPhysicalFile ;
    nfo:fileName ?fileNamePhysicalFile ;
    nfo:fileSize ?sizePhysicalFile ;
    dbpedia:fileExtension ?extensionPhysicalFile ;
    nie:dataSource ?derivedFile .
}}
WHERE {{
  GRAPH {kanselarij} {{
    {piece} a dossier:Stuk ;
      prov:value ?sourceFile .
    ?derivedFile prov:hadPrimarySource ?sourceFile ;
      a nfo:FileDataObject ;
      mu:uuid ?uuidDerivedFile ;
      nfo:fileName ?fileNameDerivedFile ;
      nfo:fileSize ?sizeDerivedFile ;
      dbpedia:fileExtension ?extensionDerivedFile ;
      dct:format ?format ;
      ^nie:dataSource ?physicalFile .
    ?physicalFile a nfo:FileDataObject ;
      mu:uuid ?uuidPhysicalFile ;
      nfo:fileName ?fileNamePhysicalFile ;
      nfo:fileSize ?sizePhysicalFile ;
      dbpedia:fileExtension ?extensionPhysicalFile .
  }}
}}""",
                graph,
            )

    def mapping_fix_namespaces(self, graph: str) -> None:
        """Rewrite legacy `http://` besluitvorming terms to `https://` in a graph.

        Args:
            graph: Staging graph URI.

        Returns:
            None: Triples are rewritten as side effect.

        Raises:
            StoreAdapterError: Raised when a store update fails.
        """

        target_graph = sparql_escape_uri(graph)
        legacy_namespace = sparql_escape_string(LEGACY_BESLUITVORMING_NAMESPACE)
        for position in ("p", "o"):
            rewritten = "?s ?newP ?o" if position == "p" else "?s ?p ?newO"
            new_variable = "?newP" if position == "p" else "?newO"
            self._export_store.store_update(
                f"""DELETE {{
  GRAPH {target_graph} {{ ?s ?p ?o . }}
}} INSERT {{
  GRAPH {target_graph} {{ {rewritten} . }}
}} WHERE {{
  GRAPH {target_graph} {{
    ?s ?p ?o .
    FILTER(isIRI(?{position}) && STRSTARTS(STR(?{position}), {legacy_namespace}))
    BIND(IRI(CONCAT("https://", STRAFTER(STR(?{position}), "http://"))) AS {new_variable})
  }}
}}"""
            )

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

        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT ?uri ?meeting ?meetingId ?plannedStart
WHERE {{
  GRAPH {sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)} {{
    ?uri a ext:ThemisPublicationActivity ;
      prov:used ?meeting ;
      prov:startedAtTime ?plannedStart .
    FILTER(?plannedStart >= {sparql_escape_datetime(window_start)})
    FILTER(?plannedStart <= {sparql_escape_datetime(window_end)})
    ?meeting mu:uuid ?meetingId .
  }}
}} ORDER BY ?plannedStart ?uri"""
        )
        return [
            PublicationRequestRecord(
                uri=row["uri"],
                meeting_uri=row["meeting"],
                meeting_id=row["meetingId"],
                planned_start=domain_parse_datetime_literal(row["plannedStart"]),
            )
            for row in rows
            if row["uri"] and row["meeting"] and row["meetingId"] and row["plannedStart"]
        ]

    def mapping_list_publication_request_scope(self, request_uri: str) -> tuple[str, ...]:
        """Return the raw scope labels of one publication request.

        Args:
            request_uri: URI of the source publication activity.

        Returns:
            tuple[str, ...]: Scope labels as stored in the source system.
        """

        rows = self._source_store.store_select(
            f"""{PREFIXES}
SELECT DISTINCT ?label
WHERE {{
  GRAPH {sparql_escape_uri(KALEIDOS_GRAPH_KANSELARIJ)} {{
    {sparql_escape_uri(request_uri)} a ext:ThemisPublicationActivity ;
      ext:scope ?label .
  }}
}}"""
        )
        return tuple(row["label"] for row in rows if row["label"])

    def _mapping_copy_to_staging(self, construct_query: str, graph: str) -> None:
        """Run a CONSTRUCT on the source store and insert the triples into a staging graph.

        Args:
            construct_query: CONSTRUCT query evaluated on the source store.
            graph: Staging graph URI.

        Returns:
            None: Triples are written as side effect, nothing is written for empty results.

        Raises:
            StoreAdapterError: Raised when a store request fails.
        """

        try:
            triples = self._source_store.store_construct(construct_query, media_type=self._NTRIPLES_MEDIA_TYPE)
            statements = [
                line.strip() for line in triples.splitlines() if line.strip() and not line.lstrip().startswith("#")
            ]
            if not statements:
                return
            joined_statements = "\n    ".join(statements)
            self._export_store.store_update(
                f"""INSERT DATA {{
  GRAPH {sparql_escape_uri(graph)} {{
    {joined_statements}
  }}
}}"""
            )
        except StoreAdapterError:
            logger.error("Copy into staging graph <%s> failed for query:\n%s", graph, construct_query)
            raise


def _parse_priority(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None
