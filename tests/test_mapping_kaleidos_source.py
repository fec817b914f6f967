"""Tests for Kaleidos field mapping queries and row conversion."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from publication_export.adapters import StoreConnectionError
from publication_export.domain import (
    AGENDA_ITEM_KIND_ANNOUNCEMENT,
    AGENDA_ITEM_KIND_PRIMARY,
    AgendaItemRecord,
    AgendaRecord,
    Mandatee,
)
from publication_export.mapping import KaleidosPublicationSource

_NOTA = "http://themis.vlaanderen.be/id/concept/agendapunt-type/dd47a8f8-3ad2-4d5a-8318-66fc02fe80fd"
_ANNOUNCEMENT = "http://themis.vlaanderen.be/id/concept/agendapunt-type/8f8adcf0-58ef-4edc-9e36-0c9095fd76b0"
_STAGING_GRAPH = "http://mu.semte.ch/graphs/tmp/20261019083015042"
_PUBLIC_GRAPH = "http://mu.semte.ch/graphs/themis-public"


class _ScriptedStore:
    """Store stub answering selects and constructs from queues."""

    def __init__(self, select_results=None, construct_results=None, fail_updates: bool = False):
        self.select_results = list(select_results or [])
        self.construct_results = list(construct_results or [])
        self.fail_updates = fail_updates
        self.selects: list[str] = []
        self.constructs: list[tuple[str, str]] = []
        self.updates: list[str] = []

    def store_select(self, query: str) -> list[dict[str, str | None]]:
        self.selects.append(query)
        return self.select_results.pop(0) if self.select_results else []

    def store_construct(self, query: str, media_type: str = "text/turtle") -> str:
        self.constructs.append((query, media_type))
        return self.construct_results.pop(0) if self.construct_results else ""

    def store_update(self, query: str) -> None:
        if self.fail_updates:
            raise StoreConnectionError("store unreachable after retries")
        self.updates.append(query)


def _build_source(source_store: _ScriptedStore, export_store: _ScriptedStore | None = None):
    ids = iter(f"id{index}" for index in range(1, 100))
    return KaleidosPublicationSource(
        source_store=source_store,
        export_store=export_store or _ScriptedStore(),
        public_graph=_PUBLIC_GRAPH,
        id_factory=lambda: next(ids),
    )


def test_get_meeting_by_id_parses_row() -> None:
    """Resolve a meeting by UUID and parse its planned start.

    Returns:
        None: Assertions validate the parsed meeting and the query.

    Raises:
        AssertionError: Raised when mapping differs.
    """

    store = _ScriptedStore(
        select_results=[
            [
                {
                    "uri": "http://themis.vlaanderen.be/id/zitting/m1",
                    "uuid": "m1",
                    "plannedStart": "2021-03-05T09:00:00Z",
                    "location": None,
                    "type": None,
                }
            ]
        ]
    )

    meeting = _build_source(store).mapping_get_meeting(meeting_id="m1")

    assert meeting is not None
    assert meeting.uri == "http://themis.vlaanderen.be/id/zitting/m1"
    assert meeting.planned_start == datetime(2021, 3, 5, 9, 0, tzinfo=timezone.utc)
    assert 'mu:uuid """m1"""' in store.selects[0]


def test_get_meeting_returns_none_when_missing_and_requires_identifier() -> None:
    source = _build_source(_ScriptedStore())

    assert source.mapping_get_meeting(meeting_uri="http://themis.vlaanderen.be/id/zitting/x") is None
    with pytest.raises(ValueError):
        source.mapping_get_meeting()


def test_latest_agenda_falls_back_to_final_version_flag() -> None:
    store = _ScriptedStore(select_results=[[], [{"uri": "http://kanselarij.vo.data.gift/id/agendas/a1"}]])

    agenda = _build_source(store).mapping_get_latest_agenda("http://themis.vlaanderen.be/id/zitting/m1")

    assert agenda == AgendaRecord(uri="http://kanselarij.vo.data.gift/id/agendas/a1")
    assert len(store.selects) == 2
    assert "ext:finaleVersie" in store.selects[1]


def test_list_agenda_items_maps_kinds_and_skips_unsupported_types() -> None:
    """Keep nota and announcement items, sorted by number, without duplicates."""

    row_template = {"title": None, "shortTitle": None, "newsletterInfo": "http://example.org/news"}
    store = _ScriptedStore(
        select_results=[
            [
                {**row_template, "uri": "http://example.org/item2", "number": "2", "type": _ANNOUNCEMENT},
                {**row_template, "uri": "http://example.org/item1", "number": "1", "type": _NOTA},
                {**row_template, "uri": "http://example.org/item1", "number": "1", "type": _NOTA},
                {**row_template, "uri": "http://example.org/item3", "number": "3", "type": "http://example.org/other"},
            ]
        ]
    )

    items = _build_source(store).mapping_list_agenda_items(AgendaRecord(uri="http://example.org/agenda"))

    assert [(item.uri, item.kind, item.number) for item in items] == [
        ("http://example.org/item1", AGENDA_ITEM_KIND_PRIMARY, 1),
        ("http://example.org/item2", AGENDA_ITEM_KIND_ANNOUNCEMENT, 2),
    ]


def test_list_mandatees_keeps_lowest_priority_per_mandatee() -> None:
    store = _ScriptedStore(
        select_results=[
            [
                {"uri": "http://example.org/mandatee/b", "priority": "3"},
                {"uri": "http://example.org/mandatee/a", "priority": None},
                {"uri": "http://example.org/mandatee/b", "priority": "1"},
                {"uri": "http://example.org/mandatee/c", "priority": "n/a"},
            ]
        ]
    )
    agenda_item = AgendaItemRecord(
        uri="http://example.org/item1",
        kind=AGENDA_ITEM_KIND_PRIMARY,
        number=1,
        newsletter_info_uri="http://example.org/news",
    )

    mandatees = _build_source(store).mapping_list_agenda_item_mandatees(agenda_item)

    assert mandatees == (
        Mandatee(uri="http://example.org/mandatee/a", priority=None),
        Mandatee(uri="http://example.org/mandatee/b", priority=1),
        Mandatee(uri="http://example.org/mandatee/c", priority=None),
    )


def test_copy_meeting_inserts_constructed_triples_into_staging_graph() -> None:
    """Insert N-Triples from the source store into the staging graph of the export store."""

    source_store = _ScriptedStore(
        construct_results=[
            "<http://themis.vlaanderen.be/id/zitting/m1> <http://mu.semte.ch/vocabularies/core/uuid> \"m1\" .\n"
            "# comment\n"
        ]
    )
    export_store = _ScriptedStore()

    _build_source(source_store, export_store).mapping_copy_meeting(
        "http://themis.vlaanderen.be/id/zitting/m1",
        _STAGING_GRAPH,
    )

    assert {media_type for _, media_type in source_store.constructs} == {"text/plain"}
    assert len(export_store.updates) == 1
    assert f"GRAPH <{_STAGING_GRAPH}>" in export_store.updates[0]
    assert '<http://mu.semte.ch/vocabularies/core/uuid> "m1" .' in export_store.updates[0]
    assert "# comment" not in export_store.updates[0]


def test_copy_failure_propagates_store_error() -> None:
    source_store = _ScriptedStore(construct_results=["<http://a> <http://b> <http://c> ."])
    export_store = _ScriptedStore(fail_updates=True)

    with pytest.raises(StoreConnectionError):
        _build_source(source_store, export_store).mapping_copy_meeting(
            "http://themis.vlaanderen.be/id/zitting/m1",
            _STAGING_GRAPH,
        )


def test_insert_publication_activity_mints_public_uri() -> None:
    export_store = _ScriptedStore()

    reference = _build_source(_ScriptedStore(), export_store).mapping_insert_publication_activity(
        "http://themis.vlaanderen.be/id/zitting/m1",
        _STAGING_GRAPH,
    )

    assert reference.resource_id == "id1"
    assert reference.uri.endswith("id1")
    assert "prov:used <http://themis.vlaanderen.be/id/zitting/m1>" in export_store.updates[0]
    assert f"GRAPH <{_STAGING_GRAPH}>" in export_store.updates[0]


def test_insert_public_agenda_links_previous_revision_only_when_published_before() -> None:
    export_store = _ScriptedStore()
    source = _build_source(_ScriptedStore(), export_store)
    agenda = AgendaRecord(uri="http://example.org/agenda", serial_number="B", title="Agenda B")

    source.mapping_insert_public_agenda(agenda, "http://example.org/meeting", "http://example.org/pub", None, _STAGING_GRAPH)
    assert len(export_store.updates) == 1
    assert '"""Publieke Agenda B"""' in export_store.updates[0]

    source.mapping_insert_public_agenda(
        agenda, "http://example.org/meeting", "http://example.org/pub", "http://example.org/previous", _STAGING_GRAPH
    )
    assert len(export_store.updates) == 3
    assert "prov:wasRevisionOf" in export_store.updates[2]
    assert f"GRAPH <{_PUBLIC_GRAPH}>" in export_store.updates[2]


def test_fix_namespaces_rewrites_predicates_and_objects() -> None:
    export_store = _ScriptedStore()

    _build_source(_ScriptedStore(), export_store).mapping_fix_namespaces(_STAGING_GRAPH)

    assert len(export_store.updates) == 2
    assert all('"""http://data.vlaanderen.be/ns/besluitvorming#"""' in update for update in export_store.updates)


def test_list_publication_requests_filters_incomplete_rows() -> None:
    store = _ScriptedStore(
        select_results=[
            [
                {
                    "uri": "http://example.org/pub1",
                    "meeting": "http://example.org/meeting1",
                    "meetingId": "m1",
                    "plannedStart": "2026-10-19T07:00:00Z",
                },
                {"uri": "http://example.org/pub2", "meeting": None, "meetingId": None, "plannedStart": None},
            ]
        ]
    )

    requests = _build_source(store).mapping_list_publication_requests(
        datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc),
        datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc),
    )

    assert [request.uri for request in requests] == ["http://example.org/pub1"]
    assert requests[0].planned_start == datetime(2026, 10, 19, 7, 0, tzinfo=timezone.utc)
    assert "ext:ThemisPublicationActivity" in store.selects[0]
