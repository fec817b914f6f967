"""Tests for deterministic agenda item ordering."""

from __future__ import annotations

import random

import pytest

from publication_export.domain import (
    AGENDA_ITEM_KIND_ANNOUNCEMENT,
    AGENDA_ITEM_KIND_PRIMARY,
    AgendaItemRecord,
    Mandatee,
)
from publication_export.ordering import (
    ordering_has_complete_priorities,
    ordering_priority_key,
    ordering_sort_agenda_items,
)


def _item(
    name: str,
    number: int,
    mandatees: tuple[Mandatee, ...] = (),
    kind: str = AGENDA_ITEM_KIND_PRIMARY,
) -> AgendaItemRecord:
    """Build an agenda item with deterministic URIs.

    Args:
        name: Short item name used in its URI.
        number: Source agenda position.
        mandatees: Assigned mandatees.
        kind: Agenda item kind.

    Returns:
        AgendaItemRecord: Agenda item test value.
    """

    return AgendaItemRecord(
        uri=f"http://example.org/agendapunt/{name}",
        kind=kind,
        number=number,
        newsletter_info_uri=f"http://example.org/nieuwsbrief/{name}",
        mandatees=mandatees,
    )


def _names(ordered) -> list[str]:
    return [entry.item.uri.rsplit("/", 1)[-1] for entry in ordered]


def _mandatee(name: str, priority: int | None) -> Mandatee:
    return Mandatee(uri=f"http://example.org/mandataris/{name}", priority=priority)


def test_priority_mode_orders_prefix_before_extension_with_numeric_comparison() -> None:
    """Order priority keys lexicographically by numbers, shorter prefixes first.

    Returns:
        None: Assertions validate final order.

    Raises:
        AssertionError: Raised when the order differs.
    """

    items = [
        _item("k10", 1, (_mandatee("j", 10),)),
        _item("k1_2", 2, (_mandatee("b", 2), _mandatee("a", 1))),
        _item("k2", 3, (_mandatee("b", 2),)),
        _item("k1", 4, (_mandatee("a", 1),)),
        _item("k1_3", 5, (_mandatee("a", 1), _mandatee("c", 3))),
    ]

    ordered = ordering_sort_agenda_items(items)

    assert _names(ordered) == ["k1", "k1_2", "k1_3", "k2", "k10"]


def test_priority_mode_orders_items_within_group_by_number() -> None:
    items = [
        _item("late", 9, (_mandatee("a", 1),)),
        _item("early", 2, (_mandatee("a", 1),)),
    ]

    assert _names(ordering_sort_agenda_items(items)) == ["early", "late"]


def test_fallback_mode_groups_by_mandatee_set_ordered_by_lowest_number() -> None:
    """Use mandatee groups when any priority is missing.

    Returns:
        None: Assertions validate final order.

    Raises:
        AssertionError: Raised when the order differs.
    """

    items = [
        _item("a_high", 1, (_mandatee("a", 1),)),
        _item("b_first", 2, (_mandatee("b", None),)),
        _item("a_low", 5, (_mandatee("a", 1),)),
        _item("b_second", 3, (_mandatee("b", None),)),
        _item("ab", 4, (_mandatee("b", None), _mandatee("a", 1))),
    ]

    ordered = ordering_sort_agenda_items(items)

    assert _names(ordered) == ["a_high", "a_low", "b_first", "b_second", "ab"]


def test_items_without_mandatees_and_announcements_follow_in_source_order() -> None:
    """Append items without mandatees, then announcements, each by number."""

    items = [
        _item("announcement_2", 2, kind=AGENDA_ITEM_KIND_ANNOUNCEMENT),
        _item("plain_3", 3),
        _item("announcement_1", 1, kind=AGENDA_ITEM_KIND_ANNOUNCEMENT),
        _item("with_mandatee", 7, (_mandatee("a", 1),)),
        _item("plain_1", 1),
    ]

    ordered = ordering_sort_agenda_items(items)

    assert _names(ordered) == ["with_mandatee", "plain_1", "plain_3", "announcement_1", "announcement_2"]
    assert [entry.sequence for entry in ordered] == [1, 2, 3, 4, 5]


def test_predecessors_chain_through_announcements() -> None:
    """Link every item to the previous one, the first announcement to the last primary item."""

    items = [
        _item("primary_1", 1),
        _item("primary_2", 2),
        _item("announcement_1", 1, kind=AGENDA_ITEM_KIND_ANNOUNCEMENT),
    ]

    ordered = ordering_sort_agenda_items(items)

    assert [entry.predecessor_index for entry in ordered] == [None, 0, 1]


def test_announcements_only_start_a_fresh_chain() -> None:
    items = [
        _item("announcement_2", 2, kind=AGENDA_ITEM_KIND_ANNOUNCEMENT),
        _item("announcement_1", 1, kind=AGENDA_ITEM_KIND_ANNOUNCEMENT),
    ]

    ordered = ordering_sort_agenda_items(items)

    assert _names(ordered) == ["announcement_1", "announcement_2"]
    assert [entry.predecessor_index for entry in ordered] == [None, 0]


def test_order_does_not_depend_on_input_order() -> None:
    """Produce the same order for every permutation of the input."""

    items = [
        _item("a", 1, (_mandatee("x", 2),)),
        _item("b", 1, (_mandatee("y", None),)),
        _item("c", 1, (_mandatee("y", None),)),
        _item("d", 2),
        _item("e", 2),
        _item("f", 1, kind=AGENDA_ITEM_KIND_ANNOUNCEMENT),
    ]
    expected = _names(ordering_sort_agenda_items(items))
    shuffler = random.Random(7)

    for _ in range(10):
        shuffled = list(items)
        shuffler.shuffle(shuffled)
        assert _names(ordering_sort_agenda_items(shuffled)) == expected


def test_empty_input_returns_empty_order() -> None:
    assert ordering_sort_agenda_items([]) == []


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        ordering_sort_agenda_items([_item("odd", 1, kind="remark")])


def test_priority_helpers() -> None:
    """Compute sorted priority keys and detect incomplete priorities."""

    complete = _item("complete", 1, (_mandatee("b", 3), _mandatee("a", 1)))
    incomplete = _item("incomplete", 2, (_mandatee("c", None),))

    assert ordering_priority_key(complete) == (1, 3)
    assert ordering_has_complete_priorities([complete])
    assert not ordering_has_complete_priorities([complete, incomplete])
    with pytest.raises(ValueError):
        ordering_priority_key(incomplete)
