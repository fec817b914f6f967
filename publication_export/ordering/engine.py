"""Deterministic ordering of publishable agenda items.

Primary items with mandatees come first. When every mandatee carries a
priority, items are grouped by their ascending priority key and the groups
are emitted by a depth-first walk of a priority tree, which yields keys in
numeric lexicographic order with a prefix before its extensions. Otherwise
items are grouped by their sorted mandatee URIs and the groups are ordered by
the lowest source number they contain. Primary items without mandatees and
then announcements follow, each by source number.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from publication_export.domain import (
    AGENDA_ITEM_KIND_ANNOUNCEMENT,
    AGENDA_ITEM_KIND_PRIMARY,
    AgendaItemRecord,
    OrderedAgendaItem,
)

logger = logging.getLogger(__name__)


@dataclass
class _PriorityTreeNode:
    """Node of the priority tree.

    Attributes:
        items: Items whose priority key ends at this node.
        children: Child nodes keyed by the next priority value.
    """

    items: list[AgendaItemRecord] = field(default_factory=list)
    children: dict[int, "_PriorityTreeNode"] = field(default_factory=dict)


def ordering_sort_agenda_items(items: Sequence[AgendaItemRecord]) -> list[OrderedAgendaItem]:
    """Place agenda items in their final public order.

    Args:
        items: Agenda items in any order.

    Returns:
        list[OrderedAgendaItem]: Items with 1-based sequence and predecessor index.

    Raises:
        ValueError: Raised when an item has an unknown kind.
    """

    primary_items: list[AgendaItemRecord] = []
    announcements: list[AgendaItemRecord] = []
    for item in items:
        if item.kind == AGENDA_ITEM_KIND_PRIMARY:
            primary_items.append(item)
        elif item.kind == AGENDA_ITEM_KIND_ANNOUNCEMENT:
            announcements.append(item)
        else:
            raise ValueError(f"unknown agenda item kind: {item.kind}")

    with_mandatees = [item for item in primary_items if item.mandatees]
    without_mandatees = [item for item in primary_items if not item.mandatees]
    logger.info(
        "Ordering %d primary items (%d with mandatees) and %d announcements",
        len(primary_items),
        len(with_mandatees),
        len(announcements),
    )

    if ordering_has_complete_priorities(with_mandatees):
        logger.info("Ordering items by mandatee priorities")
        ordered_with_mandatees = _ordering_by_priority_tree(with_mandatees)
    else:
        logger.info("Ordering items by lowest agenda item number per mandatee group")
        ordered_with_mandatees = _ordering_by_mandatee_groups(with_mandatees)

    final_order = [
        *ordered_with_mandatees,
        *sorted(without_mandatees, key=_ordering_source_key),
        *sorted(announcements, key=_ordering_source_key),
    ]
    # Announcements continue the chain from the last primary item.
    return [
        OrderedAgendaItem(item=item, sequence=index + 1, predecessor_index=index - 1 if index > 0 else None)
        for index, item in enumerate(final_order)
    ]


def ordering_has_complete_priorities(items: Sequence[AgendaItemRecord]) -> bool:
    """Return whether every mandatee of every item carries a priority.

    Args:
        items: Agenda items with mandatees.

    Returns:
        bool: True when priority ordering applies.
    """

    return all(mandatee.priority is not None for item in items for mandatee in item.mandatees)


def ordering_priority_key(item: AgendaItemRecord) -> tuple[int, ...]:
    """Return the ascending mandatee priorities of an item.

    Args:
        item: Agenda item whose mandatees all carry a priority.

    Returns:
        tuple[int, ...]: Sorted priority key.

    Raises:
        ValueError: Raised when a mandatee has no priority.
    """

    priorities: list[int] = []
    for mandatee in item.mandatees:
        if mandatee.priority is None:
            raise ValueError(f"mandatee {mandatee.uri} has no priority")
        priorities.append(mandatee.priority)
    return tuple(sorted(priorities))


def _ordering_by_priority_tree(items: Sequence[AgendaItemRecord]) -> list[AgendaItemRecord]:
    root = _PriorityTreeNode()
    for item in items:
        node = root
        for priority in ordering_priority_key(item):
            node = node.children.setdefault(priority, _PriorityTreeNode())
        node.items.append(item)

    ordered: list[AgendaItemRecord] = []
    group_keys: list[str] = []
    for key, group_items in _ordering_walk_priority_tree(root, ()):
        group_keys.append("-".join(str(priority) for priority in key))
        ordered.extend(sorted(group_items, key=_ordering_source_key))
    logger.info("Sorted mandatee groups: %s", group_keys)
    return ordered


def _ordering_walk_priority_tree(
    node: _PriorityTreeNode,
    prefix: tuple[int, ...],
) -> Iterator[tuple[tuple[int, ...], list[AgendaItemRecord]]]:
    if node.items:
        yield prefix, node.items
    for priority in sorted(node.children):
        yield from _ordering_walk_priority_tree(node.children[priority], (*prefix, priority))


def _ordering_by_mandatee_groups(items: Sequence[AgendaItemRecord]) -> list[AgendaItemRecord]:
    groups: dict[tuple[str, ...], list[AgendaItemRecord]] = {}
    for item in items:
        group_key = tuple(sorted(mandatee.uri for mandatee in item.mandatees))
        groups.setdefault(group_key, []).append(item)

    # Equal lowest numbers fall back to the group key.
    sorted_keys = sorted(groups, key=lambda group_key: (min(item.number for item in groups[group_key]), group_key))
    ordered: list[AgendaItemRecord] = []
    for group_key in sorted_keys:
        ordered.extend(sorted(groups[group_key], key=_ordering_source_key))
    return ordered


def _ordering_source_key(item: AgendaItemRecord) -> tuple[int, str]:
    return item.number, item.uri
