"""Ordering layer package for sequencing publishable agenda items."""

from .engine import ordering_has_complete_priorities, ordering_priority_key, ordering_sort_agenda_items

__all__ = [
	"ordering_has_complete_priorities",
	"ordering_priority_key",
	"ordering_sort_agenda_items",
]
