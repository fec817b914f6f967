"""Tests for scope normalization and timestamp helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest

from publication_export.domain import (
    InvalidScopeError,
    domain_compact_timestamp,
    domain_is_before_date,
    domain_normalize_scope,
    domain_parse_datetime_literal,
)


def test_scope_aliases_map_to_canonical_facets_in_fixed_order() -> None:
    assert domain_normalize_scope(["documents", "newsitems", "items"]) == ("items", "attachments")


def test_empty_scope_is_allowed() -> None:
    assert domain_normalize_scope(None) == ()
    assert domain_normalize_scope([]) == ()


@pytest.mark.parametrize("scope", [["attachments"], ["documents"], ["items", "signatures"]])
def test_inconsistent_or_unknown_scope_is_rejected(scope: list[str]) -> None:
    """Reject attachments without items and unknown facets."""

    with pytest.raises(InvalidScopeError):
        domain_normalize_scope(scope)


def test_compact_timestamp_renders_seventeen_digits_in_utc() -> None:
    value = datetime(2026, 10, 19, 10, 5, 7, 123456, tzinfo=timezone(timedelta(hours=2)))

    assert domain_compact_timestamp(value) == "20261019080507123"


def test_parse_datetime_literal_accepts_zulu_suffix() -> None:
    assert domain_parse_datetime_literal("2021-03-05T09:00:00Z") == datetime(2021, 3, 5, 9, tzinfo=timezone.utc)


def test_is_before_date_compares_with_midnight_utc() -> None:
    """Compare timestamps with the start of the threshold day."""

    threshold = date(2016, 9, 8)

    assert domain_is_before_date(datetime(2016, 9, 7, 23, 59, tzinfo=timezone.utc), threshold)
    assert not domain_is_before_date(datetime(2016, 9, 8, 0, 0, tzinfo=timezone.utc), threshold)
