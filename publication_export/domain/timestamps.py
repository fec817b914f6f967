"""Timestamp helpers for staging handles, file names and literal parsing."""

from __future__ import annotations

from datetime import date, datetime, timezone


def domain_utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp.

    Returns:
        datetime: Current UTC time.
    """

    return datetime.now(timezone.utc)


def domain_compact_timestamp(value: datetime) -> str:
    """Render a timestamp as 17 digits `YYYYMMDDHHMMSSmmm` in UTC.

    Args:
        value: Timestamp to render. Naive values are treated as UTC.

    Returns:
        str: Digits-only millisecond-precision timestamp.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    utc_value = domain_ensure_utc(value)
    return f"{utc_value:%Y%m%d%H%M%S}{utc_value.microsecond // 1000:03d}"


def domain_ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps and convert aware ones to UTC.

    Args:
        value: Candidate timestamp.

    Returns:
        datetime: Timezone-aware UTC timestamp.
    """

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def domain_parse_datetime_literal(value: str) -> datetime:
    """Parse an `xsd:dateTime` lexical value into an aware UTC datetime.

    Args:
        value: Literal value as returned in SPARQL JSON results.

    Returns:
        datetime: Parsed UTC timestamp.

    Raises:
        ValueError: Raised when the value is not an ISO-8601 timestamp.
    """

    normalized_value = value.strip()
    if normalized_value.endswith("Z"):
        normalized_value = f"{normalized_value[:-1]}+00:00"
    return domain_ensure_utc(datetime.fromisoformat(normalized_value))


def domain_is_before_date(value: datetime, threshold: date) -> bool:
    """Return whether a timestamp falls before midnight UTC of a threshold date.

    Args:
        value: Timestamp to compare.
        threshold: Availability date.

    Returns:
        bool: True when the timestamp precedes the threshold.
    """

    threshold_start = datetime(threshold.year, threshold.month, threshold.day, tzinfo=timezone.utc)
    return domain_ensure_utc(value) < threshold_start
