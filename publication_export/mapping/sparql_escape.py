"""SPARQL term escaping helpers used by query templates."""

from __future__ import annotations

import re
from datetime import datetime

from publication_export.domain import domain_ensure_utc

_URI_SPECIAL_CHARACTERS = re.compile(r'[\\"<>]')
_STRING_SPECIAL_CHARACTERS = re.compile(r'[\\"]')

XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema#"


def sparql_escape_uri(value: str) -> str:
    """Render a value as an IRI reference.

    Args:
        value: IRI text.

    Returns:
        str: `<...>` term with reserved characters backslash-escaped.

    Raises:
        ValueError: Raised when the value is blank.
    """

    if not value or not value.strip():
        raise ValueError("uri must not be blank")
    return "<" + _URI_SPECIAL_CHARACTERS.sub(lambda match: "\\" + match.group(0), value.strip()) + ">"


def sparql_escape_string(value: str) -> str:
    """Render a value as a long string literal.

    Args:
        value: Literal text.

    Returns:
        str: Triple-quoted literal with backslashes and quotes escaped.
    """

    return '"""' + _STRING_SPECIAL_CHARACTERS.sub(lambda match: "\\" + match.group(0), value) + '"""'


def sparql_escape_datetime(value: datetime) -> str:
    """Render a timestamp as an `xsd:dateTime` literal in UTC.

    Args:
        value: Timestamp, naive values are treated as UTC.

    Returns:
        str: Typed literal.
    """

    utc_value = domain_ensure_utc(value)
    lexical_value = utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f'"{lexical_value}"^^<{XSD_NAMESPACE}dateTime>'


def sparql_escape_int(value: int) -> str:
    """Render an integer as an `xsd:integer` literal.

    Args:
        value: Integer value.

    Returns:
        str: Typed literal.

    Raises:
        TypeError: Raised when value is not an integer.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("value must be an int")
    return f'"{value}"^^<{XSD_NAMESPACE}integer>'
