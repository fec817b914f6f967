"""Export scope normalization and consistency rules."""

from __future__ import annotations

from typing import Final, Iterable

from .models import EXPORT_SCOPES, SCOPE_ATTACHMENTS, SCOPE_ITEMS

# labels used by the source system for the same facets
_DOMAIN_SCOPE_ALIASES: Final[dict[str, str]] = {
    "newsitems": SCOPE_ITEMS,
    "documents": SCOPE_ATTACHMENTS,
}


class InvalidScopeError(ValueError):
    """Raised when a requested export scope is unknown or inconsistent."""


def domain_normalize_scope(values: Iterable[str] | None) -> tuple[str, ...]:
    """Normalize requested scope labels into the canonical facet enumeration.

    Source-system labels (`newsitems`, `documents`) are accepted as aliases of
    `items` and `attachments`. Duplicates are removed and the result follows the
    order of the facet enumeration.

    Args:
        values: Requested scope labels, or None for an empty scope.

    Returns:
        tuple[str, ...]: Canonical, de-duplicated facets.

    Raises:
        InvalidScopeError: Raised when a label is unknown or when `attachments`
            is requested without `items`.
    """

    requested: set[str] = set()
    for value in values or ():
        if not isinstance(value, str):
            raise InvalidScopeError(f"scope values must be strings, got {type(value).__name__}")
        normalized_value = value.strip().lower()
        canonical_value = _DOMAIN_SCOPE_ALIASES.get(normalized_value, normalized_value)
        if canonical_value not in EXPORT_SCOPES:
            raise InvalidScopeError(f"unsupported scope value={value!r}")
        requested.add(canonical_value)

    if SCOPE_ATTACHMENTS in requested and SCOPE_ITEMS not in requested:
        raise InvalidScopeError(
            f'If "{SCOPE_ATTACHMENTS}" is included in the scope "{SCOPE_ITEMS}" also need to be included.'
        )

    return tuple(scope for scope in EXPORT_SCOPES if scope in requested)
