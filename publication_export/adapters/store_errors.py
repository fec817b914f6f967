"""Project-native typed exceptions for SPARQL store adapter failures."""

from __future__ import annotations


class StoreAdapterError(Exception):
    """Base exception for adapter-level SPARQL store failures.

    Attributes:
        status_code: Optional HTTP status code returned by the store.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StoreConnectionError(StoreAdapterError, ConnectionError):
    """Transport-level or server-side failure that persisted after all retries."""


class StoreTimeoutError(StoreAdapterError, TimeoutError):
    """Request timeout that persisted after all retries."""


class StoreRequestError(StoreAdapterError, ValueError):
    """Non-retryable rejection of a query by the store (HTTP 4xx)."""


class StoreResponseError(StoreAdapterError, RuntimeError):
    """Store answered successfully but the payload violates the result contract."""
