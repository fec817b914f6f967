"""SPARQL-over-HTTP store client with bounded linear retry backoff."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Final

import httpx

from .interfaces import SparqlStorePort
from .store_errors import StoreConnectionError, StoreRequestError, StoreResponseError, StoreTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StoreRetryStrategy:
    """Immutable retry strategy config and calculation helpers.

    Attributes:
        retry_attempts: Total number of attempts for one request.
        backoff_seconds: Per-attempt delay multiplier.
    """

    retry_attempts: int
    backoff_seconds: float

    def strategy_calculate_retry_wait_seconds(self, attempt_number: int) -> float:
        """Calculate linear wait before the next attempt.

        Args:
            attempt_number: 1-based number of the attempt that just failed.

        Returns:
            float: Seconds to wait before retrying.

        Raises:
            ValueError: Raised when attempt number is not positive.
        """

        if attempt_number < 1:
            raise ValueError("attempt_number must be >= 1")
        return float(attempt_number) * self.backoff_seconds


class SparqlStoreClient(SparqlStorePort):
    """Store client posting SPARQL requests as form-encoded `query` parameters."""

    _USER_AGENT: Final[str] = "publication-export/1.0 (Python/httpx)"
    _RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        endpoint: str,
        retry_attempts: int = 5,
        retry_backoff_seconds: float = 0.5,
        request_timeout_seconds: float = 60.0,
        extra_headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize SPARQL store client.

        Args:
            endpoint: SPARQL endpoint URL.
            retry_attempts: Total attempts for one request (first try included).
            retry_backoff_seconds: Linear delay multiplier between attempts.
            request_timeout_seconds: HTTP timeout of one attempt.
            extra_headers: Optional headers sent with every request.
            transport: Optional httpx transport override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        normalized_endpoint = endpoint.strip()
        if not normalized_endpoint:
            raise ValueError("endpoint must not be blank")
        if retry_attempts < 1:
            raise ValueError("retry_attempts must be >= 1")
        if retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds must be >= 0")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._endpoint = normalized_endpoint
        self._retry_strategy = _StoreRetryStrategy(
            retry_attempts=retry_attempts,
            backoff_seconds=retry_backoff_seconds,
        )
        self._headers = {"User-Agent": self._USER_AGENT, **(extra_headers or {})}
        self._client = httpx.Client(timeout=request_timeout_seconds, transport=transport)

    def store_endpoint_label(self) -> str:
        """Return the configured endpoint URL.

        Returns:
            str: Endpoint URL.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return self._endpoint

    def store_select(self, query: str) -> list[dict[str, str | None]]:
        """Execute a SELECT query and flatten bindings to plain values.

        Args:
            query: SPARQL SELECT query.

        Returns:
            list[dict[str, str | None]]: Solutions keyed by projected variables.

        Raises:
            StoreConnectionError: Raised when the store stays unreachable.
            StoreTimeoutError: Raised when requests keep timing out.
            StoreRequestError: Raised when the store rejects the query.
            StoreResponseError: Raised when the response is not SPARQL JSON results.
        """

        payload = self._store_post(query=query, accept="application/sparql-results+json")
        try:
            document = json.loads(payload)
        except json.JSONDecodeError as error:
            raise StoreResponseError("SPARQL SELECT response is not valid JSON") from error
        return store_parse_select_results(document)

    def store_construct(self, query: str, media_type: str = "text/turtle") -> str:
        """Execute a CONSTRUCT query and return the serialized graph.

        Args:
            query: SPARQL CONSTRUCT query.
            media_type: Requested RDF serialization.

        Returns:
            str: Serialized triples.

        Raises:
            StoreConnectionError: Raised when the store stays unreachable.
            StoreTimeoutError: Raised when requests keep timing out.
            StoreRequestError: Raised when the store rejects the query.
        """

        return self._store_post(query=query, accept=media_type, format_hint=media_type)

    def store_update(self, query: str) -> None:
        """Execute a SPARQL update.

        Args:
            query: SPARQL update request.

        Returns:
            None: Update is applied as side effect.

        Raises:
            StoreConnectionError: Raised when the store stays unreachable.
            StoreTimeoutError: Raised when requests keep timing out.
            StoreRequestError: Raised when the store rejects the update.
        """

        self._store_post(query=query, accept="application/sparql-results+json")

    def store_close(self) -> None:
        """Release pooled HTTP connections.

        Returns:
            None: Connections are closed as side effect.
        """

        self._client.close()

    def _store_post(self, query: str, accept: str, format_hint: str | None = None) -> str:
        """Post one SPARQL request, retrying transient failures with linear backoff.

        Args:
            query: SPARQL query or update text.
            accept: Accept header value.
            format_hint: Optional `format` form parameter understood by Virtuoso.

        Returns:
            str: Response body text.

        Raises:
            StoreConnectionError: Raised when retries are exhausted on transport or 5xx failures.
            StoreTimeoutError: Raised when retries are exhausted on timeouts.
            StoreRequestError: Raised immediately on non-retryable HTTP 4xx responses.
        """

        form_data = {"query": query}
        if format_hint is not None:
            form_data["format"] = format_hint
        headers = {**self._headers, "Accept": accept}

        last_error: StoreConnectionError | StoreTimeoutError | None = None
        for attempt_number in range(1, self._retry_strategy.retry_attempts + 1):
            try:
                response = self._client.post(self._endpoint, data=form_data, headers=headers)
            except httpx.TimeoutException as error:
                last_error = StoreTimeoutError(f"SPARQL request to {self._endpoint} timed out")
                last_error.__cause__ = error
            except httpx.TransportError as error:
                last_error = StoreConnectionError(f"SPARQL request to {self._endpoint} failed: {error}")
                last_error.__cause__ = error
            else:
                if response.status_code in self._RETRYABLE_STATUS_CODES:
                    last_error = StoreConnectionError(
                        f"SPARQL endpoint {self._endpoint} returned HTTP {response.status_code}",
                        status_code=response.status_code,
                    )
                elif response.status_code >= 400:
                    raise StoreRequestError(
                        f"SPARQL endpoint {self._endpoint} rejected request with HTTP {response.status_code}: "
                        f"{response.text[:500]}",
                        status_code=response.status_code,
                    )
                else:
                    return response.text

            if attempt_number < self._retry_strategy.retry_attempts:
                wait_seconds = self._retry_strategy.strategy_calculate_retry_wait_seconds(attempt_number)
                logger.warning(
                    "SPARQL request failed (%s), retrying in %.2fs [%d/%d]",
                    last_error,
                    wait_seconds,
                    attempt_number,
                    self._retry_strategy.retry_attempts,
                )
                if wait_seconds > 0:
                    time.sleep(wait_seconds)

        logger.error("SPARQL request failed after %d attempts:\n%s", self._retry_strategy.retry_attempts, query)
        if last_error is None:
            raise RuntimeError("SPARQL request loop ended without a response")
        raise last_error


def store_parse_select_results(document: Any) -> list[dict[str, str | None]]:
    """Convert SPARQL JSON results into flat dictionaries.

    Args:
        document: Parsed `application/sparql-results+json` document.

    Returns:
        list[dict[str, str | None]]: Solutions keyed by every projected variable.

    Raises:
        StoreResponseError: Raised when the document does not follow the results format.
    """

    try:
        variables = list(document["head"]["vars"])
        bindings = document["results"]["bindings"]
    except (KeyError, TypeError) as error:
        raise StoreResponseError("SPARQL SELECT response misses head.vars or results.bindings") from error

    rows: list[dict[str, str | None]] = []
    for binding in bindings:
        row: dict[str, str | None] = {}
        for variable in variables:
            term = binding.get(variable)
            row[variable] = term["value"] if term else None
        rows.append(row)
    return rows
