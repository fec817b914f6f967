"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol


class SparqlStorePort(Protocol):
    """Port definition for executing SPARQL requests against one remote store."""

    def store_endpoint_label(self) -> str:
        """Return the endpoint identifier for diagnostics.

        Returns:
            str: Endpoint URL of the store.

        Raises:
            RuntimeError: Raised when endpoint metadata is unavailable.
        """

    def store_select(self, query: str) -> list[dict[str, str | None]]:
        """Execute a SELECT query and flatten its bindings.

        Args:
            query: SPARQL SELECT query.

        Returns:
            list[dict[str, str | None]]: One mapping per solution, keyed by every
                projected variable, None for unbound values.

        Raises:
            ConnectionError: Raised when the store stays unreachable after retries.
            TimeoutError: Raised when requests keep timing out after retries.
            ValueError: Raised when the store rejects the query.
        """

    def store_construct(self, query: str, media_type: str = "text/turtle") -> str:
        """Execute a CONSTRUCT query and return the serialized graph.

        Args:
            query: SPARQL CONSTRUCT query.
            media_type: Requested RDF serialization.

        Returns:
            str: Serialized triples.

        Raises:
            ConnectionError: Raised when the store stays unreachable after retries.
            TimeoutError: Raised when requests keep timing out after retries.
            ValueError: Raised when the store rejects the query.
        """

    def store_update(self, query: str) -> None:
        """Execute a SPARQL update.

        Args:
            query: SPARQL update request.

        Returns:
            None: Update is applied as side effect.

        Raises:
            ConnectionError: Raised when the store stays unreachable after retries.
            TimeoutError: Raised when requests keep timing out after retries.
            ValueError: Raised when the store rejects the update.
        """
