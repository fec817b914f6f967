"""Paginated export of a staging graph into a Turtle file."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from publication_export.adapters import SparqlStorePort, StoreResponseError
from publication_export.mapping import sparql_escape_uri

from .interfaces import GraphExporterPort

logger = logging.getLogger(__name__)


class GraphBulkExporter(GraphExporterPort):
    """Exporter paging CONSTRUCT results into a temporary file renamed on completion.

    Pages are fetched sequentially with a stable `ORDER BY` so offsets address
    the same triples on every page. The final file name only appears after the
    last page was written, and a sidecar `.graph` file then records the graph
    the triples must be loaded into downstream.
    """

    _TURTLE_MEDIA_TYPE = "text/turtle"

    def __init__(self, store: SparqlStorePort, target_graph: str, batch_size: int = 1000):
        """Initialize bulk exporter.

        Args:
            store: Store holding the graphs to export.
            target_graph: Graph URI written to the sidecar file.
            batch_size: Number of triples per page.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        if not target_graph.strip():
            raise ValueError("target_graph must not be blank")
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._store = store
        self._target_graph = target_graph.strip()
        self._batch_size = batch_size

    def exporter_count_triples(self, graph: str) -> int:
        """Count triples in a graph.

        Args:
            graph: Graph URI.

        Returns:
            int: Number of triples.

        Raises:
            StoreResponseError: Raised when the count result is malformed.
        """

        rows = self._store.store_select(
            f"SELECT (COUNT(*) AS ?count) WHERE {{ GRAPH {sparql_escape_uri(graph)} {{ ?s ?p ?o . }} }}"
        )
        if not rows or rows[0].get("count") is None:
            raise StoreResponseError(f"triple count of graph <{graph}> missing from response")
        try:
            return int(rows[0]["count"])
        except ValueError as error:
            raise StoreResponseError(f"triple count of graph <{graph}> is not an integer") from error

    def exporter_write_graph(self, graph: str, file_path: Path) -> Path | None:
        """Write all triples of a graph to a file with atomic finalization.

        Args:
            graph: Graph URI to export.
            file_path: Final path of the Turtle file.

        Returns:
            Path | None: Final path, None when the graph holds no triples.

        Raises:
            StoreAdapterError: Raised when counting or fetching a page fails.
            OSError: Raised when the file cannot be written.
        """

        total = self.exporter_count_triples(graph)
        logger.info("Exporting 0/%d triples from graph <%s>", total, graph)
        if total == 0:
            return None

        final_path = Path(file_path)
        temporary_path = final_path.with_name(f"{final_path.name}.tmp")
        final_path.parent.mkdir(parents=True, exist_ok=True)

        with temporary_path.open("w", encoding="utf-8") as handle:
            offset = 0
            while offset < total:
                page = self._store.store_construct(
                    self._exporter_page_query(graph=graph, offset=offset),
                    media_type=self._TURTLE_MEDIA_TYPE,
                )
                handle.write(page)
                handle.write("\n")
                offset += self._batch_size
                logger.info("Constructed %d/%d triples from graph <%s>", min(offset, total), total, graph)

        os.replace(temporary_path, final_path)
        final_path.with_suffix(".graph").write_text(self._target_graph, encoding="utf-8")
        return final_path

    def _exporter_page_query(self, graph: str, offset: int) -> str:
        """Build the CONSTRUCT query of one page.

        Args:
            graph: Graph URI.
            offset: Number of triples to skip.

        Returns:
            str: SPARQL CONSTRUCT query.
        """

        return (
            "CONSTRUCT { ?s ?p ?o } "
            f"WHERE {{ GRAPH {sparql_escape_uri(graph)} {{ ?s ?p ?o . }} }} "
            f"ORDER BY ?s ?p ?o LIMIT {self._batch_size} OFFSET {offset}"
        )
