"""Promotion of staging graphs into the public baseline graph."""

import logging

from publication_export.adapters import SparqlStorePort
from publication_export.mapping import sparql_escape_uri

from .interfaces import GraphPromotionPort

logger = logging.getLogger(__name__)


class SparqlGraphPromotion(GraphPromotionPort):
    """Graph promotion issuing Virtuoso graph management updates."""

    def __init__(self, store: SparqlStorePort):
        """Initialize graph promotion.

        Args:
            store: Store holding staging and public graphs.
        """

        self._store = store

    def promotion_merge_graph(self, source_graph: str, target_graph: str) -> None:
        """Add all triples of a graph to another graph.

        Args:
            source_graph: Graph to copy from.
            target_graph: Graph to copy into.

        Returns:
            None: Triples are copied as side effect.
        """

        logger.info("Merging graph <%s> into <%s>", source_graph, target_graph)
        self._store.store_update(
            f"ADD SILENT GRAPH {sparql_escape_uri(source_graph)} TO {sparql_escape_uri(target_graph)}"
        )

    def promotion_drop_graph(self, graph: str) -> None:
        """Drop a graph without transaction logging.

        Args:
            graph: Graph to drop.

        Returns:
            None: Graph is dropped as side effect.
        """

        logger.info("Dropping graph <%s>", graph)
        self._store.store_update(f"DEFINE sql:log-enable 3 DROP SILENT GRAPH {sparql_escape_uri(graph)}")
