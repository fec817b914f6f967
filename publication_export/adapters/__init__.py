"""Adapter layer package for SPARQL store integration boundaries."""

from .interfaces import SparqlStorePort
from .sparql_store import SparqlStoreClient, store_parse_select_results
from .store_errors import (
	StoreAdapterError,
	StoreConnectionError,
	StoreRequestError,
	StoreResponseError,
	StoreTimeoutError,
)

__all__ = [
	"SparqlStoreClient",
	"SparqlStorePort",
	"StoreAdapterError",
	"StoreConnectionError",
	"StoreRequestError",
	"StoreResponseError",
	"StoreTimeoutError",
	"store_parse_select_results",
]
