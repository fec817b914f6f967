"""Graph names, codelists and URI builders shared by SPARQL templates."""

from __future__ import annotations

from typing import Final

KALEIDOS_GRAPH_KANSELARIJ: Final[str] = "http://mu.semte.ch/graphs/organizations/kanselarij"
KALEIDOS_GRAPH_PUBLIC: Final[str] = "http://mu.semte.ch/graphs/public"

ACCESS_LEVEL_PUBLIC: Final[str] = (
    "http://themis.vlaanderen.be/id/concept/toegangsniveau/c3de9c70-391e-4031-a85e-4b03433d6266"
)

ACTIVITY_TYPE_PUBLICATION: Final[str] = (
    "http://themis.vlaanderen.be/id/concept/activity-type/fb1916be-0a42-4a52-a69d-92764eba4955"
)
AGENDA_STATUS_PUBLIC: Final[str] = (
    "http://themis.vlaanderen.be/id/concept/agenda-status/de6fc320-cfb9-47a6-af25-e063b80992f7"
)
AGENDA_ITEM_TYPE_NOTA: Final[str] = (
    "http://themis.vlaanderen.be/id/concept/agendapunt-type/dd47a8f8-3ad2-4d5a-8318-66fc02fe80fd"
)
AGENDA_ITEM_TYPE_ANNOUNCEMENT: Final[str] = (
    "http://themis.vlaanderen.be/id/concept/agendapunt-type/8f8adcf0-58ef-4edc-9e36-0c9095fd76b0"
)
DOCUMENT_TYPE_NEWS_ITEM: Final[str] = (
    "http://themis.vlaanderen.be/id/concept/document-type/63d628cb-a594-4166-8b4e-880b4214fc5b"
)
GOVERNING_BODY: Final[str] = "http://themis.vlaanderen.be/id/bestuursorgaan/7f2c82aa-75ac-40f8-a6c3-9fe539163025"

TTL_TO_DELTA_STATUS_NOT_STARTED: Final[str] = (
    "http://redpencil.data.gift/ttl-to-delta-tasks/8C7E9155-B467-49A4-B047-7764FE5401F7"
)

LEGACY_BESLUITVORMING_NAMESPACE: Final[str] = "http://data.vlaanderen.be/ns/besluitvorming#"

STAGING_GRAPH_URI_BASE: Final[str] = "http://mu.semte.ch/graphs/tmp/"

PREFIXES: Final[str] = """
PREFIX mu: <http://mu.semte.ch/vocabularies/core/>
PREFIX ext: <http://mu.semte.ch/vocabularies/ext/>
PREFIX prov: <http://www.w3.org/ns/prov#>
PREFIX dct: <http://purl.org/dc/terms/>
PREFIX adms: <http://www.w3.org/ns/adms#>
PREFIX besluit: <http://data.vlaanderen.be/ns/besluit#>
PREFIX besluitvorming: <https://data.vlaanderen.be/ns/besluitvorming#>
PREFIX dossier: <https://data.vlaanderen.be/ns/dossier#>
PREFIX mandaat: <http://data.vlaanderen.be/ns/mandaat#>
PREFIX schema: <http://schema.org/>
PREFIX nie: <http://www.semanticdesktop.org/ontologies/2007/01/19/nie#>
PREFIX nfo: <http://www.semanticdesktop.org/ontologies/2007/03/22/nfo#>
PREFIX dbpedia: <http://dbpedia.org/ontology/>
PREFIX themis: <http://themis.vlaanderen.be/vocabularies/besluitvorming/>
PREFIX generiek: <https://data.vlaanderen.be/ns/generiek#>
"""


def vocabulary_public_resource_uri(resource_type: str, resource_id: str) -> str:
    """Build the URI of a resource minted in the public namespace.

    Args:
        resource_type: Path segment naming the resource type (e.g. `agenda`).
        resource_id: Resource UUID.

    Returns:
        str: Public resource URI.
    """

    return f"http://themis.vlaanderen.be/id/{resource_type}/{resource_id}"


def vocabulary_staging_graph_uri(compact_timestamp: str) -> str:
    """Build the staging graph URI for one export execution.

    Args:
        compact_timestamp: Digits-only export timestamp.

    Returns:
        str: Staging graph URI.
    """

    return f"{STAGING_GRAPH_URI_BASE}{compact_timestamp}"
