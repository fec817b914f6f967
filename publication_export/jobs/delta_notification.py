"""Registration of exported files as ttl-to-delta tasks."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Final, Sequence
from uuid import uuid4

from publication_export.adapters import SparqlStorePort
from publication_export.domain import domain_utc_now
from publication_export.mapping import (
    KALEIDOS_GRAPH_PUBLIC,
    TTL_TO_DELTA_STATUS_NOT_STARTED,
    sparql_escape_datetime,
    sparql_escape_uri,
)

from .interfaces import DeltaNotificationPort

logger = logging.getLogger(__name__)

TTL_TO_DELTA_TASK_URI_BASE: Final[str] = "http://data.kaleidos.vlaanderen.be/ttl-to-delta-tasks/"
FILE_URI_BASE: Final[str] = "http://data.kaleidos.vlaanderen.be/files/"
SHARE_URI_SCHEME: Final[str] = "share://"


class TtlToDeltaNotifier(DeltaNotificationPort):
    """Notifier inserting a not-started ttl-to-delta task for produced files.

    The task is written through the delta-generating endpoint so that the
    downstream consumer picks it up. Each file is registered as a logical file
    whose physical counterpart lives under `share://`.
    """

    def __init__(
        self,
        store: SparqlStorePort,
        export_directory: Path,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize notifier.

        Args:
            store: Delta-generating store receiving the task.
            export_directory: Directory mapped onto `share://`.
            id_factory: Optional generator of task and file UUIDs.
            clock: Optional provider of the creation timestamp.

        Returns:
            None: Initializer does not return a value.
        """

        self._store = store
        self._export_directory = Path(export_directory)
        self._id_factory = id_factory or (lambda: str(uuid4()))
        self._clock = clock or domain_utc_now

    def notification_physical_file_uri(self, file_path: Path) -> str:
        """Map an exported file onto its `share://` URI.

        Args:
            file_path: File under the export directory.

        Returns:
            str: Physical file URI.

        Raises:
            ValueError: Raised when the file is outside the export directory.
        """

        relative_path = Path(file_path).relative_to(self._export_directory)
        return f"{SHARE_URI_SCHEME}{relative_path.as_posix()}"

    def notification_register_files(self, file_paths: Sequence[Path]) -> str | None:
        """Insert one ttl-to-delta task referencing every produced file.

        Args:
            file_paths: Produced files in production order.

        Returns:
            str | None: Task URI, None when no file was produced.

        Raises:
            StoreAdapterError: Raised when the insert fails.
            ValueError: Raised when a file is outside the export directory.
        """

        if not file_paths:
            logger.info("No files generated by export. No need to create a ttl-to-delta task.")
            return None

        task_uri = f"{TTL_TO_DELTA_TASK_URI_BASE}{self._id_factory()}"
        created = sparql_escape_datetime(self._clock())
        file_statements: list[str] = []
        for file_path in file_paths:
            file_uri = sparql_escape_uri(f"{FILE_URI_BASE}{self._id_factory()}")
            physical_uri = sparql_escape_uri(self.notification_physical_file_uri(file_path))
            file_statements.append(
                f"    {sparql_escape_uri(task_uri)} prov:used {file_uri} .\n"
                f"    {physical_uri} nie:dataSource {file_uri} ;\n"
                f"      dct:created {created} ."
            )

        statements = "\n".join(file_statements)
        self._store.store_update(
            f"""PREFIX adms: <http://www.w3.org/ns/adms#>
PREFIX prov: <http://www.w3.org/ns/prov#>
PREFIX nie: <http://www.semanticdesktop.org/ontologies/2007/01/19/nie#>
PREFIX dct: <http://purl.org/dc/terms/>
INSERT DATA {{
  GRAPH {sparql_escape_uri(KALEIDOS_GRAPH_PUBLIC)} {{
    {sparql_escape_uri(task_uri)} a <http://mu.semte.ch/vocabularies/ext/TtlToDeltaTask> ;
      adms:status {sparql_escape_uri(TTL_TO_DELTA_STATUS_NOT_STARTED)} .
{statements}
  }}
}}"""
        )
        logger.info("Created ttl-to-delta task <%s> for %d file(s)", task_uri, len(file_paths))
        return task_uri
