"""Typed interfaces for job-layer orchestration responsibilities."""

from pathlib import Path
from typing import Protocol, Sequence

from publication_export.db import PublicationJobRecord


class ExportContractError(RuntimeError):
    """Raised when source data needed by an export is missing or inconsistent."""


class GraphExporterPort(Protocol):
    """Port definition for writing one staging graph to a Turtle file."""

    def exporter_write_graph(self, graph: str, file_path: Path) -> Path | None:
        """Write all triples of a graph to a file with atomic finalization.

        Args:
            graph: Graph URI to export.
            file_path: Final path of the Turtle file.

        Returns:
            Path | None: Final path, None when the graph holds no triples.

        Raises:
            ConnectionError: Raised when the store stays unreachable after retries.
            OSError: Raised when the file cannot be written.
        """


class GraphPromotionPort(Protocol):
    """Port definition for merging staging graphs into the public baseline."""

    def promotion_merge_graph(self, source_graph: str, target_graph: str) -> None:
        """Add all triples of a graph to another graph.

        Args:
            source_graph: Graph to copy from.
            target_graph: Graph to copy into.

        Returns:
            None: Triples are copied as side effect.

        Raises:
            ConnectionError: Raised when the store stays unreachable after retries.
        """

    def promotion_drop_graph(self, graph: str) -> None:
        """Drop a graph.

        Args:
            graph: Graph to drop.

        Returns:
            None: Graph is dropped as side effect.

        Raises:
            ConnectionError: Raised when the store stays unreachable after retries.
        """


class DeltaNotificationPort(Protocol):
    """Port definition for announcing produced files to downstream consumers."""

    def notification_register_files(self, file_paths: Sequence[Path]) -> str | None:
        """Register produced files for downstream consumption.

        Args:
            file_paths: Produced files in production order.

        Returns:
            str | None: URI of the registered task, None when there was nothing to register.

        Raises:
            ConnectionError: Raised when the store stays unreachable after retries.
        """


class PublicationPipelinePort(Protocol):
    """Port definition for exporting one publication job."""

    def pipeline_export(self, job: PublicationJobRecord) -> str | None:
        """Assemble, write and promote the public snapshot of one job.

        Args:
            job: Job being executed.

        Returns:
            str | None: Publication activity URI, None when nothing was exported.

        Raises:
            ExportContractError: Raised when source data is missing.
            ConnectionError: Raised when a store stays unreachable after retries.
        """


class SchedulerPort(Protocol):
    """Port definition for the single-flight job scheduler."""

    def scheduler_run_next(self) -> int:
        """Execute scheduled jobs until none is eligible.

        Returns:
            int: Number of executed jobs.
        """

    def scheduler_retry_failed(self) -> int:
        """Re-execute failed jobs below the retry bound.

        Returns:
            int: Number of re-executed jobs.
        """
