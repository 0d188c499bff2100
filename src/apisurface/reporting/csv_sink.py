"""CSV report writers for per-resource and per-module surface rows."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from types import TracebackType
from typing import Any, TextIO

from apisurface.analysis.aggregator import ModuleSummary, ResourceSurfaceRecord

log = logging.getLogger(__name__)

RESOURCES_FILE = "resources.csv"
MODULES_FILE = "modules.csv"

RESOURCES_HEADER = ("service", "resource", "surface", "stability")
MODULES_HEADER = (
    "Service",
    "Stability",
    "Surface (props)",
    "Stable (props)",
    "Experimental (props)",
    "Deprecated (props)",
    "Coverage",
    "Total SUs",
    "Covered SUs",
)


def resource_row(record: ResourceSurfaceRecord) -> tuple[str, ...]:
    """
    Render a resource record as a ``resources.csv`` row.

    Returns
    -------
    tuple[str, ...]
        Row values in header order.
    """
    return (
        record.service,
        record.base_name,
        str(record.property_count),
        str(record.stability),
    )


def module_row(summary: ModuleSummary) -> tuple[str, ...]:
    """
    Render a module summary as a ``modules.csv`` row.

    Returns
    -------
    tuple[str, ...]
        Row values in header order.
    """
    return (
        summary.service,
        str(summary.module_stability),
        str(summary.total_props),
        str(summary.total_stable_props),
        str(summary.total_experimental_props),
        str(summary.total_deprecated_props),
        f"{summary.coverage_percent}%",
        str(summary.total_su),
        str(summary.covered_su),
    )


class ReportSink:
    """Append-only writer for ``resources.csv`` and ``modules.csv``."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self._streams: list[TextIO] = []
        self._resources: Any = None
        self._modules: Any = None

    def open(self) -> ReportSink:
        """
        Create both files and write their headers.

        Returns
        -------
        ReportSink
            This sink, ready for rows.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        resources = self._open_stream(RESOURCES_FILE)
        try:
            modules = self._open_stream(MODULES_FILE)
        except OSError:
            self.close()
            raise
        self._resources = csv.writer(resources, lineterminator="\n")
        self._modules = csv.writer(modules, lineterminator="\n")
        self._resources.writerow(RESOURCES_HEADER)
        self._modules.writerow(MODULES_HEADER)
        return self

    def _open_stream(self, name: str) -> TextIO:
        stream = (self.output_dir / name).open("w", encoding="utf-8", newline="")
        self._streams.append(stream)
        return stream

    def write_resource(self, record: ResourceSurfaceRecord) -> None:
        """Append one ``resources.csv`` row."""
        if self._resources is None:
            message = "ReportSink is not open"
            raise RuntimeError(message)
        self._resources.writerow(resource_row(record))

    def write_module(self, summary: ModuleSummary) -> None:
        """Append one ``modules.csv`` row."""
        if self._modules is None:
            message = "ReportSink is not open"
            raise RuntimeError(message)
        self._modules.writerow(module_row(summary))

    def close(self) -> None:
        """Flush and close both files."""
        for stream in self._streams:
            stream.close()
        self._streams = []
        self._resources = None
        self._modules = None
        log.info("Wrote %s and %s to %s", RESOURCES_FILE, MODULES_FILE, self.output_dir)

    def __enter__(self) -> ReportSink:
        """
        Open both files when entering a context manager.

        Returns
        -------
        ReportSink
            This sink, ready for rows.
        """
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close both files on every exit path."""
        self.close()
