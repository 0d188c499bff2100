"""Report pipeline wiring the analysis to its sinks."""

from __future__ import annotations

from apisurface.pipeline.report import open_history_store, run_report

__all__ = ["open_history_store", "run_report"]
