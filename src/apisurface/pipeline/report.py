"""Run the surface-coverage report: load manifests, analyze, write and persist."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from apisurface.analysis.aggregator import ModuleAggregator, ModuleReport
from apisurface.config.models import (
    MySQLSettings,
    PersistMode,
    ReportConfig,
    RestSettings,
    load_environment,
)
from apisurface.metadata.manifest import load_type_system
from apisurface.metadata.models import TypeSystem
from apisurface.reporting.csv_sink import ReportSink
from apisurface.storage.duckdb_store import DuckDBConfig, DuckDBHistoryStore
from apisurface.storage.history import HistoryStore, ModuleHistoryRecorder
from apisurface.storage.mysql_store import MySQLHistoryStore

log = logging.getLogger(__name__)


def open_history_store(cfg: ReportConfig, env: Mapping[str, str]) -> HistoryStore | None:
    """
    Create the history store selected by the persistence mode.

    Returns
    -------
    HistoryStore | None
        Store for ``mysql``/``duckdb`` modes, None when only CSV is written.

    Raises
    ------
    ConfigurationError
        If the mode's required environment variables are missing.
    """
    if cfg.persist is PersistMode.MYSQL:
        return MySQLHistoryStore.from_settings(MySQLSettings.from_env(env))
    if cfg.persist is PersistMode.DUCKDB:
        return DuckDBHistoryStore(DuckDBConfig(db_path=cfg.db_path))
    if cfg.persist is PersistMode.REST:
        settings = RestSettings.from_env(env)
        log.warning("REST submission to %s is not implemented; writing CSV only", settings.url)
    return None


def run_report(
    cfg: ReportConfig,
    *,
    env: Mapping[str, str] | None = None,
    store: HistoryStore | None = None,
    system: TypeSystem | None = None,
) -> list[ModuleReport]:
    """
    Produce the CSV reports and persist module history for one version.

    Parameters
    ----------
    cfg
        Run configuration.
    env
        Environment used for connection settings; defaults to ``os.environ``.
    store
        Pre-built history store; the caller keeps ownership and closes it.
    system
        Pre-loaded type system; loaded from ``cfg.manifest_dir`` when omitted.

    Returns
    -------
    list[ModuleReport]
        Reports for every qualifying module, in processing order.
    """
    owns_store = store is None
    if store is None:
        store = open_history_store(cfg, load_environment(cfg.persist, env))

    reports: list[ModuleReport] = []
    try:
        if system is None:
            system = load_type_system(cfg.manifest_dir)
        aggregator = ModuleAggregator(system, module_prefix=cfg.module_prefix)
        recorder = (
            ModuleHistoryRecorder(store, version=cfg.version, latest_version=cfg.latest_version)
            if store is not None
            else None
        )
        with ReportSink(cfg.output_dir) as sink:
            for report in aggregator.iter_reports():
                for record in report.resources:
                    sink.write_resource(record)
                sink.write_module(report.summary)
                if recorder is not None:
                    recorder.record(report.summary)
                reports.append(report)
    finally:
        if owns_store and store is not None:
            store.close()

    log.info("Processed %d modules for version %s", len(reports), cfg.version)
    return reports
