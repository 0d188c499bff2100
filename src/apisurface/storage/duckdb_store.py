"""DuckDB-backed history store for module snapshots and history rows."""

from __future__ import annotations

import logging
from dataclasses import astuple, dataclass
from pathlib import Path
from types import TracebackType

import duckdb

from apisurface.services.errors import PersistenceError
from apisurface.storage.history import ModuleHistoryRecord, ModuleSnapshot
from apisurface.storage.schemas import apply_all_schemas

log = logging.getLogger(__name__)


@dataclass
class DuckDBConfig:
    """Configuration for connecting to the history DuckDB database."""

    db_path: Path
    read_only: bool = False


class DuckDBHistoryStore:
    """History store persisting into ``surface.module`` and ``surface.module_history``."""

    def __init__(self, cfg: DuckDBConfig) -> None:
        self.cfg = cfg
        self._con: duckdb.DuckDBPyConnection | None = None

    def connect(self) -> duckdb.DuckDBPyConnection:
        """
        Establish a DuckDB connection, applying schemas on first connect.

        Returns
        -------
        duckdb.DuckDBPyConnection
            Live connection configured per `self.cfg`.
        """
        if self._con is not None:
            return self._con

        db_path = self.cfg.db_path
        if not self.cfg.read_only:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        log.info("Connecting to DuckDB at %s (read_only=%s)", db_path, self.cfg.read_only)
        con = duckdb.connect(str(db_path), read_only=self.cfg.read_only)
        if not self.cfg.read_only:
            apply_all_schemas(con)
        self._con = con
        return self._con

    @property
    def con(self) -> duckdb.DuckDBPyConnection:
        """Expose the lazily created connection."""
        return self.connect()

    def find_history_id(self, module: str, major: int, minor: int, patch: int) -> str | None:
        """
        Return the history identifier recorded for a module version.

        Returns
        -------
        str | None
            Identifier, or None when the version was never recorded.
        """
        try:
            row = self.con.execute(
                """
                SELECT id FROM surface.module_history
                WHERE module = ? AND major = ? AND minor = ? AND patch = ?
                """,
                [module, major, minor, patch],
            ).fetchone()
        except duckdb.Error as exc:
            raise PersistenceError(str(exc), module=module) from exc
        return None if row is None else str(row[0])

    def save_history(self, record: ModuleHistoryRecord) -> None:
        """Insert a history row; an existing row for the same version is kept."""
        values = list(astuple(record))
        placeholders = ", ".join("?" for _ in values)
        try:
            self.con.execute(
                f"""
                INSERT INTO surface.module_history (
                    id, module, major, minor, patch, maturity, stability,
                    num_props, num_stable_props, num_deprecated_props,
                    num_experimental_props, normver, created_at
                )
                VALUES ({placeholders}, CAST(now() AS TIMESTAMP))
                ON CONFLICT DO NOTHING
                """,  # noqa: S608 - placeholders only
                values,
            )
        except duckdb.Error as exc:
            raise PersistenceError(str(exc), module=record.module) from exc

    def save_snapshot(self, snapshot: ModuleSnapshot) -> None:
        """Replace the current snapshot row of a module."""
        values = list(astuple(snapshot))
        placeholders = ", ".join("?" for _ in values)
        try:
            self.con.execute(
                f"""
                INSERT OR REPLACE INTO surface.module (
                    module, stability, maturity, category, num_props,
                    num_stable_props, num_deprecated_props,
                    num_experimental_props, updated_at
                )
                VALUES ({placeholders}, CAST(now() AS TIMESTAMP))
                """,  # noqa: S608 - placeholders only
                values,
            )
        except duckdb.Error as exc:
            raise PersistenceError(str(exc), module=snapshot.module) from exc

    def close(self) -> None:
        """Close the current connection if it exists."""
        if self._con is not None:
            log.info("Closing DuckDB connection to %s", self.cfg.db_path)
            self._con.close()
            self._con = None

    def __enter__(self) -> DuckDBHistoryStore:
        """
        Open the connection when entering a context manager.

        Returns
        -------
        DuckDBHistoryStore
            This store, connected.
        """
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the connection when exiting a context manager."""
        self.close()
