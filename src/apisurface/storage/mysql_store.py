"""MySQL history store calling the module stored procedures."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from apisurface.config.models import MySQLSettings
from apisurface.services.errors import PersistenceError
from apisurface.storage.history import ModuleHistoryRecord, ModuleSnapshot

log = logging.getLogger(__name__)

MODULE_SAVE_SQL = text(
    "CALL module_save(:module, :stability, :maturity, :category, :num_props,"
    " :num_stable_props, :num_deprecated_props, :num_experimental_props)"
)
MODULE_HISTORY_GET_ID_SQL = text("CALL module_history_get_id(:module, :major, :minor, :patch)")
MODULE_HISTORY_SAVE_SQL = text(
    "CALL module_history_save(:id, :module, :major, :minor, :patch, :maturity, :num_props,"
    " :num_stable_props, :num_deprecated_props, :num_experimental_props, :normver)"
)


def mysql_url(settings: MySQLSettings) -> URL:
    """
    Build the SQLAlchemy URL for the PyMySQL driver.

    Returns
    -------
    URL
        Connection URL.
    """
    return URL.create(
        "mysql+pymysql",
        username=settings.user,
        password=settings.password,
        host=settings.host,
        database=settings.database,
    )


class MySQLHistoryStore:
    """History store delegating to ``module_save``/``module_history_*`` procedures."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: MySQLSettings) -> MySQLHistoryStore:
        """
        Create a store with an engine for the configured database.

        Returns
        -------
        MySQLHistoryStore
            Store bound to a new engine.
        """
        log.info("Connecting to MySQL at %s/%s", settings.host, settings.database)
        return cls(create_engine(mysql_url(settings), pool_pre_ping=True))

    def _call(self, statement: Any, params: Mapping[str, object], *, module: str) -> Any:
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement, dict(params))
                return result.mappings().first() if result.returns_rows else None
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc), module=module) from exc

    def find_history_id(self, module: str, major: int, minor: int, patch: int) -> str | None:
        """
        Return the history identifier recorded for a module version.

        Returns
        -------
        str | None
            Identifier, or None when the procedure returns no row.
        """
        row = self._call(
            MODULE_HISTORY_GET_ID_SQL,
            {"module": module, "major": major, "minor": minor, "patch": patch},
            module=module,
        )
        if row is None or row.get("id") is None:
            return None
        return str(row["id"])

    def save_history(self, record: ModuleHistoryRecord) -> None:
        """Call ``module_history_save`` for one history row."""
        self._call(
            MODULE_HISTORY_SAVE_SQL,
            {
                "id": record.id,
                "module": record.module,
                "major": record.major,
                "minor": record.minor,
                "patch": record.patch,
                "maturity": record.maturity,
                "num_props": record.num_props,
                "num_stable_props": record.num_stable_props,
                "num_deprecated_props": record.num_deprecated_props,
                "num_experimental_props": record.num_experimental_props,
                "normver": record.normver,
            },
            module=record.module,
        )

    def save_snapshot(self, snapshot: ModuleSnapshot) -> None:
        """Call ``module_save`` for the module's current snapshot."""
        self._call(
            MODULE_SAVE_SQL,
            {
                "module": snapshot.module,
                "stability": snapshot.stability,
                "maturity": snapshot.maturity,
                "category": snapshot.category,
                "num_props": snapshot.num_props,
                "num_stable_props": snapshot.num_stable_props,
                "num_deprecated_props": snapshot.num_deprecated_props,
                "num_experimental_props": snapshot.num_experimental_props,
            },
            module=snapshot.module,
        )

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.engine.dispose()
