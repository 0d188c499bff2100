"""Pytest configuration for the apisurface test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from apisurface.storage.duckdb_store import DuckDBConfig, DuckDBHistoryStore


@pytest.fixture
def duckdb_store(tmp_path: Path) -> Iterator[DuckDBHistoryStore]:
    """Provide a history store over a fresh DuckDB file.

    Yields
    ------
    DuckDBHistoryStore
        Connected store with schemas applied; closed after the test.
    """
    with DuckDBHistoryStore(DuckDBConfig(db_path=tmp_path / "db" / "history.duckdb")) as store:
        yield store
