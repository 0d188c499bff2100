"""Typed fakes for history store and database engine tests."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from apisurface.storage.history import ModuleHistoryRecord, ModuleSnapshot


@dataclass
class InMemoryHistoryStore:
    """History store keeping rows in dicts keyed like the relational tables."""

    history: dict[tuple[str, int, int, int], ModuleHistoryRecord] = field(default_factory=dict)
    snapshots: dict[str, ModuleSnapshot] = field(default_factory=dict)
    lookups: list[tuple[str, int, int, int]] = field(default_factory=list)
    closed: bool = False

    def find_history_id(self, module: str, major: int, minor: int, patch: int) -> str | None:
        key = (module, major, minor, patch)
        self.lookups.append(key)
        found = self.history.get(key)
        return None if found is None else found.id

    def save_history(self, record: ModuleHistoryRecord) -> None:
        key = (record.module, record.major, record.minor, record.patch)
        self.history.setdefault(key, record)

    def save_snapshot(self, snapshot: ModuleSnapshot) -> None:
        self.snapshots[snapshot.module] = snapshot

    def close(self) -> None:
        self.closed = True


class _FakeMappings:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows

    def first(self) -> dict[str, Any] | None:
        return self._rows[0] if self._rows else None


class _FakeResult:
    def __init__(self, rows: list[dict[str, Any]] | None) -> None:
        self._rows = rows or []
        self.returns_rows = rows is not None

    def mappings(self) -> _FakeMappings:
        return _FakeMappings(self._rows)


@dataclass
class FakeEngine:
    """SQLAlchemy engine double recording executed statements and their parameters."""

    responses: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    fail_with: Exception | None = None
    disposed: bool = False

    def execute(self, statement: Any, params: dict[str, Any]) -> _FakeResult:
        sql = str(statement)
        self.calls.append((sql, params))
        if self.fail_with is not None:
            raise self.fail_with
        for prefix, rows in self.responses.items():
            if sql.startswith(prefix):
                return _FakeResult(rows)
        return _FakeResult(None)

    @contextmanager
    def begin(self) -> Iterator[FakeEngine]:
        yield self

    def dispose(self) -> None:
        self.disposed = True
