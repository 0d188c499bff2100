"""
Versioned persistence of module rollups.

Every processed version appends one immutable history row per module. The
history identifier for a (module, version) pair is reused when the store
already knows it, so reprocessing a version is idempotent. When the processed
version is the designated latest version, the module's current snapshot is
also replaced.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from apisurface.analysis.aggregator import ModuleSummary
from apisurface.config.models import SemVer

log = logging.getLogger(__name__)

MODULE_CATEGORY = 1


@dataclass(frozen=True)
class ModuleSnapshot:
    """Current, non-versioned state of a module."""

    module: str
    stability: int
    maturity: int
    category: int
    num_props: int
    num_stable_props: int
    num_deprecated_props: int
    num_experimental_props: int


@dataclass(frozen=True)
class ModuleHistoryRecord:
    """Immutable per-version row of a module."""

    id: str
    module: str
    major: int
    minor: int
    patch: int
    maturity: int
    stability: int
    num_props: int
    num_stable_props: int
    num_deprecated_props: int
    num_experimental_props: int
    normver: str


class HistoryStore(Protocol):
    """Relational store holding module snapshots and history rows."""

    def find_history_id(self, module: str, major: int, minor: int, patch: int) -> str | None:
        """Return the history identifier of a module version, if recorded."""
        ...

    def save_history(self, record: ModuleHistoryRecord) -> None:
        """Append a history row; repeating the same (module, version) is a no-op."""
        ...

    def save_snapshot(self, snapshot: ModuleSnapshot) -> None:
        """Replace the current snapshot of a module."""
        ...

    def close(self) -> None:
        """Release the underlying connection."""
        ...


class ModuleState(StrEnum):
    """Persistence progress of a module within one run."""

    UNSEEN = "unseen"
    HAS_HISTORY_ID = "has_history_id"
    SNAPSHOT_CURRENT = "snapshot_current"


def snapshot_from_summary(summary: ModuleSummary) -> ModuleSnapshot:
    """
    Build the current-snapshot row for a module summary.

    Returns
    -------
    ModuleSnapshot
        Snapshot row.
    """
    return ModuleSnapshot(
        module=summary.service,
        stability=summary.ranks.stability,
        maturity=summary.ranks.maturity,
        category=MODULE_CATEGORY,
        num_props=summary.total_props,
        num_stable_props=summary.total_stable_props,
        num_deprecated_props=summary.total_deprecated_props,
        num_experimental_props=summary.total_experimental_props,
    )


class ModuleHistoryRecorder:
    """Apply the snapshot/history protocol for one processed version."""

    def __init__(
        self,
        store: HistoryStore,
        *,
        version: SemVer,
        latest_version: SemVer,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.store = store
        self.version = version
        self.latest_version = latest_version
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._history_ids: dict[str, str] = {}
        self._states: dict[str, ModuleState] = {}

    def state(self, module: str) -> ModuleState:
        """
        Return the persistence state of a module in this run.

        Returns
        -------
        ModuleState
            Current state, ``UNSEEN`` for modules not recorded yet.
        """
        return self._states.get(module, ModuleState.UNSEEN)

    def history_id(self, module: str) -> str:
        """
        Return the history identifier of a module, looking it up on first use.

        Returns
        -------
        str
            Existing identifier from the store, or a newly minted one.
        """
        known = self._history_ids.get(module)
        if known is not None:
            return known
        v = self.version
        found = self.store.find_history_id(module, v.major, v.minor, v.patch)
        if found is None:
            found = self._id_factory()
            log.debug("Created module history id %s for %s", found, module)
        else:
            log.debug("Found module history id %s for %s", found, module)
        self._history_ids[module] = found
        self._states[module] = ModuleState.HAS_HISTORY_ID
        return found

    def record(self, summary: ModuleSummary) -> ModuleHistoryRecord:
        """
        Persist a module summary for the processed version.

        Returns
        -------
        ModuleHistoryRecord
            The history row that was saved.
        """
        module = summary.service
        v = self.version
        record = ModuleHistoryRecord(
            id=self.history_id(module),
            module=module,
            major=v.major,
            minor=v.minor,
            patch=v.patch,
            maturity=summary.ranks.maturity,
            stability=summary.ranks.stability,
            num_props=summary.total_props,
            num_stable_props=summary.total_stable_props,
            num_deprecated_props=summary.total_deprecated_props,
            num_experimental_props=summary.total_experimental_props,
            normver=v.normalized,
        )
        self.store.save_history(record)
        log.info("Saved module history %s v%s", module, v)

        if self.version == self.latest_version:
            self.store.save_snapshot(snapshot_from_summary(summary))
            self._states[module] = ModuleState.SNAPSHOT_CURRENT
            log.info("Saved module %s", module)
        return record
