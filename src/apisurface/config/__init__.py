"""Configuration models for apisurface runs."""

from __future__ import annotations

from apisurface.config.models import (
    DEFAULT_LATEST_VERSION,
    MySQLSettings,
    PersistMode,
    ReportConfig,
    RestSettings,
    SemVer,
    load_environment,
    require_env,
)

__all__ = [
    "DEFAULT_LATEST_VERSION",
    "MySQLSettings",
    "PersistMode",
    "ReportConfig",
    "RestSettings",
    "SemVer",
    "load_environment",
    "require_env",
]
