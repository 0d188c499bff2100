"""
Configuration models used by the apisurface CLI and report pipeline.

These Pydantic models normalize the processed version, persistence mode and
filesystem layout, and read connection settings from an explicit environment
mapping so no module-level state is involved.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Self

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from apisurface.services.errors import ConfigurationError, problem

_SEMVER_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")

DEFAULT_LATEST_VERSION = "1.60.0"


class PersistMode(StrEnum):
    """Where module rollups are persisted in addition to the CSV reports."""

    MYSQL = "mysql"
    DUCKDB = "duckdb"
    REST = "rest"
    CSV = "csv"

    @classmethod
    def from_arg(cls, value: str) -> PersistMode:
        """
        Map a CLI argument to a mode; unknown values mean CSV only.

        Returns
        -------
        PersistMode
            Selected persistence mode.
        """
        try:
            return cls(value)
        except ValueError:
            return cls.CSV


class SemVer(BaseModel):
    """A ``MAJOR.MINOR.PATCH`` version."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(..., ge=0)
    minor: int = Field(..., ge=0)
    patch: int = Field(..., ge=0)

    @classmethod
    def parse(cls, text: str) -> Self:
        """
        Parse a dotted version string.

        Returns
        -------
        SemVer
            Parsed version.

        Raises
        ------
        ConfigurationError
            If ``text`` is not three dot-separated non-negative integers.
        """
        match = _SEMVER_PATTERN.match(text.strip())
        if match is None:
            raise ConfigurationError(
                problem(
                    code="config.invalid_version",
                    title="Invalid version",
                    detail=f"expected MAJOR.MINOR.PATCH, got {text!r}",
                )
            )
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    @property
    def normalized(self) -> str:
        """Zero-padded ``MMM.mmm.ppp`` form that sorts lexically."""
        return f"{self.major:03d}.{self.minor:03d}.{self.patch:03d}"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


class ReportConfig(BaseModel):
    """Settings for one report run."""

    model_config = ConfigDict(frozen=True)

    persist: PersistMode = PersistMode.CSV
    version: SemVer
    manifest_dir: Path = Field(default=Path("jsii"), description="Directory of assembly manifests")
    output_dir: Path = Field(default=Path(), description="Directory for resources.csv/modules.csv")
    db_path: Path = Field(
        default=Path("build/db/apisurface.duckdb"),
        description="DuckDB history database (duckdb mode)",
    )
    latest_version: SemVer = Field(default_factory=lambda: SemVer.parse(DEFAULT_LATEST_VERSION))
    module_prefix: str = ""

    @field_validator("version", "latest_version", mode="before")
    @classmethod
    def _parse_version(cls, v: SemVer | str | Mapping[str, int]) -> SemVer | Mapping[str, int]:
        if isinstance(v, str):
            return SemVer.parse(v)
        return v

    @field_validator("manifest_dir", "output_dir", "db_path", mode="before")
    @classmethod
    def _expand_user(cls, v: Path | str) -> Path:
        return Path(str(v)).expanduser()


def require_env(env: Mapping[str, str], name: str) -> str:
    """
    Return a required environment variable.

    Returns
    -------
    str
        Variable value.

    Raises
    ------
    ConfigurationError
        If the variable is unset or empty.
    """
    value = env.get(name)
    if not value:
        raise ConfigurationError.missing_env(name)
    return value


class MySQLSettings(BaseModel):
    """Connection settings for the MySQL history database."""

    model_config = ConfigDict(frozen=True)

    host: str
    user: str
    password: str = Field(repr=False)
    database: str

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> Self:
        """
        Read ``CDK_PM_HOST``/``USER``/``PASSWORD``/``DATABASE``.

        Returns
        -------
        MySQLSettings
            Settings populated from ``env``.
        """
        return cls(
            host=require_env(env, "CDK_PM_HOST"),
            user=require_env(env, "CDK_PM_USER"),
            password=require_env(env, "CDK_PM_PASSWORD"),
            database=require_env(env, "CDK_PM_DATABASE"),
        )


class RestSettings(BaseModel):
    """Endpoint settings for REST submission."""

    model_config = ConfigDict(frozen=True)

    url: str

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> Self:
        """
        Read ``REST_API_URL``.

        Returns
        -------
        RestSettings
            Settings populated from ``env``.
        """
        return cls(url=require_env(env, "REST_API_URL"))


def load_environment(mode: PersistMode, env: Mapping[str, str] | None = None) -> Mapping[str, str]:
    """
    Return the environment to read connection settings from.

    An explicit mapping is returned unchanged. Otherwise, for MySQL, a ``.env``
    file in the working directory is loaded before reading ``os.environ``.

    Returns
    -------
    Mapping[str, str]
        Environment mapping.
    """
    if env is not None:
        return env
    if mode is PersistMode.MYSQL:
        load_dotenv()
    return os.environ
