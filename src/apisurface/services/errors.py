"""Shared error taxonomy and Problem Details helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4


def generate_correlation_id() -> str:
    """
    Return a new correlation identifier for tracing errors.

    Returns
    -------
    str
        UUID4 correlation identifier.
    """
    return str(uuid4())


@dataclass(frozen=True)
class ProblemDetail:
    """
    RFC 9457 Problem Details payload.

    Fields mirror the standard shape with optional extras for diagnostics.
    """

    type: str
    title: str
    detail: str
    instance: str = field(default_factory=generate_correlation_id)
    code: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to a JSON-friendly dict.

        Returns
        -------
        dict[str, Any]
            Problem detail payload as a plain dictionary.
        """
        payload: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "detail": self.detail,
            "instance": self.instance,
        }
        if self.code is not None:
            payload["code"] = self.code
        if self.extras:
            payload["extras"] = self.extras
        return payload


def problem(
    code: str,
    title: str,
    detail: str,
    *,
    instance: str | None = None,
    extras: dict[str, Any] | None = None,
) -> ProblemDetail:
    """
    Create a ProblemDetail with defaults for type/instance.

    Parameters
    ----------
    code
        Stable problem code (e.g., 'config.missing_env').
    title
        Human-readable error summary.
    detail
        Detailed description of the error.
    instance
        Correlation/trace identifier; defaults to a UUID4.
    extras
        Optional structured context for diagnostics.

    Returns
    -------
    ProblemDetail
        Structured problem payload.
    """
    return ProblemDetail(
        type=f"https://problems.apisurface.dev/{code}",
        title=title,
        detail=detail,
        instance=instance or generate_correlation_id(),
        code=code,
        extras=extras or {},
    )


def log_problem(logger: logging.Logger | logging.LoggerAdapter, detail: ProblemDetail) -> None:
    """Emit a Problem Detail as a structured error log."""
    logger.error(json.dumps(detail.to_dict()))


class ProblemError(Exception):
    """Base exception carrying a ProblemDetail payload."""

    def __init__(self, detail: ProblemDetail) -> None:
        super().__init__(detail.detail)
        self.problem_detail = detail


class ConfigurationError(ProblemError):
    """Missing environment configuration or malformed invocation."""

    @classmethod
    def missing_env(cls, name: str) -> ConfigurationError:
        """
        Build the error raised when a required environment variable is unset.

        Returns
        -------
        ConfigurationError
            Error carrying the variable name in its extras.
        """
        return cls(
            problem(
                code="config.missing_env",
                title="Missing environment configuration",
                detail=f"{name} environment variable not set",
                extras={"variable": name},
            )
        )


class SchemaContractError(ProblemError):
    """The metadata model disagrees with the analyzer's assumptions."""

    def __init__(self, detail: str, *, resource: str | None = None) -> None:
        extras = {"resource": resource} if resource is not None else None
        super().__init__(
            problem(
                code="metadata.schema_contract",
                title="Metadata schema contract violation",
                detail=detail,
                extras=extras,
            )
        )


class UnknownStabilityError(ProblemError):
    """A construct carries a stability tag outside the recognized set."""

    def __init__(self, value: str, *, construct: str | None = None) -> None:
        extras: dict[str, Any] = {"stability": value}
        if construct is not None:
            extras["construct"] = construct
        super().__init__(
            problem(
                code="analysis.unknown_stability",
                title="Unknown stability value",
                detail=f"unexpected stability {value}",
                extras=extras,
            )
        )
        self.value = value


class PersistenceError(ProblemError):
    """A history store call failed; the run must be repeated from scratch."""

    def __init__(self, detail: str, *, module: str | None = None) -> None:
        extras = {"module": module} if module is not None else None
        super().__init__(
            problem(
                code="storage.persist_failed",
                title="History persistence failed",
                detail=detail,
                extras=extras,
            )
        )
