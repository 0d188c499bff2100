"""Shared services (error taxonomy) for apisurface surfaces."""

from __future__ import annotations

from apisurface.services.errors import (
    ConfigurationError,
    PersistenceError,
    ProblemDetail,
    ProblemError,
    SchemaContractError,
    UnknownStabilityError,
    log_problem,
    problem,
)

__all__ = [
    "ConfigurationError",
    "PersistenceError",
    "ProblemDetail",
    "ProblemError",
    "SchemaContractError",
    "UnknownStabilityError",
    "log_problem",
    "problem",
]
