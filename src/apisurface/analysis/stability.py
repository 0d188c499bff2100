"""Stability classification and its ordinal encodings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from apisurface.services.errors import UnknownStabilityError


class Stability(StrEnum):
    """Stability bucket of a resource."""

    CFN_ONLY = "cfn-only"
    EXPERIMENTAL = "experimental"
    STABLE = "stable"
    DEPRECATED = "deprecated"


@dataclass(frozen=True)
class StabilityRanks:
    """Maturity and stability ranks persisted for a module rollup."""

    maturity: int
    stability: int


# cfn-only has no stability rank of its own; it keeps the module default.
DEFAULT_RANKS = StabilityRanks(maturity=1, stability=1)

RANKS: dict[Stability, StabilityRanks] = {
    Stability.CFN_ONLY: DEFAULT_RANKS,
    Stability.EXPERIMENTAL: StabilityRanks(maturity=2, stability=1),
    Stability.STABLE: StabilityRanks(maturity=4, stability=2),
    Stability.DEPRECATED: StabilityRanks(maturity=5, stability=3),
}

_TAGGED = {
    Stability.EXPERIMENTAL.value: Stability.EXPERIMENTAL,
    Stability.STABLE.value: Stability.STABLE,
    Stability.DEPRECATED.value: Stability.DEPRECATED,
}


def classify_stability(
    tag: str | None,
    *,
    construct: str | None = None,
) -> Stability | UnknownStabilityError:
    """
    Map a construct's documentation stability tag to a bucket.

    An absent tag counts as experimental. Unrecognized values are returned as
    an error value rather than raised, so the caller decides when to abort.

    Parameters
    ----------
    tag
        Raw ``docs.stability`` value of the construct.
    construct
        Construct name, recorded on the error for diagnostics.

    Returns
    -------
    Stability | UnknownStabilityError
        The bucket, or the error describing the unknown value.
    """
    if tag is None:
        return Stability.EXPERIMENTAL
    found = _TAGGED.get(tag)
    if found is None:
        return UnknownStabilityError(tag, construct=construct)
    return found


def ranks_for(stability: Stability) -> StabilityRanks:
    """
    Return the persisted ranks for a stability bucket.

    Returns
    -------
    StabilityRanks
        Maturity and stability ranks.
    """
    return RANKS[stability]
