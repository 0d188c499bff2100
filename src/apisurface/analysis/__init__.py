"""Surface-coverage analysis: resolver, surface counter and module aggregator."""

from __future__ import annotations

from apisurface.analysis.aggregator import (
    ModuleAggregator,
    ModuleReport,
    ModuleSummary,
    ResourceSurfaceRecord,
    coverage_percent,
    service_name_for_assembly,
    surface_units,
)
from apisurface.analysis.resolver import find_l2
from apisurface.analysis.stability import Stability, StabilityRanks, classify_stability
from apisurface.analysis.surface import count_props, get_props_type, resource_surface

__all__ = [
    "ModuleAggregator",
    "ModuleReport",
    "ModuleSummary",
    "ResourceSurfaceRecord",
    "Stability",
    "StabilityRanks",
    "classify_stability",
    "count_props",
    "coverage_percent",
    "find_l2",
    "get_props_type",
    "resource_surface",
    "service_name_for_assembly",
    "surface_units",
]
