"""
Roll per-resource surface counts up into per-module coverage statistics.

Each qualifying assembly is walked resource by resource: the wrapping construct
decides the stability bucket, the props type decides the surface, and the
totals feed coverage and surface-unit (SU) metrics for the module.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from apisurface.analysis.resolver import base_name, find_l2, is_resource
from apisurface.analysis.stability import (
    DEFAULT_RANKS,
    Stability,
    StabilityRanks,
    classify_stability,
    ranks_for,
)
from apisurface.analysis.surface import resource_surface
from apisurface.metadata.models import Assembly, ClassType, TypeSystem
from apisurface.services.errors import UnknownStabilityError

log = logging.getLogger(__name__)

PROPS_PER_SU = 10
MODULE_NAME_COMPONENTS = 3


@dataclass(frozen=True)
class ResourceSurfaceRecord:
    """Surface and stability of one generated resource."""

    service: str
    base_name: str
    property_count: int
    stability: Stability


@dataclass(frozen=True)
class ModuleSummary:
    """Coverage rollup for one module."""

    service: str
    module_stability: Stability
    total_props: int
    total_cfn_only_props: int
    total_stable_props: int
    total_experimental_props: int
    total_deprecated_props: int
    coverage_percent: int
    total_su: int
    covered_su: float
    ranks: StabilityRanks = DEFAULT_RANKS


@dataclass(frozen=True)
class ModuleReport:
    """Per-resource records plus the module rollup for one assembly."""

    assembly: str
    resources: tuple[ResourceSurfaceRecord, ...]
    summary: ModuleSummary


@dataclass
class _ModuleTotals:
    service: str
    stability: Stability = Stability.CFN_ONLY
    ranks: StabilityRanks = DEFAULT_RANKS
    by_bucket: dict[Stability, int] = field(
        default_factory=lambda: dict.fromkeys(Stability, 0)
    )

    def add(self, record: ResourceSurfaceRecord) -> None:
        self.by_bucket[record.stability] += record.property_count
        if record.stability is not Stability.CFN_ONLY:
            # last non-cfn-only resource decides the module stability
            self.stability = record.stability
            self.ranks = ranks_for(record.stability)

    def finalize(self) -> ModuleSummary:
        total = sum(self.by_bucket.values())
        stable = self.by_bucket[Stability.STABLE]
        experimental = self.by_bucket[Stability.EXPERIMENTAL]
        coverage = coverage_percent(stable + experimental, total)
        total_su = surface_units(total)
        return ModuleSummary(
            service=self.service,
            module_stability=self.stability,
            total_props=total,
            total_cfn_only_props=self.by_bucket[Stability.CFN_ONLY],
            total_stable_props=stable,
            total_experimental_props=experimental,
            total_deprecated_props=self.by_bucket[Stability.DEPRECATED],
            coverage_percent=coverage,
            total_su=total_su,
            covered_su=total_su * coverage / 100,
            ranks=self.ranks,
        )


def coverage_percent(covered_props: int, total_props: int) -> int:
    """
    Return covered surface as a whole percentage, rounding halves up.

    A module without any properties reports 0.

    Returns
    -------
    int
        Percentage in ``[0, 100]``.
    """
    if total_props <= 0:
        return 0
    ratio = Decimal(100 * covered_props) / Decimal(total_props)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def surface_units(total_props: int) -> int:
    """
    Return the number of surface units, one per started block of ten properties.

    Returns
    -------
    int
        ``ceil(total_props / 10)``.
    """
    return math.ceil(total_props / PROPS_PER_SU)


def service_name_for_assembly(name: str, *, prefix: str = "") -> str | None:
    """
    Derive the short service name of a module.

    Parameters
    ----------
    name
        Assembly name, e.g. ``@aws-cdk/aws-s3``.
    prefix
        Required assembly name prefix; empty accepts any name.

    Returns
    -------
    str | None
        Third hyphen-delimited component, or None when the assembly does not
        have the three-component shape (e.g. ``aws-s3-deployment``).
    """
    if prefix and not name.startswith(prefix):
        return None
    parts = name.split("-")
    if len(parts) != MODULE_NAME_COMPONENTS:
        return None
    return parts[2]


class ModuleAggregator:
    """Compute surface coverage for every qualifying assembly of a type system."""

    def __init__(self, system: TypeSystem, *, module_prefix: str = "") -> None:
        self.system = system
        self.module_prefix = module_prefix

    def classify(self, assembly: Assembly, resource: ClassType) -> Stability:
        """
        Resolve the stability bucket of one resource.

        Returns
        -------
        Stability
            ``cfn-only`` when no construct wraps the resource, otherwise the
            construct's tagged stability.

        Raises
        ------
        UnknownStabilityError
            If the construct's stability tag is not recognized.
        """
        construct = find_l2(assembly, resource)
        if construct is None:
            return Stability.CFN_ONLY
        outcome = classify_stability(construct.docs.stability, construct=construct.fqn)
        if isinstance(outcome, UnknownStabilityError):
            raise outcome
        return outcome

    def analyze_assembly(self, assembly: Assembly) -> ModuleReport | None:
        """
        Analyze one assembly.

        Returns
        -------
        ModuleReport | None
            Report for the module, or None when the assembly name does not
            qualify.
        """
        service = service_name_for_assembly(assembly.name, prefix=self.module_prefix)
        if service is None:
            log.debug("Skipping assembly %s", assembly.name)
            return None

        totals = _ModuleTotals(service=service)
        records: list[ResourceSurfaceRecord] = []
        for cls in assembly.classes:
            if not is_resource(cls):
                continue
            record = ResourceSurfaceRecord(
                service=service,
                base_name=base_name(cls),
                property_count=resource_surface(self.system, cls),
                stability=self.classify(assembly, cls),
            )
            totals.add(record)
            records.append(record)

        summary = totals.finalize()
        log.info(
            "Module %s: %d props, %d%% coverage (%s)",
            service,
            summary.total_props,
            summary.coverage_percent,
            summary.module_stability,
        )
        return ModuleReport(assembly=assembly.name, resources=tuple(records), summary=summary)

    def iter_reports(self) -> Iterator[ModuleReport]:
        """
        Yield one report per qualifying assembly, in load order.

        Yields
        ------
        ModuleReport
            Report for each qualifying assembly.
        """
        for assembly in self.system.list_assemblies():
            report = self.analyze_assembly(assembly)
            if report is not None:
                yield report
