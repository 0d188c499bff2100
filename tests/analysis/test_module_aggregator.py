"""Tests for per-module surface and coverage rollups."""

from __future__ import annotations

import math

import pytest

from apisurface.analysis.aggregator import (
    ModuleAggregator,
    coverage_percent,
    service_name_for_assembly,
    surface_units,
)
from apisurface.analysis.stability import Stability, StabilityRanks
from apisurface.services.errors import UnknownStabilityError
from tests._helpers.expect import expect_equal, expect_none, expect_true
from tests._helpers.manifests import (
    ManifestBuilder,
    TypeEntry,
    construct,
    resource,
    s3_assembly,
    scalar,
    struct,
    type_system,
)

ASM = "@aws-cdk/aws-lambda"


def _props(name: str, count: int) -> TypeEntry:
    return struct(f"{ASM}.{name}", *(scalar(f"p{i}") for i in range(count)))


def _mixed_assembly() -> ManifestBuilder:
    return ManifestBuilder(ASM).add(
        resource(ASM, "CfnFunction", f"{ASM}.CfnFunctionProps"),
        _props("CfnFunctionProps", 7),
        construct(ASM, "Function", stability="stable"),
        resource(ASM, "CfnAlias", f"{ASM}.CfnAliasProps"),
        _props("CfnAliasProps", 4),
        construct(ASM, "Alias"),
        resource(ASM, "CfnLayerVersionPermission", f"{ASM}.CfnPermProps"),
        _props("CfnPermProps", 5),
        resource(ASM, "CfnEventSourceMapping", f"{ASM}.CfnEsmProps"),
        _props("CfnEsmProps", 3),
        construct(ASM, "EventSourceMapping", stability="deprecated"),
    )


def test_service_name_requires_three_components() -> None:
    """Only three-part hyphenated names qualify; the third part is the service."""
    expect_equal(service_name_for_assembly("@scope-aws-s3"), "s3")
    expect_equal(service_name_for_assembly("@aws-cdk/aws-s3"), "s3")
    expect_none(service_name_for_assembly("@scope-core"))
    expect_none(service_name_for_assembly("@aws-cdk/aws-s3-deployment"))
    expect_none(service_name_for_assembly("@scope-aws-s3", prefix="@aws-cdk/aws-"))


def test_mixed_module_totals_and_metrics() -> None:
    """Totals split by bucket and derive coverage and SU metrics."""
    system = type_system(_mixed_assembly())
    report = ModuleAggregator(system).analyze_assembly(system.find_assembly(ASM))
    if report is None:
        pytest.fail("lambda module should qualify")
    summary = report.summary
    expect_equal(summary.total_props, 19)
    expect_equal(summary.total_stable_props, 7)
    expect_equal(summary.total_experimental_props, 4)
    expect_equal(summary.total_cfn_only_props, 5)
    expect_equal(summary.total_deprecated_props, 3)
    expect_equal(
        summary.total_props,
        summary.total_cfn_only_props
        + summary.total_stable_props
        + summary.total_experimental_props
        + summary.total_deprecated_props,
    )
    # 11 / 19 = 57.89%
    expect_equal(summary.coverage_percent, 58)
    expect_equal(summary.total_su, 2)
    expect_equal(summary.covered_su, 1.16)
    # last non-cfn-only resource decides the module stability
    expect_equal(summary.module_stability, Stability.DEPRECATED)
    expect_equal(summary.ranks, StabilityRanks(maturity=5, stability=3))
    expect_equal(
        [(r.base_name, r.property_count, r.stability) for r in report.resources],
        [
            ("Function", 7, Stability.STABLE),
            ("Alias", 4, Stability.EXPERIMENTAL),
            ("LayerVersionPermission", 5, Stability.CFN_ONLY),
            ("EventSourceMapping", 3, Stability.DEPRECATED),
        ],
    )


def test_cfn_only_module_keeps_defaults() -> None:
    """A module with only unwrapped resources stays cfn-only with default ranks."""
    builder = ManifestBuilder(ASM).add(
        resource(ASM, "CfnUrl", f"{ASM}.CfnUrlProps"),
        _props("CfnUrlProps", 2),
    )
    system = type_system(builder)
    report = ModuleAggregator(system).analyze_assembly(system.find_assembly(ASM))
    if report is None:
        pytest.fail("lambda module should qualify")
    expect_equal(report.summary.module_stability, Stability.CFN_ONLY)
    expect_equal(report.summary.ranks, StabilityRanks(maturity=1, stability=1))
    expect_equal(report.summary.coverage_percent, 0)


def test_empty_module_is_degenerate_not_fatal() -> None:
    """Zero total properties yield zero coverage without NaN."""
    builder = ManifestBuilder(ASM).add(resource(ASM, "CfnPermission"))
    system = type_system(builder)
    report = ModuleAggregator(system).analyze_assembly(system.find_assembly(ASM))
    if report is None:
        pytest.fail("lambda module should qualify")
    summary = report.summary
    expect_equal(summary.total_props, 0)
    expect_equal(summary.coverage_percent, 0)
    expect_equal(summary.total_su, 0)
    expect_equal(summary.covered_su, 0.0)
    expect_true(math.isfinite(summary.covered_su))


def test_unknown_stability_aborts() -> None:
    """An unrecognized stability tag is raised for the whole run."""
    system = type_system(s3_assembly(stability="frozen"))
    aggregator = ModuleAggregator(system)
    with pytest.raises(UnknownStabilityError, match="unexpected stability frozen"):
        list(aggregator.iter_reports())


def test_non_matching_assemblies_are_skipped() -> None:
    """Assemblies without the three-component shape produce no report."""
    system = type_system(s3_assembly(), s3_assembly("@scope-core"))
    reports = list(ModuleAggregator(system).iter_reports())
    expect_equal([r.summary.service for r in reports], ["s3"])


def test_coverage_rounds_half_up() -> None:
    """Half percentages round up rather than to even."""
    expect_equal(coverage_percent(1, 8), 13)
    expect_equal(coverage_percent(5, 200), 3)
    expect_equal(coverage_percent(0, 0), 0)
    expect_equal(coverage_percent(3, 3), 100)


@pytest.mark.parametrize(("props", "units"), [(0, 0), (1, 1), (10, 1), (11, 2), (95, 10)])
def test_surface_units(props: int, units: int) -> None:
    """One surface unit per started block of ten properties."""
    expect_equal(surface_units(props), units)
