"""Tests for manifest normalization and type-system loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from apisurface.metadata.manifest import flatten_dependencies, load_type_system, upgrade_manifest
from apisurface.metadata.models import ClassType, InterfaceType
from apisurface.services.errors import SchemaContractError
from tests._helpers.expect import expect_equal, expect_none, expect_true
from tests._helpers.manifests import ManifestBuilder, s3_assembly, type_system


def test_object_dependencies_are_flattened(tmp_path: Path) -> None:
    """``{"version": x}`` dependency entries become bare strings on disk."""
    builder = s3_assembly()
    builder.dependencies = {"@aws-cdk/core": {"version": "1.60.0"}, "constructs": "^3.0.4"}
    path = builder.write(tmp_path)

    upgraded = upgrade_manifest(path)

    expected = {"@aws-cdk/core": "1.60.0", "constructs": "^3.0.4"}
    expect_equal(upgraded["dependencies"], expected)
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    expect_equal(on_disk["dependencies"], expected)


def test_manifest_without_dependencies_is_unchanged() -> None:
    """Documents lacking dependencies pass through."""
    doc = {"name": "x", "types": {}}
    expect_equal(flatten_dependencies(doc), {"name": "x", "types": {}})


def test_load_type_system_reads_directory(tmp_path: Path) -> None:
    """Every manifest in the directory becomes an assembly."""
    s3_assembly().write(tmp_path)
    ManifestBuilder("@scope-core").write(tmp_path)

    system = load_type_system(tmp_path)

    names = sorted(a.name for a in system.list_assemblies())
    expect_equal(names, ["@scope-aws-s3", "@scope-core"])
    s3 = system.find_assembly("@scope-aws-s3")
    expect_equal([c.name for c in s3.classes], ["CfnBucket", "Bucket"])
    found = s3.try_find_type("@scope-aws-s3.CfnBucketProps")
    expect_true(isinstance(found, InterfaceType))
    bucket = s3.try_find_type("@scope-aws-s3.Bucket")
    expect_true(isinstance(bucket, ClassType))
    if isinstance(bucket, ClassType):
        expect_equal(bucket.docs.stability, "stable")
        expect_none(bucket.docs.custom_tag("resource"))


def test_enum_records_are_ignored() -> None:
    """Type kinds other than class and interface are not indexed."""
    builder = ManifestBuilder("@scope-aws-s3")
    builder.entries.append(("@scope-aws-s3.Mode", {"kind": "enum", "name": "Mode"}))
    loaded = type_system(builder)
    asm = loaded.find_assembly("@scope-aws-s3")
    expect_none(asm.try_find_type("@scope-aws-s3.Mode"))


def test_invalid_manifest_is_a_contract_violation(tmp_path: Path) -> None:
    """Documents missing required fields abort loading."""
    (tmp_path / "broken.jsii").write_text(json.dumps({"types": {}}), encoding="utf-8")
    with pytest.raises(SchemaContractError, match="broken.jsii"):
        load_type_system(tmp_path)


def test_missing_directory_raises(tmp_path: Path) -> None:
    """A missing manifest directory is reported immediately."""
    with pytest.raises(FileNotFoundError):
        load_type_system(tmp_path / "nope")


def test_object_dependencies_without_version_are_dropped(tmp_path: Path) -> None:
    """An object entry lacking ``version`` is removed instead of loading as null."""
    doc = {"dependencies": {"constructs": {"range": "^3"}, "@aws-cdk/core": {"version": "1.0.0"}}}
    expect_equal(flatten_dependencies(doc)["dependencies"], {"@aws-cdk/core": "1.0.0"})

    builder = s3_assembly()
    builder.dependencies = {"constructs": {"targets": {}}, "@aws-cdk/core": "1.60.0"}
    path = builder.write(tmp_path)

    system = load_type_system(tmp_path)

    expect_equal(len(system.list_assemblies()), 1)
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    expect_equal(on_disk["dependencies"], {"@aws-cdk/core": "1.60.0"})
