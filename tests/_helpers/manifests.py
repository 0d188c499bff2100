"""Builders for in-memory assembly manifests used across the test suite."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from apisurface.metadata.models import TypeSystem

TypeEntry = tuple[str, dict[str, Any]]


def scalar(name: str, primitive: str = "string") -> dict[str, Any]:
    """Property with a primitive type."""
    return {"name": name, "type": {"primitive": primitive}}


def nested(name: str, fqn: str) -> dict[str, Any]:
    """Property referencing a named type."""
    return {"name": name, "type": {"fqn": fqn}}


def struct(fqn: str, *props: dict[str, Any], bases: Iterable[str] = ()) -> TypeEntry:
    """Interface record with the given properties."""
    return fqn, {
        "kind": "interface",
        "name": fqn.rsplit(".", 1)[-1],
        "properties": list(props),
        "interfaces": list(bases),
    }


def resource(
    assembly: str,
    name: str,
    props_fqn: str | None = None,
    *,
    third_param: str = "props",
) -> TypeEntry:
    """Generated resource class with a ``(scope, id, props)`` initializer."""
    params: list[dict[str, Any]] = [
        {"name": "scope", "type": {"fqn": "constructs.Construct"}},
        {"name": "id", "type": {"primitive": "string"}},
    ]
    if props_fqn is not None:
        params.append({"name": third_param, "type": {"fqn": props_fqn}})
    return f"{assembly}.{name}", {
        "kind": "class",
        "name": name,
        "initializer": {"parameters": params},
    }


def construct(
    assembly: str,
    name: str,
    *,
    stability: str | None = None,
    resource_tag: str | None = None,
) -> TypeEntry:
    """Hand-written construct class with optional stability and ``@resource`` tags."""
    docs: dict[str, Any] = {}
    if stability is not None:
        docs["stability"] = stability
    if resource_tag is not None:
        docs["custom"] = {"resource": resource_tag}
    return f"{assembly}.{name}", {"kind": "class", "name": name, "docs": docs}


@dataclass
class ManifestBuilder:
    """Accumulate type records for one assembly."""

    name: str
    entries: list[TypeEntry] = field(default_factory=list)
    dependencies: dict[str, Any] = field(default_factory=dict)

    def add(self, *entries: TypeEntry) -> ManifestBuilder:
        self.entries.extend(entries)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": "1.60.0",
            "dependencies": dict(self.dependencies),
            "types": dict(self.entries),
        }

    def write(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{self.name.replace('/', '_')}.jsii"
        path.write_text(json.dumps(self.to_dict()), encoding="utf-8")
        return path


def type_system(*builders: ManifestBuilder) -> TypeSystem:
    """Load builders into a type system without touching disk."""
    return TypeSystem.from_manifests(b.to_dict() for b in builders)


def s3_assembly(name: str = "@scope-aws-s3", *, stability: str | None = "stable") -> ManifestBuilder:
    """Assembly with ``CfnBucket`` (2 scalar props) wrapped by ``Bucket``."""
    return ManifestBuilder(name).add(
        resource(name, "CfnBucket", f"{name}.CfnBucketProps"),
        struct(f"{name}.CfnBucketProps", scalar("bucketName"), scalar("versioned", "boolean")),
        construct(name, "Bucket", stability=stability),
    )
