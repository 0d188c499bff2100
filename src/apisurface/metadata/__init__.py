"""Metadata source: decoded assembly manifests and the type-system index."""

from __future__ import annotations

from apisurface.metadata.manifest import load_type_system, upgrade_manifest
from apisurface.metadata.models import (
    Assembly,
    ClassType,
    Docs,
    Initializer,
    InterfaceType,
    Parameter,
    Property,
    TypeRef,
    TypeSystem,
)

__all__ = [
    "Assembly",
    "ClassType",
    "Docs",
    "Initializer",
    "InterfaceType",
    "Parameter",
    "Property",
    "TypeRef",
    "TypeSystem",
    "load_type_system",
    "upgrade_manifest",
]
