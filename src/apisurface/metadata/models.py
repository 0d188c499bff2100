"""
Typed model of decoded assembly manifests.

The manifests are JSON documents describing one module each: its name and a
mapping of fully qualified type names to class/interface records. Only the
fields the surface analysis reads are modelled; everything else is ignored at
validation time so newer manifest revisions still load.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class TypeRef(_Record):
    """Reference to a type; ``fqn`` is None for primitives, collections and unions."""

    fqn: str | None = None


class Parameter(_Record):
    """Initializer parameter."""

    name: str
    type: TypeRef = Field(default_factory=TypeRef)


class Initializer(_Record):
    """Class initializer signature."""

    parameters: tuple[Parameter, ...] = ()


class Docs(_Record):
    """Documentation tags attached to a type."""

    stability: str | None = None
    custom: dict[str, str] = Field(default_factory=dict)

    def custom_tag(self, name: str) -> str | None:
        """
        Return the value of a custom documentation tag.

        Returns
        -------
        str | None
            Tag value, or None when the tag is absent.
        """
        return self.custom.get(name)


class Property(_Record):
    """Named property declared on an interface."""

    name: str
    type: TypeRef = Field(default_factory=TypeRef)


class ClassType(_Record):
    """Class definition within an assembly."""

    kind: Literal["class"] = "class"
    fqn: str
    name: str
    assembly: str
    docs: Docs = Field(default_factory=Docs)
    initializer: Initializer | None = None


class InterfaceType(_Record):
    """Interface (struct) definition within an assembly."""

    kind: Literal["interface"] = "interface"
    fqn: str
    name: str
    assembly: str
    docs: Docs = Field(default_factory=Docs)
    properties: tuple[Property, ...] = ()
    interfaces: tuple[str, ...] = ()


class AssemblyManifest(_Record):
    """Top-level manifest document for one assembly."""

    name: str
    version: str | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
    types: dict[str, dict[str, Any]] = Field(default_factory=dict)


TypeDefinition = ClassType | InterfaceType


@dataclass(frozen=True)
class Assembly:
    """A loaded module with its classes and interfaces in manifest order."""

    name: str
    classes: tuple[ClassType, ...]
    interfaces: tuple[InterfaceType, ...]
    _types: Mapping[str, TypeDefinition] = field(repr=False, default_factory=dict)

    @classmethod
    def from_manifest(cls, manifest: AssemblyManifest) -> Assembly:
        """
        Validate the type records of a manifest and build an assembly.

        Records of kinds other than ``class`` and ``interface`` are skipped.

        Returns
        -------
        Assembly
            Assembly exposing its classes and interfaces.
        """
        classes: list[ClassType] = []
        interfaces: list[InterfaceType] = []
        types: dict[str, TypeDefinition] = {}
        for fqn, raw in manifest.types.items():
            record = {"fqn": fqn, "assembly": manifest.name, **raw}
            kind = raw.get("kind")
            if kind == "class":
                cls_type = ClassType.model_validate(record)
                classes.append(cls_type)
                types[fqn] = cls_type
            elif kind == "interface":
                iface = InterfaceType.model_validate(record)
                interfaces.append(iface)
                types[fqn] = iface
        return cls(
            name=manifest.name,
            classes=tuple(classes),
            interfaces=tuple(interfaces),
            _types=types,
        )

    def try_find_type(self, fqn: str) -> TypeDefinition | None:
        """
        Look up a type declared in this assembly.

        Returns
        -------
        ClassType | InterfaceType | None
            Matching type or None.
        """
        return self._types.get(fqn)


class TypeSystem:
    """Read-only index over every loaded assembly."""

    def __init__(self, assemblies: Iterable[Assembly] = ()) -> None:
        self._assemblies: list[Assembly] = []
        self._by_name: dict[str, Assembly] = {}
        self._interfaces: dict[str, InterfaceType] = {}
        for assembly in assemblies:
            self.add(assembly)

    @classmethod
    def from_manifests(cls, manifests: Iterable[Mapping[str, Any]]) -> TypeSystem:
        """
        Build a type system from already parsed manifest documents.

        Returns
        -------
        TypeSystem
            Type system containing one assembly per manifest.
        """
        return cls(
            Assembly.from_manifest(AssemblyManifest.model_validate(doc)) for doc in manifests
        )

    def add(self, assembly: Assembly) -> None:
        """Register an assembly; a later assembly with the same name replaces the earlier."""
        if assembly.name in self._by_name:
            log.warning("Assembly %s loaded twice; keeping the last copy", assembly.name)
            self._assemblies = [a for a in self._assemblies if a.name != assembly.name]
        self._assemblies.append(assembly)
        self._by_name[assembly.name] = assembly
        for iface in assembly.interfaces:
            self._interfaces[iface.fqn] = iface

    def list_assemblies(self) -> Sequence[Assembly]:
        """
        Return the loaded assemblies in load order.

        Returns
        -------
        Sequence[Assembly]
            Loaded assemblies.
        """
        return tuple(self._assemblies)

    def find_assembly(self, name: str) -> Assembly:
        """
        Return an assembly by name.

        Returns
        -------
        Assembly
            Loaded assembly.

        Raises
        ------
        KeyError
            If the assembly is unknown.
        """
        if name not in self._by_name:
            message = f"Unknown assembly: {name}"
            raise KeyError(message)
        return self._by_name[name]

    def try_find_interface(self, fqn: str) -> InterfaceType | None:
        """
        Look up an interface across all assemblies.

        Returns
        -------
        InterfaceType | None
            Interface, or None when ``fqn`` is unknown or not an interface.
        """
        return self._interfaces.get(fqn)

    def find_interface(self, fqn: str) -> InterfaceType:
        """
        Look up an interface across all assemblies.

        Returns
        -------
        InterfaceType
            Interface declared under ``fqn``.

        Raises
        ------
        KeyError
            If no interface is declared under ``fqn``.
        """
        iface = self.try_find_interface(fqn)
        if iface is None:
            message = f"Unknown interface: {fqn}"
            raise KeyError(message)
        return iface

    def all_properties(self, iface: InterfaceType) -> tuple[Property, ...]:
        """
        Return own and inherited properties of an interface.

        Own declarations come first and win on a name clash; inherited
        properties follow in base-interface order. Unknown base interfaces
        contribute nothing.

        Returns
        -------
        tuple[Property, ...]
            Properties visible on the interface.
        """
        seen: dict[str, Property] = {}
        pending: list[InterfaceType] = [iface]
        visited: set[str] = set()
        while pending:
            current = pending.pop(0)
            if current.fqn in visited:
                continue
            visited.add(current.fqn)
            for prop in current.properties:
                seen.setdefault(prop.name, prop)
            for base_fqn in current.interfaces:
                base = self.try_find_interface(base_fqn)
                if base is not None:
                    pending.append(base)
        return tuple(seen.values())
