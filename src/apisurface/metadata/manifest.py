"""Locate, normalize and load assembly manifests from disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from apisurface.metadata.models import Assembly, AssemblyManifest, TypeSystem
from apisurface.services.errors import SchemaContractError

log = logging.getLogger(__name__)


def flatten_dependencies(manifest: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten ``{"version": "x"}`` dependency entries to the bare version string.

    Object entries without a ``version`` key are dropped.

    Parameters
    ----------
    manifest
        Parsed manifest document; updated in place.

    Returns
    -------
    dict[str, Any]
        The same manifest, for chaining.
    """
    dependencies = manifest.get("dependencies") or {}
    for name, value in list(dependencies.items()):
        if not isinstance(value, dict):
            continue
        version = value.get("version")
        if version is None:
            log.debug("Dropping dependency %s without a version", name)
            del dependencies[name]
        else:
            dependencies[name] = version
    return manifest


def upgrade_manifest(path: Path) -> dict[str, Any]:
    """
    Rewrite a manifest file with plain-string dependency versions.

    Returns
    -------
    dict[str, Any]
        The normalized manifest document.
    """
    manifest = json.loads(path.read_text(encoding="utf-8"))
    flatten_dependencies(manifest)
    path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return manifest


def manifest_paths(manifest_dir: Path) -> list[Path]:
    """
    List manifest files in a directory in a stable order.

    Returns
    -------
    list[Path]
        Regular files under ``manifest_dir`` sorted by name.

    Raises
    ------
    FileNotFoundError
        If ``manifest_dir`` does not exist.
    """
    if not manifest_dir.is_dir():
        message = f"Manifest directory not found: {manifest_dir}"
        raise FileNotFoundError(message)
    return sorted(p for p in manifest_dir.iterdir() if p.is_file())


def load_type_system(manifest_dir: Path) -> TypeSystem:
    """
    Normalize and load every manifest in ``manifest_dir``.

    Returns
    -------
    TypeSystem
        Fully loaded, read-only type system.

    Raises
    ------
    SchemaContractError
        If a manifest does not match the expected document shape.
    """
    system = TypeSystem()
    for path in manifest_paths(manifest_dir):
        document = upgrade_manifest(path)
        try:
            manifest = AssemblyManifest.model_validate(document)
            assembly = Assembly.from_manifest(manifest)
        except ValidationError as exc:
            message = f"Invalid assembly manifest {path.name}: {exc}"
            raise SchemaContractError(message) from exc
        system.add(assembly)
        log.debug(
            "Loaded %s (%d classes, %d interfaces)",
            assembly.name,
            len(assembly.classes),
            len(assembly.interfaces),
        )
    log.info("Loaded %d assemblies from %s", len(system.list_assemblies()), manifest_dir)
    return system
