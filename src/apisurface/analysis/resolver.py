"""Pair generated resource classes with their hand-written constructs."""

from __future__ import annotations

from apisurface.metadata.models import Assembly, ClassType

RESOURCE_PREFIX = "Cfn"
RESOURCE_TAG = "resource"


def is_resource(cls: ClassType) -> bool:
    """
    Return True when the class was generated from a raw resource schema.

    Returns
    -------
    bool
        Whether the class name carries the generated-resource prefix.
    """
    return cls.name.startswith(RESOURCE_PREFIX)


def base_name(cls: ClassType) -> str:
    """
    Return the resource name with the generated-resource prefix stripped.

    Returns
    -------
    str
        Base name, e.g. ``Bucket`` for ``CfnBucket``.
    """
    return cls.name.removeprefix(RESOURCE_PREFIX)


def _tagged_base_name(cls: ClassType) -> str | None:
    tag = cls.docs.custom_tag(RESOURCE_TAG)
    if not tag:
        return None
    segments = tag.split("::")
    if len(segments) < 3:
        return None
    return segments[2]


def find_l2(assembly: Assembly, resource: ClassType) -> ClassType | None:
    """
    Find the construct wrapping a generated resource.

    The construct named after the resource's base name wins. Otherwise the
    first class whose ``@resource Provider::Service::Type`` tag names the same
    type (case-insensitively) is returned.

    Parameters
    ----------
    assembly
        Assembly the resource belongs to.
    resource
        Generated resource class.

    Returns
    -------
    ClassType | None
        Matching construct, or None when the resource is unwrapped.
    """
    expected = base_name(resource)
    found = assembly.try_find_type(f"{assembly.name}.{expected}")
    if isinstance(found, ClassType):
        return found

    wanted = expected.lower()
    for cls in assembly.classes:
        tagged = _tagged_base_name(cls)
        if tagged is not None and tagged.lower() == wanted:
            return cls
    return None
