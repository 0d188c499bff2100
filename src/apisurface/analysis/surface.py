"""Count the configuration surface reachable from a resource's props type."""

from __future__ import annotations

import logging

from apisurface.metadata.models import ClassType, InterfaceType, TypeSystem
from apisurface.services.errors import SchemaContractError

log = logging.getLogger(__name__)

PROPS_PARAMETER_INDEX = 2
PROPS_PARAMETER_NAME = "props"


def get_props_type(system: TypeSystem, resource: ClassType) -> InterfaceType | None:
    """
    Locate the configuration type of a resource.

    Resources follow the ``(scope, id, props)`` initializer convention.

    Parameters
    ----------
    system
        Type system used to resolve the props interface.
    resource
        Generated resource class.

    Returns
    -------
    InterfaceType | None
        Props interface, or None when the initializer takes fewer than three
        parameters.

    Raises
    ------
    SchemaContractError
        If the third parameter is not named ``props`` or its type is not an
        interface.
    """
    init = resource.initializer
    if init is None or len(init.parameters) <= PROPS_PARAMETER_INDEX:
        return None
    props = init.parameters[PROPS_PARAMETER_INDEX]
    if props.name != PROPS_PARAMETER_NAME:
        message = (
            f'invalid 3rd parameter name. expecting "{PROPS_PARAMETER_NAME}" got {props.name}'
        )
        raise SchemaContractError(message, resource=resource.fqn)
    iface = system.try_find_interface(props.type.fqn) if props.type.fqn else None
    if iface is None:
        message = f"props parameter of {resource.fqn} does not reference an interface"
        raise SchemaContractError(message, resource=resource.fqn)
    return iface


def count_props(system: TypeSystem, struct: InterfaceType) -> int:
    """
    Count properties reachable from a struct, descending into nested structs.

    Every property counts once; a property whose type is itself an interface
    also adds that interface's full count. A struct that is re-entered along
    the current path contributes 0 so cyclic definitions terminate.

    Parameters
    ----------
    system
        Type system resolving nested property types.
    struct
        Interface to count.

    Returns
    -------
    int
        Total number of reachable properties.

    Examples
    --------
    >>> from apisurface.metadata.models import TypeSystem
    >>> system = TypeSystem.from_manifests([{
    ...     "name": "demo",
    ...     "types": {"demo.P": {"kind": "interface", "name": "P", "properties": [
    ...         {"name": "a", "type": {"primitive": "string"}},
    ...         {"name": "b", "type": {"primitive": "number"}},
    ...     ]}},
    ... }])
    >>> count_props(system, system.find_interface("demo.P"))
    2
    """
    return _count(system, struct, frozenset())


def _count(system: TypeSystem, struct: InterfaceType, path: frozenset[str]) -> int:
    if struct.fqn in path:
        log.warning("Property type cycle through %s; counting re-entry as 0", struct.fqn)
        return 0
    path = path | {struct.fqn}
    count = 0
    for prop in system.all_properties(struct):
        count += 1
        if prop.type.fqn is None:
            continue
        nested = system.try_find_interface(prop.type.fqn)
        if nested is not None:
            count += _count(system, nested, path)
    return count


def resource_surface(system: TypeSystem, resource: ClassType) -> int:
    """
    Return the property count of a resource's configuration type.

    Returns
    -------
    int
        Reachable property count, 0 when the resource takes no props.
    """
    props = get_props_type(system, resource)
    return 0 if props is None else count_props(system, props)
