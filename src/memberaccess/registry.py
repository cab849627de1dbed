"""
Explicit member registration for classes that cannot be introspected.

Extension types and classes without annotations do not expose the declared
type of their state. Registering a member adds a typed declaration to the
member table of one class, exactly as if it had been discovered there.
Registered declarations win over introspected ones with the same name at the
same class.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from memberaccess.declarations import MemberDeclaration, MemberKind, MemberScope, StorageKind

logger = logging.getLogger(__name__)

# owner class -> {(storage_name, scope): declaration}
_registered_members: Dict[type, Dict[Tuple[str, MemberScope], MemberDeclaration]] = {}
_registry_lock = threading.RLock()


def register_member(
    owner: type,
    name: str,
    value_type: Any,
    *,
    scope: MemberScope = MemberScope.INSTANCE,
    kind: MemberKind = MemberKind.FIELD,
    getter: Optional[Callable[..., Any]] = None,
    setter: Optional[Callable[..., Any]] = None,
) -> MemberDeclaration:
    """
    Declare a typed member on a class.

    Without a getter the member is stored where Python stores it anyway:
    the instance __dict__ for instance scope, the class __dict__ of owner for
    static scope. With a getter, reads call getter(instance) (instance scope)
    or getter() (static scope); writes call setter the same way with the value
    appended. A getter without a setter makes the member read-only.

    Private names ("__x") are mangled for owner, as Python would.

    Args:
        owner: Class the member is declared on
        name: Member name
        value_type: Declared value type
        scope: MemberScope.INSTANCE or MemberScope.STATIC
        kind: MemberKind.FIELD or MemberKind.PROPERTY
        getter: Optional read function
        setter: Optional write function (requires getter)

    Returns:
        The registered declaration

    Raises:
        ValueError: If owner is not a class, the name is empty, a setter is
            given without a getter, or the member is already registered
    """
    from memberaccess.hierarchy_walker import mangle_name
    from memberaccess.member_resolver import invalidate_member_cache

    if not isinstance(owner, type):
        raise ValueError(f"{owner!r} is not a class")
    if not name:
        raise ValueError("Member name must not be empty")
    if setter is not None and getter is None:
        raise ValueError(f"Setter for {owner.__name__}.{name} needs a getter")

    storage_name = mangle_name(name, owner)
    if getter is not None:
        storage = StorageKind.REGISTERED
    elif scope is MemberScope.STATIC:
        storage = StorageKind.CLASS_DICT
    else:
        storage = StorageKind.INSTANCE_DICT

    declaration = MemberDeclaration(
        name=storage_name,
        storage_name=storage_name,
        value_type=value_type,
        kind=kind,
        scope=scope,
        storage=storage,
        declaring_type=owner,
        accessor=getter,
        setter=setter,
    )

    with _registry_lock:
        members = _registered_members.setdefault(owner, {})
        key = (storage_name, scope)
        if key in members:
            raise ValueError(f"{scope.value} member {owner.__name__}.{storage_name} is already registered")
        members[key] = declaration

    invalidate_member_cache(owner)
    logger.debug(f"Registered member: {declaration}")
    return declaration


def unregister_member(owner: type, name: str, scope: MemberScope = MemberScope.INSTANCE) -> bool:
    """Remove a registered member. Returns True if something was removed."""
    from memberaccess.hierarchy_walker import mangle_name
    from memberaccess.member_resolver import invalidate_member_cache

    storage_name = mangle_name(name, owner)
    with _registry_lock:
        members = _registered_members.get(owner)
        if not members or (storage_name, scope) not in members:
            return False
        del members[(storage_name, scope)]
        if not members:
            del _registered_members[owner]

    invalidate_member_cache(owner)
    logger.debug(f"Unregistered member: {owner.__name__}.{storage_name} ({scope.value})")
    return True


def get_registered_members(owner: type) -> List[MemberDeclaration]:
    """Declarations registered directly on owner (not its ancestors)."""
    with _registry_lock:
        return list(_registered_members.get(owner, {}).values())


def clear_registry() -> None:
    """Forget every registration (for testing)."""
    from memberaccess.member_resolver import clear_resolution_cache

    with _registry_lock:
        _registered_members.clear()
    clear_resolution_cache()
