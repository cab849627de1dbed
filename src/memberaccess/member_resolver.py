"""
Member resolution: pick the single authoritative declaration for a name.

ALGORITHM:
  1. Walk the starting class and its ancestors, most-derived first
  2. Stop at the first level that declares the name (field or property)
  3. At that level prefer the instance declaration, otherwise the static one
  4. Ancestor declarations of the same name are hidden from this start type;
     they stay reachable by resolving from the ancestor itself

The starting class is the caller's static view of the object (the owner
type), which may be an ancestor of the instance's runtime type. Resolving the
same instance from different owners can therefore yield different members.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, get_origin

from memberaccess.config import is_resolution_cache_enabled
from memberaccess.declarations import MemberDeclaration, ResolutionResult
from memberaccess.errors import AccessErrorKind
from memberaccess.hierarchy_walker import clear_member_tables, invalidate_member_table, locate

logger = logging.getLogger(__name__)

# PERFORMANCE: Cache resolution results
# Key: (owner_type, member_name) -> ResolutionResult (successes and failures)
_resolution_cache: Dict[Tuple[type, str], ResolutionResult] = {}


def normalize_owner(owner: Any) -> Optional[type]:
    """Class to resolve from, unwrapping closed generics (Box[int] -> Box).

    Returns None for anything that is not a class.
    """
    origin = get_origin(owner)
    if isinstance(origin, type):
        return origin
    if isinstance(owner, type):
        return owner
    return None


def _resolve_uncached(owner: type, name: str) -> ResolutionResult:
    levels = locate(owner, name)
    matches = [level for level in levels if level.has_match]
    if not matches:
        logger.debug(f"🔍 RESOLVE: {owner.__qualname__}.{name} not declared in {[t.__name__ for t in owner.__mro__]}")
        return ResolutionResult.failed(
            owner, name, AccessErrorKind.MEMBER_NOT_FOUND, "no field or property with this name in the hierarchy"
        )

    winner = matches[0]
    declaration = winner.declarations[0]

    hidden = [d for level in matches[1:] for d in level.declarations]
    if any(d.scope is not declaration.scope for d in hidden):
        logger.warning(
            f"{owner.__qualname__}.{name}: {declaration.scope.value} member at "
            f"{winner.level_type.__qualname__} hides a member of different scope "
            f"({', '.join(str(d) for d in hidden)}); precedence across scopes is undefined"
        )

    logger.debug(
        f"🔍 RESOLVE: {owner.__qualname__}.{name} -> {declaration} "
        f"(depth={winner.depth}, hides {len(hidden)})"
    )
    return ResolutionResult.found(owner, name, declaration)


def resolve(owner: Any, name: Optional[str]) -> ResolutionResult:
    """
    Resolve name starting from owner.

    Never raises for lookup failures; the failure is returned in the result
    and ResolutionResult.unwrap() raises the classified error.

    Args:
        owner: Class to start from (closed generic aliases are unwrapped)
        name: Member name; private names are mangled per level

    Returns:
        ResolutionResult with one declaration or one failure kind
    """
    owner_type = normalize_owner(owner)
    if not isinstance(name, str) or not name:
        return ResolutionResult.failed(owner_type, name, AccessErrorKind.MISSING_NAME, "member name is empty")
    if owner_type is None:
        return ResolutionResult.failed(
            None, name, AccessErrorKind.MEMBER_NOT_FOUND, f"{owner!r} is not a class"
        )

    if not is_resolution_cache_enabled():
        return _resolve_uncached(owner_type, name)

    key = (owner_type, name)
    cached = _resolution_cache.get(key)
    if cached is not None:
        return cached
    return _resolution_cache.setdefault(key, _resolve_uncached(owner_type, name))


def describe_member(owner: Any, name: str) -> MemberDeclaration:
    """The authoritative declaration for name seen from owner.

    Raises:
        MissingNameError, MemberNotFoundError
    """
    return resolve(owner, name).unwrap()


def find_hidden_members(owner: Any, name: str) -> List[MemberDeclaration]:
    """
    Every declaration of name along owner's hierarchy, most-derived first.

    The first entry is the one resolve() picks (when the first matching level
    declares both scopes, both appear, instance first). Later entries are
    hidden from owner.

    Raises:
        MissingNameError, MemberNotFoundError
    """
    result = resolve(owner, name)
    result.unwrap()
    return [d for level in locate(result.owner_type, name) for d in level.declarations]


def invalidate_member_cache(changed_type: type, member_name: Optional[str] = None) -> None:
    """Invalidate cache entries that could see a change to changed_type.

    Only clears resolutions whose owner has changed_type in its MRO (and, if
    given, whose name matches), plus the member table of changed_type.
    """
    invalidate_member_table(changed_type)
    if not _resolution_cache:
        return

    keys_to_remove = []
    for key in list(_resolution_cache):
        owner_type, cached_name = key
        if member_name is not None and cached_name != member_name:
            continue
        if changed_type in owner_type.__mro__:
            keys_to_remove.append(key)

    for key in keys_to_remove:
        _resolution_cache.pop(key, None)


def clear_resolution_cache() -> None:
    """Clear cached resolutions and member tables."""
    _resolution_cache.clear()
    clear_member_tables()
