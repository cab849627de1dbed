"""
Per-class member tables and the ordered walk over a class hierarchy.

Each class gets one member table built from its OWN namespace only
(vars(cls) and the annotations defined in its own body), never from what it
inherits. Hiding is then visible as the same name appearing in the tables of
several classes along the MRO, and the walk reports every level so callers
can see exactly where a name is declared.

Discovery rules for one class:
    property object                       -> instance property
    __slots__ member descriptor           -> instance field (slot storage)
    annotation x: T                       -> instance field (instance __dict__)
    annotation x: ClassVar[T]             -> static field (class __dict__)
    annotation x: Final[T] with a value   -> static field (class __dict__)
    unannotated plain data attribute      -> static field typed type(value),
                                             shadowed by an instance __dict__ entry
    explicit registration                 -> as registered, overrides the above

Private names are mangled per level, so "__count" is looked up as
"_Base__count" in Base and "_Derived__count" in Derived.
"""

import inspect
import logging
import sys
import types
from types import MappingProxyType
from typing import Annotated, Any, ClassVar, Dict, Final, List, Mapping, Tuple, get_args, get_origin

from memberaccess.declarations import (
    HierarchyLevel,
    MemberDeclaration,
    MemberKind,
    MemberScope,
    StorageKind,
)

logger = logging.getLogger(__name__)

# PERFORMANCE: one member table per class, built on first lookup
# Key: class -> {storage_name: (declaration, ...)} with instance declarations first
_member_table_cache: Dict[type, Mapping[str, Tuple[MemberDeclaration, ...]]] = {}


def mangle_name(name: str, cls: type) -> str:
    """Apply Python private-name mangling for a name looked up in cls.

    __count -> _Base__count    (for cls named Base)
    __dunder__ and _single are returned unchanged.
    """
    if not name.startswith('__') or name.endswith('__'):
        return name
    stripped = cls.__name__.lstrip('_')
    if not stripped:
        return name
    return f"_{stripped}{name}"


def _is_dunder(name: str) -> bool:
    return name.startswith('__') and name.endswith('__')


def _raw_annotations(obj: Any) -> Dict[str, Any]:
    try:
        return inspect.get_annotations(obj)
    except NameError:
        # Lazily evaluated annotations (3.14+) naming something undefined
        import annotationlib
        return annotationlib.get_annotations(obj, format=annotationlib.Format.STRING)
    except TypeError:
        return {}


def _own_annotations(obj: Any) -> Dict[str, Any]:
    """
    Annotations defined directly on a class or function.

    String annotations are evaluated one by one against the defining module's
    globals and the class namespace. Only those that cannot be evaluated (for
    example names imported under TYPE_CHECKING) stay strings.
    """
    annotations = dict(_raw_annotations(obj))
    if not any(isinstance(hint, str) for hint in annotations.values()):
        return annotations

    globalns = getattr(obj, '__globals__', None)
    if globalns is None:
        module = sys.modules.get(getattr(obj, '__module__', None))
        globalns = vars(module) if module is not None else {}
    localns = dict(vars(obj)) if isinstance(obj, type) else {}

    for key, hint in annotations.items():
        if not isinstance(hint, str):
            continue
        try:
            annotations[key] = eval(hint, globalns, localns)
        except Exception as e:
            logger.debug(f"Keeping annotation {key}: {hint!r} of {obj!r} as a string: {e}")
    return annotations


def _strip_qualifiers(hint: Any) -> Tuple[Any, bool, bool]:
    """Split an annotation into (value_type, is_classvar, is_final)."""
    is_classvar = False
    is_final = False
    while True:
        origin = get_origin(hint)
        if hint is ClassVar or origin is ClassVar:
            is_classvar = True
        elif hint is Final or origin is Final:
            is_final = True
        elif origin is Annotated:
            hint = get_args(hint)[0]
            continue
        else:
            return hint, is_classvar, is_final
        args = get_args(hint)
        hint = args[0] if args else Any


def _property_type(prop: property) -> Any:
    if prop.fget is None:
        return Any
    return _own_annotations(prop.fget).get('return', Any)


def _is_plain_data(value: Any) -> bool:
    """True for class attributes that hold data rather than behaviour."""
    if callable(value):
        return False
    return not hasattr(type(value), '__get__')


def _discover_members(cls: type) -> Dict[str, Tuple[MemberDeclaration, ...]]:
    """Build the member table of one class from its own namespace."""
    from memberaccess.registry import get_registered_members

    namespace = vars(cls)
    annotations = _own_annotations(cls)
    found: Dict[str, Dict[MemberScope, MemberDeclaration]] = {}

    def declare(key: str, value_type: Any, kind: MemberKind, scope: MemberScope,
                storage: StorageKind, accessor: Any = None) -> None:
        found.setdefault(key, {})[scope] = MemberDeclaration(
            name=key,
            storage_name=key,
            value_type=value_type,
            kind=kind,
            scope=scope,
            storage=storage,
            declaring_type=cls,
            accessor=accessor,
        )

    # Descriptors that own their storage come first: a property or slot and an
    # annotation of the same name describe one member.
    for key, value in namespace.items():
        if _is_dunder(key):
            continue
        if isinstance(value, property):
            value_type = annotations.get(key, _property_type(value))
            declare(key, _strip_qualifiers(value_type)[0], MemberKind.PROPERTY,
                    MemberScope.INSTANCE, StorageKind.PROPERTY, value)
        elif isinstance(value, types.MemberDescriptorType):
            value_type = _strip_qualifiers(annotations.get(key, Any))[0]
            declare(key, value_type, MemberKind.FIELD, MemberScope.INSTANCE, StorageKind.SLOT, value)

    for key, hint in annotations.items():
        if key in found:
            continue
        value_type, is_classvar, is_final = _strip_qualifiers(hint)
        if is_classvar or (is_final and key in namespace):
            declare(key, value_type, MemberKind.FIELD, MemberScope.STATIC, StorageKind.CLASS_DICT)
        else:
            declare(key, value_type, MemberKind.FIELD, MemberScope.INSTANCE, StorageKind.INSTANCE_DICT)

    for key, value in namespace.items():
        if key in found or _is_dunder(key) or not _is_plain_data(value):
            continue
        declare(key, type(value), MemberKind.FIELD, MemberScope.STATIC, StorageKind.CLASS_DEFAULT)

    # Registrations replace whatever introspection found under the same name
    registered = get_registered_members(cls)
    for declaration in registered:
        found.pop(declaration.storage_name, None)
    for declaration in registered:
        found.setdefault(declaration.storage_name, {})[declaration.scope] = declaration

    return {
        key: tuple(by_scope[scope] for scope in (MemberScope.INSTANCE, MemberScope.STATIC) if scope in by_scope)
        for key, by_scope in found.items()
    }


def get_member_table(cls: type) -> Mapping[str, Tuple[MemberDeclaration, ...]]:
    """
    Get the member table declared directly on cls.

    Tables are built once per class and cached for the process lifetime.
    Concurrent first callers may both build a table; setdefault keeps one and
    both are structurally identical.

    Args:
        cls: Class to inspect

    Returns:
        Read-only mapping of storage name -> declarations at this class
    """
    table = _member_table_cache.get(cls)
    if table is not None:
        return table

    table = MappingProxyType(_discover_members(cls))
    logger.debug(f"Built member table for {cls.__qualname__}: {sorted(table)}")
    return _member_table_cache.setdefault(cls, table)


def parent_chain(start_type: type) -> Tuple[type, ...]:
    """start_type and its ancestors, most-derived first."""
    return start_type.__mro__


def locate(start_type: type, name: str) -> List[HierarchyLevel]:
    """
    Walk start_type and its ancestors, noting where name is declared.

    Every level of the chain is reported, most-derived first, with the
    declarations found under name at that level (empty when absent). The
    returned declarations carry name as the lookup name even when the
    storage name is mangled.

    Args:
        start_type: Class to start from
        name: Member name as the caller wrote it

    Returns:
        One HierarchyLevel per class in the chain
    """
    levels = []
    for depth, level_type in enumerate(parent_chain(start_type)):
        key = mangle_name(name, level_type)
        declarations = get_member_table(level_type).get(key, ())
        if declarations and key != name:
            declarations = tuple(d.renamed(name) for d in declarations)
        levels.append(HierarchyLevel(depth=depth, level_type=level_type, declarations=declarations))
    return levels


def invalidate_member_table(changed_type: type) -> None:
    """Drop the cached table of one class (its subclasses keep theirs)."""
    _member_table_cache.pop(changed_type, None)


def clear_member_tables() -> None:
    """Clear every cached member table."""
    _member_table_cache.clear()
