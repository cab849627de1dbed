"""
Typed access to non-public members anywhere in a class hierarchy.

This library reads and writes private fields, class-level state and
properties of objects you do not own, for test harnesses and extension code
that must observe or mutate internal state.

Key Features:
- Hierarchy-aware resolution that honours member hiding
- Per-level private name mangling ("__count" means Base's or Derived's)
- Instance and static (class-level) members, never conflated
- Exact expected-type checks, no coercion
- Four classified failure kinds
- Explicit registration for classes that cannot be introspected

Quick Start:
    >>> from typing import ClassVar
    >>> from memberaccess import get_private_member, set_private_member
    >>>
    >>> class Base:
    ...     __count: int
    ...     __limit: ClassVar[int] = 300
    ...     def __init__(self):
    ...         self.__count = 30
    >>>
    >>> class Derived(Base):
    ...     __count: int
    ...     def __init__(self):
    ...         super().__init__()
    ...         self.__count = 70
    >>>
    >>> obj = Derived()
    >>> get_private_member(obj, "__count", int)               # Derived's
    70
    >>> get_private_member(obj, "__count", int, owner=Base)   # Base's, still there
    30
    >>> get_private_member(None, "__limit", int, owner=Base)  # static
    300

Architecture:
    caller -> value_accessor (typed read/write)
           -> member_resolver (first declaring level wins)
           -> hierarchy_walker (per-class member tables along the MRO)
    Failures are classified by errors into NullTargetError,
    MissingNameError, MemberNotFoundError and TypeMismatchError.

Modules:
    - errors: Failure kinds and exceptions
    - declarations: Immutable member and resolution records
    - hierarchy_walker: Per-class member tables and the MRO walk
    - member_resolver: Authoritative declaration selection and caching
    - value_accessor: Typed reads and writes, public entry points
    - registry: Explicit member registration
    - config: Framework switches
"""

# Errors
from memberaccess.errors import (
    AccessErrorKind,
    MemberAccessError,
    NullTargetError,
    MissingNameError,
    MemberNotFoundError,
    TypeMismatchError,
    classify,
)

# Data model
from memberaccess.declarations import (
    MemberKind,
    MemberScope,
    StorageKind,
    MemberDeclaration,
    HierarchyLevel,
    ResolutionResult,
)

# Walker
from memberaccess.hierarchy_walker import (
    get_member_table,
    locate,
    mangle_name,
)

# Resolver
from memberaccess.member_resolver import (
    resolve,
    describe_member,
    find_hidden_members,
    invalidate_member_cache,
    clear_resolution_cache,
)

# Accessor
from memberaccess.value_accessor import (
    get_private_member,
    set_private_member,
    private_member,
    MemberAccessor,
    read_value,
    write_value,
)

# Registry
from memberaccess.registry import (
    register_member,
    unregister_member,
    get_registered_members,
)

# Configuration
from memberaccess.config import (
    set_resolution_cache_enabled,
    is_resolution_cache_enabled,
)

__all__ = [
    # Errors
    'AccessErrorKind',
    'MemberAccessError',
    'NullTargetError',
    'MissingNameError',
    'MemberNotFoundError',
    'TypeMismatchError',
    'classify',
    # Data model
    'MemberKind',
    'MemberScope',
    'StorageKind',
    'MemberDeclaration',
    'HierarchyLevel',
    'ResolutionResult',
    # Walker
    'get_member_table',
    'locate',
    'mangle_name',
    # Resolver
    'resolve',
    'describe_member',
    'find_hidden_members',
    'invalidate_member_cache',
    'clear_resolution_cache',
    # Accessor
    'get_private_member',
    'set_private_member',
    'private_member',
    'MemberAccessor',
    'read_value',
    'write_value',
    # Registry
    'register_member',
    'unregister_member',
    'get_registered_members',
    # Configuration
    'set_resolution_cache_enabled',
    'is_resolution_cache_enabled',
]

__version__ = '1.0.0'
__description__ = 'Typed access to non-public members anywhere in a class hierarchy'
