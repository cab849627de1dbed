"""
Immutable records describing discovered members and resolution outcomes.

Design Philosophy: Correct by Construction
- Declarations are frozen once discovered
- A ResolutionResult is either a declaration or a failure, never both
- Storage is described explicitly so the accessor never has to guess
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from memberaccess.errors import AccessErrorKind, MemberAccessError, classify, type_label


class MemberKind(Enum):
    FIELD = "field"
    PROPERTY = "property"


class MemberScope(Enum):
    INSTANCE = "instance"
    STATIC = "static"


class StorageKind(Enum):
    """Where the value of a declaration physically lives."""
    INSTANCE_DICT = "instance_dict"  # key in the instance __dict__
    SLOT = "slot"  # __slots__ member descriptor of the declaring class
    CLASS_DICT = "class_dict"  # key in the declaring class __dict__
    CLASS_DEFAULT = "class_default"  # class __dict__ key an instance __dict__ may shadow
    PROPERTY = "property"  # fget/fset of a property object
    REGISTERED = "registered"  # explicitly registered getter/setter


@dataclass(frozen=True)
class MemberDeclaration:
    """One concrete field or property declared at a specific class.

    name is the name the lookup used; storage_name is the key actually found
    in the declaring class (differs for mangled private names).
    """
    name: str
    storage_name: str
    value_type: Any
    kind: MemberKind
    scope: MemberScope
    storage: StorageKind
    declaring_type: type
    accessor: Any = field(default=None, compare=False, repr=False)
    setter: Any = field(default=None, compare=False, repr=False)
    read_only: bool = False

    @property
    def is_static(self) -> bool:
        return self.scope is MemberScope.STATIC

    @property
    def is_writable(self) -> bool:
        if self.read_only:
            return False
        if self.storage is StorageKind.PROPERTY:
            return self.accessor.fset is not None
        if self.storage is StorageKind.REGISTERED:
            return self.setter is not None
        return True

    def renamed(self, name: str) -> 'MemberDeclaration':
        """Copy of this declaration as seen through a different lookup name."""
        return MemberDeclaration(
            name=name,
            storage_name=self.storage_name,
            value_type=self.value_type,
            kind=self.kind,
            scope=self.scope,
            storage=self.storage,
            declaring_type=self.declaring_type,
            accessor=self.accessor,
            setter=self.setter,
            read_only=self.read_only,
        )

    def __str__(self) -> str:
        return (
            f"{self.scope.value} {self.kind.value} "
            f"{type_label(self.declaring_type)}.{self.storage_name}: {type_label(self.value_type)}"
        )


@dataclass(frozen=True)
class HierarchyLevel:
    """One row of a hierarchy walk: a class and what it declares under a name.

    declarations holds at most one declaration per scope, instance first.
    """
    depth: int
    level_type: type
    declarations: Tuple[MemberDeclaration, ...] = ()

    @property
    def has_match(self) -> bool:
        return bool(self.declarations)


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one name from one starting type."""
    owner_type: Optional[type]
    member_name: Optional[str]
    declaration: Optional[MemberDeclaration] = None
    failure: Optional[AccessErrorKind] = None
    detail: str = ""

    @classmethod
    def found(cls, owner_type: type, member_name: str, declaration: MemberDeclaration) -> 'ResolutionResult':
        return cls(owner_type=owner_type, member_name=member_name, declaration=declaration)

    @classmethod
    def failed(
        cls,
        owner_type: Optional[type],
        member_name: Optional[str],
        kind: AccessErrorKind,
        detail: str = "",
    ) -> 'ResolutionResult':
        return cls(owner_type=owner_type, member_name=member_name, failure=kind, detail=detail)

    @property
    def ok(self) -> bool:
        return self.declaration is not None

    def error(self) -> MemberAccessError:
        """Classified exception for a failed result."""
        if self.failure is None:
            raise ValueError("error() called on a successful ResolutionResult")
        return classify(self.failure, self.owner_type, self.member_name, self.detail)

    def unwrap(self) -> MemberDeclaration:
        """Return the declaration or raise the classified error."""
        if self.declaration is None:
            raise self.error()
        return self.declaration
