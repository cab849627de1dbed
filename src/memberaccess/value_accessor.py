"""
Typed reads and writes against a resolved member declaration.

The accessor goes straight to the storage of the declaring class: instance
__dict__ entries, slot descriptors and class __dict__ entries are read and
written directly, bypassing any __getattribute__ / __setattr__ overrides on
the target. Properties call the fget/fset of the declaring class, not
whatever a subclass installed under the same name. Unannotated class data
is static, except through an instance that holds its own value under the
same key.

The requested value type must be exactly the declared type. int is not float,
bool is not int, and nothing is ever converted.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from memberaccess.declarations import MemberDeclaration, MemberScope, StorageKind
from memberaccess.errors import AccessErrorKind, MemberAccessError, classify, type_label
from memberaccess.member_resolver import normalize_owner, resolve

logger = logging.getLogger(__name__)

_MISSING = object()  # Distinguishes "no value" from a stored None


def types_match(declared_type: Any, expected_type: Any) -> bool:
    """Exact type equality: identity for classes, equality for typing forms."""
    if isinstance(declared_type, type) or isinstance(expected_type, type):
        return declared_type is expected_type
    return declared_type == expected_type


def _value_matches(value: Any, value_type: Any) -> bool:
    """Runtime check of a value about to be written; typing forms are not checked."""
    if value_type is Any or not isinstance(value_type, type):
        return True
    if isinstance(value, bool) and value_type is int:
        return False
    return isinstance(value, value_type)


def _fail(kind: AccessErrorKind, owner: Optional[type], name: Optional[str], detail: str = "", **extra) -> MemberAccessError:
    return classify(kind, owner, name, detail, **extra)


def _check_access(instance: Any, declaration: MemberDeclaration, value_type: Any, owner: type) -> None:
    if declaration.scope is MemberScope.INSTANCE and instance is None:
        raise _fail(AccessErrorKind.NULL_TARGET, owner, declaration.name,
                    f"{declaration} needs an instance")
    if not types_match(declaration.value_type, value_type):
        raise _fail(
            AccessErrorKind.TYPE_MISMATCH, owner, declaration.name,
            f"declared {type_label(declaration.value_type)}, requested {type_label(value_type)}",
            declared_type=declaration.value_type,
            expected_type=value_type,
        )


def _instance_dict(instance: Any) -> Optional[dict]:
    try:
        return object.__getattribute__(instance, '__dict__')
    except AttributeError:
        return None


def _shadows_class_value(instance: Any, key: str) -> bool:
    if instance is None:
        return False
    inst_dict = _instance_dict(instance)
    return inst_dict is not None and key in inst_dict


def read_value(instance: Any, declaration: MemberDeclaration, value_type: Any, owner: type) -> Any:
    """
    Read the value behind a declaration.

    Args:
        instance: Target object, ignored for static members
        declaration: Authoritative declaration from the resolver
        value_type: Type the caller expects, must equal the declared type
        owner: Type resolution started from (for error reporting)

    Returns:
        The stored value

    Raises:
        NullTargetError: Instance member without an instance
        TypeMismatchError: value_type is not the declared type
        MemberNotFoundError: Storage is declared but holds no value
    """
    _check_access(instance, declaration, value_type, owner)

    storage = declaration.storage
    key = declaration.storage_name
    value: Any = _MISSING

    if storage is StorageKind.INSTANCE_DICT:
        inst_dict = _instance_dict(instance)
        if inst_dict is not None:
            value = inst_dict.get(key, _MISSING)
        if value is _MISSING:
            # Fall back to the class-level default of the declaring class
            value = vars(declaration.declaring_type).get(key, _MISSING)
    elif storage is StorageKind.SLOT:
        try:
            value = declaration.accessor.__get__(instance, declaration.declaring_type)
        except AttributeError:
            value = _MISSING
    elif storage is StorageKind.CLASS_DICT:
        value = vars(declaration.declaring_type).get(key, _MISSING)
    elif storage is StorageKind.CLASS_DEFAULT:
        if _shadows_class_value(instance, key):
            value = _instance_dict(instance)[key]
        else:
            value = vars(declaration.declaring_type).get(key, _MISSING)
    elif storage is StorageKind.PROPERTY:
        if declaration.accessor.fget is None:
            raise _fail(AccessErrorKind.MEMBER_NOT_FOUND, owner, declaration.name, "property is not readable")
        value = declaration.accessor.fget(instance)
    elif storage is StorageKind.REGISTERED:
        if declaration.is_static:
            value = declaration.accessor()
        else:
            value = declaration.accessor(instance)

    if value is _MISSING:
        raise _fail(AccessErrorKind.MEMBER_NOT_FOUND, owner, declaration.name, f"{declaration} has no value")
    return value


def write_value(instance: Any, declaration: MemberDeclaration, value: Any, value_type: Any, owner: type) -> None:
    """
    Write a value into the storage behind a declaration.

    Same preconditions as read_value. Additionally the member must be
    assignable and, when value_type is a class, value must be an instance
    of it.

    Raises:
        NullTargetError, TypeMismatchError, MemberNotFoundError
    """
    _check_access(instance, declaration, value_type, owner)
    if not declaration.is_writable:
        raise _fail(AccessErrorKind.MEMBER_NOT_FOUND, owner, declaration.name, f"{declaration} is not writable")
    if not _value_matches(value, value_type):
        raise _fail(
            AccessErrorKind.TYPE_MISMATCH, owner, declaration.name,
            f"value {value!r} is not a {type_label(value_type)}",
            declared_type=declaration.value_type,
            expected_type=value_type,
        )

    storage = declaration.storage
    key = declaration.storage_name

    if storage is StorageKind.INSTANCE_DICT:
        inst_dict = _instance_dict(instance)
        if inst_dict is None:
            raise _fail(AccessErrorKind.MEMBER_NOT_FOUND, owner, declaration.name,
                        f"{type(instance).__qualname__} instances have no __dict__")
        inst_dict[key] = value
    elif storage is StorageKind.SLOT:
        declaration.accessor.__set__(instance, value)
    elif storage is StorageKind.CLASS_DEFAULT and _shadows_class_value(instance, key):
        _instance_dict(instance)[key] = value
    elif storage in (StorageKind.CLASS_DICT, StorageKind.CLASS_DEFAULT):
        try:
            setattr(declaration.declaring_type, key, value)
        except TypeError as e:
            # Builtin and extension types reject class attribute assignment
            raise _fail(AccessErrorKind.MEMBER_NOT_FOUND, owner, declaration.name, f"not writable: {e}") from e
    elif storage is StorageKind.PROPERTY:
        declaration.accessor.fset(instance, value)
    elif storage is StorageKind.REGISTERED:
        if declaration.is_static:
            declaration.setter(value)
        else:
            declaration.setter(instance, value)

    logger.debug(f"Wrote {type_label(owner)}.{declaration.name} -> {declaration}")


def _owner_for(instance: Any, name: Optional[str], owner: Any) -> type:
    """Work out the class to resolve from and validate the call arguments."""
    if owner is not None:
        owner_type = normalize_owner(owner)
    elif instance is not None:
        owner_type = type(instance)
    else:
        owner_type = None

    if not isinstance(name, str) or not name:
        raise _fail(AccessErrorKind.MISSING_NAME, owner_type, name, "member name is empty")
    if owner is None and instance is None:
        raise _fail(AccessErrorKind.NULL_TARGET, None, name, "no instance and no owner type given")
    if owner_type is None:
        raise _fail(AccessErrorKind.MEMBER_NOT_FOUND, None, name, f"{owner!r} is not a class")
    if instance is not None and not isinstance(instance, owner_type):
        raise _fail(
            AccessErrorKind.TYPE_MISMATCH, owner_type, name,
            f"instance of {type(instance).__qualname__} is not a {owner_type.__qualname__}",
        )
    return owner_type


def get_private_member(instance: Any, name: str, value_type: Any, owner: Any = None) -> Any:
    """
    Read a field or property, wherever it is declared in the hierarchy.

    Args:
        instance: Target object, or None for static members
        name: Member name as written in the class body ("__count", "_level")
        value_type: Exact declared type of the member
        owner: Class to resolve from; defaults to type(instance). Passing an
            ancestor reads the ancestor's member even if a subclass hides it.

    Returns:
        The member value

    Raises:
        MissingNameError, NullTargetError, MemberNotFoundError, TypeMismatchError
    """
    owner_type = _owner_for(instance, name, owner)
    declaration = resolve(owner_type, name).unwrap()
    return read_value(instance, declaration, value_type, owner_type)


def set_private_member(instance: Any, name: str, value: Any, value_type: Any, owner: Any = None) -> None:
    """
    Write a field or property, wherever it is declared in the hierarchy.

    Arguments and errors as for get_private_member; additionally a member
    without assignable storage raises MemberNotFoundError.
    """
    owner_type = _owner_for(instance, name, owner)
    declaration = resolve(owner_type, name).unwrap()
    write_value(instance, declaration, value, value_type, owner_type)


@dataclass(frozen=True)
class MemberAccessor:
    """A resolved, type-checked member ready for repeated reads and writes.

    Usage:
        count = private_member(Counter, "__count", int)
        count.get(counter)
        count.set(counter, 5)

        total = private_member(Counter, "_total", int)  # ClassVar[int]
        total.set(None, total.get() + 1)
    """
    owner: type
    declaration: MemberDeclaration
    value_type: Any

    def _check_instance(self, instance: Any) -> None:
        if instance is not None and not isinstance(instance, self.owner):
            raise _fail(
                AccessErrorKind.TYPE_MISMATCH, self.owner, self.declaration.name,
                f"instance of {type(instance).__qualname__} is not a {self.owner.__qualname__}",
            )

    def get(self, instance: Any = None) -> Any:
        self._check_instance(instance)
        return read_value(instance, self.declaration, self.value_type, self.owner)

    def set(self, instance: Any, value: Any) -> None:
        """Write value; instance may be None for static members."""
        self._check_instance(instance)
        write_value(instance, self.declaration, value, self.value_type, self.owner)


def private_member(owner: Any, name: str, value_type: Any) -> MemberAccessor:
    """
    Resolve and type-check a member once, for repeated access.

    Raises:
        MissingNameError, MemberNotFoundError, TypeMismatchError
    """
    owner_type = normalize_owner(owner)
    result = resolve(owner, name)
    declaration = result.unwrap()
    if not types_match(declaration.value_type, value_type):
        raise _fail(
            AccessErrorKind.TYPE_MISMATCH, owner_type, name,
            f"declared {type_label(declaration.value_type)}, requested {type_label(value_type)}",
            declared_type=declaration.value_type,
            expected_type=value_type,
        )
    return MemberAccessor(owner=owner_type, declaration=declaration, value_type=value_type)
