"""
Failure classification for member resolution and access.

Every failure path of the resolver and the value accessor ends up as exactly
one of four kinds. Each kind has its own exception class that also derives
from the closest builtin exception, so callers can catch either the precise
kind or the builtin category they already handle.

    NULL_TARGET       -> NullTargetError       (TypeError)
    MISSING_NAME      -> MissingNameError      (ValueError)
    MEMBER_NOT_FOUND  -> MemberNotFoundError   (AttributeError)
    TYPE_MISMATCH     -> TypeMismatchError     (TypeError)
"""

from enum import Enum
from typing import Any, Dict, Optional, Type


class AccessErrorKind(Enum):
    """The four ways a member lookup or access can fail."""
    NULL_TARGET = "null_target"
    MISSING_NAME = "missing_name"
    MEMBER_NOT_FOUND = "member_not_found"
    TYPE_MISMATCH = "type_mismatch"


def type_label(t: Any) -> str:
    """Readable name for a type or typing construct."""
    if isinstance(t, type):
        return t.__qualname__
    return repr(t)


class MemberAccessError(Exception):
    """Base class for all classified member access failures.

    Attributes:
        kind: The AccessErrorKind of this failure
        member_name: The member name as the caller supplied it
        owner_type: The type resolution started from (None if unknown)
    """
    kind: AccessErrorKind

    def __init__(self, message: str, member_name: Optional[str], owner_type: Optional[type]):
        super().__init__(message)
        self.member_name = member_name
        self.owner_type = owner_type


class NullTargetError(MemberAccessError, TypeError):
    """An instance-scoped member was requested without an instance."""
    kind = AccessErrorKind.NULL_TARGET


class MissingNameError(MemberAccessError, ValueError):
    """No member name (None or empty) was supplied."""
    kind = AccessErrorKind.MISSING_NAME


class MemberNotFoundError(MemberAccessError, AttributeError):
    """No field or property of that name exists, or it cannot be assigned."""
    kind = AccessErrorKind.MEMBER_NOT_FOUND


class TypeMismatchError(MemberAccessError, TypeError):
    """The member exists but its declared type is not the requested type."""
    kind = AccessErrorKind.TYPE_MISMATCH

    def __init__(
        self,
        message: str,
        member_name: Optional[str],
        owner_type: Optional[type],
        declared_type: Any = None,
        expected_type: Any = None,
    ):
        super().__init__(message, member_name, owner_type)
        self.declared_type = declared_type
        self.expected_type = expected_type


_ERROR_CLASSES: Dict[AccessErrorKind, Type[MemberAccessError]] = {
    AccessErrorKind.NULL_TARGET: NullTargetError,
    AccessErrorKind.MISSING_NAME: MissingNameError,
    AccessErrorKind.MEMBER_NOT_FOUND: MemberNotFoundError,
    AccessErrorKind.TYPE_MISMATCH: TypeMismatchError,
}


def classify(
    kind: AccessErrorKind,
    owner_type: Optional[type],
    member_name: Optional[str],
    detail: str = "",
    **extra: Any,
) -> MemberAccessError:
    """
    Build the exception for a failure kind.

    The message always names the queried member and the owner type so that
    the four kinds stay distinguishable from the text alone.

    Args:
        kind: Failure kind
        owner_type: Type resolution started from
        member_name: Name the caller asked for
        detail: Extra context appended to the message
        **extra: Additional constructor arguments (TYPE_MISMATCH only:
            declared_type, expected_type)

    Returns:
        An exception instance, not raised
    """
    owner = type_label(owner_type) if owner_type is not None else "<unknown type>"
    message = f"{kind.value}: {owner}.{member_name!s}"
    if detail:
        message = f"{message} ({detail})"
    return _ERROR_CLASSES[kind](message, member_name, owner_type, **extra)
