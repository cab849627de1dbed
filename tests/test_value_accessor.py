"""
Tests for typed reads and writes of private members.

Tests cover:
- Reads of instance and static members, with and without hiding
- Resolution from an ancestor owner on a subclass instance
- The four failure kinds
- Writes, round trips and non-writable members
- Prepared accessors
"""

from typing import Any, ClassVar, Generic, List, Optional, TypeVar

import pytest

from memberaccess import (
    MemberNotFoundError,
    MissingNameError,
    NullTargetError,
    TypeMismatchError,
    get_private_member,
    private_member,
    set_private_member,
)

from sample_hierarchy import ParentClass, SubClassA, SubClassB


class TestGetFromParentOwner:
    """Always resolving from ParentClass, whatever the runtime type."""

    @pytest.mark.parametrize("instance, name, expected", [
        # Static field with instance value
        (ParentClass(), "__instances", 300),
        (ParentClass(), "_shared_level", 200),
        # Static field with no instance
        (None, "__instances", 300),
        (None, "_shared_level", 200),
        # Instance field with instance value
        (ParentClass(), "__count", 30),
        (ParentClass(), "__level", 20),
        # Instance field on a subclass that declares nothing
        (SubClassA(), "__count", 30),
        (SubClassA(), "__level", 20),
        # Instance field on a subclass that hides both
        (SubClassB(), "__count", 30),
        (SubClassB(), "__level", 20),
        # Static field through a hiding subclass instance
        (SubClassB(), "__instances", 300),
        (SubClassB(), "_shared_level", 200),
    ])
    def test_expected_value(self, instance, name, expected):
        assert get_private_member(instance, name, int, owner=ParentClass) == expected


class TestGetFromSubClassOwner:
    """Resolving from the hiding subclass sees its own members."""

    @pytest.mark.parametrize("name, expected", [
        ("__level", 80),
        ("__count", 70),
        ("_shared_level", 800),
        ("__instances", 700),
    ])
    def test_expected_value(self, sub_b, name, expected):
        assert get_private_member(sub_b, name, int, owner=SubClassB) == expected

    def test_owner_defaults_to_runtime_type(self, sub_b):
        """Without an owner the instance's own class is the starting point."""
        assert get_private_member(sub_b, "__count", int) == 70
        assert get_private_member(sub_b, "__count", int, owner=ParentClass) == 30

    def test_subclass_without_redeclaration(self, sub_a):
        """SubClassA resolves to ParentClass storage from either owner."""
        assert get_private_member(sub_a, "__count", int, owner=SubClassA) == 30
        assert get_private_member(sub_a, "__count", int, owner=ParentClass) == 30

    def test_static_without_instance_matches_instance_read(self, sub_b):
        """Static members read the same with or without an instance."""
        with_instance = get_private_member(sub_b, "__instances", int)
        without_instance = get_private_member(None, "__instances", int, owner=SubClassB)
        assert with_instance == without_instance == 700

    def test_already_mangled_name(self, sub_b):
        """A mangled name addresses exactly one class's storage."""
        assert get_private_member(sub_b, "_ParentClass__count", int) == 30
        assert get_private_member(sub_b, "_SubClassB__count", int) == 70


class TestReadFailures:
    """Each failure maps to exactly one error kind."""

    def test_no_instance_for_instance_member(self):
        with pytest.raises(NullTargetError):
            get_private_member(None, "__count", int, owner=ParentClass)

    def test_no_instance_and_no_owner(self):
        with pytest.raises(NullTargetError):
            get_private_member(None, "__instances", int)

    @pytest.mark.parametrize("name", [None, ""])
    def test_missing_name(self, parent, name):
        with pytest.raises(MissingNameError):
            get_private_member(parent, name, int)

    @pytest.mark.parametrize("instance, owner", [
        (None, None),
        (None, ParentClass),
        (ParentClass(), None),
        (SubClassB(), ParentClass),
    ])
    def test_missing_name_regardless_of_target(self, instance, owner):
        with pytest.raises(MissingNameError):
            get_private_member(instance, "", int, owner=owner)

    def test_type_mismatch_text(self, parent):
        """An integer field requested as text."""
        with pytest.raises(TypeMismatchError) as exc_info:
            get_private_member(parent, "__count", str)
        assert exc_info.value.declared_type is int
        assert exc_info.value.expected_type is str

    def test_type_mismatch_no_widening(self, parent):
        """int is never read as float."""
        with pytest.raises(TypeMismatchError):
            get_private_member(parent, "__count", float)

    def test_type_mismatch_bool_is_not_int(self):
        class Flags:
            _enabled: bool = True

        with pytest.raises(TypeMismatchError):
            get_private_member(Flags(), "_enabled", int)
        assert get_private_member(Flags(), "_enabled", bool) is True

    def test_type_mismatch_on_static(self):
        with pytest.raises(TypeMismatchError):
            get_private_member(None, "__instances", str, owner=ParentClass)

    @pytest.mark.parametrize("name", ["_myField", "__counts", "count", "_count", "__Count"])
    def test_member_not_found(self, sub_b, name):
        with pytest.raises(MemberNotFoundError):
            get_private_member(sub_b, name, int)

    def test_methods_are_not_members(self):
        class Worker:
            def _run(self):
                return 1

        with pytest.raises(MemberNotFoundError):
            get_private_member(Worker(), "_run", Any)

    def test_instance_not_of_owner_type(self, parent):
        """A ParentClass object cannot be viewed as a SubClassB."""
        with pytest.raises(TypeMismatchError):
            get_private_member(parent, "__count", int, owner=SubClassB)

    def test_owner_is_not_a_class(self, parent):
        T = TypeVar("T")
        with pytest.raises(MemberNotFoundError):
            get_private_member(None, "__count", int, owner=T)

    def test_null_target_checked_before_type(self):
        with pytest.raises(NullTargetError):
            get_private_member(None, "__count", str, owner=ParentClass)


class TestStorageKinds:
    """Reads from each kind of storage."""

    def test_class_default_for_unset_instance_field(self):
        """An annotated field with a class value uses it as the default."""
        class Counter:
            _ticks: int = 5

        assert get_private_member(Counter(), "_ticks", int) == 5

    def test_declared_but_never_set(self):
        class Lazy:
            __value: int

        with pytest.raises(MemberNotFoundError):
            get_private_member(Lazy(), "__value", int)

    def test_slots(self):
        class Point:
            __slots__ = ("_x", "_y")
            _x: int
            _y: int

            def __init__(self):
                self._x = 1

        point = Point()
        assert get_private_member(point, "_x", int) == 1
        with pytest.raises(MemberNotFoundError):
            get_private_member(point, "_y", int)

        set_private_member(point, "_y", 9, int)
        assert point._y == 9

    def test_unannotated_slot_is_typed_any(self):
        class Legacy:
            __slots__ = ("_state",)

            def __init__(self):
                self._state = "ready"

        assert get_private_member(Legacy(), "_state", Any) == "ready"
        with pytest.raises(TypeMismatchError):
            get_private_member(Legacy(), "_state", str)

    def test_unannotated_class_attribute(self):
        """Plain class data is a static member typed by its value."""
        class Settings:
            _retries = 3

        assert get_private_member(None, "_retries", int, owner=Settings) == 3
        with pytest.raises(TypeMismatchError):
            get_private_member(None, "_retries", float, owner=Settings)

    def test_unannotated_class_attribute_shadowed_by_instance(self):
        """An instance that assigned over the class value reports its own value."""
        class Legacy:
            _hits = 0

            def bump(self):
                self._hits += 1

        bumped = Legacy()
        bumped.bump()
        fresh = Legacy()

        assert get_private_member(bumped, "_hits", int) == 1
        assert get_private_member(fresh, "_hits", int) == 0
        assert get_private_member(None, "_hits", int, owner=Legacy) == 0

    def test_typing_forms_compare_by_equality(self):
        class Registry:
            _names: List[str]
            _parent: Optional[int] = None

            def __init__(self):
                self._names = ["a"]

        registry = Registry()
        assert get_private_member(registry, "_names", List[str]) == ["a"]
        assert get_private_member(registry, "_parent", Optional[int]) is None
        with pytest.raises(TypeMismatchError):
            get_private_member(registry, "_names", list)

    def test_bypasses_getattribute_override(self):
        class Guarded:
            __secret: int

            def __init__(self):
                self.__secret = 42

            def __getattribute__(self, name):
                if "secret" in name:
                    raise AttributeError(name)
                return object.__getattribute__(self, name)

        assert get_private_member(Guarded(), "__secret", int) == 42

    def test_closed_generic_owner(self):
        T = TypeVar("T")

        class Box(Generic[T]):
            __size: int

            def __init__(self):
                self.__size = 4

        assert get_private_member(Box(), "__size", int, owner=Box[int]) == 4

    def test_single_underscore_redeclaration_shares_storage(self):
        """Only the declaration differs; Python keeps one __dict__ entry."""
        class Node:
            _label: str

            def __init__(self):
                self._label = "node"

        class Leaf(Node):
            _label: object

        leaf = Leaf()
        assert get_private_member(leaf, "_label", object) == "node"
        assert get_private_member(leaf, "_label", str, owner=Node) == "node"
        with pytest.raises(TypeMismatchError):
            get_private_member(leaf, "_label", str)


class TestProperties:
    """Properties resolve like fields and use the declaring class's accessors."""

    def test_read_property(self, sub_b):
        assert get_private_member(sub_b, "my_integer", int) == 80
        assert get_private_member(sub_b, "my_integer", int, owner=ParentClass) == 0

    def test_write_through_parent_setter(self, sub_b):
        set_private_member(sub_b, "my_integer", 10, int, owner=ParentClass)
        assert get_private_member(sub_b, "my_integer", int, owner=ParentClass) == 10
        assert get_private_member(sub_b, "my_integer", int) == 80

    def test_hiding_property_without_setter(self, sub_b):
        """SubClassB hides the writable property with a getter-only one."""
        with pytest.raises(MemberNotFoundError):
            set_private_member(sub_b, "my_integer", 10, int)

    def test_write_to_parent_instance(self, parent):
        set_private_member(parent, "my_integer", 10, int)
        assert parent.my_integer == 10

    def test_property_annotation_type(self, parent):
        with pytest.raises(TypeMismatchError):
            get_private_member(parent, "my_integer", str)


class TestWrites:
    """Writes go to the storage of the resolved declaration only."""

    def test_round_trip_instance_field(self, sub_b):
        set_private_member(sub_b, "__count", 71, int)
        assert get_private_member(sub_b, "__count", int) == 71
        assert get_private_member(sub_b, "__count", int, owner=ParentClass) == 30

    def test_round_trip_parent_storage(self, sub_b):
        set_private_member(sub_b, "__count", 31, int, owner=ParentClass)
        assert get_private_member(sub_b, "__count", int, owner=ParentClass) == 31
        assert get_private_member(sub_b, "__count", int) == 70

    def test_round_trip_static(self):
        class Config:
            __limit: ClassVar[int] = 1

        class Child(Config):
            __limit: ClassVar[int] = 2

        set_private_member(None, "__limit", 10, int, owner=Config)
        assert get_private_member(None, "__limit", int, owner=Config) == 10
        assert get_private_member(None, "__limit", int, owner=Child) == 2
        assert Config._Config__limit == 10

    def test_static_write_ignores_instance(self):
        class Config:
            _mode: ClassVar[str] = "a"

        set_private_member(Config(), "_mode", "b", str)
        assert Config._mode == "b"

    def test_write_needs_instance(self):
        with pytest.raises(NullTargetError):
            set_private_member(None, "__count", 1, int, owner=ParentClass)

    def test_write_type_mismatch(self, parent):
        with pytest.raises(TypeMismatchError):
            set_private_member(parent, "__count", 1.5, float)

    def test_write_value_of_wrong_type(self, parent):
        with pytest.raises(TypeMismatchError):
            set_private_member(parent, "__count", "thirty", int)
        assert get_private_member(parent, "__count", int) == 30

    def test_write_bool_into_int_field(self, parent):
        """bool is not int, on writes as on reads."""
        with pytest.raises(TypeMismatchError):
            set_private_member(parent, "__count", True, int)
        assert get_private_member(parent, "__count", int) == 30

    def test_write_int_into_object_field(self):
        class Bag:
            _item: object = None

        bag = Bag()
        set_private_member(bag, "_item", True, object)
        assert get_private_member(bag, "_item", object) is True

    def test_write_shadowed_class_attribute(self):
        """Writes follow the instance override; otherwise they go to the class."""
        class Legacy:
            _hits = 0

            def bump(self):
                self._hits += 1

        bumped = Legacy()
        bumped.bump()
        fresh = Legacy()

        set_private_member(bumped, "_hits", 5, int)
        assert bumped._hits == 5
        assert Legacy._hits == 0

        set_private_member(fresh, "_hits", 7, int)
        assert Legacy._hits == 7
        assert bumped._hits == 5

    def test_write_missing_name(self, parent):
        with pytest.raises(MissingNameError):
            set_private_member(parent, "", 1, int)

    def test_write_unknown_member(self, parent):
        with pytest.raises(MemberNotFoundError):
            set_private_member(parent, "__missing", 1, int)

    def test_write_bypasses_setattr_override(self):
        class Frozen:
            __value: int

            def __init__(self):
                object.__setattr__(self, "_Frozen__value", 1)

            def __setattr__(self, name, value):
                raise AttributeError("frozen")

        frozen = Frozen()
        set_private_member(frozen, "__value", 2, int)
        assert get_private_member(frozen, "__value", int) == 2


class TestPreparedAccessor:
    """private_member() resolves once and can be reused."""

    def test_get_and_set(self, sub_b):
        count = private_member(ParentClass, "__count", int)
        assert count.get(sub_b) == 30
        count.set(sub_b, 35)
        assert count.get(sub_b) == 35

    def test_static_accessor(self):
        class Pool:
            __size: ClassVar[int] = 4

        size = private_member(Pool, "__size", int)
        size.set(None, size.get() + 1)
        assert size.get() == 5

    def test_type_checked_upfront(self):
        with pytest.raises(TypeMismatchError):
            private_member(ParentClass, "__count", str)

    def test_unknown_member_upfront(self):
        with pytest.raises(MemberNotFoundError):
            private_member(ParentClass, "__nothing", int)

    def test_rejects_foreign_instance(self, parent):
        count = private_member(SubClassB, "__count", int)
        with pytest.raises(TypeMismatchError):
            count.get(parent)

    def test_instance_member_without_instance(self):
        with pytest.raises(NullTargetError):
            private_member(ParentClass, "__count", int).get()
