"""Type introspection used by the property resolver.

Subjects are classified once into a :class:`SubjectKind` and every resolver
operation dispatches on that tag instead of probing types ad hoc.

Python has no enforced member visibility. Members whose name starts with an
underscore count as private: they never show up in member listings and can
only be reached through the raw accessors (``read_raw``/``write_raw``), which
back ``force_direct_access``.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
from collections.abc import Iterable, Mapping, Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final, Protocol, runtime_checkable

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Iterator

SCALAR_TYPES: Final[tuple[type, ...]] = (str, bytes, bytearray, int, float, complex)
_SKIPPED_BASES: Final[tuple[type, ...]] = (object, BaseModel)


class SubjectKind(StrEnum):
    NULL = "null"
    SCALAR = "scalar"
    KEYED_CONTAINER = "keyed_container"
    PLAIN_BAG = "plain_bag"
    INDEXABLE_RECORD = "indexable_record"
    STRUCTURED_RECORD = "structured_record"


@runtime_checkable
class KeyedAccessible(Protocol):
    """Capability of records that support an existence check and an index read."""

    def __contains__(self, key: object, /) -> bool: ...

    def __getitem__(self, key: Any, /) -> Any: ...


def is_public(name: str) -> bool:
    return not name.startswith("_")


def is_collection(value: object) -> bool:
    """Tell whether ``value`` is an aggregate mutated item by item rather than replaced.

    Structured records stay single values even when they are iterable, as
    pydantic models are.
    """

    if not isinstance(value, Iterable) or isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return not is_structured_record(value)


def is_structured_record(value: object) -> bool:
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def is_frozen(cls: type) -> bool:
    """Tell whether instances of ``cls`` reject every attribute assignment."""

    params = getattr(cls, "__dataclass_params__", None)
    if params is not None and params.frozen:
        return True
    return issubclass(cls, BaseModel) and bool(cls.model_config.get("frozen", False))


def as_items(value: object) -> list[object]:
    """Flatten ``value`` into a list of items the way an array cast would."""

    if value is None:
        return []
    if isinstance(value, Mapping):
        return list(value.values())
    if is_collection(value):
        return list(value)  # type: ignore[arg-type]
    return [value]


def _mangled_names(cls: type, name: str) -> Iterator[str]:
    for klass in cls.__mro__:
        if klass in _SKIPPED_BASES:
            continue
        yield f"_{klass.__name__.lstrip('_')}__{name}"


def _slot_descriptor(cls: type, name: str) -> types.MemberDescriptorType | None:
    for klass in cls.__mro__:
        attr = vars(klass).get(name)
        if isinstance(attr, types.MemberDescriptorType):
            return attr
    return None


def _is_plain_value(attr: object) -> bool:
    return not hasattr(attr, "__get__") and not callable(attr)


def _class_default(cls: type, name: str) -> tuple[bool, object]:
    for klass in cls.__mro__:
        if klass in _SKIPPED_BASES or name not in vars(klass):
            continue
        attr = vars(klass)[name]
        if not _is_plain_value(attr):
            return False, None
        return True, attr
    return False, None


def _class_value_names(klass: type) -> list[str]:
    # names inherited from BaseModel (``model_config`` and friends) are framework internals
    return [
        name
        for name, attr in vars(klass).items()
        if _is_plain_value(attr) and not any(hasattr(base, name) for base in _SKIPPED_BASES)
    ]


def _annotation_names(klass: type) -> list[str]:
    try:
        return list(inspect.get_annotations(klass))
    except NameError:
        # unresolvable forward reference; dataclass and pydantic fields are still seen
        return []


def _is_method(attr: object) -> bool:
    if isinstance(attr, (staticmethod, classmethod)):
        return True
    if isinstance(attr, (property, type)):
        return False
    return callable(attr)


def _is_read_only(attr: object) -> bool:
    return isinstance(attr, property) and attr.fset is None


def _accepts(func: object, count: int) -> bool:
    """Tell whether ``func`` can be called with ``count`` positional arguments."""

    try:
        signature = inspect.signature(func)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        # builtins without introspectable signatures get the benefit of the doubt
        return True
    try:
        signature.bind(*range(count))
    except TypeError:
        return False
    return True


def _class_attr_accepts(attr: object, count: int) -> bool:
    if isinstance(attr, staticmethod):
        return _accepts(attr.__func__, count)
    if isinstance(attr, classmethod):
        return _accepts(attr.__func__, count + 1)
    if inspect.isfunction(attr):
        return _accepts(attr, count + 1)
    return _accepts(attr, count)


class Introspector:
    """Enumerate and access the members and methods of Python values."""

    def classify(self, subject: object) -> SubjectKind:
        if subject is None:
            return SubjectKind.NULL
        if isinstance(subject, SCALAR_TYPES):
            return SubjectKind.SCALAR
        if isinstance(subject, (Mapping, Sequence)):
            return SubjectKind.KEYED_CONTAINER
        if isinstance(subject, types.SimpleNamespace):
            return SubjectKind.PLAIN_BAG
        if isinstance(subject, KeyedAccessible):
            return SubjectKind.INDEXABLE_RECORD
        return SubjectKind.STRUCTURED_RECORD

    def declared_members(self, cls: type) -> frozenset[str]:
        """Public members declared on ``cls`` or its bases."""

        names: set[str] = set()
        if dataclasses.is_dataclass(cls):
            names.update(field.name for field in dataclasses.fields(cls))
        if issubclass(cls, BaseModel):
            names.update(cls.model_fields)
        for klass in cls.__mro__:
            if klass in _SKIPPED_BASES:
                continue
            slots = vars(klass).get("__slots__", ())
            names.update((slots,) if isinstance(slots, str) else slots)
            names.update(_annotation_names(klass))
            names.update(_class_value_names(klass))
            names.update(name for name, attr in vars(klass).items() if isinstance(attr, property))
        return frozenset(name for name in names if is_public(name))

    def attached_members(self, subject: object) -> list[str]:
        """Public members attached to this very instance."""

        instance_dict = getattr(subject, "__dict__", None)
        if not isinstance(instance_dict, dict):
            return []
        return [name for name in instance_dict if isinstance(name, str) and is_public(name)]

    def has_member(self, subject: object, name: str | int) -> bool:
        if not isinstance(name, str) or not is_public(name):
            return False
        return name in self.declared_members(type(subject)) or name in self.attached_members(
            subject
        )

    def method_names(self, cls: type, *, arity: int | None = None) -> tuple[str, ...]:
        """Public callables reachable through ``cls``, sorted.

        With ``arity`` set, only methods callable with that many positional
        arguments (besides ``self``) are listed.
        """

        names: set[str] = set()
        seen: set[str] = set()
        for klass in cls.__mro__:
            if klass in _SKIPPED_BASES:
                continue
            for name, attr in vars(klass).items():
                # the most derived definition wins
                if name in seen:
                    continue
                seen.add(name)
                if not is_public(name) or not _is_method(attr):
                    continue
                if arity is None or _class_attr_accepts(attr, arity):
                    names.add(name)
        return tuple(sorted(names))

    def has_method(self, subject: object, name: str, *, arity: int | None = None) -> bool:
        """Tell whether the class of ``subject`` defines a method ``name``.

        Callables stored on the instance are not methods: the answer must hold
        for every instance of the type, since the resolver caches it per type.
        Properties are never evaluated.
        """

        if not name or not is_public(name):
            return False
        try:
            attr = inspect.getattr_static(type(subject), name)
        except AttributeError:
            return False
        if not _is_method(attr):
            return False
        return arity is None or _class_attr_accepts(attr, arity)

    def writable_members(self, cls: type) -> frozenset[str]:
        """Declared members that an assignment on an instance of ``cls`` can change."""

        if is_frozen(cls):
            return frozenset()
        return frozenset(
            name
            for name in self.declared_members(cls)
            if not _is_read_only(inspect.getattr_static(cls, name, None))
        )

    def has_writable_member(self, subject: object, name: str | int) -> bool:
        if not isinstance(name, str) or not is_public(name) or is_frozen(type(subject)):
            return False
        return name in self.writable_members(type(subject)) or name in self.attached_members(
            subject
        )

    def _raw_candidates(self, subject: object, name: str) -> Iterator[str]:
        yield name
        yield f"_{name}"
        yield from _mangled_names(type(subject), name)

    def _locate_raw(self, subject: object, name: str) -> tuple[str, str] | None:
        instance_dict = getattr(subject, "__dict__", None)
        for storage_name in self._raw_candidates(subject, name):
            if isinstance(instance_dict, dict) and storage_name in instance_dict:
                return storage_name, "dict"
            if _slot_descriptor(type(subject), storage_name) is not None:
                return storage_name, "slot"
            found, _ = _class_default(type(subject), storage_name)
            if found:
                return storage_name, "class"
        return None

    def has_raw(self, subject: object, name: str | int) -> bool:
        if not isinstance(name, str):
            return False
        location = self._locate_raw(subject, name)
        if location is None:
            return False
        storage_name, where = location
        if where == "slot":
            return hasattr(subject, storage_name)
        return True

    def read_raw(self, subject: object, name: str) -> object:
        """Read the stored value of ``name``, bypassing properties and accessors."""

        location = self._locate_raw(subject, name)
        if location is None:
            raise AttributeError(name)
        storage_name, where = location
        if where == "dict":
            return vars(subject)[storage_name]
        if where == "slot":
            descriptor = _slot_descriptor(type(subject), storage_name)
            return descriptor.__get__(subject, type(subject))  # type: ignore[union-attr]
        _, value = _class_default(type(subject), storage_name)
        return value

    def write_raw(self, subject: object, name: str, value: object) -> None:
        """Store ``value`` as ``name``, bypassing properties, setters and frozen guards."""

        location = self._locate_raw(subject, name)
        if location is None:
            object.__setattr__(subject, name, value)
            return
        storage_name, where = location
        if where == "dict":
            vars(subject)[storage_name] = value
        elif where == "slot":
            _slot_descriptor(type(subject), storage_name).__set__(subject, value)  # type: ignore[union-attr]
        else:
            object.__setattr__(subject, storage_name, value)


__all__ = [
    "SCALAR_TYPES",
    "Introspector",
    "KeyedAccessible",
    "SubjectKind",
    "as_items",
    "is_collection",
    "is_frozen",
    "is_public",
    "is_structured_record",
]
