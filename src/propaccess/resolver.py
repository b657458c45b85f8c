"""Read and write named properties on arbitrary values.

The resolver follows these rules, in order:

- keyed containers (mappings, sequences) are read and written by key
- ``force_direct_access`` reads/writes the stored member, ignoring accessors
- a getter (``get_x``, ``is_x``, ``has_x``) or setter (``set_x``) is called
- records supporting ``in`` and ``[]`` are accessed by index
- a public member is read or assigned directly
- otherwise reads raise :class:`PropertyNotAccessibleError` and writes return ``False``

Collection properties with an adder/remover pair (``add_item``/``remove_item``
for ``items``) are written by applying only the difference between the
current and the new items.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping, MutableSequence
from dataclasses import dataclass
from functools import cache
from typing import TYPE_CHECKING, TypeAlias

from .cache import NO_ACCESS, AccessDescriptor, AccessKind, ResolutionCache
from .config import ResolverConfig, get_resolver_config
from .errors import InvalidArgumentError, PropertyNotAccessibleError
from .introspection import SCALAR_TYPES, Introspector, SubjectKind, as_items, is_collection
from .naming import NamingStrategy, naming_strategy_for

if TYPE_CHECKING:
    from collections.abc import Iterator

log = logging.getLogger(__name__)

PropertyName: TypeAlias = str | int

_RECORD_KINDS = frozenset(
    {SubjectKind.PLAIN_BAG, SubjectKind.INDEXABLE_RECORD, SubjectKind.STRUCTURED_RECORD}
)


@dataclass(frozen=True, slots=True)
class CollectionMutationPlan:
    add_method: str
    remove_method: str


def same_item(current: object, new: object) -> bool:
    """Identity for objects, typed equality for scalars."""

    if current is new:
        return True
    return type(current) is type(new) and isinstance(current, SCALAR_TYPES) and current == new


def _segment_keys(segment: str) -> Iterator[PropertyName]:
    yield segment
    if segment.isdigit():
        yield int(segment)


class PropertyResolver:
    """Resolve read/write access to named properties with per-type caching."""

    def __init__(
        self,
        *,
        naming: NamingStrategy | None = None,
        introspector: Introspector | None = None,
        cache: ResolutionCache | None = None,
        config: ResolverConfig | None = None,
    ) -> None:
        config = config or ResolverConfig()
        self.naming = naming or naming_strategy_for(config.naming)
        self.introspector = introspector or Introspector()
        self.cache = cache or ResolutionCache(enabled=config.cache_enabled)

    @classmethod
    def from_environment(cls) -> PropertyResolver:
        return cls(config=get_resolver_config())

    # -- reading -----------------------------------------------------------------

    def get_property(
        self,
        subject: object,
        property_name: PropertyName,
        force_direct_access: bool = False,
    ) -> object:
        """Return ``property_name`` of ``subject``.

        Raises:
            InvalidArgumentError: ``subject`` is ``None`` or a scalar, or the
                property name is neither a string nor a non-negative integer.
            PropertyNotAccessibleError: no read strategy resolved the property.
        """

        kind = self.introspector.classify(subject)
        if kind in (SubjectKind.NULL, SubjectKind.SCALAR):
            raise InvalidArgumentError(
                f"Subject must be an object or a container, {type(subject).__name__} given"
            )
        self._check_property_name(property_name)

        exists, value = self._resolve(subject, kind, property_name, force_direct_access)
        if exists:
            return value
        raise PropertyNotAccessibleError(
            f'The property "{property_name}" on the subject was not accessible.',
            property_name=property_name,
            subject_type=type(subject),
        )

    def get_property_path(self, subject: object, property_path: str | None) -> object:
        """Follow a dot-delimited path; any segment that cannot be resolved yields ``None``."""

        if property_path is None:
            return None
        current = subject
        for segment in property_path.split("."):
            kind = self.introspector.classify(current)
            exists, value = self._resolve(current, kind, segment, False)
            if not exists:
                exists, value = self._index_fallback(current, kind, segment)
            current = value
        return current

    def _resolve(
        self,
        subject: object,
        kind: SubjectKind,
        property_name: PropertyName,
        force_direct_access: bool,
    ) -> tuple[bool, object]:
        if kind in (SubjectKind.NULL, SubjectKind.SCALAR):
            return False, None
        if kind is SubjectKind.KEYED_CONTAINER:
            return self._container_read(subject, property_name)

        if force_direct_access:
            if self.introspector.has_raw(subject, property_name):
                return True, self.introspector.read_raw(subject, property_name)  # type: ignore[arg-type]
            raise PropertyNotAccessibleError(
                f'The property "{property_name}" on the subject does not exist.',
                property_name=property_name,
                subject_type=type(subject),
            )

        if kind is SubjectKind.PLAIN_BAG:
            members = vars(subject)
            if property_name in members:
                return True, members[property_name]
            return False, None

        descriptor = self._descriptor(subject, kind, property_name)
        if descriptor.kind is AccessKind.ACCESSOR_METHOD:
            return True, getattr(subject, descriptor.name)()  # type: ignore[arg-type]
        if descriptor.kind is AccessKind.PUBLIC_MEMBER:
            try:
                return True, getattr(subject, property_name)  # type: ignore[arg-type]
            except AttributeError:
                # declared but never assigned on this instance
                return False, None

        if kind is SubjectKind.INDEXABLE_RECORD:
            if property_name in subject:  # type: ignore[operator]
                return True, subject[property_name]  # type: ignore[index]
            return False, None
        if property_name in self.introspector.attached_members(subject):
            return True, getattr(subject, property_name)  # type: ignore[arg-type]
        return False, None

    def _descriptor(
        self,
        subject: object,
        kind: SubjectKind,
        property_name: PropertyName,
    ) -> AccessDescriptor:
        return self.cache.descriptor(
            type(subject),
            property_name,
            lambda: self._compute_descriptor(subject, kind, property_name),
        )

    def _compute_descriptor(
        self,
        subject: object,
        kind: SubjectKind,
        property_name: PropertyName,
    ) -> AccessDescriptor:
        if not isinstance(property_name, str) or not property_name:
            return NO_ACCESS
        for method_name in self.naming.getter_names(property_name):
            if self.introspector.has_method(subject, method_name, arity=0):
                return AccessDescriptor(AccessKind.ACCESSOR_METHOD, method_name)
        if kind is SubjectKind.INDEXABLE_RECORD:
            # index access is checked live on every read
            return NO_ACCESS
        if property_name in self.introspector.declared_members(type(subject)):
            return AccessDescriptor(AccessKind.PUBLIC_MEMBER, property_name)
        return NO_ACCESS

    def _container_read(self, container: object, key: PropertyName) -> tuple[bool, object]:
        if isinstance(container, Mapping):
            if key in container:
                return True, container[key]
            return False, None
        if isinstance(key, int) and 0 <= key < len(container):  # type: ignore[arg-type]
            return True, container[key]  # type: ignore[index]
        return False, None

    def _index_fallback(
        self,
        subject: object,
        kind: SubjectKind,
        segment: str,
    ) -> tuple[bool, object]:
        if kind is SubjectKind.KEYED_CONTAINER:
            for key in _segment_keys(segment):
                exists, value = self._container_read(subject, key)
                if exists:
                    return True, value
        elif kind is SubjectKind.INDEXABLE_RECORD:
            for key in _segment_keys(segment):
                if key in subject:  # type: ignore[operator]
                    return True, subject[key]  # type: ignore[index]
        return False, None

    # -- writing -----------------------------------------------------------------

    def set_property(
        self,
        subject: object,
        property_name: PropertyName,
        value: object,
        force_direct_access: bool = False,
    ) -> bool:
        """Set ``property_name`` on ``subject``; return whether it could be set."""

        kind = self.introspector.classify(subject)
        self._check_property_name(property_name)
        if kind is SubjectKind.KEYED_CONTAINER:
            self._container_write(subject, property_name, value)
            return True
        if kind not in _RECORD_KINDS:
            raise InvalidArgumentError(
                f"Subject must be an object or a container, {type(subject).__name__} given"
            )

        if force_direct_access:
            if not isinstance(property_name, str):
                raise InvalidArgumentError("Direct access needs a string property name")
            try:
                self.introspector.write_raw(subject, property_name, value)
            except AttributeError:
                log.debug(
                    "%s rejected direct write of %r", type(subject).__name__, property_name
                )
                return False
            return True

        if isinstance(property_name, str) and property_name:
            plan = self._collection_plan(subject, property_name, value)
            if plan is not None:
                self._update_collection(subject, kind, property_name, value, plan)
                return True
            setter = self.naming.setter_name(property_name)
            if self.introspector.has_method(subject, setter, arity=1):
                getattr(subject, setter)(value)
                return True

        if kind is SubjectKind.INDEXABLE_RECORD and hasattr(type(subject), "__setitem__"):
            subject[property_name] = value  # type: ignore[index]
            return True

        if self._has_writable_member(subject, kind, property_name):
            try:
                setattr(subject, property_name, value)  # type: ignore[arg-type]
            except AttributeError:
                log.debug("%s.%s is read-only", type(subject).__name__, property_name)
                return False
            return True

        log.debug("No way to set %r on %s", property_name, type(subject).__name__)
        return False

    def _has_writable_member(
        self,
        subject: object,
        kind: SubjectKind,
        property_name: PropertyName,
    ) -> bool:
        if kind is SubjectKind.PLAIN_BAG:
            return property_name in vars(subject)
        return self.introspector.has_writable_member(subject, property_name)

    def _container_write(self, container: object, key: PropertyName, value: object) -> None:
        if isinstance(container, MutableMapping):
            container[key] = value
            return
        if isinstance(container, MutableSequence):
            if not isinstance(key, int):
                raise InvalidArgumentError(
                    f"{type(container).__name__} index must be an integer, "
                    f"{type(key).__name__} given"
                )
            if key == len(container):
                container.append(value)
                return
            if key < len(container):
                container[key] = value
                return
            raise InvalidArgumentError(
                f"Index {key} is out of range for a sequence of length {len(container)}"
            )
        raise InvalidArgumentError(f"{type(container).__name__} does not support item assignment")

    def _collection_plan(
        self,
        subject: object,
        property_name: str,
        value: object,
    ) -> CollectionMutationPlan | None:
        if value is not None and not is_collection(value):
            return None
        add_method = self.naming.adder_name(property_name)
        remove_method = self.naming.remover_name(property_name)
        if self.introspector.has_method(
            subject, add_method, arity=1
        ) and self.introspector.has_method(subject, remove_method, arity=1):
            return CollectionMutationPlan(add_method, remove_method)
        return None

    def _update_collection(
        self,
        subject: object,
        kind: SubjectKind,
        property_name: str,
        value: object,
        plan: CollectionMutationPlan,
    ) -> None:
        items_to_add = as_items(value)
        exists, current = self._resolve(subject, kind, property_name, False)
        if not exists:
            log.debug(
                "%s.%s is not readable, treating it as empty",
                type(subject).__name__,
                property_name,
            )

        items_to_remove: list[object] = []
        for current_item in as_items(current):
            for index, new_item in enumerate(items_to_add):
                if same_item(current_item, new_item):
                    del items_to_add[index]
                    break
            else:
                items_to_remove.append(current_item)

        remove = getattr(subject, plan.remove_method)
        for item in items_to_remove:
            remove(item)
        add = getattr(subject, plan.add_method)
        for item in items_to_add:
            add(item)

    # -- introspection -----------------------------------------------------------

    def get_gettable_property_names(self, obj: object) -> list[str]:
        """Sorted names readable through :meth:`get_property` without direct access."""

        kind = self._require_record(obj)
        if kind is SubjectKind.PLAIN_BAG:
            # a bag's shape differs per instance, so nothing is cached
            return sorted(set(vars(obj)).union(self._type_gettable_names(type(obj))))
        type_names = self.cache.gettable_names(
            type(obj),
            lambda: self._type_gettable_names(type(obj)),
        )
        return sorted(set(type_names).union(self.introspector.attached_members(obj)))

    def _type_gettable_names(self, cls: type) -> tuple[str, ...]:
        names = set(self.introspector.declared_members(cls))
        for method_name in self.introspector.method_names(cls, arity=0):
            property_name = self.naming.property_from_getter(method_name)
            if property_name:
                names.add(property_name)
        return tuple(sorted(names))

    def get_settable_property_names(self, obj: object) -> list[str]:
        """Sorted names writable through :meth:`set_property` without direct access."""

        kind = self._require_record(obj)
        names = set(self.introspector.writable_members(type(obj)))
        if kind is SubjectKind.PLAIN_BAG:
            names.update(vars(obj))
        else:
            names.update(
                name
                for name in self.introspector.attached_members(obj)
                if self.introspector.has_writable_member(obj, name)
            )
        for method_name in self.introspector.method_names(type(obj), arity=1):
            property_name = self.naming.property_from_setter(method_name)
            if property_name:
                names.add(property_name)
        return sorted(names)

    def is_property_gettable(self, obj: object, property_name: PropertyName) -> bool:
        kind = self._require_record(obj)
        self._check_property_name(property_name)
        if kind is SubjectKind.INDEXABLE_RECORD and property_name in obj:  # type: ignore[operator]
            return True
        if kind is SubjectKind.PLAIN_BAG and property_name in vars(obj):
            return True
        if isinstance(property_name, str) and property_name:
            for method_name in self.naming.getter_names(property_name):
                if self.introspector.has_method(obj, method_name, arity=0):
                    return True
        return self.introspector.has_member(obj, property_name)

    def is_property_settable(self, obj: object, property_name: PropertyName) -> bool:
        kind = self._require_record(obj)
        self._check_property_name(property_name)
        if self._has_writable_member(obj, kind, property_name):
            return True
        if not isinstance(property_name, str) or not property_name:
            return False
        return self.introspector.has_method(obj, self.naming.setter_name(property_name), arity=1)

    def get_gettable_properties(self, obj: object) -> dict[str, object]:
        """Map every gettable property name of ``obj`` to its current value."""

        kind = self._require_record(obj)
        properties: dict[str, object] = {}
        for property_name in self.get_gettable_property_names(obj):
            exists, value = self._resolve(obj, kind, property_name, False)
            if exists:
                properties[property_name] = value
        return properties

    # -- naming ------------------------------------------------------------------

    def build_setter_method_name(self, property_name: str) -> str:
        return self.naming.setter_name(property_name)

    def build_adder_method_name(self, property_name: str) -> str:
        return self.naming.adder_name(property_name)

    def build_remover_method_name(self, property_name: str) -> str:
        return self.naming.remover_name(property_name)

    # -- helpers -----------------------------------------------------------------

    def _require_record(self, obj: object) -> SubjectKind:
        kind = self.introspector.classify(obj)
        if kind not in _RECORD_KINDS:
            raise InvalidArgumentError(f"Expected an object, {type(obj).__name__} given")
        return kind

    @staticmethod
    def _check_property_name(property_name: object) -> None:
        if isinstance(property_name, bool) or not isinstance(property_name, (str, int)):
            raise InvalidArgumentError(
                "Property name must be a string or an integer, "
                f"{type(property_name).__name__} given"
            )
        if isinstance(property_name, int) and property_name < 0:
            raise InvalidArgumentError(f"Property index must not be negative, {property_name} given")


@cache
def default_resolver() -> PropertyResolver:
    """Process-wide resolver configured from the environment.

    Call ``default_resolver.cache_clear()`` to pick up changed settings.
    """

    return PropertyResolver.from_environment()


def get_property(
    subject: object,
    property_name: PropertyName,
    force_direct_access: bool = False,
) -> object:
    return default_resolver().get_property(subject, property_name, force_direct_access)


def get_property_path(subject: object, property_path: str | None) -> object:
    return default_resolver().get_property_path(subject, property_path)


def set_property(
    subject: object,
    property_name: PropertyName,
    value: object,
    force_direct_access: bool = False,
) -> bool:
    return default_resolver().set_property(subject, property_name, value, force_direct_access)


def get_gettable_property_names(obj: object) -> list[str]:
    return default_resolver().get_gettable_property_names(obj)


def get_settable_property_names(obj: object) -> list[str]:
    return default_resolver().get_settable_property_names(obj)


def is_property_gettable(obj: object, property_name: PropertyName) -> bool:
    return default_resolver().is_property_gettable(obj, property_name)


def is_property_settable(obj: object, property_name: PropertyName) -> bool:
    return default_resolver().is_property_settable(obj, property_name)


def get_gettable_properties(obj: object) -> dict[str, object]:
    return default_resolver().get_gettable_properties(obj)


__all__ = [
    "CollectionMutationPlan",
    "PropertyName",
    "PropertyResolver",
    "default_resolver",
    "get_gettable_properties",
    "get_gettable_property_names",
    "get_property",
    "get_property_path",
    "get_settable_property_names",
    "is_property_gettable",
    "is_property_settable",
    "same_item",
    "set_property",
]
