"""Naming conventions that map property names to accessor method names.

A naming strategy answers two questions for the resolver:

- which method names to try when reading, writing or mutating a property
- which property name a given method name exposes

The convention is swappable so that records written in the Python idiom
(``get_title``/``set_title``) and records following the camel-case idiom of
the PHP world (``getTitle``/``setTitle``) can both be resolved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import cache
from typing import TYPE_CHECKING, Final, TypeAlias

import inflect

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)

Singularizer: TypeAlias = "Callable[[str], str]"

GETTER_PREFIXES: Final[tuple[str, ...]] = ("get", "is", "has")


@cache
def _inflect_engine() -> inflect.engine:
    return inflect.engine()


def inflect_singularize(word: str) -> str:
    """Return the singular form of ``word``; words that are already singular are kept."""

    if not word:
        return word
    singular = _inflect_engine().singular_noun(word)
    if not singular:
        return word
    return singular


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


class NamingStrategy(ABC):
    """Derive accessor method names from property names and back."""

    name: str

    def __init__(self, singularize: Singularizer | None = None) -> None:
        self._singularize = singularize or inflect_singularize

    def singular(self, property_name: str) -> str:
        return self._singularize(property_name)

    @abstractmethod
    def accessor(self, prefix: str, property_name: str) -> str:
        """Combine a verb prefix and a property name into a method name."""

    @abstractmethod
    def property_from(self, prefix: str, method_name: str) -> str | None:
        """Return the property a ``prefix`` method exposes, or ``None``."""

    def getter_names(self, property_name: str) -> tuple[str, ...]:
        """Candidate read accessors, in priority order."""
        return tuple(self.accessor(prefix, property_name) for prefix in GETTER_PREFIXES)

    def setter_name(self, property_name: str) -> str:
        return self.accessor("set", property_name)

    def adder_name(self, property_name: str) -> str:
        return self.accessor("add", self.singular(property_name))

    def remover_name(self, property_name: str) -> str:
        return self.accessor("remove", self.singular(property_name))

    def property_from_getter(self, method_name: str) -> str | None:
        for prefix in GETTER_PREFIXES:
            property_name = self.property_from(prefix, method_name)
            if property_name is not None:
                return property_name
        return None

    def property_from_setter(self, method_name: str) -> str | None:
        return self.property_from("set", method_name)


class SnakeCaseNaming(NamingStrategy):
    """``get_title``, ``is_active``, ``set_title``, ``add_item``/``remove_item``."""

    name = "snake"

    def accessor(self, prefix: str, property_name: str) -> str:
        return f"{prefix}_{property_name}"

    def property_from(self, prefix: str, method_name: str) -> str | None:
        marker = f"{prefix}_"
        if len(method_name) > len(marker) and method_name.startswith(marker):
            return method_name[len(marker) :]
        return None

    def singular(self, property_name: str) -> str:
        # only the trailing word carries the plural: ``child_nodes`` -> ``child_node``
        head, separator, tail = property_name.rpartition("_")
        return f"{head}{separator}{self._singularize(tail)}"


class CamelCaseNaming(NamingStrategy):
    """``getTitle``, ``isActive``, ``setTitle``, ``addItem``/``removeItem``."""

    name = "camel"

    def accessor(self, prefix: str, property_name: str) -> str:
        return prefix + upper_first(property_name)

    def property_from(self, prefix: str, method_name: str) -> str | None:
        if len(method_name) <= len(prefix) or not method_name.startswith(prefix):
            return None
        remainder = method_name[len(prefix) :]
        # ``issue`` is not an accessor for ``sue``
        if not remainder[0].isupper():
            return None
        return lower_first(remainder)


NAMING_STRATEGIES: Final[dict[str, type[NamingStrategy]]] = {
    SnakeCaseNaming.name: SnakeCaseNaming,
    CamelCaseNaming.name: CamelCaseNaming,
}


def naming_strategy_for(name: str, *, singularize: Singularizer | None = None) -> NamingStrategy:
    """Instantiate a registered naming strategy by name."""

    try:
        strategy_type = NAMING_STRATEGIES[name]
    except KeyError as exc:
        known = ", ".join(sorted(NAMING_STRATEGIES))
        raise ValueError(f"Unknown naming strategy {name!r} (known: {known})") from exc
    log.debug("Using %s naming strategy", name)
    return strategy_type(singularize)


__all__ = [
    "NAMING_STRATEGIES",
    "CamelCaseNaming",
    "NamingStrategy",
    "Singularizer",
    "SnakeCaseNaming",
    "inflect_singularize",
    "lower_first",
    "naming_strategy_for",
    "upper_first",
]
