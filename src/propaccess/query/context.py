"""Ordered result-set contexts that query operations work on."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .operations import default_registry

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .operations import OperationRegistry

log = logging.getLogger(__name__)


@runtime_checkable
class QueryContext(Protocol):
    """Anything exposing an ordered result set that operations may replace."""

    def get_context(self) -> list[object]: ...

    def set_context(self, items: Iterable[object]) -> None: ...


class Query:
    """Minimal query holding an ordered result set.

    Operations are looked up by short name in a registry and applied in place::

        query = Query([first, second, third])
        query.apply("last")
        query.get_context()  # [third]
    """

    def __init__(
        self,
        items: Iterable[object] = (),
        *,
        registry: OperationRegistry | None = None,
    ) -> None:
        self._items = list(items)
        self._registry = registry

    @property
    def registry(self) -> OperationRegistry:
        if self._registry is None:
            self._registry = default_registry()
        return self._registry

    def get_context(self) -> list[object]:
        return list(self._items)

    def set_context(self, items: Iterable[object]) -> None:
        self._items = list(items)

    def apply(self, short_name: str, *arguments: object) -> Query:
        operation = self.registry.resolve(short_name, self)
        log.debug("Applying %s to %d item(s)", short_name, len(self._items))
        operation.evaluate(self, list(arguments))
        return self

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[object]:
        return iter(self._items)
