"""Operations applied to a query context."""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cache
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .context import QueryContext


class UnknownOperationError(LookupError):
    """Raised when no registered operation matches a short name."""


class Operation(ABC):
    """A single step that rewrites the ordered result set of a context."""

    short_name: ClassVar[str]

    def can_evaluate(self, context: QueryContext) -> bool:  # noqa: ARG002
        return True

    @abstractmethod
    def evaluate(self, query: QueryContext, arguments: list[object]) -> None: ...


class LastOperation(Operation):
    """Get the last element inside the context."""

    short_name = "last"

    def evaluate(self, query: QueryContext, arguments: list[object]) -> None:  # noqa: ARG002
        context = query.get_context()
        if context:
            query.set_context([context[-1]])
        else:
            query.set_context([])


class OperationRegistry:
    """Short-name lookup for operations."""

    def __init__(self, operations: Iterable[Operation] = ()) -> None:
        self._operations: dict[str, Operation] = {}
        for operation in operations:
            self.register(operation)

    def register(self, operation: Operation) -> None:
        self._operations[operation.short_name] = operation

    def resolve(self, short_name: str, context: QueryContext) -> Operation:
        operation = self._operations.get(short_name)
        if operation is None or not operation.can_evaluate(context):
            raise UnknownOperationError(f"No operation {short_name!r} can evaluate this context")
        return operation

    def __contains__(self, short_name: object) -> bool:
        return short_name in self._operations


@cache
def default_registry() -> OperationRegistry:
    return OperationRegistry([LastOperation()])
