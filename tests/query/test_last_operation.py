from __future__ import annotations

import pytest

from propaccess.query import (
    LastOperation,
    Operation,
    OperationRegistry,
    Query,
    QueryContext,
    UnknownOperationError,
    default_registry,
)


def test_last_keeps_only_the_final_item() -> None:
    query = Query(["first", "second", "third"])

    LastOperation().evaluate(query, [])

    assert query.get_context() == ["third"]


def test_last_on_empty_context_stays_empty() -> None:
    query = Query()

    LastOperation().evaluate(query, [])

    assert query.get_context() == []


def test_last_ignores_arguments() -> None:
    query = Query([1, 2])

    LastOperation().evaluate(query, ["unused", 5])

    assert query.get_context() == [2]


def test_apply_resolves_by_short_name() -> None:
    query = Query(range(5))

    assert query.apply("last") is query
    assert list(query) == [4]
    assert len(query) == 1


def test_unknown_operation() -> None:
    with pytest.raises(UnknownOperationError, match="'first'"):
        Query([1]).apply("first")


def test_registry_honours_can_evaluate() -> None:
    class OnlyNonEmpty(Operation):
        short_name = "picky"

        def can_evaluate(self, context: QueryContext) -> bool:
            return bool(context.get_context())

        def evaluate(self, query: QueryContext, arguments: list[object]) -> None:
            query.set_context([])

    registry = OperationRegistry([OnlyNonEmpty()])

    assert "picky" in registry
    assert "last" not in registry
    assert Query([1], registry=registry).apply("picky").get_context() == []
    with pytest.raises(UnknownOperationError):
        Query(registry=registry).apply("picky")


def test_query_satisfies_context_protocol() -> None:
    assert isinstance(Query(), QueryContext)
    assert "last" in default_registry()


def test_context_is_copied() -> None:
    items = [1, 2]
    query = Query(items)

    query.get_context().append(3)
    items.append(4)

    assert query.get_context() == [1, 2]
