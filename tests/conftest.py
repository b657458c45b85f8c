from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from propaccess.introspection import Introspector
from propaccess.naming import CamelCaseNaming
from propaccess.resolver import PropertyResolver, default_resolver

if TYPE_CHECKING:
    from collections.abc import Iterator


class CountingIntrospector(Introspector):
    """Counts the expensive method enumerations."""

    def __init__(self) -> None:
        self.method_enumerations = 0

    def method_names(self, cls: type, *, arity: int | None = None) -> tuple[str, ...]:
        self.method_enumerations += 1
        return super().method_names(cls, arity=arity)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("PROPACCESS_NAMING", "PROPACCESS_CACHE", "PROPACCESS_SUBPROCESS_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    default_resolver.cache_clear()
    yield
    default_resolver.cache_clear()


@pytest.fixture
def resolver() -> PropertyResolver:
    return PropertyResolver()


@pytest.fixture
def camel_resolver() -> PropertyResolver:
    return PropertyResolver(naming=CamelCaseNaming(singularize=lambda word: word.removesuffix("s")))


@pytest.fixture
def counting_introspector() -> CountingIntrospector:
    return CountingIntrospector()
