from __future__ import annotations

import threading

from propaccess.cache import NO_ACCESS, AccessDescriptor, AccessKind, ResolutionCache
from propaccess.resolver import PropertyResolver
from tests.support.records import Album, Greeting


def test_descriptor_is_computed_once_per_type_and_name() -> None:
    cache = ResolutionCache()
    calls: list[str] = []

    def compute() -> AccessDescriptor:
        calls.append("computed")
        return AccessDescriptor(AccessKind.ACCESSOR_METHOD, "get_title")

    first = cache.descriptor(Album, "title", compute)
    second = cache.descriptor(Album, "title", compute)
    cache.descriptor(Greeting, "title", compute)

    assert first is second
    assert calls == ["computed", "computed"]
    assert cache.stats().hits == 1
    assert cache.stats().misses == 2
    assert len(cache) == 2


def test_disabled_cache_always_computes() -> None:
    cache = ResolutionCache(enabled=False)
    calls: list[str] = []

    def compute() -> AccessDescriptor:
        calls.append("computed")
        return NO_ACCESS

    cache.descriptor(Album, "title", compute)
    cache.descriptor(Album, "title", compute)

    assert len(calls) == 2
    assert len(cache) == 0


def test_clear_drops_entries_and_stats() -> None:
    cache = ResolutionCache()
    cache.gettable_names(Album, lambda: ("title",))
    cache.gettable_names(Album, lambda: ("title",))

    cache.clear()

    assert len(cache) == 0
    assert cache.stats().hits == 0
    assert cache.stats().misses == 0


def test_stats_are_a_snapshot() -> None:
    cache = ResolutionCache()
    snapshot = cache.stats()

    cache.descriptor(Album, "title", lambda: NO_ACCESS)

    assert snapshot.misses == 0
    assert cache.stats().misses == 1


def test_clear_picks_up_methods_added_at_runtime() -> None:
    class Mutable:
        pass

    resolver = PropertyResolver()
    subject = Mutable()

    assert resolver.get_gettable_property_names(subject) == []

    Mutable.get_answer = lambda self: 42  # type: ignore[attr-defined]
    assert resolver.get_gettable_property_names(subject) == []

    resolver.cache.clear()
    assert resolver.get_gettable_property_names(subject) == ["answer"]
    assert resolver.get_property(subject, "answer") == 42


def test_concurrent_lookups_compute_once() -> None:
    cache = ResolutionCache()
    barrier = threading.Barrier(8)
    calls: list[int] = []
    results: list[AccessDescriptor] = []

    def compute() -> AccessDescriptor:
        calls.append(1)
        return AccessDescriptor(AccessKind.PUBLIC_MEMBER, "title")

    def worker() -> None:
        barrier.wait()
        results.append(cache.descriptor(Album, "title", compute))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(result is results[0] for result in results)
