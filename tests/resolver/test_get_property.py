from __future__ import annotations

from types import SimpleNamespace

import pytest

from propaccess import InvalidArgumentError, PropertyNotAccessibleError, get_property
from propaccess.resolver import PropertyResolver
from tests.support.records import (
    Album,
    Catalog,
    Defaults,
    Greeting,
    Hooked,
    Node,
    Plain,
    Profile,
    Settings,
    Slotted,
    Track,
    Vault,
)


def test_mapping_returns_stored_value(resolver: PropertyResolver) -> None:
    assert resolver.get_property({"a": 1}, "a") == 1
    assert resolver.get_property({0: "zero"}, 0) == "zero"
    assert resolver.get_property({"empty": None}, "empty") is None


def test_mapping_missing_key_is_not_accessible(resolver: PropertyResolver) -> None:
    with pytest.raises(PropertyNotAccessibleError, match='The property "missing"') as exc:
        resolver.get_property({"a": 1}, "missing")

    assert exc.value.property_name == "missing"
    assert exc.value.subject_type is dict


def test_sequence_is_read_by_index(resolver: PropertyResolver) -> None:
    assert resolver.get_property(["a", "b"], 1) == "b"
    assert resolver.get_property(("x",), 0) == "x"

    with pytest.raises(PropertyNotAccessibleError):
        resolver.get_property(["a", "b"], 5)


@pytest.mark.parametrize("subject", [None, 42, 1.5, "text", b"bytes", True])
def test_scalar_or_null_subject_is_rejected(resolver: PropertyResolver, subject: object) -> None:
    with pytest.raises(InvalidArgumentError, match="Subject must be an object or a container"):
        resolver.get_property(subject, "anything")


@pytest.mark.parametrize("property_name", [1.5, True, None, -1, ("a",)])
def test_invalid_property_name_is_rejected(
    resolver: PropertyResolver, property_name: object
) -> None:
    with pytest.raises(InvalidArgumentError):
        resolver.get_property({"a": 1}, property_name)  # type: ignore[arg-type]


def test_getter_result_is_stable_across_cache_hits(resolver: PropertyResolver) -> None:
    album = Album(title="OK Computer", year=1997)
    album.set_rating(4)

    cold = resolver.get_property(album, "rating")
    warm = resolver.get_property(album, "rating")

    assert cold == warm == album.get_rating() == 4
    stats = resolver.cache.stats()
    assert stats.misses == 1
    assert stats.hits == 1


def test_is_and_has_accessors(resolver: PropertyResolver) -> None:
    released = Album(title="Kid A", year=2000)
    unreleased = Album(title="Demo")

    assert resolver.get_property(released, "released") is True
    assert resolver.get_property(unreleased, "released") is False


def test_get_accessor_wins_over_has_accessor(resolver: PropertyResolver) -> None:
    track = Track(title="Airbag")
    album = Album(title="OK Computer", _tracks=[track])

    assert resolver.get_property(album, "tracks") == [track]


def test_getter_wins_over_public_member(resolver: PropertyResolver) -> None:
    greeting = Greeting()

    assert resolver.get_property(greeting, "message") == "from getter"


def test_declared_and_attached_members(resolver: PropertyResolver) -> None:
    assert resolver.get_property(Album(title="Amnesiac"), "title") == "Amnesiac"
    assert resolver.get_property(Plain(), "colour") == "red"


def test_private_members_are_not_accessible(resolver: PropertyResolver) -> None:
    with pytest.raises(PropertyNotAccessibleError):
        resolver.get_property(Album(title="Amnesiac"), "_rating")


def test_getter_requiring_arguments_is_not_an_accessor(resolver: PropertyResolver) -> None:
    catalog = Catalog()

    assert resolver.get_property(catalog, "size") == 2
    with pytest.raises(PropertyNotAccessibleError):
        resolver.get_property(catalog, "entry")


def test_unset_slot_is_not_accessible(resolver: PropertyResolver) -> None:
    slotted = Slotted()

    with pytest.raises(PropertyNotAccessibleError):
        resolver.get_property(slotted, "value")

    slotted.value = 3
    assert resolver.get_property(slotted, "value") == 3


def test_force_direct_access_bypasses_getter(resolver: PropertyResolver) -> None:
    greeting = Greeting()

    assert resolver.get_property(greeting, "message", force_direct_access=True) == "raw"


def test_force_direct_access_reads_private_storage(resolver: PropertyResolver) -> None:
    album = Album(title="Hail to the Thief")
    album.set_rating(3)

    assert resolver.get_property(album, "rating", force_direct_access=True) == 3
    assert resolver.get_property(Vault(), "code", force_direct_access=True) == 1234


def test_force_direct_access_fails_for_unknown_member(resolver: PropertyResolver) -> None:
    with pytest.raises(PropertyNotAccessibleError, match="does not exist"):
        resolver.get_property(Greeting(), "unknown", force_direct_access=True)


def test_force_direct_access_on_mapping_reads_key(resolver: PropertyResolver) -> None:
    assert resolver.get_property({"a": 1}, "a", force_direct_access=True) == 1


def test_plain_bag_reads_attached_members_only(resolver: PropertyResolver) -> None:
    bag = SimpleNamespace(a=1)

    assert resolver.get_property(bag, "a") == 1
    with pytest.raises(PropertyNotAccessibleError):
        resolver.get_property(bag, "b")


def test_indexable_record_prefers_getter_then_index(resolver: PropertyResolver) -> None:
    settings = Settings({"lang": "en", "theme": "light"})

    assert resolver.get_property(settings, "theme") == "dark"
    assert resolver.get_property(settings, "lang") == "en"
    with pytest.raises(PropertyNotAccessibleError):
        resolver.get_property(settings, "missing")


def test_indexable_record_is_checked_live(resolver: PropertyResolver) -> None:
    settings = Settings({})

    with pytest.raises(PropertyNotAccessibleError):
        resolver.get_property(settings, "lang")

    settings["lang"] = "de"
    assert resolver.get_property(settings, "lang") == "de"


def test_pydantic_model_fields_and_getters(resolver: PropertyResolver) -> None:
    profile = Profile(handle="ada")

    assert resolver.get_property(profile, "display") == "@ada"
    assert resolver.get_property(profile, "followers") == 0


def test_camel_case_accessors(camel_resolver: PropertyResolver) -> None:
    node = Node("root")

    assert camel_resolver.get_property(node, "name") == "root"
    assert camel_resolver.get_property(node, "visible") is True


def test_module_level_function_uses_default_resolver() -> None:
    assert get_property({"a": 1}, "a") == 1
    assert get_property(Album(title="Pablo Honey"), "title") == "Pablo Honey"


def test_callables_on_instances_are_not_accessors(resolver: PropertyResolver) -> None:
    hooked = Hooked(hooked=True)

    assert resolver.get_property(hooked, "x") == 1
    assert resolver.get_property_path(Hooked(hooked=False), "x") == 1
    assert resolver.get_property(Hooked(hooked=False), "x") == 1


def test_class_attributes_are_declared_members(resolver: PropertyResolver) -> None:
    defaults = Defaults()

    assert resolver.get_property(defaults, "colour") == "red"
    assert resolver.get_property(defaults, "sizes") == (1, 2)
    assert resolver.get_property(defaults, "colour", force_direct_access=True) == "red"
    assert resolver.get_gettable_property_names(defaults) == ["colour", "sizes"]

    assert resolver.set_property(defaults, "colour", "blue") is True
    assert resolver.get_property(defaults, "colour") == "blue"
    assert Defaults.colour == "red"
    assert resolver.get_settable_property_names(defaults) == ["colour", "sizes"]
