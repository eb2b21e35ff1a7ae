import itertools
import re
from collections import namedtuple

import pytest

from zone import Zone
from zone.errors import DeclarationError, NotFoundError, UnknownModuleError


@pytest.fixture
def zone():
    return Zone()


@pytest.fixture
def counted(zone):
    """A zone whose 'foo' bindings are stamped by a counting interceptor."""
    zone.value("a.b.c.foo", "bar")
    zone.value("x.foo", "qux")
    zone("counters").factory("counter", lambda: itertools.count(1))
    zone("counters").interceptor(
        lambda module, name: name == "foo",
        ["counter"],
        lambda counter: lambda value: f"{value}-{next(counter)}",
    )
    return zone


def test_registration_by_full_name_creates_modules(zone):
    zone.value("a.b.foo", 1).factory("a.b.bar", lambda foo: foo + 1).service("a.svc", [], dict)

    assert zone.get("a.b.bar") == 2
    assert zone.get("a.svc") == {}
    assert zone("a.b", True).bindings["foo"].full_name == "a.b.foo"


def test_registration_by_full_name_keeps_the_access_sigil(zone):
    zone.value("-a.hidden", 1).value("#a.shared", 2)

    with pytest.raises(NotFoundError):
        zone.get("a.hidden")
    assert zone("a.child").get("shared") == 2


def test_registration_at_the_root(zone):
    zone.value("foo", "bar")

    assert zone().get("foo") == "bar"


def test_get_of_unknown_module_fails_without_creating_it(zone):
    with pytest.raises(NotFoundError, match="nowhere.foo"):
        zone.get("nowhere.foo")

    with pytest.raises(UnknownModuleError):
        zone("nowhere", True)


def test_provides_by_full_name(zone):
    zone.value("db.url", "sqlite://")

    @zone.provides("db.connection")
    def make_connection(url):
        return f"connected to {url}"

    assert zone.get("db.connection") == "connected to sqlite://"


def test_constants_are_deeply_frozen(zone):
    Point = namedtuple("Point", "x y")
    zone.constant("config", {"hosts": ["a", "b"], "tags": {"x"}, "origin": Point([0], 0)})

    config = zone.get("config")
    assert config["hosts"] == ("a", "b")
    assert config["tags"] == frozenset({"x"})
    assert config["origin"].x == (0,)
    with pytest.raises(TypeError):
        config["port"] = 80
    with pytest.raises(AttributeError):
        config["hosts"].append("c")


def test_constant_does_not_share_the_original(zone):
    original = {"key": "value"}
    zone.constant("config", original)
    original["key"] = "changed"

    assert zone.get("config")["key"] == "value"


def test_memoises_values(zone):
    produced = []

    def make_service():
        produced.append(object())
        return produced[-1]

    zone.factory("svc", make_service)

    assert zone.get("svc") is zone.get("svc")
    assert len(produced) == 1


def test_static_injection(zone):
    zone.value("mine.foo", "bar")

    assert zone.inject("mine", ["foo"], lambda x: x)() == "bar"


def test_static_injection_into_the_root(zone):
    zone.value("foo", "bar")

    assert zone.inject(["foo"], lambda x: x)() == "bar"


def test_static_injection_is_deferred_until_called(zone):
    injected = zone.inject("mine", ["foo"], lambda x: x)
    zone.value("mine.foo", "bar")

    assert injected() == "bar"


def test_static_injection_requires_an_existing_module(zone):
    injected = zone.inject("mine", lambda foo: foo)

    with pytest.raises(UnknownModuleError):
        injected()


def test_static_injection_with_free_arguments(zone):
    zone.value("mine.foo", "foo")
    injected = zone.inject("mine", ["foo", "#y", "#z"], lambda x, y, z: x + y + z)

    assert injected("bar", "baz") == "foobarbaz"


def test_descriptor_helpers_check_their_arguments(zone):
    with pytest.raises(DeclarationError, match="at most 2"):
        zone.as_function(["a"], lambda a: a, "extra")
    with pytest.raises(DeclarationError, match="at least 1"):
        zone.as_constructor()


def test_names_lists_public_bindings_sorted(zone):
    zone.value("b.two", 2).value("a.one", 1).value("-a.hidden", 0).value("#b.shared", 0)
    zone.value("root", 0)

    assert zone.names() == ["a.one", "b.two", "root"]


def test_names_filters_narrow_the_result(zone):
    zone.value("mine.foo", 1).value("mine.bar", 2).value("yours.baz", 3)

    assert zone.names("ba[rz]") == ["mine.bar", "yours.baz"]
    assert zone.names(re.compile(r"^yours\.")) == ["yours.baz"]
    assert zone.names(lambda name: name.endswith("foo")) == ["mine.foo"]


def test_names_rejects_invalid_filters(zone):
    with pytest.raises(DeclarationError):
        zone.names(42)


def test_make_zone_is_empty_and_independent(zone):
    zone.value("foo", "bar")
    fresh = zone.make_zone()

    assert fresh.names() == []
    assert fresh() is not zone()


def test_reset_discards_everything(zone):
    zone.value("foo", "bar").get("foo")
    old_root = zone()

    zone.reset()

    assert zone() is not old_root
    assert zone.names() == []
    zone.value("foo", "again")
    assert zone.get("foo") == "again"


def test_copy_zone_re_resolves_independently(counted):
    assert counted.get("a.b.c.foo") == "bar-1"

    copy = counted.copy_zone()

    assert copy.get("a.b.c.foo") == "bar-1"
    assert counted.get("x.foo") == "qux-2"
    assert copy.get("x.foo") == "qux-2"
    assert copy.get("counters.counter") is not counted.get("counters.counter")


def test_copy_zone_copies_structure(counted):
    counted.get("a.b.c.foo")
    copy = counted.copy_zone()

    assert copy.names() == counted.names()
    assert copy("a.b.c", True).full_name == "a.b.c"
    assert copy("a.b.c") is not counted("a.b.c")
    assert not copy().sealed


def test_copy_zone_can_be_extended_without_touching_the_original(zone):
    zone.value("mine.foo", "bar")
    zone.get("mine.foo")

    copy = zone.copy_zone()
    copy.value("mine.double", "test double")

    assert copy.get("mine.double") == "test double"
    with pytest.raises(NotFoundError):
        zone.get("mine.double")


def test_copy_zone_keeps_imports(zone):
    zone.value("lib.util", "util")
    zone().create("app", ["lib"])

    copy = zone.copy_zone()

    assert copy("app").imports == ("lib",)
    assert copy("app").get("util") == "util"


def test_version(zone):
    assert zone.version() == "1.0"


def test_constants_keep_arbitrary_objects_as_they_are(zone):
    class Settings:
        debug = False

    settings = Settings()
    zone.constant("settings", settings)

    assert zone.get("settings") is settings
