import pytest

from zone import Zone
from zone.domain import Access
from zone.errors import (
    CyclicDependencyError,
    NotFoundError,
    ProducerError,
    UnknownModuleError,
)
from zone.resolution import find_resolvable


@pytest.fixture
def zone():
    return Zone()


@pytest.fixture
def family(zone):
    parent = zone("parent").value("#shared", "protected").value("-secret", "private")
    zone("parent.child.grandchild")
    zone("unrelated")
    return parent


def test_protected_bindings_are_visible_to_descendants(zone, family):
    assert zone("parent.child").get("shared") == "protected"
    assert zone("parent.child.grandchild").get("shared") == "protected"


def test_protected_bindings_are_hidden_from_unrelated_modules(zone, family):
    assert find_resolvable("parent.shared", zone("unrelated"), Access.PRIVATE) is None
    with pytest.raises(NotFoundError):
        zone("unrelated").get("parent.shared")


def test_protected_bindings_are_not_public(zone, family):
    with pytest.raises(NotFoundError):
        zone.get("parent.shared")


def test_private_bindings_are_visible_only_in_their_module(zone, family):
    family.factory("reveal", ["secret"], lambda secret: secret)
    zone("parent.child").factory("leak", ["secret"], lambda secret: secret)

    assert zone.get("parent.reveal") == "private"
    with pytest.raises(NotFoundError, match="secret"):
        zone.get("parent.child.leak")


def test_private_binding_is_found_from_its_own_module(zone, family):
    binding = find_resolvable("secret", family, Access.PRIVATE)

    assert binding.full_name == "parent.secret"
    assert find_resolvable("secret", zone("parent.child"), Access.PRIVATE) is None


def test_absolute_names_clamp_access(zone, family):
    # an ancestor's private binding stays hidden under a dotted name
    assert find_resolvable("parent.secret", zone("parent.child"), Access.PRIVATE) is None
    assert find_resolvable("parent.shared", zone("parent.child"), Access.PRIVATE) is not None


def test_injects_values_with_absolute_paths(zone):
    zone("mine").value("-foo", "foo").factory("bar", ["yours.foo"], lambda foo: foo)
    zone("yours").value("foo", "FOO")

    assert zone("mine").get("bar") == "FOO"


def test_injects_private_and_protected_values(zone):
    mine = zone("mine").value("-foo", "foo").value("#baz", "baz")
    mine.factory("bar", ["foo", "baz"], lambda foo, baz: foo + baz)

    assert mine.get("bar") == "foobaz"


def test_searches_locally_then_imports_then_parents(zone):
    root = zone()
    mine = root.create("mine")
    yours = root.create("yours", ["mine"])

    root.value("#bar", "root").value("#foo", "root").value("baz", "root")
    mine.value("foo", "mine").value("bar", "mine")
    yours.value("bar", "yours")

    assert yours.inject(["bar"], lambda x: x)() == "yours"
    assert yours.inject(["foo"], lambda x: x)() == "mine"
    assert yours.inject(["baz"], lambda x: x)() == "root"


def test_imports_are_searched_in_declaration_order(zone):
    zone("first").value("name", "first")
    zone("second").value("name", "second")
    zone("consumer").configure(["second", "first"])

    assert zone("consumer").get("name") == "second"


def test_imports_expose_only_public_bindings(zone):
    zone("lib").value("#internal", 1).value("-hidden", 2)
    consumer = zone().create("consumer", ["lib"])

    for name in ("internal", "hidden"):
        with pytest.raises(NotFoundError):
            consumer.get(name)


def test_imports_are_not_transitive(zone):
    zone("c").value("deep", "value")
    zone().create("b", ["c"])
    zone().create("a", ["b"])

    assert zone("b").get("deep") == "value"
    with pytest.raises(NotFoundError):
        zone("a").get("deep")


def test_import_of_unknown_module_fails(zone):
    zone().create("mine", ["nowhere"])

    with pytest.raises(UnknownModuleError, match="nowhere"):
        zone("mine").get("anything")


def test_self_import_is_only_detected_on_resolution(zone):
    mine = zone().create("mine", ["mine"])

    with pytest.raises(CyclicDependencyError):
        mine.get("X")


def test_mutual_imports_resolve_names_from_each_other(zone):
    zone().create("mine", ["yours"]).value("a", "A")
    zone().create("yours", ["mine"]).value("b", "B")

    assert zone("mine").get("b") == "B"
    assert zone("yours").get("a") == "A"


def test_detects_cycles_between_values(zone):
    zone("mine").factory("foo", ["yours.bar"], lambda bar: "mine.foo")
    zone("yours").factory("bar", ["mine.foo"], lambda foo: "yours.bar")

    with pytest.raises(CyclicDependencyError) as caught:
        zone("yours").get("bar")

    assert caught.value.resolution_path == ["mine.foo", "yours.bar"]
    assert not zone("mine").bindings["foo"].is_resolved
    assert zone("yours").bindings["bar"].state_name == "unresolved"


def test_detects_a_binding_depending_on_itself(zone):
    zone().factory("foo", ["foo"], lambda foo: foo)

    with pytest.raises(CyclicDependencyError, match="foo"):
        zone.get("foo")


def test_optional_lookup_through_a_sibling_import_is_not_cyclic(zone):
    zone().create("sibling")
    zone().create("myzone", ["sibling"])

    assert zone.inject(["?myzone.value"], lambda value: value)() is None


def test_missing_lookup_through_a_sibling_import_is_not_cyclic(zone):
    zone().create("sibling")
    zone().create("myzone", ["sibling"])

    with pytest.raises(NotFoundError):
        zone.inject(["myzone.value"], lambda value: value)()


def test_failed_resolution_can_be_retried(zone):
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("not yet")
        return "ready"

    zone().factory("flaky", flaky)

    with pytest.raises(ProducerError, match="Failed to resolve flaky") as caught:
        zone.get("flaky")
    assert isinstance(caught.value.__cause__, RuntimeError)

    assert zone.get("flaky") == "ready"
    assert zone.get("flaky") == "ready"
    assert len(attempts) == 2


def test_missing_dependency_names_the_dependency_and_the_binding(zone):
    zone("mine").factory("foo", ["missing"], lambda missing: missing)

    with pytest.raises(NotFoundError, match="missing") as caught:
        zone.get("mine.foo")

    assert caught.value.resolution_path == ["mine.foo"]
    assert "while resolving mine.foo" in str(caught.value)
