"""Tests for qualified-name allocation and scope composition."""

import itertools

import pytest

from starscope import InvalidIdentifier, Namespace, compose_scope, qualify, split_qualified


SCOPES = ["a", "b", "birthday", "anniversary", "a_b", "x1"]
LOCALS = ["date", "error", "value", "a", "b_c", "n2"]


def test_sibling_scopes_never_collide():
    for scope1, scope2 in itertools.permutations(SCOPES, 2):
        for local in LOCALS:
            assert qualify(scope1)(local) != qualify(scope2)(local)


def test_distinct_locals_never_collide_within_scope():
    for scope in SCOPES:
        names = {qualify(scope)(local) for local in LOCALS}
        assert len(names) == len(LOCALS)


def test_qualify_is_deterministic():
    first = qualify("birthday")
    second = qualify("birthday")
    assert first("date") == second("date") == "birthday.date"
    assert first("date") == first("date")


def test_qualify_embeds_scope_as_prefix():
    assert qualify("birthday")("error").startswith("birthday.")


@pytest.mark.parametrize("bad", ["", "a.b", "a-b", "has space", "ünï", None, 42, "a/b"])
def test_malformed_local_names_rejected(bad):
    with pytest.raises(InvalidIdentifier):
        qualify("scope")(bad)


@pytest.mark.parametrize("bad", ["", "a-b", ".a", "a.", "a..b", None, "x y"])
def test_malformed_scopes_rejected_eagerly(bad):
    with pytest.raises(InvalidIdentifier):
        qualify(bad)


def test_separator_in_local_is_reported():
    with pytest.raises(InvalidIdentifier) as excinfo:
        qualify("scope")("a.b")
    assert "separator" in str(excinfo.value)


def test_compose_scope_nests_with_separator():
    assert compose_scope("parent", "child") == "parent.child"
    assert compose_scope(compose_scope("a", "b"), "c") == "a.b.c"


def test_compose_scope_rejects_composed_inner():
    with pytest.raises(InvalidIdentifier):
        compose_scope("parent", "child.grandchild")


def test_three_levels_of_siblings_produce_no_collisions():
    names = set()
    count = 0
    for outer in ["p1", "p2"]:
        for middle in ["c1", "c2"]:
            for inner in ["g1", "g2"]:
                scope = compose_scope(compose_scope(outer, middle), inner)
                for local in ["value", "error"]:
                    names.add(qualify(scope)(local))
                    count += 1
            for local in ["value", "error"]:
                names.add(qualify(compose_scope(outer, middle))(local))
                count += 1
    assert len(names) == count


def test_split_qualified_reverses_qualify():
    assert split_qualified(qualify("a.b")("c")) == ("a.b", "c")
    assert split_qualified("plain") == (None, "plain")


def test_split_qualified_rejects_garbage():
    with pytest.raises(InvalidIdentifier):
        split_qualified("a..b")


class TestNamespace:
    def test_renderings(self):
        ns = Namespace("birthday").child("picker")
        assert ns("date") == "birthday.picker.date"
        assert ns.id("date") == "birthday-picker-date"
        assert ns.signal("date") == "$birthday.picker.date"
        assert ns.depth == 2

    def test_root_qualifies_to_local(self):
        root = Namespace.root()
        assert root.is_root
        assert root("title") == "title"
        assert root.child("a").scope == "a"

    def test_owns_only_direct_names(self):
        ns = Namespace("a")
        assert ns.owns("a.x")
        assert not ns.owns("a.b.x")
        assert not ns.owns("b.x")
        assert ns.contains("a.b.x")
        assert not ns.contains("ab.x")

    def test_local_name(self):
        ns = Namespace("a.b")
        assert ns.local_name("a.b.x") == "x"
        with pytest.raises(InvalidIdentifier):
            ns.local_name("a.x")

    def test_invalid_scope_rejected(self):
        with pytest.raises(InvalidIdentifier):
            Namespace("bad-scope")

    def test_equal_scopes_are_equal_values(self):
        assert Namespace("a") == Namespace("a")
        assert hash(Namespace("a")) == hash(Namespace("a"))
