"""Tests for waypoint.route — Route snapshots and comparisons."""

import dataclasses

import pytest

from waypoint.location import Location
from waypoint.route import (
    START,
    Route,
    create_route,
    get_full_path,
    is_included_route,
    is_object_equal,
    is_same_route,
)
from waypoint.routing.matcher import Matcher
from waypoint.routing.table import create_route_map


def _route(path: str, **kwargs: object) -> Route:
    return Route(path=path, full_path=path, **kwargs)  # type: ignore[arg-type]


class TestCreateRoute:
    def test_from_record(self) -> None:
        table = create_route_map([
            {"path": "/p", "name": "parent", "meta": {"layout": "wide"}, "children": [
                {"path": "c", "name": "child", "meta": {"auth": True}},
            ]},
        ])
        record = table.name_map["child"]
        route = create_route(record, Location(path="/p/c", query={"x": "1"}, hash="#h"))
        assert route.name == "child"
        assert route.meta == {"auth": True}
        assert route.full_path == "/p/c?x=1#h"
        assert [r.path for r in route.matched] == ["/p", "/p/c"]
        assert route.redirected_from is None

    def test_no_record(self) -> None:
        route = create_route(None, Location(path="/nowhere"))
        assert route.matched == ()
        assert route.name is None
        assert route.full_path == "/nowhere"

    def test_redirected_from(self) -> None:
        route = create_route(None, Location(path="/b"), Location(path="/a", query={"q": "1"}))
        assert route.redirected_from == "/a?q=1"

    def test_query_is_deep_copied(self) -> None:
        query = {"tags": ["a"]}
        route = create_route(None, Location(path="/", query=query))
        query["tags"].append("b")
        assert route.query == {"tags": ["a"]}

    def test_custom_stringifier(self) -> None:
        route = create_route(None, Location(path="/", query={"a": "1"}), stringify=lambda q: "?custom")
        assert route.full_path == "/?custom"

    def test_immutable(self) -> None:
        route = create_route(None, Location(path="/"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            route.path = "/other"  # type: ignore[misc]


class TestFullPath:
    def test_empty_path_is_root(self) -> None:
        assert get_full_path(Location(path="")) == "/"

    def test_query_and_hash(self) -> None:
        assert get_full_path(Location(path="/a", query={"b": None}, hash="#c")) == "/a?b#c"


class TestStart:
    def test_start_is_root(self) -> None:
        assert START.path == "/"
        assert START.matched == ()

    def test_start_only_equals_itself(self) -> None:
        assert is_same_route(START, START)
        assert not is_same_route(_route("/"), START)


class TestIsSameRoute:
    def test_trailing_slash_ignored(self) -> None:
        assert is_same_route(_route("/a/"), _route("/a"))

    def test_query_compared_by_value(self) -> None:
        assert is_same_route(_route("/a", query={"p": 1}), _route("/a", query={"p": "1"}))
        assert not is_same_route(_route("/a", query={"p": "1"}), _route("/a", query={"p": "2"}))

    def test_hash(self) -> None:
        assert not is_same_route(_route("/a", hash="#x"), _route("/a"))

    def test_none(self) -> None:
        assert not is_same_route(_route("/a"), None)

    def test_named_routes_compare_params(self) -> None:
        a = _route("", name="user", params={"id": "1"})
        b = _route("", name="user", params={"id": "1"})
        c = _route("", name="user", params={"id": "2"})
        assert is_same_route(a, b)
        assert not is_same_route(a, c)


class TestIsObjectEqual:
    def test_nested(self) -> None:
        assert is_object_equal({"a": {"b": 1}}, {"a": {"b": "1"}})
        assert not is_object_equal({"a": {"b": 1}}, {"a": {"b": 2}})

    def test_lists(self) -> None:
        assert is_object_equal({"a": ["1", 2]}, {"a": [1, "2"]})
        assert not is_object_equal({"a": ["1"]}, {"a": ["1", "2"]})

    def test_key_mismatch(self) -> None:
        assert not is_object_equal({"a": "1"}, {"b": "1"})
        assert not is_object_equal({"a": "1"}, {})


class TestIsIncludedRoute:
    def test_prefix(self) -> None:
        assert is_included_route(_route("/users/7"), _route("/users"))
        assert not is_included_route(_route("/users"), _route("/users/7"))

    def test_hash_must_match(self) -> None:
        assert not is_included_route(_route("/a", hash="#x"), _route("/a", hash="#y"))
        assert is_included_route(_route("/a", hash="#x"), _route("/a"))

    def test_query_keys_must_be_present(self) -> None:
        assert is_included_route(_route("/a", query={"x": "1", "y": "2"}), _route("/a", query={"x": "1"}))
        assert not is_included_route(_route("/a"), _route("/a", query={"x": "1"}))


class TestRouteHash:
    def test_equal_routes_hash_equal(self) -> None:
        matcher = Matcher([{"path": "/a", "name": "a"}, {"path": "/b"}])
        first, second = matcher.match("/a?x=1"), matcher.match("/a?x=1")
        assert first == second
        assert hash(first) == hash(second)
        assert {first, second, matcher.match("/b")} == {first, matcher.match("/b")}

    def test_usable_as_dict_key(self) -> None:
        route = _route("/a", query={"x": "1"})
        assert {route: "seen"}[_route("/a", query={"x": "1"})] == "seen"
