"""Tests for waypoint.util.query — the default query string codec."""

import logging

import pytest

from waypoint.util.query import encode, parse_query, resolve_query, stringify_query


class TestParseQuery:
    def test_empty(self) -> None:
        assert parse_query("") == {}
        assert parse_query("?") == {}

    def test_leading_markers_ignored(self) -> None:
        assert parse_query("?a=1") == {"a": "1"}
        assert parse_query("#a=1") == {"a": "1"}
        assert parse_query("&a=1") == {"a": "1"}

    def test_repeated_keys_collect_into_list(self) -> None:
        assert parse_query("a=1&a=2&a=3") == {"a": ["1", "2", "3"]}

    def test_bare_key_is_none(self) -> None:
        assert parse_query("?a=1&a=2&b") == {"a": ["1", "2"], "b": None}

    def test_empty_value_differs_from_bare_key(self) -> None:
        assert parse_query("b=&c") == {"b": "", "c": None}

    def test_plus_decodes_to_space(self) -> None:
        assert parse_query("q=hello+world") == {"q": "hello world"}

    def test_percent_decoding(self) -> None:
        assert parse_query("q=a%20b&k%3D=v") == {"q": "a b", "k=": "v"}

    def test_value_with_equals(self) -> None:
        assert parse_query("expr=a=b") == {"expr": "a=b"}

    def test_empty_value(self) -> None:
        assert parse_query("a=") == {"a": ""}


class TestStringifyQuery:
    def test_empty(self) -> None:
        assert stringify_query({}) == ""
        assert stringify_query(None) == ""

    def test_pairs(self) -> None:
        assert stringify_query({"a": "1", "b": "2"}) == "?a=1&b=2"

    def test_none_is_bare_key(self) -> None:
        assert stringify_query({"flag": None}) == "?flag"

    def test_lists_expand(self) -> None:
        assert stringify_query({"c": ["x", None, "y"]}) == "?c=x&c&c=y"

    def test_non_string_values(self) -> None:
        assert stringify_query({"page": 2}) == "?page=2"

    def test_empty_list_contributes_nothing(self) -> None:
        assert stringify_query({"c": []}) == ""

    def test_reserved_characters_escaped(self) -> None:
        assert encode("!'()*") == "%21%27%28%29%2A"
        assert encode("a,b") == "a,b"
        assert stringify_query({"q": "a b&c"}) == "?q=a%20b%26c"


class TestResolveQuery:
    def test_extra_wins(self) -> None:
        assert resolve_query("a=1&b=2", {"a": "9"}) == {"a": "9", "b": "2"}

    def test_no_query(self) -> None:
        assert resolve_query(None) == {}

    def test_custom_parser(self) -> None:
        assert resolve_query("x", parse=lambda q: {"raw": q}) == {"raw": "x"}

    def test_failing_parser_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        def broken(query: str) -> dict[str, str]:
            msg = "malformed"
            raise ValueError(msg)

        with caplog.at_level(logging.WARNING, logger="waypoint.routing"):
            assert resolve_query("%%", {"a": "1"}, broken) == {"a": "1"}
        assert "Could not parse query" in caplog.text
