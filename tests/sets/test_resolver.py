"""
Tests for set query resolution (synchronous path).
"""

import warnings
from enum import Enum

import pytest

from set_query.sets.registry import SetRegistry
from set_query.sets.resolver import (
    EXCLUDE_ALL,
    ID_MAX,
    ID_MIN,
    SetQueryItem,
    SetQueryResolver,
    SetRelation,
    to_identifier,
)


def resolver_a(*args):
    return [3, 1, 2]


def resolver_b(*args):
    return []


class TestToIdentifier:
    """Tests for to_identifier coercion."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (7, 7),
            (3.9, 3),
            (-2.5, -2),
            ("12", 12),
            ("12abc", 12),
            ("  42 ", 42),
            ("abc", 0),
            ("", 0),
            (b"15", 15),
            (True, 1),
            (None, 0),
            (float("nan"), 0),
            (object(), 0),
            ("9" * 30, ID_MAX),
            ("-" + "9" * 30, ID_MIN),
            ("9" * 5000, ID_MAX),
            ("-" + "9" * 5000, ID_MIN),
        ],
    )
    def test_coercion(self, value, expected):
        assert to_identifier(value) == expected


class TestNoSetQuery:
    """A post query without set query input is left alone."""

    def setup_method(self):
        self.resolver = SetQueryResolver(SetRegistry())

    def test_missing_key_is_identity(self):
        query_args = {"author": 4}
        result = self.resolver.transform(query_args, {"authorId": 4})

        assert result is query_args
        assert result == {"author": 4}

    @pytest.mark.parametrize("empty", [[], None, ()])
    def test_empty_set_query_is_identity(self, empty):
        query_args = {"author": 4, "setQuery": empty}
        result = self.resolver.transform(query_args, {"setQuery": empty})

        assert result is query_args
        assert result == {"author": 4, "setQuery": empty}


class TestTransform:
    """Tests for SetQueryResolver.transform."""

    def test_single_set(self, set_registry):
        resolver = SetQueryResolver(set_registry)
        input_args = {"setQuery": [{"set": resolver_a, "args": ["x"]}]}
        query_args = dict(input_args)

        result = resolver.transform(query_args, input_args)

        assert sorted(result["post__in"]) == [1, 2, 3]
        assert result["post__in"] == [3, 1, 2]
        assert result["orderby"] == "post__in"
        assert "setQuery" not in result

    def test_set_by_registered_name(self, set_registry):
        resolver = SetQueryResolver(set_registry)

        result = resolver.transform({}, {"setQuery": [{"set": "featured"}]})

        assert result["post__in"] == [3, 1, 2]

    def test_args_are_spread_positionally(self):
        calls = []

        def record(*args):
            calls.append(args)
            return [1]

        set_registry = SetRegistry()
        set_registry.register("record", record)
        resolver = SetQueryResolver(set_registry)

        resolver.transform({}, {"setQuery": [{"set": "record", "args": ["a", "b", "c"]}]})

        assert calls == [("a", "b", "c")]

    @pytest.mark.parametrize("args", [None, "abc", 5, {"a": 1}])
    def test_args_default_to_empty(self, args):
        calls = []

        def record(*received):
            calls.append(received)
            return [1]

        resolver = SetQueryResolver(SetRegistry())
        resolver.transform({}, {"setQuery": [{"set": record, "args": args}]})

        assert calls == [()]

    def test_non_invokable_set_is_dropped(self, set_registry):
        resolver = SetQueryResolver(set_registry)
        query_args = {"author": 4, "setQuery": [{"set": "not_callable"}]}

        result = resolver.transform(query_args, {"setQuery": [{"set": "not_callable"}]})

        assert "setQuery" not in result
        assert result["author"] == 4
        assert result["post__in"] == []
        assert result["orderby"] == "post__in"

    @pytest.mark.parametrize(
        "item",
        [
            {},
            {"set": None},
            {"set": 42},
            {"set": ["featured"]},
            {"args": ["x"]},
            "featured",
            42,
            None,
        ],
    )
    def test_malformed_items_contribute_nothing(self, set_registry, item):
        resolver = SetQueryResolver(set_registry)

        result = resolver.transform({}, {"setQuery": [item, {"set": "by_ids", "args": [8]}]})

        assert result["post__in"] == [8]

    def test_empty_result_contributes_exclude_all(self):
        resolver = SetQueryResolver(SetRegistry())
        input_args = {"setQuery": [{"set": resolver_a, "args": []}, {"set": resolver_b, "args": []}]}

        result = resolver.transform({}, input_args)

        assert set(result["post__in"]) == {1, 2, 3, 0}
        assert result["post__in"] == [3, 1, 2, 0]

    def test_scenario_union_with_empty_set(self):
        set_registry = SetRegistry()
        set_registry.register("a", lambda: [1, 2])
        set_registry.register("b", lambda: [])
        resolver = SetQueryResolver(set_registry)

        result = resolver.transform({}, {"setQuery": [{"set": "a", "args": []}, {"set": "b", "args": []}]})

        assert result["post__in"] == [1, 2, 0]

    def test_failing_resolver_contributes_exclude_all(self):
        def broken(*args):
            raise RuntimeError("boom")

        resolver = SetQueryResolver(SetRegistry())

        result = resolver.transform({}, {"setQuery": [{"set": broken}, {"set": lambda: [5]}]})

        assert result["post__in"] == [0, 5]

    @pytest.mark.parametrize("returned", [None, 5, "123", {"a": 1}, b"12", False])
    def test_non_sequence_result_contributes_exclude_all(self, returned):
        resolver = SetQueryResolver(SetRegistry())

        result = resolver.transform({}, {"setQuery": [{"set": lambda: returned}]})

        assert result["post__in"] == list(EXCLUDE_ALL)

    def test_result_elements_are_coerced(self):
        resolver = SetQueryResolver(SetRegistry())

        result = resolver.transform({}, {"setQuery": [{"set": lambda: ("12abc", 3.9, "x", 4)}]})

        assert result["post__in"] == [12, 3, 0, 4]

    def test_numeric_string_past_digit_limit_saturates(self):
        resolver = SetQueryResolver(SetRegistry())

        result = resolver.transform({}, {"setQuery": [{"set": lambda: ["9" * 5000, 4]}]})

        assert result["post__in"] == [ID_MAX, 4]

    def test_element_coercion_failure_degrades_single_item(self):
        class BadIdentifier:
            def __int__(self):
                raise KeyError("id")

        resolver = SetQueryResolver(SetRegistry())
        input_args = {"setQuery": [{"set": lambda: [BadIdentifier()]}, {"set": lambda: [5]}]}

        result = resolver.transform({}, input_args)

        assert result["post__in"] == [0, 5]

    def test_result_iteration_failure_degrades_single_item(self):
        class BrokenSequence(list):
            def __iter__(self):
                raise RuntimeError("cursor closed")

        resolver = SetQueryResolver(SetRegistry())
        input_args = {"setQuery": [{"set": lambda: BrokenSequence([1])}, {"set": lambda: [5]}]}

        result = resolver.transform({}, input_args)

        assert result["post__in"] == [0, 5]

    def test_deduplication(self):
        set_registry = SetRegistry()
        set_registry.register("first", lambda: [5, 6])
        set_registry.register("second", lambda: [7, "5"])
        resolver = SetQueryResolver(set_registry)

        result = resolver.transform({}, {"setQuery": [{"set": "first"}, {"set": "second"}]})

        assert result["post__in"].count(5) == 1
        assert result["post__in"] == [5, 6, 7]

    def test_exclude_all_sentinel_appears_once(self):
        resolver = SetQueryResolver(SetRegistry())

        result = resolver.transform({}, {"setQuery": [{"set": lambda: []}, {"set": lambda: None}]})

        assert result["post__in"] == [0]

    def test_unrelated_filters_are_kept(self, set_registry):
        resolver = SetQueryResolver(set_registry)
        query_args = {"author": 4, "s": "news", "setQuery": [{"set": "featured"}]}

        result = resolver.transform(query_args, {"setQuery": [{"set": "featured"}]})

        assert result == {"author": 4, "s": "news", "post__in": [3, 1, 2], "orderby": "post__in"}

    def test_orderby_is_overridden(self, set_registry):
        resolver = SetQueryResolver(set_registry)

        result = resolver.transform({"orderby": "title"}, {"setQuery": [{"set": "featured"}]})

        assert result["orderby"] == "post__in"

    def test_set_query_that_is_not_a_list(self, set_registry):
        resolver = SetQueryResolver(set_registry)
        input_args = {"setQuery": {"set": "featured"}}

        result = resolver.transform(dict(input_args), input_args)

        assert result == {"post__in": [], "orderby": "post__in"}

    def test_enum_reference(self, set_registry):
        SetName = Enum("SetName", {"FEATURED": "featured"})
        resolver = SetQueryResolver(set_registry)

        result = resolver.transform({}, {"setQuery": [{"set": SetName.FEATURED}]})

        assert result["post__in"] == [3, 1, 2]

    def test_dataclass_items(self, set_registry):
        resolver = SetQueryResolver(set_registry)
        items = [SetQueryItem(set="by_ids", args=["4", "9"]), SetQueryItem(set="featured")]

        result = resolver.transform({}, {"setQuery": items})

        assert result["post__in"] == [4, 9, 3, 1, 2]

    def test_async_resolver_in_sync_path(self):
        async def async_set(*args):
            return [1]

        resolver = SetQueryResolver(SetRegistry())

        with warnings.catch_warnings():
            warnings.simplefilter("error", RuntimeWarning)
            result = resolver.transform({}, {"setQuery": [{"set": async_set}]})

        assert result["post__in"] == [0]

    def test_deterministic_for_pure_resolvers(self, set_registry):
        resolver = SetQueryResolver(set_registry)
        input_args = {
            "setQuery": [
                {"set": "by_ids", "args": ["9", "4"]},
                {"set": "featured"},
                {"set": "empty"},
            ]
        }

        first = resolver.transform(dict(input_args), input_args)
        second = resolver.transform(dict(input_args), input_args)

        assert first == second

    def test_uses_global_registry_by_default(self):
        from set_query.sets.registry import registry

        registry.register("global_set", lambda: [11])

        result = SetQueryResolver().transform({}, {"setQuery": [{"set": "global_set"}]})

        assert result["post__in"] == [11]


class TestValidate:
    """Tests for SetQueryResolver.validate defaults."""

    def test_relation_defaults_to_or(self, set_registry):
        queries = SetQueryResolver(set_registry).validate([{"set": "featured"}])

        assert len(queries) == 1
        assert queries[0].relation is SetRelation.OR
        assert queries[0].args == []
        assert queries[0].name == "featured"

    @pytest.mark.parametrize("relation", ["OR", SetRelation.OR, "AND", 3])
    def test_relation_is_always_or(self, set_registry, relation):
        queries = SetQueryResolver(set_registry).validate([{"set": "featured", "relation": relation}])

        assert queries[0].relation is SetRelation.OR

    def test_tuple_args_become_list(self, set_registry):
        queries = SetQueryResolver(set_registry).validate([{"set": "by_ids", "args": (1, 2)}])

        assert queries[0].args == [1, 2]

    def test_callable_reference_name(self):
        queries = SetQueryResolver(SetRegistry()).validate([{"set": resolver_a}])

        assert queries[0].name == "resolver_a"
        assert queries[0].resolver is resolver_a
