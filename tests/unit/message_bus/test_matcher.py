"""Tests for structural pattern matching."""

import pytest
from collections import OrderedDict

from patternbus.core.message_bus import Bus
from patternbus.core.message_bus.matcher import is_mapping, match


class TestMatch:
    """Test suite for match()."""

    def test_exact_match(self):
        assert match({"topic": "news"}, {"topic": "news"})

    def test_extra_message_keys_are_ignored(self):
        assert match({"topic": "news", "content": "Hello, world!"}, {"topic": "news"})

    def test_missing_key(self):
        assert not match({"content": "Hello, world!"}, {"topic": "news"})

    def test_unequal_value(self):
        assert not match({"topic": "art"}, {"topic": "news"})

    def test_every_pattern_key_must_match(self):
        pattern = {"topic": "news", "lang": "en"}

        assert match({"topic": "news", "lang": "en", "id": 1}, pattern)
        assert not match({"topic": "news", "lang": "de"}, pattern)
        assert not match({"topic": "news"}, pattern)

    @pytest.mark.parametrize("message", [
        {},
        {"topic": "news"},
        {"deeply": {"nested": {"value": 1}}},
        "not a mapping",
        None,
    ])
    def test_empty_pattern_is_catch_all(self, message):
        assert match(message, {})

    def test_nested_match(self):
        message = {"match": "this", "and": {"also": "this", "extra": 1}}

        assert match(message, {"match": "this", "and": {"also": "this"}})

    def test_nested_mismatch(self):
        assert not match({"a": {"b": 2}}, {"a": {"b": 1}})

    def test_nested_pattern_against_scalar_value(self):
        assert not match({"a": 5}, {"a": {"b": 1}})

    def test_scalar_pattern_against_nested_value(self):
        assert not match({"a": {"b": 1}}, {"a": 1})

    def test_empty_nested_pattern_requires_key_only(self):
        assert match({"a": {"b": 1}}, {"a": {}})
        assert not match({"c": 1}, {"a": {}})

    @pytest.mark.parametrize("pattern", ["topic", None, 42, ["topic"], ("topic", "news")])
    def test_non_mapping_pattern_never_matches(self, pattern):
        assert not match({"topic": "news"}, pattern)

    def test_non_mapping_message_with_keys_in_pattern(self):
        assert not match("topic", {"topic": "news"})
        assert not match(None, {"topic": "news"})

    def test_bool_does_not_match_int(self):
        assert not match({"flag": 1}, {"flag": True})
        assert not match({"flag": True}, {"flag": 1})
        assert not match({"flag": 0}, {"flag": False})
        assert match({"flag": True}, {"flag": True})

    def test_none_values(self):
        assert match({"a": None}, {"a": None})
        assert not match({}, {"a": None})

    def test_lists_compare_as_whole_sequences(self):
        assert match({"tags": ["a", "b"]}, {"tags": ["a", "b"]})
        assert not match({"tags": ["a", "b", "c"]}, {"tags": ["a", "b"]})
        assert not match({"tags": ["b", "a"]}, {"tags": ["a", "b"]})

    def test_bool_does_not_match_int_inside_sequences(self):
        assert not match({"a": [True]}, {"a": [1]})
        assert not match({"a": [1]}, {"a": [True]})
        assert not match({"a": [{"flag": 1}]}, {"a": [{"flag": True}]})
        assert match({"a": [True, {"flag": False}]}, {"a": [True, {"flag": False}]})

    def test_mappings_inside_lists_compare_exactly(self):
        assert not match({"a": [{"b": 1, "c": 2}]}, {"a": [{"b": 1}]})

    def test_any_mapping_type(self):
        assert match(OrderedDict(topic="news", id=1), OrderedDict(topic="news"))

    def test_bus_exposes_matcher(self):
        assert Bus.match is match


def test_is_mapping():
    assert is_mapping({})
    assert is_mapping(OrderedDict())
    assert not is_mapping([])
    assert not is_mapping("str")
    assert not is_mapping(None)
