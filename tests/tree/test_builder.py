"""Tests for JsonTreeBuilder.

Covers all JSON types, nesting, bool/int dispatch ordering, Decimal number
loading, duplicate-key detection, parse positions in load errors, depth
limits, and TypeError on invalid Python input.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from structural_diff.errors import JsonLoadError, LoadError
from structural_diff.tree.builder import JsonTreeBuilder
from structural_diff.tree.nodes import DocumentFormat, NodeKind

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def builder() -> JsonTreeBuilder:
    """A fresh JsonTreeBuilder instance for each test."""
    return JsonTreeBuilder()


# ---------------------------------------------------------------------------
# Loading text
# ---------------------------------------------------------------------------


class TestLoad:
    def test_object_becomes_unordered_object(self, builder: JsonTreeBuilder) -> None:
        tree = builder.load('{"a": 1, "b": "x"}')
        assert tree.kind is NodeKind.OBJECT
        assert tree.ordered is False
        assert [key for key, _ in tree.items()] == ["a", "b"]

    def test_root_carries_format_and_source(self, builder: JsonTreeBuilder) -> None:
        text = '{"a": 1}'
        tree = builder.load(text)
        assert tree.format is DocumentFormat.JSON
        assert tree.source == text

    def test_bytes_input_is_decoded(self, builder: JsonTreeBuilder) -> None:
        tree = builder.load('\ufeff{"name": "Zoë"}'.encode())
        name = tree.get("name")
        assert name is not None
        assert name.value == "Zoë"

    def test_array_order_left_to_options(self, builder: JsonTreeBuilder) -> None:
        tree = builder.load("[1, 2, 3]")
        assert tree.kind is NodeKind.ARRAY
        assert tree.ordered is None
        assert len(tree.children) == 3

    def test_numbers_load_as_decimal(self, builder: JsonTreeBuilder) -> None:
        tree = builder.load('{"i": 1, "f": 1.50, "e": 1e2}')
        values = {key: child.value for key, child in tree.items()}
        assert values == {"i": Decimal(1), "f": Decimal("1.5"), "e": Decimal(100)}
        assert all(isinstance(v, Decimal) for v in values.values())

    def test_scalar_root(self, builder: JsonTreeBuilder) -> None:
        tree = builder.load('"hello"')
        assert tree.kind is NodeKind.SCALAR
        assert tree.value == "hello"

    def test_null_and_booleans(self, builder: JsonTreeBuilder) -> None:
        tree = builder.load('{"n": null, "t": true, "f": false}')
        values = {key: child.value for key, child in tree.items()}
        assert values == {"n": None, "t": True, "f": False}

    def test_nested_names(self, builder: JsonTreeBuilder) -> None:
        tree = builder.load('{"user": {"tags": ["a"]}}')
        user = tree.get("user")
        assert user is not None
        tags = user.get("tags")
        assert tags is not None
        assert tags.name == "tags"
        assert tags.children[0].name is None


class TestLoadErrors:
    def test_invalid_json_names_position(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(JsonLoadError) as exc_info:
            builder.load("not-json")
        error = exc_info.value
        assert error.line == 1
        assert error.column == 1
        assert "load_json failure: invalid JSON" in str(error)
        assert "(line 1, column 1)" in str(error)

    def test_error_includes_input_preview(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(JsonLoadError, match="Input:\nnot-json"):
            builder.load("not-json")

    def test_error_position_on_later_line(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(JsonLoadError) as exc_info:
            builder.load('{\n  "a": 1,\n  "b": }')
        assert exc_info.value.line == 3

    def test_empty_input(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(JsonLoadError):
            builder.load("")

    def test_duplicate_key(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(JsonLoadError, match="duplicate object key 'a'"):
            builder.load('{"a": 1, "a": 2}')

    def test_nan_rejected(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(JsonLoadError, match="non-standard number NaN"):
            builder.load('{"a": NaN}')

    def test_load_error_is_value_error(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(ValueError):
            builder.load("{")

    def test_load_error_is_not_assertion_error(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(LoadError) as exc_info:
            builder.load("{")
        assert not isinstance(exc_info.value, AssertionError)

    def test_depth_limit(self) -> None:
        builder = JsonTreeBuilder(max_depth=3)
        with pytest.raises(JsonLoadError, match="nests deeper than 3 levels"):
            builder.load("[[[[[1]]]]]")

    def test_depth_limit_error_keeps_source(self) -> None:
        builder = JsonTreeBuilder(max_depth=1)
        with pytest.raises(JsonLoadError) as exc_info:
            builder.load("[[[1]]]")
        assert exc_info.value.source == "[[[1]]]"


# ---------------------------------------------------------------------------
# Building from Python values
# ---------------------------------------------------------------------------


class TestBuild:
    def test_bool_is_not_a_number(self, builder: JsonTreeBuilder) -> None:
        node = builder.build(True)
        assert node.value is True

    def test_int_becomes_decimal(self, builder: JsonTreeBuilder) -> None:
        assert builder.build(5).value == Decimal(5)

    def test_float_keeps_its_shortest_repr(self, builder: JsonTreeBuilder) -> None:
        assert builder.build(0.1).value == Decimal("0.1")

    def test_tuple_is_an_array(self, builder: JsonTreeBuilder) -> None:
        assert builder.build((1, 2)).kind is NodeKind.ARRAY

    def test_dict_keys_are_names(self, builder: JsonTreeBuilder) -> None:
        node = builder.build({"x": {"y": None}})
        x = node.get("x")
        assert x is not None
        assert x.name == "x"
        assert x.get("y") is not None

    def test_non_finite_float_raises(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(ValueError, match="non-finite"):
            builder.build(float("inf"))

    def test_unsupported_type_raises(self, builder: JsonTreeBuilder) -> None:
        with pytest.raises(TypeError, match="Unsupported JSON value type"):
            builder.build({1, 2})  # type: ignore[arg-type]
