"""Tests for DiffEngine over JSON trees.

XML and CSV specifics (coercion, document-level rules) are covered in
tests/test_dialects.py; here the recursion itself is exercised.
"""

from __future__ import annotations

import logging
from typing import Any

import pytest

from structural_diff.algorithm.config import ComparisonOptions, OrderMode
from structural_diff.algorithm.engine import DiffEngine
from structural_diff.dialects import JsonDialect
from structural_diff.errors import MaxDepthExceededError
from structural_diff.result import Difference, DifferenceKind
from structural_diff.tree.builder import JsonTreeBuilder


def diff(expected: Any, actual: Any, **options: Any) -> list[Difference]:
    builder = JsonTreeBuilder()
    engine = DiffEngine(JsonDialect(), ComparisonOptions(**options))
    return engine.compare(builder.build(expected), builder.build(actual))


def summary(differences: list[Difference]) -> list[tuple[str, DifferenceKind]]:
    return [(d.path, d.kind) for d in differences]


# ---------------------------------------------------------------------------
# Scalars and objects
# ---------------------------------------------------------------------------


class TestObjects:
    def test_equal_documents(self) -> None:
        assert diff({"a": 1, "b": [1, 2]}, {"b": [2, 1], "a": 1}) == []

    def test_value_mismatch(self) -> None:
        (difference,) = diff({"a": 1}, {"a": 2})
        assert difference == Difference(
            "$.a",
            DifferenceKind.VALUE_MISMATCH,
            "a number: 1",
            "a number: 2",
            subject="property",
        )

    def test_scalar_type_mismatch(self) -> None:
        (difference,) = diff({"a": 1}, {"a": "1"})
        assert difference.kind is DifferenceKind.TYPE_MISMATCH
        assert difference.actual_description == 'a string: "1"'

    def test_kind_mismatch_does_not_descend(self) -> None:
        (difference,) = diff({"a": {"b": 1}}, {"a": [1]})
        assert difference.kind is DifferenceKind.TYPE_MISMATCH
        assert difference.expected_description == 'an object: {"b":1}'
        assert difference.actual_description == "an array: [1]"

    def test_missing_property(self) -> None:
        (difference,) = diff({"a": 1, "b": 2}, {"a": 1})
        assert difference.path == "$.b"
        assert difference.kind is DifferenceKind.MISSING_IN_ACTUAL
        assert difference.actual_description == "nothing"
        assert difference.phrase == "missing property"

    def test_unexpected_nested_property(self) -> None:
        assert summary(diff({"a": {"b": 1}}, {"a": {"b": 1, "c": 2}})) == [
            ("$.a.c", DifferenceKind.UNEXPECTED_IN_ACTUAL)
        ]

    def test_every_difference_is_collected(self) -> None:
        assert summary(diff({"a": 1, "b": 2}, {"a": 3, "b": 4})) == [
            ("$.a", DifferenceKind.VALUE_MISMATCH),
            ("$.b", DifferenceKind.VALUE_MISMATCH),
        ]

    def test_quoted_key_path(self) -> None:
        assert summary(diff({"odd key": 1}, {"odd key": 2})) == [
            ("$['odd key']", DifferenceKind.VALUE_MISMATCH)
        ]

    def test_null_against_value(self) -> None:
        (difference,) = diff({"a": None}, {"a": False})
        assert difference.expected_description == "type null"
        assert difference.actual_description == "false boolean"

    def test_root_scalar(self) -> None:
        (difference,) = diff(1, 2)
        assert difference.path == "$"
        assert difference.subject == "document"


# ---------------------------------------------------------------------------
# Ignored names
# ---------------------------------------------------------------------------


class TestIgnoredNames:
    def test_ignored_property_is_skipped(self) -> None:
        assert diff({"a": 1, "ts": 1}, {"a": 1, "ts": 2}, ignored_node_names={"ts"}) == []

    def test_ignored_missing_property_is_skipped(self) -> None:
        assert diff({"a": 1, "ts": 1}, {"a": 1}, ignored_node_names={"ts"}) == []

    def test_ignored_name_inside_array_elements(self) -> None:
        expected = [{"id": 1, "ts": "x"}, {"id": 2, "ts": "y"}]
        actual = [{"id": 2, "ts": "z"}, {"id": 1, "ts": "w"}]
        assert diff(expected, actual, ignored_node_names={"ts"}) == []

    def test_extra_ignored_names(self) -> None:
        builder = JsonTreeBuilder()
        engine = DiffEngine(JsonDialect())
        differences = engine.diff(
            builder.build({"a": 1, "b": 1}),
            builder.build({"a": 1, "b": 2}),
            extra_ignored=frozenset({"b"}),
        )
        assert differences == []


# ---------------------------------------------------------------------------
# Unordered arrays
# ---------------------------------------------------------------------------


class TestUnorderedArrays:
    def test_permutation_is_equal(self) -> None:
        assert diff([1, 2, 3], [3, 1, 2]) == []

    def test_missing_element_reported_at_expected_index(self) -> None:
        (difference,) = diff([1, 2, 3], [1, 3])
        assert difference.path == "$[1]"
        assert difference.kind is DifferenceKind.MISSING_IN_ACTUAL
        assert difference.expected_description == "a number: 2"
        assert difference.subject == "array element"

    def test_unexpected_element_reported_at_actual_index(self) -> None:
        assert summary(diff([1], [1, 5])) == [("$[1]", DifferenceKind.UNEXPECTED_IN_ACTUAL)]

    def test_closest_element_recurses(self) -> None:
        expected = [{"id": 1, "v": "a"}, {"id": 2, "v": "b"}]
        actual = [{"id": 2, "v": "b"}, {"id": 1, "v": "c"}]
        assert summary(diff(expected, actual)) == [("$[0].v", DifferenceKind.VALUE_MISMATCH)]

    def test_same_keys_changed_value_recurses(self) -> None:
        assert summary(diff([{"a": 1}], [{"a": 2}])) == [("$[0].a", DifferenceKind.VALUE_MISMATCH)]

    def test_every_value_changed_still_recurses(self) -> None:
        assert summary(diff([{"id": 1, "n": "x"}], [{"id": 2, "n": "y"}])) == [
            ("$[0].id", DifferenceKind.VALUE_MISMATCH),
            ("$[0].n", DifferenceKind.VALUE_MISMATCH),
        ]

    def test_nested_arrays_recurse(self) -> None:
        assert summary(diff([[]], [[1]])) == [("$[0][0]", DifferenceKind.UNEXPECTED_IN_ACTUAL)]

    def test_array_under_property_recurses(self) -> None:
        assert summary(diff({"l": [{"a": 1}]}, {"l": [{"a": 2}]})) == [
            ("$.l[0].a", DifferenceKind.VALUE_MISMATCH)
        ]

    def test_disjoint_objects_are_reported_whole(self) -> None:
        assert summary(diff([{"a": 1}], [{"b": 1}])) == [
            ("$[0]", DifferenceKind.MISSING_IN_ACTUAL),
            ("$[0]", DifferenceKind.UNEXPECTED_IN_ACTUAL),
        ]

    def test_unequal_scalars_are_reported_whole(self) -> None:
        assert summary(diff([1], [2])) == [
            ("$[0]", DifferenceKind.MISSING_IN_ACTUAL),
            ("$[0]", DifferenceKind.UNEXPECTED_IN_ACTUAL),
        ]


# ---------------------------------------------------------------------------
# Ordered arrays
# ---------------------------------------------------------------------------


class TestOrderedArrays:
    def test_same_order_is_equal(self) -> None:
        assert diff([1, 2], [1, 2], order=OrderMode.INCLUDE) == []

    def test_permutation_is_one_order_mismatch(self) -> None:
        (difference,) = diff([1, 2], [2, 1], order=OrderMode.INCLUDE)
        assert difference.path == "$"
        assert difference.kind is DifferenceKind.ORDER_MISMATCH
        assert difference.expected_description == "an array: [1,2]"
        assert difference.actual_description == "an array: [2,1]"

    def test_equal_length_recurses_by_index(self) -> None:
        assert summary(diff([1, 2], [1, 3], order=OrderMode.INCLUDE)) == [
            ("$[1]", DifferenceKind.VALUE_MISMATCH)
        ]

    def test_insertion_does_not_cascade(self) -> None:
        (difference,) = diff([1, 2, 3], [1, 9, 2, 3], order=OrderMode.INCLUDE)
        assert difference.kind is DifferenceKind.ORDER_MISMATCH
        assert difference.expected_description == "3 element(s)"
        assert difference.actual_description == "4 element(s), unaligned $[1]"

    def test_aligned_pairs_still_recurse(self) -> None:
        differences = diff(
            [{"a": 1}, {"b": 2, "x": 0}],
            [{"a": 1}, {"b": 3, "x": 0}, {"c": 4}],
            order=OrderMode.INCLUDE,
        )
        assert summary(differences) == [
            ("$", DifferenceKind.ORDER_MISMATCH),
            ("$[1].b", DifferenceKind.VALUE_MISMATCH),
        ]


# ---------------------------------------------------------------------------
# Guards and logging
# ---------------------------------------------------------------------------


class TestGuards:
    def test_none_tree_raises(self) -> None:
        engine = DiffEngine(JsonDialect())
        with pytest.raises(TypeError, match="required"):
            engine.compare(None, JsonTreeBuilder().build(1))  # type: ignore[arg-type]

    def test_depth_limit(self) -> None:
        with pytest.raises(MaxDepthExceededError):
            diff([[[[1]]]], [[[[2]]]], max_depth=2)

    def test_debug_log(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="structural_diff.algorithm.engine"):
            diff({"a": 1}, {"a": 2})
        assert "1 difference(s)" in caplog.text
