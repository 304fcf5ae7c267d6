"""Cross-cutting properties of the comparison, checked over a small corpus.

- Reflexivity: every document equals itself under any options.
- Symmetry: equality does not depend on which side is expected, and a
  node missing in one direction is unexpected at the same path in the other.
- Ignore coverage: ignoring a name removes every difference at or below
  that node and nothing else; ignoring it twice is ignoring it once.
- Order monotonicity: documents equal with order included are equal
  with order ignored.
- Truncation non-interference: the preview limit changes the report text
  only, never the differences.
"""

from __future__ import annotations

import re
from collections import Counter

import pytest

from structural_diff import ComparisonOptions, Difference, DifferenceKind, OrderMode, compare

PAIRS: list[tuple[str, str, str]] = [
    ("json", '{"a": 1, "b": [1, 2]}', '{"b": [1, 2], "a": 1}'),
    ("json", '{"a": 1, "b": [1, 2]}', '{"b": [2, 1], "a": 1}'),
    ("json", '[{"id": 1, "v": "a"}, {"id": 2}]', '[{"id": 2}, {"id": 1, "v": "b"}]'),
    ("json", '{"a": {"b": 1}}', '{"a": {"b": 1, "c": 2}}'),
    ("json", '{"timestamp": "T1", "v": 1}', '{"timestamp": "T2", "v": 1}'),
    ("json", "[1, 2, 3]", "[1, 9, 2, 3]"),
    ("xml", "<r><x>1</x><y>2</y></r>", "<r><y>2</y><x>1</x></r>"),
    ("xml", '<r a="1" b="2"><i>1</i><i>2</i></r>', '<r b="2" a="1"><i>2</i><i>1</i></r>'),
    ("xml", "<r><i>1</i></r>", "<r><i>1</i><i>2</i><timestamp>x</timestamp></r>"),
    ("csv", "id,name\n1,Alice", "id,name\n1,Bob"),
    ("csv", "id,name\n1,Alice\n2,Bob", "name,id\nBob,2\nAlice,1"),
    ("csv", "id,timestamp\n1,T1", "id\n1"),
]

SWAPPED = {
    DifferenceKind.MISSING_IN_ACTUAL: DifferenceKind.UNEXPECTED_IN_ACTUAL,
    DifferenceKind.UNEXPECTED_IN_ACTUAL: DifferenceKind.MISSING_IN_ACTUAL,
}


def presence(
    differences: tuple[Difference, ...], swap: bool = False
) -> list[tuple[str, DifferenceKind]]:
    """Sorted (path, kind) pairs of the missing and unexpected differences."""
    return sorted(
        (d.path, SWAPPED[d.kind] if swap else d.kind)
        for d in differences
        if d.kind in SWAPPED
    )


def names_node(path: str, name: str) -> bool:
    """True when ``path`` addresses the node ``name`` or something below it."""
    pattern = rf"(^|[./\['\"]){re.escape(name)}($|[./\[\]'\"])"
    return re.search(pattern, path) is not None


OPTION_SETS = [
    ComparisonOptions(),
    ComparisonOptions(order=OrderMode.INCLUDE),
    ComparisonOptions(ignored_node_names=frozenset({"timestamp"})),
]


@pytest.mark.parametrize(("fmt", "expected", "actual"), PAIRS)
class TestProperties:
    @pytest.mark.parametrize("options", OPTION_SETS)
    def test_reflexive(
        self, fmt: str, expected: str, actual: str, options: ComparisonOptions
    ) -> None:
        assert compare(expected, expected, fmt, options).is_equal
        assert compare(actual, actual, fmt, options).is_equal

    @pytest.mark.parametrize("options", OPTION_SETS)
    def test_symmetric(
        self, fmt: str, expected: str, actual: str, options: ComparisonOptions
    ) -> None:
        forward = compare(expected, actual, fmt, options)
        backward = compare(actual, expected, fmt, options)
        assert forward.is_equal == backward.is_equal
        forward_kinds = Counter(SWAPPED.get(d.kind, d.kind) for d in forward.differences)
        backward_kinds = Counter(d.kind for d in backward.differences)
        assert forward_kinds == backward_kinds
        # A missing node in one direction is an unexpected node at the same path
        # in the other
        assert presence(forward.differences, swap=True) == presence(backward.differences)

    def test_ignore_idempotent(self, fmt: str, expected: str, actual: str) -> None:
        once = ComparisonOptions().ignore_node("timestamp")
        twice = once.ignore_node("timestamp")
        assert once == twice
        assert compare(expected, actual, fmt, once).differences == (
            compare(expected, actual, fmt, twice).differences
        )

    def test_ignore_removes_node_and_descendants(
        self, fmt: str, expected: str, actual: str
    ) -> None:
        default = compare(expected, actual, fmt).differences
        ignoring = compare(expected, actual, fmt, ComparisonOptions().ignore_node("timestamp"))
        assert not [d.path for d in ignoring.differences if names_node(d.path, "timestamp")]
        assert list(ignoring.differences) == [
            d for d in default if not names_node(d.path, "timestamp")
        ]

    def test_order_monotonic(self, fmt: str, expected: str, actual: str) -> None:
        included = compare(expected, actual, fmt, ComparisonOptions(order=OrderMode.INCLUDE))
        if included.is_equal:
            assert compare(expected, actual, fmt, ComparisonOptions()).is_equal

    @pytest.mark.parametrize("limit", [0, 5, 10_000])
    def test_truncation_does_not_change_differences(
        self, fmt: str, expected: str, actual: str, limit: int
    ) -> None:
        default = compare(expected, actual, fmt)
        limited = compare(expected, actual, fmt, ComparisonOptions(max_preview_characters=limit))
        assert limited.differences == default.differences
