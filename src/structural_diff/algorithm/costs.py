"""NodeDistance: normalized structural distance between two subtrees.

The distance is a float in [0, 1] that is 0.0 exactly when the comparison
engine would report no difference between the two subtrees and grows with
the share of mismatching children.  It drives the two places where the
engine has to pick counterparts:

- unordered arrays: elements are paired to minimize total distance
- ordered arrays of different length: the DP alignment uses distance as
  the substitution cost

Scalars cost 0 or 1.  Containers sum the distances of their paired
children, charge 1 per unpaired child (and 1 for a violated key order) and
normalize per level by the larger child count so deep nesting does not
dominate.  A key shared by two objects costs at most ``SHARED_KEY_COST``,
so two objects of the same shape always rank closer than two objects with
disjoint keys.

Whether two elements may be paired at all is decided by ``pairable``, not
by the distance: containers of the same kind are pairable (objects only
when they share a key), scalars only when equal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from structural_diff.algorithm.config import ComparisonOptions
from structural_diff.algorithm.matcher import align_sequences, hungarian_match
from structural_diff.cache import DistanceCache
from structural_diff.errors import MaxDepthExceededError
from structural_diff.tree.nodes import ComparableNode, NodeKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from structural_diff.protocols import Dialect

__all__ = [
    "MIN_DISTANCE",
    "SHARED_KEY_COST",
    "NodeDistance",
    "normalized_distance",
    "shared_key_order",
]

# Smallest distance reported for subtrees that differ at all, so a mismatch
# deep in a wide tree never rounds down to "equal".
MIN_DISTANCE = 1e-12

# Upper bound on the cost of one key present on both sides.
SHARED_KEY_COST = 0.5


def normalized_distance(cost: float, n_left: int, n_right: int) -> float:
    """Scale a raw child cost to [0, 1] by the larger of the two child counts.

    The ``max(..., 1)`` guard keeps two empty containers from dividing by zero.
    """
    if cost <= 0.0:
        return 0.0
    distance = min(1.0, cost / max(n_left, n_right, 1))
    return max(distance, MIN_DISTANCE)


def shared_key_order(
    expected: dict[str, ComparableNode], actual: dict[str, ComparableNode]
) -> tuple[list[str], list[str]]:
    """Return the keys present on both sides, in each side's own order."""
    return (
        [key for key in expected if key in actual],
        [key for key in actual if key in expected],
    )


class NodeDistance:
    """Memoized structural distance for one dialect and one set of options.

    Args:
        dialect: Format dialect providing scalar equality and ordering policy.
        options: Comparison options.  Defaults to ``ComparisonOptions()``.
        cache:   Distance memo.  Defaults to a fresh ``DistanceCache``.
    """

    def __init__(
        self,
        dialect: Dialect,
        options: ComparisonOptions | None = None,
        cache: DistanceCache | None = None,
    ) -> None:
        self._dialect = dialect
        self._options = options if options is not None else ComparisonOptions()
        self._cache = cache if cache is not None else DistanceCache()

    @property
    def cache(self) -> DistanceCache:
        return self._cache

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def distance(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        ignored: frozenset[str] | None = None,
        depth: int = 0,
    ) -> float:
        """Return the normalized distance between two subtrees.

        Args:
            expected: Expected subtree.
            actual:   Actual subtree.
            ignored:  Node names to skip.  Defaults to the options' ignore list.
            depth:    Nesting level of the two subtrees.

        Returns:
            Float in [0.0, 1.0]; 0.0 means no difference would be reported.
        """
        if ignored is None:
            ignored = self._options.ignored_node_names

        key = (id(expected), id(actual), ignored)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if depth > self._options.max_depth:
            raise MaxDepthExceededError(self._options.max_depth)

        result = self._compute(expected, actual, ignored, depth)
        self._cache.put(key, result)
        return result

    def cost_matrix(
        self,
        expected_items: Sequence[ComparableNode],
        actual_items: Sequence[ComparableNode],
        ignored: frozenset[str],
        depth: int,
    ) -> np.ndarray:
        """Pairwise distance matrix of shape ``(len(expected), len(actual))``."""
        matrix = np.zeros((len(expected_items), len(actual_items)), dtype=float)
        for i, left in enumerate(expected_items):
            for j, right in enumerate(actual_items):
                matrix[i, j] = self.distance(left, right, ignored, depth)
        return matrix

    def pairable(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        ignored: frozenset[str],
        depth: int,
    ) -> bool:
        """Return True when two elements may be reported as one changed element.

        Elements of different kinds, unequal scalars and objects without a
        single key in common are never paired; they are reported whole as
        missing and unexpected instead.
        """
        left, right = self._dialect.coerce(expected, actual)
        if left.kind is not right.kind:
            return False
        if left.kind is NodeKind.SCALAR:
            return self.distance(expected, actual, ignored, depth) == 0.0
        if left.kind is NodeKind.OBJECT:
            left_keys = {k for k, c in left.items() if c.name not in ignored}
            right_keys = {k for k, c in right.items() if c.name not in ignored}
            return left_keys == right_keys or bool(left_keys & right_keys)
        return True

    def match_unordered(
        self,
        expected_items: Sequence[ComparableNode],
        actual_items: Sequence[ComparableNode],
        ignored: frozenset[str],
        depth: int,
    ) -> dict[int, int]:
        """Pair expected elements with actual elements regardless of position.

        Exact equals are paired first: each expected element, in order, takes
        the first unpaired actual element it equals.  The remaining elements
        are paired by minimum total distance (Hungarian assignment) among the
        ``pairable`` candidates.  Distances computed by the first pass are
        reused for the assignment.

        Returns:
            Mapping of expected index to actual index.  Indexes absent from
            the mapping have no counterpart.
        """
        matrix = np.full((len(expected_items), len(actual_items)), np.nan)

        def cell(i: int, j: int) -> float:
            if np.isnan(matrix[i, j]):
                matrix[i, j] = self.distance(
                    expected_items[i], actual_items[j], ignored, depth
                )
            return float(matrix[i, j])

        pairs: dict[int, int] = {}
        free = list(range(len(actual_items)))
        for i in range(len(expected_items)):
            for j in free:
                if cell(i, j) == 0.0:
                    pairs[i] = j
                    free.remove(j)
                    break

        rest = [i for i in range(len(expected_items)) if i not in pairs]
        if rest and free:
            cost = np.empty((len(rest), len(free)), dtype=float)
            for r, i in enumerate(rest):
                for c, j in enumerate(free):
                    if self.pairable(expected_items[i], actual_items[j], ignored, depth):
                        cost[r, c] = cell(i, j)
                    else:
                        cost[r, c] = np.inf
            row_ind, col_ind = hungarian_match(cost)
            for r, c in zip(row_ind.tolist(), col_ind.tolist(), strict=True):
                pairs[rest[r]] = free[c]

        return pairs

    # ------------------------------------------------------------------
    # Per-kind distances
    # ------------------------------------------------------------------

    def _compute(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        ignored: frozenset[str],
        depth: int,
    ) -> float:
        expected, actual = self._dialect.coerce(expected, actual)

        if expected.kind is not actual.kind:
            return 1.0

        if expected.kind is NodeKind.SCALAR:
            same_type = self._dialect.scalar_type(expected) == self._dialect.scalar_type(
                actual
            )
            return 0.0 if same_type and self._dialect.scalars_equal(expected, actual) else 1.0

        if expected.kind is NodeKind.OBJECT:
            return self._object_distance(expected, actual, ignored, depth)

        return self._array_distance(expected, actual, ignored, depth)

    def _object_distance(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        ignored: frozenset[str],
        depth: int,
    ) -> float:
        left = {k: c for k, c in expected.items() if c.name not in ignored}
        right = {k: c for k, c in actual.items() if c.name not in ignored}

        cost = 0.0
        for key, child in left.items():
            if key in right:
                cost += min(
                    self.distance(child, right[key], ignored, depth + 1), SHARED_KEY_COST
                )
            else:
                cost += 1.0
        cost += sum(1.0 for key in right if key not in left)

        if self._dialect.is_ordered(expected, self._options):
            left_order, right_order = shared_key_order(left, right)
            if left_order != right_order:
                cost += 1.0

        return normalized_distance(cost, len(left), len(right))

    def _array_distance(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        ignored: frozenset[str],
        depth: int,
    ) -> float:
        left, right = expected.children, actual.children
        if not left and not right:
            return 0.0

        if self._dialect.is_ordered(expected, self._options):
            if len(left) == len(right):
                cost = sum(
                    self.distance(a, b, ignored, depth + 1)
                    for a, b in zip(left, right, strict=True)
                )
            else:
                matrix = self.cost_matrix(left, right, ignored, depth + 1)
                cost, _ = align_sequences(matrix)
        else:
            pairs = self.match_unordered(left, right, ignored, depth + 1)
            cost = sum(
                self.distance(left[i], right[j], ignored, depth + 1)
                for i, j in pairs.items()
            )
            cost += (len(left) - len(pairs)) + (len(right) - len(pairs))

        return normalized_distance(cost, len(left), len(right))
