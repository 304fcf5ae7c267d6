"""DiffEngine: recursive structural comparison producing a list of Differences.

Walks the expected and actual trees simultaneously and collects every
discrepancy; it never stops at the first one.

Architecture:
- SCALAR pairs: a differing scalar type is a TYPE_MISMATCH, otherwise the
  dialect's equality decides between no difference and a VALUE_MISMATCH.
- Differing kinds: one TYPE_MISMATCH, no descent.
- OBJECT pairs: keys are compared as sets.  Expected-only keys are missing,
  actual-only keys are unexpected, shared keys recurse.  Ordered objects
  (XML attributes under ``OrderMode.INCLUDE``) additionally report one
  ORDER_MISMATCH when the shared keys appear in a different order.
- Ordered ARRAY pairs of equal length recurse index by index; a pure
  permutation is one ORDER_MISMATCH instead.  When the lengths differ the
  sequences are aligned (DP edit distance) and one ORDER_MISMATCH is
  reported for the whole array, so an inserted element never cascades into
  a mismatch per following index.
- Unordered ARRAY pairs: elements are paired by ``NodeDistance.match_unordered``;
  paired elements recurse, leftovers are reported whole.

Nodes whose name is ignored are skipped, together with their subtrees.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from structural_diff.algorithm.config import ComparisonOptions
from structural_diff.algorithm.costs import NodeDistance, shared_key_order
from structural_diff.algorithm.matcher import align_sequences
from structural_diff.errors import MaxDepthExceededError
from structural_diff.result import Difference, DifferenceKind
from structural_diff.tree.nodes import ComparableNode, NodeKind

if TYPE_CHECKING:
    from structural_diff.protocols import Dialect

logger = logging.getLogger(__name__)

__all__ = ["DiffEngine"]


class DiffEngine:
    """Recursive comparison engine for one dialect and one set of options.

    Example::

        from structural_diff.algorithm.engine import DiffEngine
        from structural_diff.dialects import JsonDialect
        from structural_diff.tree.builder import JsonTreeBuilder

        builder = JsonTreeBuilder()
        engine = DiffEngine(JsonDialect())
        diffs = engine.compare(builder.load('{"a": 1}'), builder.load('{"a": 2}'))
        # [Difference(path='$.a', kind=VALUE_MISMATCH, ...)]
    """

    def __init__(
        self,
        dialect: Dialect,
        options: ComparisonOptions | None = None,
        distance: NodeDistance | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            dialect:  Format dialect (paths, scalar equality, descriptions).
            options:  Comparison options.  Defaults to ``ComparisonOptions()``.
            distance: Structural distance used to pair array elements.
                Defaults to a ``NodeDistance`` over the same dialect and options.
        """
        self._dialect = dialect
        self._options = options if options is not None else ComparisonOptions()
        self._distance = (
            distance if distance is not None else NodeDistance(dialect, self._options)
        )

    @property
    def options(self) -> ComparisonOptions:
        return self._options

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compare(
        self, expected: ComparableNode, actual: ComparableNode
    ) -> list[Difference]:
        """Compare two whole documents, honouring dialect-level rules."""
        self._require_trees(expected, actual)
        return self._dialect.compare_document(self, expected, actual)

    def diff(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        path: str | None = None,
        extra_ignored: frozenset[str] = frozenset(),
    ) -> list[Difference]:
        """Compare two subtrees and return every difference found.

        Args:
            expected: Expected subtree.
            actual: Actual subtree.
            path: Path of the two subtrees.  Defaults to the dialect root path.
            extra_ignored: Names to skip in addition to the options' ignore list.

        Returns:
            Differences in depth-first visitation order; empty when equal.

        Raises:
            TypeError: If either tree is None.
            MaxDepthExceededError: If the trees nest deeper than ``max_depth``.
        """
        self._require_trees(expected, actual)
        self._distance.cache.clear()

        ignored = self._options.ignored_node_names | extra_ignored
        differences: list[Difference] = []
        self._diff_node(
            expected,
            actual,
            self._dialect.root_path if path is None else path,
            None,
            ignored,
            0,
            differences,
        )
        logger.debug(
            "Diffed subtrees at %r: %d difference(s), %d distance cache hit(s)",
            path,
            len(differences),
            self._distance.cache.hits,
        )
        return differences

    @staticmethod
    def _require_trees(expected: ComparableNode | None, actual: ComparableNode | None) -> None:
        if expected is None or actual is None:
            msg = "both expected and actual trees are required, got None"
            raise TypeError(msg)

    # ------------------------------------------------------------------
    # Recursive dispatch
    # ------------------------------------------------------------------

    def _diff_node(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        path: str,
        parent: ComparableNode | None,
        ignored: frozenset[str],
        depth: int,
        out: list[Difference],
    ) -> None:
        if depth > self._options.max_depth:
            raise MaxDepthExceededError(self._options.max_depth, path)

        expected, actual = self._dialect.coerce(expected, actual)

        if expected.kind is not actual.kind:
            out.append(
                self._difference(DifferenceKind.TYPE_MISMATCH, path, expected, actual, parent)
            )
            return

        if expected.kind is NodeKind.SCALAR:
            if self._dialect.scalar_type(expected) != self._dialect.scalar_type(actual):
                kind = DifferenceKind.TYPE_MISMATCH
            elif not self._dialect.scalars_equal(expected, actual):
                kind = DifferenceKind.VALUE_MISMATCH
            else:
                return
            out.append(self._difference(kind, path, expected, actual, parent))
            return

        if expected.kind is NodeKind.OBJECT:
            self._diff_object(expected, actual, path, ignored, depth, out)
        elif self._dialect.is_ordered(expected, self._options):
            self._diff_ordered_array(expected, actual, path, parent, ignored, depth, out)
        else:
            self._diff_unordered_array(expected, actual, path, ignored, depth, out)

    def _diff_object(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        path: str,
        ignored: frozenset[str],
        depth: int,
        out: list[Difference],
    ) -> None:
        left = {k: c for k, c in expected.items() if c.name not in ignored}
        right = {k: c for k, c in actual.items() if c.name not in ignored}

        if self._dialect.is_ordered(expected, self._options):
            left_order, right_order = shared_key_order(left, right)
            if left_order != right_order:
                out.append(
                    Difference(
                        path,
                        DifferenceKind.ORDER_MISMATCH,
                        self._names(left, left_order),
                        self._names(right, right_order),
                        subject=self._dialect.subject(expected, None),
                    )
                )

        for key, child in left.items():
            child_path = self._dialect.child_path(path, expected, child)
            if key in right:
                self._diff_node(
                    child, right[key], child_path, expected, ignored, depth + 1, out
                )
            else:
                out.append(
                    self._difference(
                        DifferenceKind.MISSING_IN_ACTUAL, child_path, child, None, expected
                    )
                )

        for key, child in right.items():
            if key not in left:
                out.append(
                    self._difference(
                        DifferenceKind.UNEXPECTED_IN_ACTUAL,
                        self._dialect.child_path(path, actual, child),
                        None,
                        child,
                        actual,
                    )
                )

    def _diff_ordered_array(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        path: str,
        parent: ComparableNode | None,
        ignored: frozenset[str],
        depth: int,
        out: list[Difference],
    ) -> None:
        left, right = expected.children, actual.children

        if len(left) == len(right):
            aligned = all(
                self._distance.distance(a, b, ignored, depth + 1) == 0.0
                for a, b in zip(left, right, strict=True)
            )
            if aligned:
                return
            pairs = self._distance.match_unordered(left, right, ignored, depth + 1)
            is_permutation = len(pairs) == len(left) and all(
                self._distance.distance(left[i], right[j], ignored, depth + 1) == 0.0
                for i, j in pairs.items()
            )
            if is_permutation:
                out.append(
                    self._difference(
                        DifferenceKind.ORDER_MISMATCH, path, expected, actual, parent
                    )
                )
                return
            for index, (a, b) in enumerate(zip(left, right, strict=True)):
                self._diff_node(
                    a,
                    b,
                    self._dialect.index_path(path, index),
                    expected,
                    ignored,
                    depth + 1,
                    out,
                )
            return

        matrix = self._distance.cost_matrix(left, right, ignored, depth + 1)
        _, steps = align_sequences(matrix)
        unmatched_left = [i for i, j in steps if j is None]
        unmatched_right = [j for i, j in steps if i is None]
        out.append(
            Difference(
                path,
                DifferenceKind.ORDER_MISMATCH,
                self._length_description(path, len(left), unmatched_left),
                self._length_description(path, len(right), unmatched_right),
                subject=self._dialect.subject(expected, parent),
            )
        )
        for i, j in steps:
            if i is not None and j is not None:
                self._diff_node(
                    left[i],
                    right[j],
                    self._dialect.index_path(path, i),
                    expected,
                    ignored,
                    depth + 1,
                    out,
                )

    def _diff_unordered_array(
        self,
        expected: ComparableNode,
        actual: ComparableNode,
        path: str,
        ignored: frozenset[str],
        depth: int,
        out: list[Difference],
    ) -> None:
        left, right = expected.children, actual.children
        pairs = self._distance.match_unordered(left, right, ignored, depth + 1)

        for i, child in enumerate(left):
            child_path = self._dialect.index_path(path, i)
            if i in pairs:
                self._diff_node(
                    child, right[pairs[i]], child_path, expected, ignored, depth + 1, out
                )
            else:
                out.append(
                    self._difference(
                        DifferenceKind.MISSING_IN_ACTUAL, child_path, child, None, expected
                    )
                )

        paired = set(pairs.values())
        for j, child in enumerate(right):
            if j not in paired:
                out.append(
                    self._difference(
                        DifferenceKind.UNEXPECTED_IN_ACTUAL,
                        self._dialect.index_path(path, j),
                        None,
                        child,
                        actual,
                    )
                )

    # ------------------------------------------------------------------
    # Descriptions
    # ------------------------------------------------------------------

    def _difference(
        self,
        kind: DifferenceKind,
        path: str,
        expected: ComparableNode | None,
        actual: ComparableNode | None,
        parent: ComparableNode | None,
    ) -> Difference:
        node = expected if expected is not None else actual
        assert node is not None
        return Difference(
            path,
            kind,
            self._dialect.describe(expected),
            self._dialect.describe(actual),
            subject=self._dialect.subject(node, parent),
        )

    @staticmethod
    def _names(children: dict[str, ComparableNode], keys: list[str]) -> str:
        return "order [" + ", ".join(children[k].name or k for k in keys) + "]"

    def _length_description(self, path: str, length: int, unmatched: list[int]) -> str:
        if not unmatched:
            return f"{length} element(s)"
        where = ", ".join(self._dialect.index_path(path, i) for i in unmatched)
        return f"{length} element(s), unaligned {where}"
