"""Dialect Protocol: the per-format extension point of the comparison engine.

The engine walks trees of any format the same way; everything that depends
on the format (path syntax, scalar equality, descriptions, ordering policy)
is asked of a dialect.  Any class with conformant methods passes
``isinstance`` checks, no inheritance required.

Example::

    from structural_diff.dialects import JsonDialect
    from structural_diff.protocols import Dialect

    assert isinstance(JsonDialect(), Dialect)  # True (structural conformance)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from structural_diff.algorithm.config import ComparisonOptions
    from structural_diff.algorithm.engine import DiffEngine
    from structural_diff.result import Difference
    from structural_diff.tree.nodes import ComparableNode


@runtime_checkable
class Dialect(Protocol):
    """Structural protocol for format dialects."""

    root_path: str

    def child_path(
        self, parent_path: str, parent: ComparableNode, child: ComparableNode
    ) -> str: ...

    def index_path(self, parent_path: str, index: int) -> str: ...

    def is_ordered(self, node: ComparableNode, options: ComparisonOptions) -> bool: ...

    def scalar_type(self, node: ComparableNode) -> str: ...

    def scalars_equal(self, expected: ComparableNode, actual: ComparableNode) -> bool: ...

    def coerce(
        self, expected: ComparableNode, actual: ComparableNode
    ) -> tuple[ComparableNode, ComparableNode]: ...

    def subject(self, node: ComparableNode, parent: ComparableNode | None) -> str: ...

    def describe(self, node: ComparableNode | None) -> str: ...

    def render(self, node: ComparableNode) -> str: ...

    def compare_document(
        self, engine: DiffEngine, expected: ComparableNode, actual: ComparableNode
    ) -> list[Difference]: ...
