"""Difference and ComparisonResult dataclasses for comparison output."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import TYPE_CHECKING

from structural_diff.report import build_failure_report

if TYPE_CHECKING:
    from structural_diff.algorithm.config import ComparisonOptions
    from structural_diff.tree.nodes import DocumentFormat

__all__ = ["ComparisonResult", "Difference", "DifferenceKind"]


class DifferenceKind(StrEnum):
    """The five ways two documents can differ at one path."""

    MISSING_IN_ACTUAL = auto()
    UNEXPECTED_IN_ACTUAL = auto()
    VALUE_MISMATCH = auto()
    TYPE_MISMATCH = auto()
    ORDER_MISMATCH = auto()


@dataclass(frozen=True, slots=True)
class Difference:
    """A single discrepancy between the expected and actual documents.

    Attributes:
        path: Location in the document's native addressing convention,
            e.g. ``$.items[2]``, ``/root/@id`` or ``row[1].name``.
        kind: What kind of discrepancy this is.
        expected_description: Short rendering of the expected side
            (``"nothing"`` when absent).
        actual_description: Short rendering of the actual side.
        subject: Plain-language noun for the node, e.g. ``"property"``.
    """

    path: str
    kind: DifferenceKind
    expected_description: str
    actual_description: str
    subject: str = "node"

    @property
    def phrase(self) -> str:
        if self.kind is DifferenceKind.MISSING_IN_ACTUAL:
            return f"missing {self.subject}"
        if self.kind is DifferenceKind.UNEXPECTED_IN_ACTUAL:
            return f"unexpected {self.subject}"
        return str(self.kind).replace("_", " ")

    def describe(self) -> str:
        return (
            f"at {self.path or '(root)'}: {self.phrase}, "
            f"expected {self.expected_description} "
            f"while actual {self.actual_description}"
        )


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    """Outcome of one structural comparison.

    Attributes:
        differences: Every difference found, in depth-first visitation order.
        format: Format of the compared documents.
        expected_source: Expected input as text (for report previews).
        actual_source: Actual input as text (for report previews).
        options: Options the comparison ran with.
        computation_time_ms: Wall-clock duration of the comparison in milliseconds.
    """

    differences: tuple[Difference, ...]
    format: DocumentFormat
    expected_source: str
    actual_source: str
    options: ComparisonOptions
    computation_time_ms: float

    @property
    def is_equal(self) -> bool:
        return not self.differences

    def paths(self) -> list[str]:
        """Return the distinct difference paths in order of first occurrence."""
        return list(dict.fromkeys(d.path for d in self.differences))

    def report(self, method_name: str | None = None) -> str:
        """Render the failure report for these differences."""
        return build_failure_report(
            method_name or f"assert_{self.format}_equal",
            f"{str(self.format).upper()} documents are not equal",
            self.differences,
            self.expected_source,
            self.actual_source,
            self.options,
            self.format,
        )
