"""Exception hierarchy for structural-diff.

Load failures and assertion failures are deliberately unrelated types:
``LoadError`` means an input could not be turned into a tree ("the fixture
is broken"), ``EqualAssertionError`` means both inputs loaded and differ
("the test failed").
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from structural_diff.algorithm.config import DEFAULT_MAX_PREVIEW_CHARACTERS
from structural_diff.report import ReportBuilder
from structural_diff.tree.nodes import DocumentFormat

if TYPE_CHECKING:
    from structural_diff.result import ComparisonResult, Difference

__all__ = [
    "CsvLoadError",
    "EqualAssertionError",
    "JsonLoadError",
    "LoadError",
    "MaxDepthExceededError",
    "StructuralDiffError",
    "XmlLoadError",
]


class StructuralDiffError(Exception):
    """Base class for every error raised by structural-diff."""


class LoadError(StructuralDiffError, ValueError):
    """Raised when raw input is not a valid document of the declared format.

    Attributes:
        construct:  What was missing or invalid, in plain words.
        line:       1-based line of the fault, when the parser reports one.
        column:     1-based column of the fault, when the parser reports one.
        source:     The raw input that failed to load.
    """

    format: ClassVar[DocumentFormat]

    def __init__(
        self,
        construct: str,
        *,
        source: str = "",
        line: int | None = None,
        column: int | None = None,
        max_characters: int = DEFAULT_MAX_PREVIEW_CHARACTERS,
    ) -> None:
        self.construct = construct
        self.source = source
        self.line = line
        self.column = column

        message = construct
        if line is not None:
            message += f" (line {line}, column {column})" if column else f" (line {line})"
        report = ReportBuilder.for_method(f"load_{self.format}", message)
        report.append_input(source, max_characters)
        super().__init__(report.build())


class JsonLoadError(LoadError):
    format = DocumentFormat.JSON


class XmlLoadError(LoadError):
    format = DocumentFormat.XML


class CsvLoadError(LoadError):
    format = DocumentFormat.CSV


class EqualAssertionError(AssertionError):
    """Raised by the ``assert_*_equal`` entry points when documents differ.

    The message is the full failure report; the structured result stays
    available for callers that want to inspect individual differences.
    """

    def __init__(self, result: ComparisonResult, method_name: str | None = None) -> None:
        self.result = result
        self.differences: tuple[Difference, ...] = result.differences
        super().__init__(result.report(method_name))


class MaxDepthExceededError(StructuralDiffError):
    """Raised when a tree nests deeper than ``ComparisonOptions.max_depth``."""

    def __init__(self, depth: int, path: str = "") -> None:
        self.depth = depth
        self.path = path
        location = f" at {path}" if path else ""
        super().__init__(f"maximum nesting depth {depth} exceeded{location}")
