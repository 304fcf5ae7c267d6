"""ReportBuilder and failure-report rendering.

A report is plain text: a ``"<method> failure: <message>"`` header line,
optional detail lines, and truncated previews of the inputs.  Assertion
failures and load failures use the same builder so that both read alike.

Example report::

    assert_json_equal failure: JSON documents are not equal

    at $.a.c: unexpected property, expected nothing while actual a number: 2

    Options:
      - array order: ignore
      - ignored node names: []

    Expected:
    {"a":{"b":1}}

    Actual:
    {"a":{"b":1,"c":2}}
"""

from __future__ import annotations

from itertools import zip_longest
from typing import TYPE_CHECKING

from structural_diff.algorithm.config import ReportFormat

if TYPE_CHECKING:
    from collections.abc import Sequence

    from structural_diff.algorithm.config import ComparisonOptions
    from structural_diff.result import Difference
    from structural_diff.tree.nodes import DocumentFormat

__all__ = ["TRUNCATION_MARKER", "ReportBuilder", "build_failure_report", "truncate"]

TRUNCATION_MARKER = "... (truncated)"
DEFAULT_MAX_LINE_CHARACTERS = 1000


def truncate(text: str, max_characters: int) -> str:
    """Cut ``text`` to ``max_characters`` and append the truncation marker."""
    if len(text) <= max_characters:
        return text
    return text[:max_characters] + TRUNCATION_MARKER


class ReportBuilder:
    """Accumulates the lines of a failure report.

    Use ``ReportBuilder.for_method`` to start a report; every ``append_*``
    method returns the builder so calls can be chained.
    """

    def __init__(self, header: str) -> None:
        self._lines: list[str] = [header]

    @classmethod
    def for_method(cls, method_name: str, general_message: str) -> ReportBuilder:
        """Start a report for the failing ``method_name``.

        Raises:
            ValueError: If either argument is blank.
        """
        if not method_name or not method_name.strip():
            msg = "method_name must not be blank"
            raise ValueError(msg)
        if not general_message or not general_message.strip():
            msg = "general_message must not be blank"
            raise ValueError(msg)
        return cls(f"{method_name} failure: {general_message}")

    def append_line(
        self, text: str, max_characters: int = DEFAULT_MAX_LINE_CHARACTERS
    ) -> ReportBuilder:
        self._lines.append(truncate(text, max_characters))
        return self

    def append_blank(self) -> ReportBuilder:
        self._lines.append("")
        return self

    def append_input(self, raw: str, max_characters: int) -> ReportBuilder:
        """Append an ``Input:`` preview; skipped when ``max_characters <= 0``."""
        if max_characters <= 0:
            return self
        self.append_blank()
        self._lines.append("Input:")
        self._lines.append(truncate(raw, max_characters))
        return self

    def append_diff(
        self,
        expected: str,
        actual: str,
        max_characters: int,
        report_format: ReportFormat = ReportFormat.VERTICAL,
    ) -> ReportBuilder:
        """Append the expected and actual previews.

        Both previews are cut to ``max_characters``; nothing is appended when
        ``max_characters <= 0``.
        """
        if max_characters <= 0:
            return self
        expected = truncate(expected, max_characters)
        actual = truncate(actual, max_characters)

        self.append_blank()
        if report_format is ReportFormat.HORIZONTAL:
            self._append_side_by_side(expected, actual)
        else:
            self._lines.extend(["Expected:", expected, "", "Actual:", actual])
        return self

    def _append_side_by_side(self, expected: str, actual: str) -> None:
        left = ["Expected:", *expected.splitlines()]
        right = ["Actual:", *actual.splitlines()]
        width = max(len(line) for line in left)
        for lhs, rhs in zip_longest(left, right, fillvalue=""):
            self._lines.append(f"{lhs:<{width}} | {rhs}".rstrip())

    def build(self) -> str:
        return "\n".join(self._lines)

    def __str__(self) -> str:
        return self.build()


def _group_by_path(differences: Sequence[Difference]) -> list[Difference]:
    """Order differences by the first occurrence of their path (stable)."""
    groups: dict[str, list[Difference]] = {}
    for difference in differences:
        groups.setdefault(difference.path, []).append(difference)
    return [difference for group in groups.values() for difference in group]


def build_failure_report(
    method_name: str,
    general_message: str,
    differences: Sequence[Difference],
    expected_text: str,
    actual_text: str,
    options: ComparisonOptions,
    fmt: DocumentFormat | str,
) -> str:
    """Render the full assertion failure message.

    Differences are grouped by path in the order the paths were first
    visited, which follows the structure of the expected document.
    """
    builder = ReportBuilder.for_method(method_name, general_message)
    builder.append_blank()
    for difference in _group_by_path(differences):
        builder.append_line(difference.describe())

    builder.append_blank()
    for line in options.describe(fmt).splitlines():
        builder.append_line(line)

    builder.append_diff(
        expected_text,
        actual_text,
        options.max_preview_characters,
        options.report_format,
    )
    return builder.build()
