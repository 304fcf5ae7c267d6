"""ComparisonOptions, CsvOptions and the enums that configure a comparison.

Options are frozen (immutable) dataclasses validated on construction, so an
instance can be shared read-only between tests and threads.  Builder-style
helpers such as ``ignore_node`` return a new instance instead of mutating.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import StrEnum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from structural_diff.tree.nodes import DocumentFormat

DEFAULT_MAX_PREVIEW_CHARACTERS = 500
DEFAULT_MAX_DEPTH = 256


class OrderMode(StrEnum):
    """Whether sibling order is significant.

    - IGNORE:  Order does not matter (set-like matching).
    - INCLUDE: Order matters (positional alignment).
    """

    IGNORE = auto()
    INCLUDE = auto()


class ReportFormat(StrEnum):
    """How the expected and actual previews are laid out in a report.

    - VERTICAL:   Expected block above the actual block.
    - HORIZONTAL: Expected and actual side by side.
    """

    VERTICAL = auto()
    HORIZONTAL = auto()


class CsvHeader(StrEnum):
    """Whether the first CSV row holds column names."""

    PRESENT = auto()
    MISSING = auto()


def _single_character(name: str, value: str | None, *, optional: bool = False) -> None:
    if value is None and optional:
        return
    if not isinstance(value, str) or len(value) != 1:
        msg = f"{name} must be a single character, got {value!r}"
        raise ValueError(msg)
    if value in "\r\n":
        msg = f"{name} cannot be a line break"
        raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class CsvOptions:
    """Immutable CSV dialect and ordering configuration.

    Attributes:
        separator: Field delimiter.  Defaults to ``","``.
        quote: Quote character.  Defaults to ``'"'``.
        escape: Escape character, or ``None`` to disable escaping.
        header: Whether the first row is a header (``CsvHeader.PRESENT``) or
            data (``CsvHeader.MISSING``; columns are then named ``#0``, ``#1``...).
        row_order: Whether data row order is significant.
        column_order: Whether column order is significant.
        ignored_column_indexes: Zero-based column positions dropped on load.
    """

    separator: str = ","
    quote: str = '"'
    escape: str | None = "\\"
    header: CsvHeader = CsvHeader.PRESENT
    row_order: OrderMode = OrderMode.INCLUDE
    column_order: OrderMode = OrderMode.INCLUDE
    ignored_column_indexes: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "header", CsvHeader(self.header))
        object.__setattr__(self, "row_order", OrderMode(self.row_order))
        object.__setattr__(self, "column_order", OrderMode(self.column_order))
        object.__setattr__(
            self, "ignored_column_indexes", frozenset(self.ignored_column_indexes)
        )

        _single_character("separator", self.separator)
        _single_character("quote", self.quote)
        _single_character("escape", self.escape, optional=True)
        if self.separator == self.quote:
            msg = f"separator and quote must differ, both are {self.separator!r}"
            raise ValueError(msg)

        for index in self.ignored_column_indexes:
            if isinstance(index, bool) or not isinstance(index, int) or index < 0:
                msg = f"ignored column indexes must be non-negative integers, got {index!r}"
                raise ValueError(msg)

        if self.header is CsvHeader.MISSING and self.column_order is OrderMode.IGNORE:
            msg = "column order cannot be ignored when the header is missing"
            raise ValueError(msg)
        if self.ignored_column_indexes and self.column_order is OrderMode.IGNORE:
            msg = "column indexes cannot be ignored when column order is ignored"
            raise ValueError(msg)

    def ignore_column(self, index: int) -> CsvOptions:
        """Return a copy that also drops the column at ``index``."""
        return replace(
            self, ignored_column_indexes=self.ignored_column_indexes | {index}
        )


@dataclass(frozen=True, slots=True)
class ComparisonOptions:
    """Immutable per-call comparison policy.

    Attributes:
        ignored_node_names: Node names (JSON keys, XML local names, CSV
            headers) skipped at any depth together with their subtrees.
        order: Array order for JSON, attribute order for XML.  Defaults to
            ``OrderMode.IGNORE``.
        max_preview_characters: Bound on each input preview rendered in a
            failure report.  ``0`` omits the previews.  Never affects the
            comparison itself.
        max_depth: Nesting limit guarding against pathological input.
        report_format: Layout of the expected/actual previews.
        csv: CSV dialect and ordering options.
    """

    ignored_node_names: frozenset[str] = frozenset()
    order: OrderMode = OrderMode.IGNORE
    max_preview_characters: int = DEFAULT_MAX_PREVIEW_CHARACTERS
    max_depth: int = DEFAULT_MAX_DEPTH
    report_format: ReportFormat = ReportFormat.VERTICAL
    csv: CsvOptions = field(default_factory=CsvOptions)

    def __post_init__(self) -> None:
        names: Iterable[str] = self.ignored_node_names
        if isinstance(names, str):
            names = (names,)
        names = frozenset(names)
        for name in names:
            if not isinstance(name, str) or not name.strip():
                msg = f"ignored node names must be non-blank strings, got {name!r}"
                raise ValueError(msg)
        object.__setattr__(self, "ignored_node_names", names)
        object.__setattr__(self, "order", OrderMode(self.order))
        object.__setattr__(self, "report_format", ReportFormat(self.report_format))

        if self.max_preview_characters < 0:
            msg = (
                "max_preview_characters must be >= 0, "
                f"got {self.max_preview_characters}"
            )
            raise ValueError(msg)
        if self.max_depth < 1:
            msg = f"max_depth must be >= 1, got {self.max_depth}"
            raise ValueError(msg)
        if not isinstance(self.csv, CsvOptions):
            msg = f"csv must be a CsvOptions instance, got {type(self.csv).__name__}"
            raise TypeError(msg)

    @property
    def max_input_characters(self) -> int:
        """Alias of ``max_preview_characters``."""
        return self.max_preview_characters

    def ignore_node(self, name: str) -> ComparisonOptions:
        """Return a copy that also ignores nodes called ``name``."""
        return replace(self, ignored_node_names=self.ignored_node_names | {name})

    def describe(self, fmt: DocumentFormat | str) -> str:
        """Render the options block written into failure reports."""
        fmt = str(fmt)
        names = ", ".join(sorted(self.ignored_node_names))
        lines = ["Options:"]
        if fmt == "xml":
            lines.append(f"  - attribute order: {self.order}")
            lines.append(f"  - ignored node (local) names: [{names}]")
        elif fmt == "csv":
            indexes = ", ".join(str(i) for i in sorted(self.csv.ignored_column_indexes))
            lines.append(f"  - separator: {self.csv.separator!r}")
            lines.append(f"  - header: {self.csv.header}")
            lines.append(f"  - row order: {self.csv.row_order}")
            lines.append(f"  - column order: {self.csv.column_order}")
            lines.append(f"  - ignored column names: [{names}]")
            lines.append(f"  - ignored column indexes: [{indexes}]")
        else:
            lines.append(f"  - array order: {self.order}")
            lines.append(f"  - ignored node names: [{names}]")
        return "\n".join(lines)
