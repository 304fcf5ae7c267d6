"""CsvTreeBuilder: converts CSV text into a ComparableNode tree.

The tree has two children under an unnamed document root:

- ``header``: ARRAY of the column names, in file order
- ``rows``: ARRAY of row OBJECTs, each keyed by column name

Without a header row the columns are named by position (``#0``, ``#1``...).
Columns dropped by index or by ignored name never reach the tree.
"""

from __future__ import annotations

import csv
import io
import logging
from collections import Counter
from dataclasses import dataclass, field

from structural_diff.algorithm.config import ComparisonOptions, CsvHeader
from structural_diff.errors import CsvLoadError
from structural_diff.tree.nodes import ComparableNode, DocumentFormat, NodeKind

logger = logging.getLogger(__name__)

HEADER_KEY = "header"
ROWS_KEY = "rows"


def positional_name(index: int) -> str:
    return f"#{index}"


@dataclass
class CsvTreeBuilder:
    """Converts CSV text into a ComparableNode tree using ``options.csv``."""

    options: ComparisonOptions = field(default_factory=ComparisonOptions)

    def load(self, raw: str | bytes) -> ComparableNode:
        """Parse CSV text into a tree.

        Raises:
            CsvLoadError: If the header row is missing, rows have differing
                column counts, an ignored column index is out of range, or
                two kept columns share a name.
        """
        try:
            text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
        except UnicodeDecodeError as exc:
            raise CsvLoadError(f"input is not valid UTF-8, {exc.reason}") from exc

        rows = self._read_rows(text)
        header_present = self.options.csv.header is CsvHeader.PRESENT

        if header_present:
            if not rows:
                raise self._error("missing header row", text)
            header, data = rows[0], rows[1:]
        else:
            header = [positional_name(i) for i in range(len(rows[0]))] if rows else []
            data = rows

        widths = Counter(len(row) for row in rows)
        if len(widths) > 1:
            counts = ", ".join(
                f"{count} row(s) with {width} columns" for width, count in widths.items()
            )
            raise self._error(f"rows have uneven column counts: {counts}", text)

        kept = self._kept_columns(header, text)
        header_node = ComparableNode(
            NodeKind.ARRAY,
            name=HEADER_KEY,
            children=tuple(
                ComparableNode(NodeKind.SCALAR, value=header[i]) for i in kept
            ),
        )
        rows_node = ComparableNode(
            NodeKind.ARRAY,
            name=ROWS_KEY,
            children=tuple(
                ComparableNode(
                    NodeKind.OBJECT,
                    children=tuple(
                        ComparableNode(NodeKind.SCALAR, name=header[i], value=row[i])
                        for i in kept
                    ),
                )
                for row in data
            ),
        )
        logger.debug(
            "Loaded CSV document: %d column(s), %d row(s)", len(kept), len(data)
        )
        return ComparableNode(
            NodeKind.OBJECT,
            children=(header_node, rows_node),
            ordered=False,
            format=DocumentFormat.CSV,
            source=text,
        )

    def _read_rows(self, text: str) -> list[list[str]]:
        csv_options = self.options.csv
        reader = csv.reader(
            io.StringIO(text, newline=""),
            delimiter=csv_options.separator,
            quotechar=csv_options.quote,
            escapechar=csv_options.escape,
            strict=True,
        )
        try:
            # csv yields an empty list for blank lines
            return [row for row in reader if row]
        except csv.Error as exc:
            raise CsvLoadError(
                f"invalid CSV, {exc}",
                source=text,
                line=reader.line_num,
                max_characters=self.options.max_preview_characters,
            ) from exc

    def _kept_columns(self, header: list[str], text: str) -> list[int]:
        ignored_indexes = self.options.csv.ignored_column_indexes
        out_of_range = sorted(i for i in ignored_indexes if i >= len(header))
        if out_of_range:
            raise self._error(
                f"ignored column index(es) {out_of_range} out of range "
                f"for {len(header)} column(s)",
                text,
            )

        kept = [
            i
            for i, name in enumerate(header)
            if i not in ignored_indexes and name not in self.options.ignored_node_names
        ]
        duplicates = sorted(
            name for name, count in Counter(header[i] for i in kept).items() if count > 1
        )
        if duplicates:
            raise self._error(f"duplicate column name(s) {duplicates}", text)
        return kept

    def _error(self, construct: str, text: str) -> CsvLoadError:
        return CsvLoadError(
            construct, source=text, max_characters=self.options.max_preview_characters
        )
