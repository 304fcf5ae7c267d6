"""Format dialects: path syntax, scalar equality and descriptions per format.

A dialect is stateless; ``dialect_for`` returns a shared instance.

Path conventions:

- JSON: ``$``, ``$.user.name``, ``$['odd key']``, ``$.items[2]`` (0-based)
- XML:  ``/root``, ``/root/item[1]`` (0-based, repeated tags only), ``/root/@id``, ``/root/text()``
- CSV:  ``column[name]``, ``header``, ``rows``, ``row[1]``, ``row[1].name``
  (rows are 1-based and exclude the header)
"""

from __future__ import annotations

import csv
import io
import json
import re
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, ClassVar
from xml.sax.saxutils import escape, quoteattr

from structural_diff.algorithm.config import OrderMode
from structural_diff.result import Difference, DifferenceKind
from structural_diff.tree.csv_builder import HEADER_KEY, ROWS_KEY
from structural_diff.tree.nodes import ComparableNode, DocumentFormat, NodeKind
from structural_diff.tree.xml_builder import ATTRIBUTES_KEY, TEXT_KEY

if TYPE_CHECKING:
    from structural_diff.algorithm.config import ComparisonOptions
    from structural_diff.algorithm.engine import DiffEngine

__all__ = ["BaseDialect", "CsvDialect", "JsonDialect", "XmlDialect", "dialect_for"]

SHORT_DESCRIPTION_CHARACTERS = 80

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PLAIN_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def shorten(text: str, limit: int = SHORT_DESCRIPTION_CHARACTERS) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class BaseDialect:
    """Behaviour shared by all dialects; subclasses fill in the format specifics."""

    format: ClassVar[DocumentFormat]
    root_path: str = ""

    def child_path(
        self, parent_path: str, parent: ComparableNode, child: ComparableNode
    ) -> str:
        raise NotImplementedError

    def index_path(self, parent_path: str, index: int) -> str:
        return f"{parent_path}[{index}]"

    def is_ordered(self, node: ComparableNode, options: ComparisonOptions) -> bool:
        if node.ordered is not None:
            return node.ordered
        return options.order is OrderMode.INCLUDE

    def scalar_type(self, node: ComparableNode) -> str:
        return "text"

    def scalars_equal(self, expected: ComparableNode, actual: ComparableNode) -> bool:
        return bool(expected.value == actual.value)

    def coerce(
        self, expected: ComparableNode, actual: ComparableNode
    ) -> tuple[ComparableNode, ComparableNode]:
        return expected, actual

    def subject(self, node: ComparableNode, parent: ComparableNode | None) -> str:
        return "node"

    def describe(self, node: ComparableNode | None) -> str:
        if node is None:
            return "nothing"
        return self._describe(node)

    def _describe(self, node: ComparableNode) -> str:
        return shorten(self.render(node))

    def render(self, node: ComparableNode) -> str:
        raise NotImplementedError

    def compare_document(
        self, engine: DiffEngine, expected: ComparableNode, actual: ComparableNode
    ) -> list[Difference]:
        return engine.diff(expected, actual)


class JsonDialect(BaseDialect):
    format = DocumentFormat.JSON
    root_path = "$"

    def child_path(
        self, parent_path: str, parent: ComparableNode, child: ComparableNode
    ) -> str:
        key = child.key or ""
        if _IDENTIFIER.match(key):
            return f"{parent_path}.{key}"
        quoted = key.replace("\\", "\\\\").replace("'", "\\'")
        return f"{parent_path}['{quoted}']"

    def is_ordered(self, node: ComparableNode, options: ComparisonOptions) -> bool:
        # Object key order never matters in JSON
        if node.kind is NodeKind.OBJECT:
            return bool(node.ordered)
        return super().is_ordered(node, options)

    def scalar_type(self, node: ComparableNode) -> str:
        value = node.value
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, (Decimal, int, float)):
            return "number"
        if isinstance(value, str):
            return "string"
        return type(value).__name__

    def subject(self, node: ComparableNode, parent: ComparableNode | None) -> str:
        if parent is None:
            return "document"
        if parent.kind is NodeKind.ARRAY:
            return "array element"
        return "property"

    def _describe(self, node: ComparableNode) -> str:
        if node.kind is NodeKind.OBJECT:
            return f"an object: {shorten(self.render(node))}"
        if node.kind is NodeKind.ARRAY:
            return f"an array: {shorten(self.render(node))}"
        scalar_type = self.scalar_type(node)
        if scalar_type == "null":
            return "type null"
        if scalar_type == "boolean":
            return f"{self.render(node)} boolean"
        if scalar_type == "string":
            return f"a string: {shorten(self.render(node))}"
        return f"a {scalar_type}: {shorten(self.render(node))}"

    def render(self, node: ComparableNode) -> str:
        if node.kind is NodeKind.OBJECT:
            members = ",".join(
                f"{json.dumps(key)}:{self.render(child)}" for key, child in node.items()
            )
            return "{" + members + "}"
        if node.kind is NodeKind.ARRAY:
            return "[" + ",".join(self.render(child) for child in node.children) + "]"
        value = node.value
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return json.dumps(value)
        return str(value)


class XmlDialect(BaseDialect):
    format = DocumentFormat.XML

    def child_path(
        self, parent_path: str, parent: ComparableNode, child: ComparableNode
    ) -> str:
        if child.name == ATTRIBUTES_KEY:
            return parent_path
        if parent.name == ATTRIBUTES_KEY:
            return f"{parent_path}/@{child.name}"
        if child.name == TEXT_KEY:
            return f"{parent_path}/text()"
        return f"{parent_path}/{child.name}"

    def coerce(
        self, expected: ComparableNode, actual: ComparableNode
    ) -> tuple[ComparableNode, ComparableNode]:
        """Treat a single element as a one-element group of the same tag."""
        if expected.kind is NodeKind.ARRAY and self._is_element(actual):
            return expected, self._as_group(actual)
        if actual.kind is NodeKind.ARRAY and self._is_element(expected):
            return self._as_group(expected), actual
        return expected, actual

    @staticmethod
    def _is_element(node: ComparableNode) -> bool:
        return node.kind is NodeKind.OBJECT and node.name not in (None, ATTRIBUTES_KEY)

    @staticmethod
    def _as_group(element: ComparableNode) -> ComparableNode:
        return ComparableNode(
            NodeKind.ARRAY,
            name=element.name,
            key=element.key,
            children=(element,),
            ordered=True,
        )

    def subject(self, node: ComparableNode, parent: ComparableNode | None) -> str:
        if node.name == ATTRIBUTES_KEY:
            return "attributes"
        if parent is not None and parent.name == ATTRIBUTES_KEY:
            return "attribute"
        if node.name == TEXT_KEY:
            return "text"
        if parent is None:
            return "document"
        return "element"

    def _describe(self, node: ComparableNode) -> str:
        if node.kind is NodeKind.SCALAR:
            if node.name == TEXT_KEY:
                return f"text {shorten(json.dumps(node.value))}"
            return f"attribute {shorten(self._render_attribute(node))}"
        if node.kind is NodeKind.ARRAY:
            return f"{len(node.children)} <{node.name}> element(s)"
        if node.name == ATTRIBUTES_KEY:
            names = ", ".join(child.name or "" for child in node.children)
            return f"attributes [{names}]"
        if node.name is None:
            return f"a document: {shorten(self.render(node))}"
        return f"an element: {shorten(self.render(node))}"

    def render(self, node: ComparableNode) -> str:
        if node.kind is NodeKind.ARRAY or node.name is None:
            return "".join(self.render(child) for child in node.children)
        if node.kind is NodeKind.SCALAR:
            if node.name == TEXT_KEY:
                return escape(str(node.value))
            return self._render_attribute(node)
        if node.name == ATTRIBUTES_KEY:
            return " ".join(self._render_attribute(child) for child in node.children)

        attributes = ""
        content = []
        for child in node.children:
            if child.name == ATTRIBUTES_KEY:
                if child.children:
                    attributes = " " + self.render(child)
            else:
                content.append(self.render(child))
        if not content:
            return f"<{node.name}{attributes}/>"
        return f"<{node.name}{attributes}>{''.join(content)}</{node.name}>"

    @staticmethod
    def _render_attribute(node: ComparableNode) -> str:
        return f"{node.name}={quoteattr(str(node.value))}"

    def compare_document(
        self, engine: DiffEngine, expected: ComparableNode, actual: ComparableNode
    ) -> list[Difference]:
        ignored = engine.options.ignored_node_names
        for document in (expected, actual):
            if document.name is not None:
                continue
            for root in document.children:
                if root.name in ignored:
                    msg = f"the root element <{root.name}> cannot be ignored"
                    raise ValueError(msg)
        return engine.diff(expected, actual)


class CsvDialect(BaseDialect):
    format = DocumentFormat.CSV

    def child_path(
        self, parent_path: str, parent: ComparableNode, child: ComparableNode
    ) -> str:
        if not parent_path:
            return child.name or ""
        return f"{parent_path}.{child.name}"

    def index_path(self, parent_path: str, index: int) -> str:
        if parent_path == ROWS_KEY:
            return f"row[{index + 1}]"
        return f"{parent_path}[{index + 1}]"

    def is_ordered(self, node: ComparableNode, options: ComparisonOptions) -> bool:
        if node.ordered is not None:
            return node.ordered
        if node.kind is NodeKind.ARRAY and node.name == HEADER_KEY:
            return options.csv.column_order is OrderMode.INCLUDE
        if node.kind is NodeKind.ARRAY:
            return options.csv.row_order is OrderMode.INCLUDE
        # Column order is checked once on the header, never per row
        return False

    def scalar_type(self, node: ComparableNode) -> str:
        return "cell"

    def scalars_equal(self, expected: ComparableNode, actual: ComparableNode) -> bool:
        left, right = str(expected.value), str(actual.value)
        if _PLAIN_NUMBER.match(left) and _PLAIN_NUMBER.match(right):
            try:
                return Decimal(left) == Decimal(right)
            except InvalidOperation:
                return left == right
        return left == right

    def subject(self, node: ComparableNode, parent: ComparableNode | None) -> str:
        if parent is None:
            return node.name or "document"
        if parent.kind is NodeKind.ARRAY and parent.name == ROWS_KEY:
            return "row"
        if parent.kind is NodeKind.OBJECT and parent.name is None and node.is_scalar:
            return "cell"
        return node.name or "node"

    def _describe(self, node: ComparableNode) -> str:
        if node.kind is NodeKind.SCALAR:
            return f"a cell: {shorten(json.dumps(str(node.value)))}"
        if node.kind is NodeKind.ARRAY:
            return f"{len(node.children)} {node.name or 'item'}"
        if node.name is None and node.get(ROWS_KEY) is None:
            return f"a row: {shorten(self.render(node))}"
        return f"a document: {shorten(self.render(node))}"

    def render(self, node: ComparableNode) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        if node.kind is NodeKind.SCALAR:
            return str(node.value)
        if node.kind is NodeKind.OBJECT and node.get(ROWS_KEY) is not None:
            header = node.get(HEADER_KEY)
            if header is not None and header.children:
                writer.writerow([child.value for child in header.children])
            rows = node.get(ROWS_KEY)
            for row in rows.children if rows is not None else ():
                writer.writerow([cell.value for cell in row.children])
        elif node.kind is NodeKind.OBJECT:
            writer.writerow([cell.value for cell in node.children])
        elif node.name == HEADER_KEY:
            writer.writerow([child.value for child in node.children])
        else:
            for row in node.children:
                writer.writerow([cell.value for cell in row.children])
        return buffer.getvalue().rstrip("\n")

    def compare_document(
        self, engine: DiffEngine, expected: ComparableNode, actual: ComparableNode
    ) -> list[Difference]:
        """Compare the header first, then the rows without the unshared columns.

        A column missing from the actual file is reported once at
        ``column[name]`` instead of once per row.
        """
        expected_rows, actual_rows = expected.get(ROWS_KEY), actual.get(ROWS_KEY)
        if expected_rows is None or actual_rows is None:
            return engine.diff(expected, actual)

        ignored = engine.options.ignored_node_names
        expected_columns = [c for c in self._columns(expected) if c not in ignored]
        actual_columns = [c for c in self._columns(actual) if c not in ignored]

        differences: list[Difference] = []
        missing = [c for c in expected_columns if c not in actual_columns]
        unexpected = [c for c in actual_columns if c not in expected_columns]
        for column in missing:
            differences.append(
                Difference(
                    f"column[{column}]",
                    DifferenceKind.MISSING_IN_ACTUAL,
                    f"column {json.dumps(column)}",
                    "nothing",
                    subject="column",
                )
            )
        for column in unexpected:
            differences.append(
                Difference(
                    f"column[{column}]",
                    DifferenceKind.UNEXPECTED_IN_ACTUAL,
                    "nothing",
                    f"column {json.dumps(column)}",
                    subject="column",
                )
            )

        shared_expected = [c for c in expected_columns if c in actual_columns]
        shared_actual = [c for c in actual_columns if c in expected_columns]
        if (
            engine.options.csv.column_order is OrderMode.INCLUDE
            and shared_expected != shared_actual
        ):
            differences.append(
                Difference(
                    HEADER_KEY,
                    DifferenceKind.ORDER_MISMATCH,
                    f"columns [{', '.join(shared_expected)}]",
                    f"columns [{', '.join(shared_actual)}]",
                    subject="header",
                )
            )

        differences.extend(
            engine.diff(
                expected_rows,
                actual_rows,
                path=ROWS_KEY,
                extra_ignored=frozenset(missing) | frozenset(unexpected),
            )
        )
        return differences

    @staticmethod
    def _columns(document: ComparableNode) -> list[str]:
        header = document.get(HEADER_KEY)
        if header is None:
            return []
        return [str(child.value) for child in header.children]


_DIALECTS: dict[DocumentFormat, BaseDialect] = {
    DocumentFormat.JSON: JsonDialect(),
    DocumentFormat.XML: XmlDialect(),
    DocumentFormat.CSV: CsvDialect(),
}


def dialect_for(fmt: DocumentFormat | str) -> BaseDialect:
    """Return the shared dialect instance for ``fmt``."""
    return _DIALECTS[DocumentFormat(fmt)]
