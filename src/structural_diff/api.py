"""Public API functions for structural-diff.

Each call creates a fresh StructuralComparator to guarantee zero global
state between calls.  The ``assert_*_equal`` functions are the assertion
entry points meant for tests: they return silently when the documents are
equal and raise ``EqualAssertionError`` with the full report otherwise.
"""

from __future__ import annotations

from typing import Any

from structural_diff.algorithm.config import ComparisonOptions
from structural_diff.comparator import StructuralComparator
from structural_diff.result import ComparisonResult
from structural_diff.tree.nodes import ComparableNode, DocumentFormat

__all__ = [
    "assert_csv_equal",
    "assert_equal",
    "assert_json_equal",
    "assert_xml_equal",
    "compare",
    "load",
    "load_csv",
    "load_json",
    "load_xml",
]


def _resolve_format(
    fmt: DocumentFormat | str | None, expected: Any, actual: Any
) -> DocumentFormat:
    if fmt is not None:
        return DocumentFormat(fmt)
    for value in (expected, actual):
        if isinstance(value, ComparableNode) and value.format is not None:
            return value.format
    msg = "format could not be inferred; pass fmt or trees returned by load()"
    raise ValueError(msg)


def load(
    raw: str | bytes,
    fmt: DocumentFormat | str,
    options: ComparisonOptions | None = None,
) -> ComparableNode:
    """Load raw input of format ``fmt`` into a tree.

    Raises:
        LoadError: If ``raw`` is not a valid document of that format.
    """
    return StructuralComparator(fmt, options=options).load(raw)


def load_json(raw: str | bytes, options: ComparisonOptions | None = None) -> ComparableNode:
    return load(raw, DocumentFormat.JSON, options)


def load_xml(raw: str | bytes, options: ComparisonOptions | None = None) -> ComparableNode:
    return load(raw, DocumentFormat.XML, options)


def load_csv(raw: str | bytes, options: ComparisonOptions | None = None) -> ComparableNode:
    return load(raw, DocumentFormat.CSV, options)


def compare(
    expected: Any,
    actual: Any,
    fmt: DocumentFormat | str | None = None,
    options: ComparisonOptions | None = None,
) -> ComparisonResult:
    """Compare two documents and return a ComparisonResult.

    Args:
        expected: Expected document: raw text/bytes or a loaded tree.
        actual:   Actual document.
        fmt:      Document format.  May be omitted when either side is a tree
                  returned by ``load``.
        options:  Comparison policy.  Defaults to ``ComparisonOptions()``.

    Returns:
        A ``ComparisonResult`` listing every difference.
    """
    comparator = StructuralComparator(
        _resolve_format(fmt, expected, actual), options=options
    )
    return comparator.compare(expected, actual)


def assert_equal(
    expected: Any,
    actual: Any,
    fmt: DocumentFormat | str | None = None,
    options: ComparisonOptions | None = None,
    method_name: str | None = None,
) -> ComparisonResult:
    """Assert that two documents are structurally equal.

    Raises:
        EqualAssertionError: When at least one difference is found; the
            message is the full failure report.
        LoadError: When either input is not a valid document.
    """
    comparator = StructuralComparator(
        _resolve_format(fmt, expected, actual), options=options
    )
    return comparator.assert_equal(expected, actual, method_name=method_name)


def assert_json_equal(
    expected: Any, actual: Any, options: ComparisonOptions | None = None
) -> None:
    """Assert that two JSON documents are structurally equal.

    Object key order never matters; array order follows ``options.order``.
    """
    assert_equal(
        expected, actual, DocumentFormat.JSON, options, method_name="assert_json_equal"
    )


def assert_xml_equal(
    expected: Any, actual: Any, options: ComparisonOptions | None = None
) -> None:
    """Assert that two XML documents are structurally equal.

    Attribute order follows ``options.order``; repeated same-tag siblings are
    always order-sensitive.
    """
    assert_equal(
        expected, actual, DocumentFormat.XML, options, method_name="assert_xml_equal"
    )


def assert_csv_equal(
    expected: Any, actual: Any, options: ComparisonOptions | None = None
) -> None:
    """Assert that two CSV documents are structurally equal."""
    assert_equal(
        expected, actual, DocumentFormat.CSV, options, method_name="assert_csv_equal"
    )
