"""Structural diff - assertion-grade structural comparison of JSON, XML and CSV documents."""

from __future__ import annotations

from structural_diff.algorithm.config import (
    ComparisonOptions,
    CsvHeader,
    CsvOptions,
    OrderMode,
    ReportFormat,
)
from structural_diff.api import (
    assert_csv_equal,
    assert_equal,
    assert_json_equal,
    assert_xml_equal,
    compare,
    load,
    load_csv,
    load_json,
    load_xml,
)
from structural_diff.comparator import StructuralComparator
from structural_diff.errors import (
    CsvLoadError,
    EqualAssertionError,
    JsonLoadError,
    LoadError,
    MaxDepthExceededError,
    StructuralDiffError,
    XmlLoadError,
)
from structural_diff.result import ComparisonResult, Difference, DifferenceKind
from structural_diff.tree.nodes import ComparableNode, DocumentFormat, NodeKind

__version__: str = "0.1.0"
__all__: list[str] = [
    "ComparableNode",
    "ComparisonOptions",
    "ComparisonResult",
    "CsvHeader",
    "CsvLoadError",
    "CsvOptions",
    "Difference",
    "DifferenceKind",
    "DocumentFormat",
    "EqualAssertionError",
    "JsonLoadError",
    "LoadError",
    "MaxDepthExceededError",
    "NodeKind",
    "OrderMode",
    "ReportFormat",
    "StructuralComparator",
    "StructuralDiffError",
    "XmlLoadError",
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
