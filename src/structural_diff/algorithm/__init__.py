"""algorithm subpackage: public API for the comparison engine.

Provides the recursive diff engine, its configuration, and the structural
distance used to pair array elements.  Import from this module (not from
sub-modules directly) to stay on the stable public interface.

Example::

    from structural_diff.algorithm import ComparisonOptions, DiffEngine, OrderMode
    from structural_diff.dialects import JsonDialect

    engine = DiffEngine(JsonDialect(), ComparisonOptions(order=OrderMode.INCLUDE))
"""

from __future__ import annotations

from structural_diff.algorithm.config import (
    ComparisonOptions,
    CsvHeader,
    CsvOptions,
    OrderMode,
    ReportFormat,
)
from structural_diff.algorithm.costs import NodeDistance
from structural_diff.algorithm.engine import DiffEngine

__all__ = [
    "ComparisonOptions",
    "CsvHeader",
    "CsvOptions",
    "DiffEngine",
    "NodeDistance",
    "OrderMode",
    "ReportFormat",
]
