"""StructuralComparator: orchestrator that wires loader + dialect + DiffEngine.

This is the central wiring layer between the raw engine and the public API.
It loads raw inputs with the builder for its format, runs the engine,
times the comparison and wraps the differences in a ComparisonResult.

A load failure on either side raises before any comparison is attempted.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from structural_diff.algorithm.config import ComparisonOptions
from structural_diff.algorithm.costs import NodeDistance
from structural_diff.algorithm.engine import DiffEngine
from structural_diff.cache import DistanceCache
from structural_diff.dialects import dialect_for
from structural_diff.errors import EqualAssertionError
from structural_diff.result import ComparisonResult
from structural_diff.tree.builder import JsonTreeBuilder
from structural_diff.tree.csv_builder import CsvTreeBuilder
from structural_diff.tree.nodes import ComparableNode, DocumentFormat
from structural_diff.tree.xml_builder import XmlTreeBuilder

logger = logging.getLogger(__name__)

__all__ = ["StructuralComparator"]


class StructuralComparator:
    """Orchestrator for structural comparison of one document format.

    Inputs may be raw text or bytes, or trees returned by ``load``.  For JSON,
    already-deserialized values (dicts, lists) are accepted as well; a ``str``
    is always parsed as JSON text.

    Two separate ``StructuralComparator`` instances never share cache state.

    Example::

        from structural_diff.comparator import StructuralComparator

        cmp = StructuralComparator("json")
        result = cmp.compare('{"a": 1, "b": 2}', '{"b": 2, "a": 1}')
        print(result.is_equal)   # True
    """

    def __init__(
        self,
        fmt: DocumentFormat | str,
        options: ComparisonOptions | None = None,
        max_cache_size: int | None = None,
    ) -> None:
        """Initialise the comparator.

        Args:
            fmt: Document format of both inputs.
            options: Comparison policy.  Defaults to ``ComparisonOptions()``.
            max_cache_size: Maximum number of pairwise distances held in the
                per-instance LRU cache, or ``None`` (the default) for no limit.
                This is an infrastructure parameter, not part of
                ``ComparisonOptions``.
        """
        self._format = DocumentFormat(fmt)
        self._options: ComparisonOptions = (
            options if options is not None else ComparisonOptions()
        )
        self._dialect = dialect_for(self._format)
        self._cache = DistanceCache(max_size=max_cache_size)
        self._engine = DiffEngine(
            self._dialect,
            self._options,
            NodeDistance(self._dialect, self._options, self._cache),
        )
        self._json_builder = JsonTreeBuilder(
            max_depth=self._options.max_depth,
            max_preview_characters=self._options.max_preview_characters,
        )

    @property
    def format(self) -> DocumentFormat:
        return self._format

    @property
    def options(self) -> ComparisonOptions:
        return self._options

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, raw: str | bytes) -> ComparableNode:
        """Load raw input into a tree.

        Raises:
            LoadError: If ``raw`` is not a valid document of this format.
        """
        if self._format is DocumentFormat.JSON:
            return self._json_builder.load(raw)
        if self._format is DocumentFormat.XML:
            return XmlTreeBuilder(
                max_depth=self._options.max_depth,
                max_preview_characters=self._options.max_preview_characters,
            ).load(raw)
        return CsvTreeBuilder(self._options).load(raw)

    def compare(self, expected: Any, actual: Any) -> ComparisonResult:
        """Compare two documents and return every difference found.

        Args:
            expected: Expected document (raw text/bytes or a loaded tree).
            actual:   Actual document.

        Returns:
            A ``ComparisonResult``; ``is_equal`` is True when no difference
            was found.

        Raises:
            LoadError: If either input fails to load.
            TypeError: If either input is None.
            ValueError: If a loaded tree belongs to another format or the
                options are invalid for this format.
        """
        t0 = time.perf_counter()

        expected_tree = self._ensure_tree(expected, "expected")
        actual_tree = self._ensure_tree(actual, "actual")
        differences = self._engine.compare(expected_tree, actual_tree)

        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        logger.debug(
            "Compared %s documents: %d difference(s) in %.2f ms",
            self._format,
            len(differences),
            elapsed_ms,
        )

        return ComparisonResult(
            differences=tuple(differences),
            format=self._format,
            expected_source=self._source(expected_tree),
            actual_source=self._source(actual_tree),
            options=self._options,
            computation_time_ms=elapsed_ms,
        )

    def assert_equal(
        self, expected: Any, actual: Any, method_name: str | None = None
    ) -> ComparisonResult:
        """Compare and raise ``EqualAssertionError`` when the documents differ.

        Args:
            expected:    Expected document.
            actual:      Actual document.
            method_name: Name shown in the report header.  Defaults to
                ``assert_<format>_equal``.

        Returns:
            The (equal) ``ComparisonResult``.
        """
        result = self.compare(expected, actual)
        if not result.is_equal:
            raise EqualAssertionError(result, method_name)
        return result

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def _ensure_tree(self, value: Any, side: str) -> ComparableNode:
        if value is None:
            msg = f"{side} document is required, got None"
            raise TypeError(msg)

        if isinstance(value, ComparableNode):
            if value.format is not None and value.format is not self._format:
                msg = (
                    f"{side} tree was loaded as {value.format}, "
                    f"cannot compare as {self._format}"
                )
                raise ValueError(msg)
            return value

        if isinstance(value, (str, bytes, bytearray)):
            return self.load(bytes(value) if isinstance(value, bytearray) else value)

        if self._format is DocumentFormat.JSON:
            return self._json_builder.build(value)

        msg = f"cannot compare {type(value).__name__} as {self._format}"
        raise TypeError(msg)

    def _source(self, tree: ComparableNode) -> str:
        if tree.source is not None:
            return tree.source
        return self._dialect.render(tree)
