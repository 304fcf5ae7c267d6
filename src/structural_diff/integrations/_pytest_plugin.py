"""pytest plugin for structural-diff.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.

Project-wide defaults can be set in the pytest ini file::

    [tool.pytest.ini_options]
    structural_diff_max_preview_characters = "200"
    structural_diff_report_format = "horizontal"

Source: https://docs.pytest.org/en/stable/how-to/writing_plugins.html
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from structural_diff.algorithm.config import (
    DEFAULT_MAX_PREVIEW_CHARACTERS,
    ComparisonOptions,
    ReportFormat,
)
from structural_diff.api import assert_equal
from structural_diff.tree.nodes import DocumentFormat

MAX_PREVIEW_INI = "structural_diff_max_preview_characters"
REPORT_FORMAT_INI = "structural_diff_report_format"

Asserter = Callable[..., None]


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini(
        MAX_PREVIEW_INI,
        help="Characters of each input shown in structural diff failure reports (0 hides them).",
        default=str(DEFAULT_MAX_PREVIEW_CHARACTERS),
    )
    parser.addini(
        REPORT_FORMAT_INI,
        help="Layout of the expected/actual previews: vertical or horizontal.",
        default=str(ReportFormat.VERTICAL),
    )


@pytest.fixture(scope="session")
def structural_diff_options(pytestconfig: pytest.Config) -> ComparisonOptions:
    """Session-wide default ``ComparisonOptions`` built from the ini settings."""
    raw_preview = str(pytestconfig.getini(MAX_PREVIEW_INI)).strip()
    try:
        max_preview = int(raw_preview)
    except ValueError as exc:
        msg = f"{MAX_PREVIEW_INI} must be an integer, got {raw_preview!r}"
        raise pytest.UsageError(msg) from exc
    raw_format = str(pytestconfig.getini(REPORT_FORMAT_INI)).strip().lower()
    try:
        return ComparisonOptions(
            max_preview_characters=max_preview, report_format=ReportFormat(raw_format)
        )
    except ValueError as exc:
        raise pytest.UsageError(f"invalid structural-diff ini setting: {exc}") from exc


def _make_asserter(fmt: DocumentFormat, defaults: ComparisonOptions) -> Asserter:
    method_name = f"assert_{fmt}_equal"

    def _assert(
        expected: Any,
        actual: Any,
        options: ComparisonOptions | None = None,
    ) -> None:
        """Assert that two documents are structurally equal.

        Args:
            expected: The expected document (raw text, bytes or loaded tree).
            actual:   The document produced by the code under test.
            options:  Optional ComparisonOptions; replaces the ini defaults.

        Raises:
            EqualAssertionError: An ``AssertionError`` whose message is the
                full failure report.
        """
        assert_equal(
            expected,
            actual,
            fmt,
            options if options is not None else defaults,
            method_name=method_name,
        )

    return _assert


@pytest.fixture(scope="session")
def json_equal(structural_diff_options: ComparisonOptions) -> Asserter:
    """Fixture that returns a callable JSON structural asserter.

    The fixture is session-scoped because the returned callable is stateless
    (delegates to assert_equal() which creates a fresh comparator per call).

    Usage in tests::

        def test_response(json_equal):
            json_equal('{"a": 1, "b": 2}', response.text)
    """
    return _make_asserter(DocumentFormat.JSON, structural_diff_options)


@pytest.fixture(scope="session")
def xml_equal(structural_diff_options: ComparisonOptions) -> Asserter:
    """Fixture that returns a callable XML structural asserter."""
    return _make_asserter(DocumentFormat.XML, structural_diff_options)


@pytest.fixture(scope="session")
def csv_equal(structural_diff_options: ComparisonOptions) -> Asserter:
    """Fixture that returns a callable CSV structural asserter."""
    return _make_asserter(DocumentFormat.CSV, structural_diff_options)
