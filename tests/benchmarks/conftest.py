"""Deterministic document generators for performance benchmarks.

All generators produce fixed, reproducible documents. No random values.
Three tiers: 10-key flat JSON, 100-record JSON arrays, and larger XML/CSV
documents. Each tier provides an "equal" pair (same content, shuffled
where order is ignored) and a "changed" pair (one field per record
differs, which forces the distance-based element pairing).
"""

from __future__ import annotations

import json
from typing import Any

import pytest


def _records(count: int, suffix: str = "") -> list[dict[str, Any]]:
    return [
        {"id": i, "name": f"user_{i}{suffix}", "tags": [f"t{i % 3}", f"t{i % 5}"]}
        for i in range(count)
    ]


def _make_flat_pair(num_keys: int) -> tuple[str, str]:
    left = {f"key_{i}": f"value_{i}" for i in range(num_keys)}
    right = dict(reversed(list(left.items())))
    return json.dumps(left), json.dumps(right)


def _make_records_pair(count: int, changed: bool) -> tuple[str, str]:
    left = _records(count)
    right = list(reversed(_records(count, "_x" if changed else "")))
    return json.dumps(left), json.dumps(right)


def _make_xml_pair(count: int, changed: bool) -> tuple[str, str]:
    def document(suffix: str) -> str:
        items = "".join(
            f'<item id="{i}"><name>n{i}{suffix}</name><qty>{i % 7}</qty></item>'
            for i in range(count)
        )
        return f"<order><meta created='x'/>{items}</order>"

    return document(""), document("_x" if changed else "")


def _make_csv_pair(count: int, changed: bool) -> tuple[str, str]:
    def document(suffix: str) -> str:
        rows = "\n".join(f"{i},name_{i}{suffix},{i * 1.5}" for i in range(count))
        return "id,name,amount\n" + rows

    return document(""), document("_x" if changed else "")


# --- Fixtures for each tier ---


@pytest.fixture
def pair_10key_flat() -> tuple[str, str]:
    """10-key flat JSON objects with reversed key order."""
    return _make_flat_pair(10)


@pytest.fixture
def pair_100_records_equal() -> tuple[str, str]:
    """100 JSON records, reversed (equal when order is ignored)."""
    return _make_records_pair(100, changed=False)


@pytest.fixture
def pair_100_records_changed() -> tuple[str, str]:
    """100 JSON records, reversed, every name changed."""
    return _make_records_pair(100, changed=True)


@pytest.fixture
def pair_xml_200_items() -> tuple[str, str]:
    """XML order with 200 repeated <item> elements, one text per item changed."""
    return _make_xml_pair(200, changed=True)


@pytest.fixture
def pair_csv_200_rows() -> tuple[str, str]:
    """CSV with 200 rows, every name cell changed."""
    return _make_csv_pair(200, changed=True)
