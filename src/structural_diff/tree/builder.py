"""JsonTreeBuilder: converts JSON text or values into a ComparableNode tree.

Uses recursive dispatch to convert JSON objects, arrays and scalar values.
Numbers are loaded as ``decimal.Decimal`` so that numerically equal literals
(``1``, ``1.0``, ``1e0``) compare equal without float rounding.  Objects are
always unordered; array ordering is left to the comparison options.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from structural_diff.algorithm.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_PREVIEW_CHARACTERS,
)
from structural_diff.errors import JsonLoadError
from structural_diff.tree.nodes import ComparableNode, DocumentFormat, NodeKind

logger = logging.getLogger(__name__)

# Type alias for valid JSON values
JsonValue = dict[str, Any] | list[Any] | str | int | float | Decimal | bool | None


class _MalformedJsonError(ValueError):
    """Raised from parser hooks; converted to JsonLoadError by ``load``."""


def _unique_pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            msg = f"duplicate object key {key!r}"
            raise _MalformedJsonError(msg)
        obj[key] = value
    return obj


def _reject_constant(name: str) -> Any:
    msg = f"non-standard number {name}"
    raise _MalformedJsonError(msg)


@dataclass
class JsonTreeBuilder:
    """Converts JSON text, or already-deserialized JSON values, into a tree.

    The dispatch order is critical: bool MUST be checked before int because
    bool is a subclass of int in Python (isinstance(True, int) is True).

    Example::
        builder = JsonTreeBuilder()
        tree = builder.load('{"user": {"name": "John"}}')
        # tree: OBJECT -> OBJECT("user") -> SCALAR("name", value="John")
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_preview_characters: int = DEFAULT_MAX_PREVIEW_CHARACTERS

    def load(self, raw: str | bytes) -> ComparableNode:
        """Parse JSON text into a tree.

        Raises:
            JsonLoadError: If ``raw`` is not a single valid JSON document, has
                duplicate object keys or nests deeper than ``max_depth``.
        """
        try:
            text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
        except UnicodeDecodeError as exc:
            raise JsonLoadError(f"input is not valid UTF-8, {exc.reason}") from exc

        try:
            value = json.loads(
                text,
                parse_float=Decimal,
                parse_int=Decimal,
                parse_constant=_reject_constant,
                object_pairs_hook=_unique_pairs,
            )
        except json.JSONDecodeError as exc:
            raise JsonLoadError(
                f"invalid JSON, {exc.msg}",
                source=text,
                line=exc.lineno,
                column=exc.colno,
                max_characters=self.max_preview_characters,
            ) from exc
        except _MalformedJsonError as exc:
            raise JsonLoadError(
                str(exc), source=text, max_characters=self.max_preview_characters
            ) from exc
        except RecursionError as exc:
            raise JsonLoadError(
                "document nests too deeply to parse",
                source=text,
                max_characters=self.max_preview_characters,
            ) from exc

        try:
            tree = self.build(value)
        except JsonLoadError as exc:
            raise JsonLoadError(
                exc.construct, source=text, max_characters=self.max_preview_characters
            ) from exc

        root = replace(tree, format=DocumentFormat.JSON, source=text)
        logger.debug("Loaded JSON document (%d characters)", len(text))
        return root

    def build(
        self, value: JsonValue, name: str | None = None, depth: int = 0
    ) -> ComparableNode:
        """Convert a JSON value to a tree.

        Args:
            value: Any valid JSON value (dict, list, str, int, float, Decimal,
                bool, None).
            name:  Key of this value inside its parent object, if any.
            depth: Nesting level of this value.  Defaults to 0 (root).

        Returns:
            A ComparableNode tree rooted at the appropriate node kind.

        Raises:
            TypeError: If value is not a valid JSON type.
            ValueError: If value is a non-finite float.
            JsonLoadError: If nesting exceeds ``max_depth``.
        """
        if depth > self.max_depth:
            msg = f"document nests deeper than {self.max_depth} levels"
            raise JsonLoadError(msg, max_characters=0)

        # CRITICAL: bool MUST be checked before int; bool subclasses int in Python
        if isinstance(value, bool):
            return ComparableNode(NodeKind.SCALAR, name=name, value=value)

        if isinstance(value, dict):
            children = tuple(
                self.build(child, name=str(key), depth=depth + 1)
                for key, child in value.items()
            )
            return ComparableNode(
                NodeKind.OBJECT, name=name, children=children, ordered=False
            )

        if isinstance(value, (list, tuple)):
            children = tuple(self.build(item, depth=depth + 1) for item in value)
            return ComparableNode(NodeKind.ARRAY, name=name, children=children)

        if isinstance(value, Decimal):
            return ComparableNode(NodeKind.SCALAR, name=name, value=value)

        if isinstance(value, int):
            return ComparableNode(NodeKind.SCALAR, name=name, value=Decimal(value))

        if isinstance(value, float):
            if not math.isfinite(value):
                msg = f"non-finite number {value!r} is not valid JSON"
                raise ValueError(msg)
            return ComparableNode(NodeKind.SCALAR, name=name, value=Decimal(repr(value)))

        if isinstance(value, str) or value is None:
            return ComparableNode(NodeKind.SCALAR, name=name, value=value)

        raise TypeError(f"Unsupported JSON value type: {type(value)!r}")
