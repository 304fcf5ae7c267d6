"""ComparableNode dataclass and NodeKind StrEnum for the format-neutral tree.

Every supported document format (JSON, XML, CSV) is loaded into the same
three-kind tree so that a single comparison engine can walk any of them.
Paths are never stored on nodes; they are computed while the engine walks
the tree, using the addressing convention of the document's dialect.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any


class NodeKind(StrEnum):
    """Enumeration of the three structural node kinds.

    - SCALAR -> "scalar" : A leaf value (string, number, bool, null, text, cell)
    - OBJECT -> "object" : Children identified by key (JSON object, XML element, CSV row)
    - ARRAY  -> "array"  : Children identified by position
    """

    SCALAR = auto()
    OBJECT = auto()
    ARRAY = auto()


class DocumentFormat(StrEnum):
    """The document formats a tree can be loaded from."""

    JSON = auto()
    XML = auto()
    CSV = auto()


@dataclass(frozen=True, slots=True)
class ComparableNode:
    """A node in the format-neutral comparison tree.

    Attributes:
        kind:     Which kind of node this is (see NodeKind).
        name:     Property key, XML local name or CSV column header.  ``None``
                  for positional array elements and document roots.
        value:    Scalar payload; always ``None`` for OBJECT and ARRAY nodes
                  (``None`` on a SCALAR encodes JSON ``null``).
        children: Child nodes.  OBJECT children are identified by ``key``,
                  ARRAY children by position.
        key:      Identity of this node inside a parent OBJECT.  Defaults to
                  ``name``; XML uses the namespace-qualified tag here.
        ordered:  Fixed ordering policy for this container, or ``None`` when
                  the comparison options decide.
        format:   Document format the tree was loaded from (root only).
        source:   Raw text the tree was loaded from (root only).  Used for the
                  report preview, never for comparison.
    """

    kind: NodeKind
    name: str | None = None
    value: Any = None
    children: tuple[ComparableNode, ...] = ()
    key: str | None = None
    ordered: bool | None = None
    format: DocumentFormat | None = field(default=None, compare=False)
    source: str | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.key is None and self.name is not None:
            object.__setattr__(self, "key", self.name)
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

        if self.kind is NodeKind.SCALAR:
            if self.children:
                msg = f"scalar node {self.name!r} cannot have children"
                raise ValueError(msg)
            return

        if self.value is not None:
            msg = f"{self.kind} node {self.name!r} cannot carry a scalar value"
            raise ValueError(msg)

        if self.kind is NodeKind.OBJECT:
            seen: set[str] = set()
            for child in self.children:
                if child.key is None:
                    msg = f"object node {self.name!r} has a child without a key"
                    raise ValueError(msg)
                if child.key in seen:
                    msg = f"object node {self.name!r} has duplicate key {child.key!r}"
                    raise ValueError(msg)
                seen.add(child.key)

    @property
    def is_scalar(self) -> bool:
        return self.kind is NodeKind.SCALAR

    @property
    def is_container(self) -> bool:
        return self.kind is not NodeKind.SCALAR

    def items(self) -> Iterator[tuple[str, ComparableNode]]:
        """Yield ``(key, child)`` pairs of an OBJECT node in document order."""
        for child in self.children:
            yield child.key or "", child

    def get(self, key: str) -> ComparableNode | None:
        """Return the child stored under ``key``, or ``None``."""
        for child in self.children:
            if child.key == key:
                return child
        return None
