"""Tree subpackage: the format-neutral node model.

Re-exports the node types:
- ComparableNode: frozen dataclass representing a node in the comparison tree
- NodeKind: StrEnum of the three node kinds (SCALAR, OBJECT, ARRAY)
- DocumentFormat: StrEnum of the supported formats (JSON, XML, CSV)

The loaders live in ``tree.builder`` (JSON), ``tree.xml_builder`` and
``tree.csv_builder``.
"""

from structural_diff.tree.nodes import ComparableNode, DocumentFormat, NodeKind

__all__ = ["ComparableNode", "DocumentFormat", "NodeKind"]
