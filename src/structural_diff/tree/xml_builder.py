"""XmlTreeBuilder: converts XML text into a ComparableNode tree.

Each element becomes an OBJECT whose children are, in this order:

- ``@``: an OBJECT holding the attributes as SCALAR children (always present)
- ``#text``: the element text, whitespace-stripped, when not blank
- one child per distinct child tag: a single element OBJECT when the tag
  occurs once, or an ordered ARRAY of element OBJECTs when it repeats

Elements are identified by namespace-qualified tag (``{uri}local``) while
``name`` keeps the local name, so ignore lists match local names.  Order
across different tags is never significant; repeated same-tag siblings keep
their document order.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from structural_diff.algorithm.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_PREVIEW_CHARACTERS,
)
from structural_diff.errors import XmlLoadError
from structural_diff.tree.nodes import ComparableNode, DocumentFormat, NodeKind

logger = logging.getLogger(__name__)

ATTRIBUTES_KEY = "@"
TEXT_KEY = "#text"


# Whitespace, the XML declaration, processing instructions and comments
_PROLOG_ITEM = re.compile(r"\s+|<\?.*?\?>|<!--.*?-->", re.DOTALL)


def _declares_doctype(text: str) -> bool:
    """Return True when the prolog before the root element holds a DOCTYPE.

    Entity declarations can only appear inside a DOCTYPE, so this covers
    ``<!ENTITY`` as well.  Markup inside comments or CDATA is not a
    declaration and is left alone.
    """
    position = 1 if text.startswith("\ufeff") else 0
    match = _PROLOG_ITEM.match(text, position)
    while match is not None:
        position = match.end()
        match = _PROLOG_ITEM.match(text, position)
    return text.startswith("<!DOCTYPE", position)


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from a Clark-notation tag."""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


@dataclass
class XmlTreeBuilder:
    """Converts XML text into a ComparableNode tree.

    The returned root is an unnamed document OBJECT whose only child is the
    root element.  ``<!DOCTYPE`` and ``<!ENTITY`` declarations are rejected
    (XML bomb protection).
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_preview_characters: int = DEFAULT_MAX_PREVIEW_CHARACTERS

    def load(self, raw: str | bytes) -> ComparableNode:
        """Parse XML text into a tree.

        Raises:
            XmlLoadError: If ``raw`` is not well-formed XML, declares a DTD or
                entities, or nests deeper than ``max_depth``.
        """
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw

        if _declares_doctype(text):
            raise XmlLoadError(
                "DOCTYPE and ENTITY declarations are not allowed",
                source=text,
                max_characters=self.max_preview_characters,
            )

        try:
            element = ET.fromstring(raw)
        except ET.ParseError as exc:
            line, column = exc.position
            reason = str(exc).split(": line", 1)[0]
            raise XmlLoadError(
                f"invalid XML, {reason}",
                source=text,
                line=line,
                column=column + 1,
                max_characters=self.max_preview_characters,
            ) from exc

        try:
            root_element = self._build_element(element, depth=1)
        except XmlLoadError as exc:
            raise XmlLoadError(
                exc.construct, source=text, max_characters=self.max_preview_characters
            ) from exc

        logger.debug(
            "Loaded XML document <%s> (%d characters)", root_element.name, len(text)
        )
        return ComparableNode(
            NodeKind.OBJECT,
            children=(root_element,),
            ordered=False,
            format=DocumentFormat.XML,
            source=text,
        )

    def _build_element(self, element: ET.Element, depth: int) -> ComparableNode:
        if depth > self.max_depth:
            msg = f"document nests deeper than {self.max_depth} levels"
            raise XmlLoadError(msg, max_characters=0)

        children: list[ComparableNode] = [self._build_attributes(element)]

        text = "".join(
            part for part in [element.text, *(child.tail for child in element)] if part
        ).strip()
        if text:
            children.append(ComparableNode(NodeKind.SCALAR, name=TEXT_KEY, value=text))

        # Group child elements by tag, keeping the order of first appearance
        groups: dict[str, list[ET.Element]] = {}
        for child in element:
            groups.setdefault(child.tag, []).append(child)

        for tag, members in groups.items():
            if len(members) == 1:
                children.append(self._build_element(members[0], depth + 1))
            else:
                children.append(
                    ComparableNode(
                        NodeKind.ARRAY,
                        name=local_name(tag),
                        key=tag,
                        children=tuple(
                            self._build_element(member, depth + 1) for member in members
                        ),
                        ordered=True,
                    )
                )

        return ComparableNode(
            NodeKind.OBJECT,
            name=local_name(element.tag),
            key=element.tag,
            children=tuple(children),
            ordered=False,
        )

    def _build_attributes(self, element: ET.Element) -> ComparableNode:
        attributes = tuple(
            ComparableNode(NodeKind.SCALAR, name=local_name(key), key=key, value=value)
            for key, value in element.attrib.items()
        )
        return ComparableNode(NodeKind.OBJECT, name=ATTRIBUTES_KEY, children=attributes)
