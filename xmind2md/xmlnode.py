"""Parse XML text into a normalized, schema-agnostic node tree.

Elements that may legally repeat under one parent are always collected
into a list, even when a document holds zero or one of them. Everything
else is kept as a single node. Builders can therefore ask for
``node.sequence("topic")`` without caring whether the exporter wrote one
element or many.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Optional

from .errors import ParseError

logger = logging.getLogger(__name__)

REPEATABLE_ELEMENTS = frozenset({
    "sheet",
    "topic",
    "topics",
    "children",
    "marker-ref",
    "attachment",
    "hyperlink",
    "label",
    "img",
})


def _local_name(name: str) -> str:
    """Drop a ``{namespace}`` or ``prefix:`` qualifier."""
    if "}" in name:
        name = name.rsplit("}", 1)[1]
    if ":" in name:
        name = name.rsplit(":", 1)[1]
    return name


@dataclass
class RawXmlNode:
    """One XML element with namespaces stripped.

    Repeatable children live in `sequences`, all others in `elements`
    (first occurrence wins). `text` is the stripped inline text, or None.
    """
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    elements: dict[str, RawXmlNode] = field(default_factory=dict)
    sequences: dict[str, list[RawXmlNode]] = field(default_factory=dict)
    text: Optional[str] = None

    def element(self, tag: str) -> Optional[RawXmlNode]:
        return self.elements.get(tag)

    def sequence(self, tag: str) -> list[RawXmlNode]:
        return self.sequences.get(tag, [])

    def attr(self, *names: str) -> str:
        """First non-empty attribute among `names`, or ""."""
        for name in names:
            value = self.attributes.get(name, "")
            if value:
                return value
        return ""

    @property
    def has_children(self) -> bool:
        return bool(self.elements) or any(self.sequences.values())


def parse_xml(text: str) -> RawXmlNode:
    """Parse XML text into a RawXmlNode tree.

    Raises:
        ParseError: If the XML is malformed.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ParseError(f"Failed to parse XML: {exc}") from exc
    return _normalize(root)


def _normalize(elem: ET.Element) -> RawXmlNode:
    """Convert an element tree without recursing, so nesting depth is unbounded."""
    root = _make_node(elem)
    stack = [(elem, root)]
    while stack:
        parent_elem, parent = stack.pop()
        for child_elem in parent_elem:
            if not isinstance(child_elem.tag, str):
                continue  # comments, processing instructions
            child = _make_node(child_elem)
            if child.tag in REPEATABLE_ELEMENTS:
                parent.sequences.setdefault(child.tag, []).append(child)
            elif child.tag in parent.elements:
                logger.debug("Ignoring repeated <%s> under <%s>", child.tag, parent.tag)
                continue
            else:
                parent.elements[child.tag] = child
            stack.append((child_elem, child))
    return root


def _make_node(elem: ET.Element) -> RawXmlNode:
    node = RawXmlNode(tag=_local_name(elem.tag))
    for name, value in elem.attrib.items():
        node.attributes.setdefault(_local_name(name), value)
    if elem.text and elem.text.strip():
        node.text = elem.text.strip()
    return node
