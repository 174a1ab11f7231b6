"""Read XMind content into a tree of Topic objects."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Iterator, Optional, Union

from .archive import read_archive, read_content_xml
from .errors import ParseError
from .markers import MarkerResolver
from .models import (
    UNTITLED,
    Attachment,
    AttachmentType,
    LinkType,
    Topic,
    TopicLink,
)
from .xmlnode import RawXmlNode, parse_xml

logger = logging.getLogger(__name__)

NESTED_TOO_DEEPLY = "Document nested too deeply to convert"

_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "bmp": "image/bmp",
}


def read(
    source: Union[bytes, str, Path],
    *,
    sheet_index: int = 0,
    markers: Optional[dict[str, str]] = None,
    max_depth: Optional[int] = None,
) -> Topic:
    """Read an .xmind file and return its root topic.

    Args:
        source: Path to the .xmind file, or its raw bytes.
        sheet_index: Which sheet to read in a multi-sheet workbook.
        markers: Marker id -> symbol overrides.
        max_depth: Stop descending below this level.

    Raises:
        FileError: If the archive is unreadable or has no content.xml.
        ParseError: If content.xml is malformed or has no root topic.
    """
    xml_text = read_content_xml(read_archive(source))
    document = parse_xml(xml_text)
    builder = TopicTreeBuilder(MarkerResolver(markers), max_depth=max_depth)
    try:
        return builder.build(extract_root_topic(document, sheet_index))
    except RecursionError as exc:
        raise ParseError(NESTED_TOO_DEEPLY) from exc


def locate_sheet(document: RawXmlNode, sheet_index: int = 0) -> RawXmlNode:
    """Return the sheet to convert, or the document itself if it has none."""
    sheets = document.sequence("sheet")
    if not sheets:
        return document
    if not 0 <= sheet_index < len(sheets):
        logger.warning(
            "Sheet %d not found (%d sheets), using the first sheet",
            sheet_index, len(sheets),
        )
        sheet_index = 0
    return sheets[sheet_index]


def sheet_title(document: RawXmlNode, sheet_index: int = 0) -> Optional[str]:
    return title_of_sheet(locate_sheet(document, sheet_index))


def title_of_sheet(sheet: RawXmlNode) -> Optional[str]:
    if sheet.tag != "sheet":
        return None
    title_node = sheet.element("title")
    if title_node is not None and title_node.text:
        return title_node.text
    return None


def extract_root_topic(document: RawXmlNode, sheet_index: int = 0) -> RawXmlNode:
    """Find the central topic element of a parsed content.xml.

    Raises:
        ParseError: If no topic element is present.
    """
    return root_topic_of(locate_sheet(document, sheet_index))


def root_topic_of(sheet: RawXmlNode) -> RawXmlNode:
    """The central topic of an already located sheet."""
    if sheet.tag == "topic":
        return sheet
    topics = sheet.sequence("topic")
    if not topics:
        raise ParseError("No root topic found in XMind content")
    return topics[0]


class TopicTreeBuilder:
    """Build an immutable Topic tree from normalized XML nodes.

    One builder instance tracks ids for one document; use a fresh
    instance (or call `build`, which resets it) per conversion.
    """

    def __init__(
        self,
        resolver: Optional[MarkerResolver] = None,
        *,
        max_depth: Optional[int] = None,
    ):
        self.resolver = resolver or MarkerResolver()
        self.max_depth = max_depth
        self._seen_ids: set[str] = set()

    def build(self, root: RawXmlNode) -> Topic:
        self._seen_ids = set()
        return self._build_topic(root, level=0, parent_id=None)

    def _build_topic(
        self, node: RawXmlNode, level: int, parent_id: Optional[str]
    ) -> Topic:
        topic_id = self._resolve_id(node)

        children = []
        if self.max_depth is None or level < self.max_depth:
            for child_node in _child_topic_nodes(node):
                children.append(self._build_topic(child_node, level + 1, topic_id))

        return Topic(
            id=topic_id,
            title=_extract_title(node),
            level=level,
            parent_id=parent_id,
            children=tuple(children),
            markers=tuple(self._extract_markers(node)),
            links=tuple(_extract_links(node)),
            notes=_extract_notes(node),
            labels=tuple(_extract_labels(node)),
            attachments=tuple(_extract_attachments(node)),
        )

    def _resolve_id(self, node: RawXmlNode) -> str:
        topic_id = node.attr("id")
        if topic_id and topic_id in self._seen_ids:
            logger.debug("Duplicate topic id %r, generating a new one", topic_id)
            topic_id = ""
        if not topic_id:
            topic_id = f"topic-{uuid.uuid4().hex}"
        self._seen_ids.add(topic_id)
        return topic_id

    def _extract_markers(self, node: RawXmlNode) -> list[str]:
        refs = node.element("marker-refs")
        if refs is None:
            return []
        markers = []
        for ref in refs.sequence("marker-ref"):
            marker_id = ref.attr("marker-id", "markerId", "id")
            if marker_id:
                markers.append(self.resolver.resolve(marker_id))
        return markers


def _child_topic_nodes(node: RawXmlNode) -> Iterator[RawXmlNode]:
    """Yield child topic elements in document order.

    Children normally sit at ``children/topics/topic``. Exporters also
    write the topic straight under ``children``, nest ``topics`` one level
    deeper, or wrap topics in an anonymous ``topic`` element.
    """
    for wrapper in node.sequence("children"):
        yield from _unwrap(wrapper.sequence("topic"))
        for container in wrapper.sequence("topics"):
            yield from _unwrap(container.sequence("topic"))
            for nested in container.sequence("topics"):
                yield from _unwrap(nested.sequence("topic"))


def _unwrap(entries: list[RawXmlNode]) -> Iterator[RawXmlNode]:
    for entry in entries:
        if _is_wrapper(entry):
            yield from _unwrap(entry.sequence("topic"))
            for container in entry.sequence("topics"):
                yield from _unwrap(container.sequence("topic"))
        else:
            yield entry


def _is_wrapper(node: RawXmlNode) -> bool:
    if node.attr("id", "title") or node.text or node.element("title") is not None:
        return False
    return bool(node.sequence("topic") or node.sequence("topics"))


def _extract_title(node: RawXmlNode) -> str:
    title_node = node.element("title")
    if title_node is not None and title_node.text:
        return title_node.text
    title = node.attr("title").strip()
    if title:
        return title
    if node.text:
        return node.text
    return UNTITLED


def _extract_links(node: RawXmlNode) -> list[TopicLink]:
    links = []
    href = node.attr("href")
    if href:
        links.append(TopicLink(href=href, type=LinkType.from_href(href)))
    for hyperlink in node.sequence("hyperlink"):
        href = hyperlink.attr("href", "url")
        if href:
            title = hyperlink.attr("title") or hyperlink.text or None
            links.append(TopicLink(href=href, type=LinkType.from_href(href), title=title))
    return links


def _extract_notes(node: RawXmlNode) -> Optional[str]:
    notes = node.element("notes")
    if notes is None:
        return None
    for tag in ("plain", "plain-text"):
        plain = notes.element(tag)
        if plain is not None and plain.text:
            return plain.text
    return None


def _extract_labels(node: RawXmlNode) -> list[str]:
    labels_node = node.element("labels")
    if labels_node is None:
        return []
    labels = []
    for label in labels_node.sequence("label"):
        # Only bare text labels; anything structured is dropped.
        if label.text and not label.attributes and not label.has_children:
            labels.append(label.text)
    return labels


def _extract_attachments(node: RawXmlNode) -> list[Attachment]:
    attachments = []
    for img in node.sequence("img"):
        src = img.attr("src")
        if not src:
            continue
        filename = src.split("/")[-1] or "image"
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        attachments.append(
            Attachment(
                filename=filename,
                path=src,
                type=AttachmentType.IMAGE,
                mime_type=_MIME_TYPES.get(ext, "image/jpeg"),
            )
        )
    return attachments
