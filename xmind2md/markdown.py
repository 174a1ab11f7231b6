"""Render a Topic tree as Markdown.

Layout by rendering depth (topic level + 1):
- 1: ``#`` heading for the central topic
- 2: ``##`` headings for main branches
- 3: ``###`` headings
- 4 and deeper: nested bullet lists; items with children end in ``:``

Notes become blockquotes, labels a ``**Tags:**`` line, links ``🔗`` lines
and images inline image references.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable, Optional

from .models import AttachmentType, LinkType, Topic

_WHITESPACE = re.compile(r"\s+")
_TRAILING_COLON = re.compile(r"[:：]+$")


def sanitize_title(title: str) -> str:
    """Collapse whitespace and escape angle brackets."""
    sanitized = _WHITESPACE.sub(" ", title).strip()
    return sanitized.replace("<", "&lt;").replace(">", "&gt;")


def to_markdown(
    root: Topic,
    *,
    include_metadata: bool = False,
    include_ids: bool = False,
    include_topic_links: bool = False,
) -> str:
    """Export a Topic tree to Markdown.

    Args:
        root: The central topic.
        include_metadata: Add an HTML comment with generation time, topic
            count and max depth after the title.
        include_ids: Append ``{: id="..."}`` to every heading and item.
        include_topic_links: Also show links to other topics (``#id``).

    Returns:
        Markdown string.
    """
    renderer = MarkdownRenderer(
        include_metadata=include_metadata,
        include_ids=include_ids,
        include_topic_links=include_topic_links,
    )
    return renderer.render(root)


class MarkdownRenderer:
    """Serialize a Topic tree in one depth-first pass."""

    def __init__(
        self,
        *,
        include_metadata: bool = False,
        include_ids: bool = False,
        include_topic_links: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.include_metadata = include_metadata
        self.include_ids = include_ids
        self.include_topic_links = include_topic_links
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def render(self, root: Topic) -> str:
        lines: list[str] = []

        lines.append(f"# {self._label(root)}")
        lines.append("")

        if self.include_metadata:
            lines.append("<!--")
            lines.append(f"Generated: {self.clock().isoformat()}")
            lines.append(f"Topics: {root.count()}")
            lines.append(f"Max Depth: {max(t.level for t in root.walk())}")
            lines.append("-->")
            lines.append("")

        self._render_extras(root, lines, indent="")

        for child in root.children:
            self._render_topic(child, lines, depth=2)

        return "\n".join(lines)

    def _render_topic(self, topic: Topic, lines: list[str], depth: int) -> None:
        indent = ""

        if depth == 2:
            lines.append(f"## {self._label(topic)}")
            lines.append("")
        elif depth == 3:
            lines.append(f"### {self._label(topic)}")
            if topic.is_leaf:
                lines.append("")
        else:
            indent = "  " * (depth - 4)
            lines.append(f"{indent}- {self._label(topic, bullet=True)}")
            # Extra blocks nest inside the list item.
            indent += "  "

        self._render_extras(topic, lines, indent)

        for child in topic.children:
            self._render_topic(child, lines, depth + 1)

    def _label(self, topic: Topic, bullet: bool = False) -> str:
        title = sanitize_title(topic.title)
        if bullet:
            title = _TRAILING_COLON.sub("", title)
            if not topic.is_leaf:
                title += ":"
        if topic.markers:
            title = f"{topic.markers[0]} {title}"
        if self.include_ids:
            title += f' {{: id="{topic.id}"}}'
        return title

    def _render_extras(self, topic: Topic, lines: list[str], indent: str) -> None:
        """Notes, labels, links and attachments, each followed by a blank line."""
        if topic.notes:
            quoted = [line.strip() for line in topic.notes.split("\n")]
            quoted = [f"{indent}> {line}" for line in quoted if line]
            if quoted:
                lines.extend(quoted)
                lines.append("")

        if topic.labels:
            tags = " ".join(f"`{label}`" for label in topic.labels)
            lines.append(f"{indent}**Tags:** {tags}")
            lines.append("")

        links = [
            link for link in topic.links
            if link.type != LinkType.TOPIC or self.include_topic_links
        ]
        if links:
            for link in links:
                lines.append(f"{indent}🔗 [{link.title or link.href}]({link.href})")
            lines.append("")

        if topic.attachments:
            for attachment in topic.attachments:
                if attachment.type == AttachmentType.IMAGE:
                    lines.append(f"{indent}![{attachment.filename}]({attachment.path})")
                else:
                    lines.append(f"{indent}📎 [{attachment.filename}]({attachment.path})")
            lines.append("")
