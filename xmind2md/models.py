"""Data models for converted XMind mind maps."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

UNTITLED = "Untitled Topic"


class LinkType(Enum):
    """What a topic hyperlink points at."""
    URL = "url"
    TOPIC = "topic"
    FILE = "file"

    @classmethod
    def from_href(cls, href: str) -> LinkType:
        if href.startswith("#"):
            return cls.TOPIC
        if href.startswith("file://") or href.startswith("./"):
            return cls.FILE
        return cls.URL


class AttachmentType(Enum):
    IMAGE = "image"
    FILE = "file"
    VIDEO = "video"


@dataclass(frozen=True)
class TopicLink:
    """A hyperlink attached to a topic."""
    href: str
    type: LinkType = LinkType.URL
    title: Optional[str] = None


@dataclass(frozen=True)
class Attachment:
    """A file embedded in a topic (in practice, an image)."""
    filename: str
    path: str
    type: AttachmentType = AttachmentType.IMAGE
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class Topic:
    """A single topic node in a mind map.

    Topics form a tree via `children` and are never modified after the
    tree is built. `level` is the distance from the root, which sits at 0.
    """
    id: str
    title: str = UNTITLED
    level: int = 0
    parent_id: Optional[str] = None
    children: tuple[Topic, ...] = ()

    markers: tuple[str, ...] = ()
    links: tuple[TopicLink, ...] = ()
    notes: Optional[str] = None
    labels: tuple[str, ...] = ()
    attachments: tuple[Attachment, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def walk(self):
        """Yield this topic and all descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, title: str) -> Optional[Topic]:
        """Find first descendant with matching title (case-insensitive)."""
        title_lower = title.lower()
        for topic in self.walk():
            if topic.title.lower() == title_lower:
                return topic
        return None

    def count(self) -> int:
        """Total number of descendants (including self)."""
        return sum(1 for _ in self.walk())

    def __str__(self) -> str:
        return self.title

    def __repr__(self) -> str:
        child_count = len(self.children)
        suffix = f" ({child_count} children)" if child_count else ""
        return f"Topic({self.title!r}, level={self.level}{suffix})"


@dataclass
class Stats:
    """Aggregate counts over one converted topic tree."""
    total_topics: int = 0
    max_depth_reached: int = 0
    root_topics: int = 0
    markers_processed: int = 0
    links_processed: int = 0
    attachments_processed: int = 0
    images_processed: int = 0
    word_count: int = 0
    char_count: int = 0
    level_distribution: dict[int, int] = field(default_factory=dict)
    topics_with_notes: int = 0
    topics_with_markers: int = 0
    topics_with_links: int = 0
    topics_with_attachments: int = 0

    def to_dict(self) -> dict:
        return {
            "totalTopics": self.total_topics,
            "maxDepthReached": self.max_depth_reached,
            "rootTopics": self.root_topics,
            "markersProcessed": self.markers_processed,
            "attachmentsProcessed": self.attachments_processed,
            "linksProcessed": self.links_processed,
            "imagesProcessed": self.images_processed,
            "wordCount": self.word_count,
            "charCount": self.char_count,
            "levelDistribution": {str(k): v for k, v in sorted(self.level_distribution.items())},
            "topicsWithNotes": self.topics_with_notes,
            "topicsWithMarkers": self.topics_with_markers,
            "topicsWithLinks": self.topics_with_links,
            "topicsWithAttachments": self.topics_with_attachments,
        }


@dataclass
class ConversionMetadata:
    source_file: str
    timestamp: str
    version: str
    source_format: str = "xmind"
    processing_duration_ms: float = 0.0
    sheet_title: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "sourceFile": self.source_file,
            "sourceFormat": self.source_format,
            "timestamp": self.timestamp,
            "version": self.version,
            "processingDurationMs": self.processing_duration_ms,
        }
        if self.sheet_title is not None:
            data["sheetTitle"] = self.sheet_title
        return data


@dataclass
class ConversionResult:
    """Outcome of converting one document.

    On failure `content` is empty, `stats` is all zeros and `error`
    carries the message.
    """
    content: str
    stats: Stats
    metadata: ConversionMetadata
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "content": self.content,
            "stats": self.stats.to_dict(),
            "metadata": self.metadata.to_dict(),
            "success": self.success,
        }
        if not self.success:
            data["error"] = self.error or ""
        return data


@dataclass
class ConversionOptions:
    """Settings for one converter.

    `markers` holds marker id -> symbol overrides merged over the
    built-in table.
    """
    include_metadata: bool = False
    include_ids: bool = False
    include_topic_links: bool = False
    max_depth: Optional[int] = None
    sheet_index: int = 0
    markers: dict[str, str] = field(default_factory=dict)
