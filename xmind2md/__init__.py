"""xmind2md: Convert XMind mind maps to Markdown.

A pure Python library for turning .xmind files into readable Markdown.
No external dependencies required.

Usage:
    import xmind2md

    # Convert a file; never raises for bad input
    result = xmind2md.convert("Project Plan.xmind")
    if result.success:
        print(result.content)
        print(result.stats.total_topics)
    else:
        print(result.error)

    # Work with the topic tree directly
    root = xmind2md.read("Project Plan.xmind")
    for topic in root.walk():
        print("  " * topic.level + topic.title)

    # Render with options
    md = xmind2md.to_markdown(root, include_metadata=True)
"""

__version__ = "0.1.0"

from .converter import XmindConverter, convert, convert_batch
from .errors import ConversionError, FileError, ParseError
from .markdown import MarkdownRenderer, sanitize_title, to_markdown
from .markers import DEFAULT_MARKERS, MarkerResolver
from .models import (
    Attachment,
    AttachmentType,
    ConversionMetadata,
    ConversionOptions,
    ConversionResult,
    LinkType,
    Stats,
    Topic,
    TopicLink,
)
from .reader import TopicTreeBuilder, read
from .stats import collect_stats, count_words, format_stats

__all__ = [
    "convert",
    "convert_batch",
    "read",
    "to_markdown",
    "collect_stats",
    "count_words",
    "format_stats",
    "sanitize_title",
    "XmindConverter",
    "TopicTreeBuilder",
    "MarkdownRenderer",
    "MarkerResolver",
    "DEFAULT_MARKERS",
    "ConversionError",
    "ParseError",
    "FileError",
    "Topic",
    "TopicLink",
    "LinkType",
    "Attachment",
    "AttachmentType",
    "Stats",
    "ConversionMetadata",
    "ConversionOptions",
    "ConversionResult",
]
