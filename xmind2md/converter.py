"""Convert .xmind files to Markdown, end to end.

`XmindConverter.convert` never raises for bad input: unreadable or corrupt
archives, malformed XML, documents without a root topic and maps nested
too deeply come back as a ConversionResult with ``success=False`` and an
error message.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from . import __version__
from .archive import read_archive, read_content_xml
from .errors import ConversionError, ParseError
from .markdown import MarkdownRenderer
from .markers import MarkerResolver
from .models import (
    ConversionMetadata,
    ConversionOptions,
    ConversionResult,
    Stats,
    Topic,
)
from .reader import (
    NESTED_TOO_DEEPLY,
    TopicTreeBuilder,
    locate_sheet,
    root_topic_of,
    title_of_sheet,
)
from .stats import collect_stats
from .xmlnode import RawXmlNode, parse_xml

logger = logging.getLogger(__name__)

Source = Union[bytes, str, Path]


class XmindConverter:
    """Runs archive -> XML -> topic tree -> Markdown + stats."""

    def __init__(self, options: Optional[ConversionOptions] = None):
        self.options = options or ConversionOptions()
        self.resolver = MarkerResolver(self.options.markers)

    def convert(self, source: Source, source_name: Optional[str] = None) -> ConversionResult:
        """Convert one .xmind file given as a path or raw bytes."""
        if source_name is None:
            source_name = Path(source).name if isinstance(source, (str, Path)) else "unknown.xmind"
        start = time.perf_counter()
        try:
            xml_text = read_content_xml(read_archive(source))
        except ConversionError as exc:
            return self._failure(source_name, exc, start)
        return self._convert_xml(xml_text, source_name, start)

    def convert_xml(self, xml_text: str, source_name: str = "content.xml") -> ConversionResult:
        """Convert an already extracted content.xml payload."""
        return self._convert_xml(xml_text, source_name, time.perf_counter())

    def _convert_xml(self, xml_text: str, source_name: str, start: float) -> ConversionResult:
        try:
            sheet = locate_sheet(parse_xml(xml_text), self.options.sheet_index)
            root = self._build(sheet)
            content = self._renderer().render(root)
            stats = collect_stats(root)
        except RecursionError:
            return self._failure(source_name, ParseError(NESTED_TOO_DEEPLY), start)
        except ConversionError as exc:
            return self._failure(source_name, exc, start)

        elapsed = _elapsed_ms(start)
        logger.info(
            "Converted %s: %d topics, max depth %d",
            source_name, stats.total_topics, stats.max_depth_reached,
        )
        return ConversionResult(
            content=content,
            stats=stats,
            metadata=self._metadata(source_name, elapsed, title_of_sheet(sheet)),
        )

    def convert_batch(self, sources: Iterable[Source]) -> list[ConversionResult]:
        """Convert several files in order; failures don't stop the batch."""
        results = []
        for source in sources:
            result = self.convert(source)
            if not result.success:
                logger.warning("Failed to convert %s: %s", result.metadata.source_file, result.error)
            results.append(result)
        return results

    def parse(self, xml_text: str) -> Topic:
        """Parse a content.xml payload into a Topic tree.

        Raises:
            ParseError: If the XML is malformed, has no root topic or is
                nested too deeply.
        """
        sheet = locate_sheet(parse_xml(xml_text), self.options.sheet_index)
        try:
            return self._build(sheet)
        except RecursionError as exc:
            raise ParseError(NESTED_TOO_DEEPLY) from exc

    def render(self, root: Topic) -> str:
        return self._renderer().render(root)

    def _build(self, sheet: RawXmlNode) -> Topic:
        builder = TopicTreeBuilder(self.resolver, max_depth=self.options.max_depth)
        return builder.build(root_topic_of(sheet))

    def _renderer(self) -> MarkdownRenderer:
        return MarkdownRenderer(
            include_metadata=self.options.include_metadata,
            include_ids=self.options.include_ids,
            include_topic_links=self.options.include_topic_links,
        )

    def _metadata(
        self, source_name: str, elapsed: float, title: Optional[str] = None
    ) -> ConversionMetadata:
        return ConversionMetadata(
            source_file=source_name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            version=__version__,
            processing_duration_ms=elapsed,
            sheet_title=title,
        )

    def _failure(self, source_name: str, exc: ConversionError, start: float) -> ConversionResult:
        logger.debug("Conversion of %s failed: %s", source_name, exc)
        elapsed = _elapsed_ms(start)
        return ConversionResult(
            content="",
            stats=Stats(),
            metadata=self._metadata(source_name, elapsed),
            success=False,
            error=str(exc),
        )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def convert(
    source: Source,
    options: Optional[ConversionOptions] = None,
    source_name: Optional[str] = None,
) -> ConversionResult:
    """One-shot conversion of a single .xmind file."""
    return XmindConverter(options).convert(source, source_name)


def convert_batch(
    sources: Iterable[Source], options: Optional[ConversionOptions] = None
) -> list[ConversionResult]:
    return XmindConverter(options).convert_batch(sources)
