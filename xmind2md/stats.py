"""Statistics over a converted Topic tree."""

from __future__ import annotations

import re

from .models import AttachmentType, Stats, Topic

# Han, CJK extension A, Hiragana, Katakana: one word per character.
_CJK = re.compile(r"[\u4e00-\u9fa5\u3400-\u4dbf\u3040-\u309f\u30a0-\u30ff]")


def count_words(text: str) -> int:
    """Count words, treating each CJK character as a word."""
    text = text.strip()
    if not text:
        return 0
    cjk_chars = len(_CJK.findall(text))
    return cjk_chars + len(_CJK.sub(" ", text).split())


def collect_stats(root: Topic) -> Stats:
    """Walk the tree once and accumulate counts.

    `max_depth_reached` is the deepest topic level (the root is 0) and
    `root_topics` counts the root's direct children.
    """
    stats = Stats(root_topics=len(root.children))

    for topic in root.walk():
        stats.total_topics += 1
        stats.max_depth_reached = max(stats.max_depth_reached, topic.level)
        stats.level_distribution[topic.level] = stats.level_distribution.get(topic.level, 0) + 1

        stats.word_count += count_words(topic.title)
        stats.char_count += len(topic.title)

        if topic.notes:
            stats.topics_with_notes += 1
            stats.word_count += count_words(topic.notes)
            stats.char_count += len(topic.notes)

        if topic.markers:
            stats.topics_with_markers += 1
            stats.markers_processed += len(topic.markers)

        if topic.links:
            stats.topics_with_links += 1
            stats.links_processed += len(topic.links)

        if topic.attachments:
            stats.topics_with_attachments += 1
            stats.attachments_processed += len(topic.attachments)
            stats.images_processed += sum(
                1 for a in topic.attachments if a.type == AttachmentType.IMAGE
            )

    return stats


def level_distribution(root: Topic) -> dict[int, int]:
    """Number of topics at each level."""
    return dict(collect_stats(root).level_distribution)


def format_stats(stats: Stats) -> str:
    """Human-readable summary of a Stats object."""
    lines = [
        f"Total Topics: {stats.total_topics}",
        f"Max Depth: {stats.max_depth_reached}",
        f"Root Topics: {stats.root_topics}",
        f"Words: {stats.word_count}",
        f"Characters: {stats.char_count}",
        "",
        "Content Counts:",
        f"- Markers: {stats.markers_processed}",
        f"- Links: {stats.links_processed}",
        f"- Attachments: {stats.attachments_processed}",
        f"- Images: {stats.images_processed}",
    ]
    if stats.level_distribution:
        lines.append("")
        lines.append("Topics per Level:")
        for level, count in sorted(stats.level_distribution.items()):
            lines.append(f"- Level {level}: {count}")
    return "\n".join(lines)
