"""Derived output formats: plain text and JSON."""

from __future__ import annotations

import json
import re

from .models import ConversionResult

_STRIP_RULES = [
    (re.compile(r"^<!--.*?-->\n?", re.MULTILINE | re.DOTALL), ""),  # metadata comment
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),                   # headings
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),                          # bold
    (re.compile(r"\*([^*]+)\*"), r"\1"),                              # italic
    (re.compile(r"`([^`]+)`"), r"\1"),                                # inline code
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), r"\1"),                   # images
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),                    # links
    (re.compile(r"^(\s*)[-*+]\s+", re.MULTILINE), r"\1"),             # bullets
    (re.compile(r"^(\s*)>\s?", re.MULTILINE), r"\1"),                 # blockquotes
    (re.compile(r"\n{3,}"), "\n\n"),
]


def strip_markdown(markdown: str) -> str:
    """Reduce rendered Markdown to plain text, keeping indentation."""
    text = markdown
    for pattern, replacement in _STRIP_RULES:
        text = pattern.sub(replacement, text)
    return text.replace("&lt;", "<").replace("&gt;", ">").strip() + "\n"


def result_to_json(result: ConversionResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
