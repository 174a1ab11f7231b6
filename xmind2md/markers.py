"""Map XMind marker ids to display symbols."""

from __future__ import annotations

from typing import Optional

DEFAULT_MARKERS: dict[str, str] = {
    # Priority
    "priority-1": "🔴",
    "priority-2": "🟠",
    "priority-3": "🟡",
    "priority-4": "🟢",
    "priority-5": "🔵",
    "priority-6": "⚪",
    # Task progress
    "task-start": "▶",
    "task-half": "◐",
    "task-done": "◼",
    "task-overtime": "⏰",
    "task-wait": "⏸️",
    "task-review": "👁️",
    # Flags
    "flag-red": "🚩",
    "flag-orange": "🏳",
    "flag-yellow": "🏴",
    # Smileys
    "smile-laugh": "😂",
    "smile-think": "🤔",
    "smile-angry": "😠",
    "smile-cry": "😢",
    "smile-cool": "😎",
    # Symbols
    "symbol-ok": "✓",
    "symbol-wrong": "✗",
    "symbol-question": "?",
    "symbol-wait": "⌛",
    "symbol-idea": "💡",
    "symbol-important": "❗",
    "symbol-note": "📝",
    # Arrows
    "arrow-up": "↑",
    "arrow-down": "↓",
    "arrow-left": "←",
    "arrow-right": "→",
    # Short aliases written by older exporters
    "flag": "🚩",
    "star": "⭐",
    "smile": "😊",
    "frown": "☹️",
    "check": "✅",
    "cross": "❌",
    "question": "❓",
    "exclamation": "❗",
    "plus": "➕",
    "minus": "➖",
}
DEFAULT_MARKERS.update({f"month-{n}": "📅" for n in range(1, 13)})
DEFAULT_MARKERS.update({f"week-{n}": "📆" for n in range(1, 5)})


class MarkerResolver:
    """Resolve marker ids through the default table plus overrides.

    Unknown ids come back bracketed (``"[tag-x]"``) so that no marker
    silently disappears from the output.
    """

    def __init__(self, overrides: Optional[dict[str, str]] = None):
        self._table = {**DEFAULT_MARKERS, **(overrides or {})}

    def resolve(self, marker_id: str) -> str:
        symbol = self._table.get(marker_id)
        if symbol:
            return symbol
        return f"[{marker_id}]"
