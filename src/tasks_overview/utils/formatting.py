"""
Marker glyphs and display labels for the Obsidian Tasks line format.

This module is the single source of truth for which emoji introduce which
piece of metadata. The parser, the line editor and the board labels all read
from these tables.
"""

from typing import Dict, Tuple

# Date markers: <emoji> YYYY-MM-DD
DUE_MARKER = "📅"
SCHEDULED_MARKER = "⏳"
START_MARKER = "🛫"
DONE_MARKER = "✅"
CREATED_MARKER = "➕"
RECURRENCE_MARKER = "🔁"

DATE_MARKERS: Tuple[str, ...] = (
    DUE_MARKER,
    SCHEDULED_MARKER,
    START_MARKER,
    DONE_MARKER,
    CREATED_MARKER,
)

# Earlier entries take precedence when a line carries several glyphs.
PRIORITY_GLYPHS: Dict[str, str] = {
    "highest": "🔺",
    "high": "⏫",
    "medium": "🔼",
    "low": "🔽",
    "lowest": "⏬",
}

GLYPH_TO_PRIORITY: Dict[str, str] = {v: k for k, v in PRIORITY_GLYPHS.items()}

# Glyphs that end a recurrence rule
RECURRENCE_STOP_GLYPHS: Tuple[str, ...] = DATE_MARKERS + tuple(PRIORITY_GLYPHS.values())

PRIORITY_LABELS: Dict[str, str] = {
    "highest": "🔺 Highest",
    "high": "⏫ High",
    "medium": "🔼 Medium",
    "normal": "Normal",
    "low": "🔽 Low",
    "lowest": "⏬ Lowest",
}

PRIORITY_COLORS: Dict[str, str] = {
    "highest": "#ef4444",
    "high": "#f97316",
    "medium": "#eab308",
    "normal": "",
    "low": "#64748b",
    "lowest": "#94a3b8",
}

DUE_BUCKET_LABELS: Dict[str, str] = {
    "overdue": "🔴 Overdue",
    "today": "🟡 Today",
    "soon": "🟢 This week",
    "future": "📅 Later",
    "none": "—  No date",
}

EMPTY_BOARD_MESSAGE = "No tasks found"


def render_date_token(marker: str, value: str) -> str:
    """Render a date token, e.g. render_date_token(DUE_MARKER, "2026-02-15") → "📅 2026-02-15"."""
    return f"{marker} {value}"
