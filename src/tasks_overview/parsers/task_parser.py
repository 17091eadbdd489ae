"""
Parser for Obsidian Tasks checklist lines.

Main API:
    parse_task_line(line, source_id, line_index)  → TaskRecord | None
    parse_document(content, source_id)             → List[TaskRecord]

Only lines of the form ``- [ ] ...`` / ``* [x] ...`` are tasks. Metadata
tokens are extracted independently of each other and then stripped from the
description; tags stay in the description text. Nothing here raises: a line
that does not match is "not a task", a malformed token is an absent field.
"""

import re
from typing import List, Optional, Tuple

from tasks_overview.models.task import TaskRecord
from tasks_overview.utils.dates import parse_iso_date
from tasks_overview.utils.formatting import (
    DATE_MARKERS,
    DONE_MARKER,
    DUE_MARKER,
    GLYPH_TO_PRIORITY,
    PRIORITY_GLYPHS,
    RECURRENCE_MARKER,
    RECURRENCE_STOP_GLYPHS,
)

_TASK_LINE_RE = re.compile(r"^\s*[-*]\s+\[([ xX])\]\s+(.+)$")

# A date after a marker must be exactly YYYY-MM-DD, not the prefix of a longer number
_DATE = r"(\d{4}-\d{2}-\d{2})(?!\d)"

_DUE_RE = re.compile(re.escape(DUE_MARKER) + r"\s*" + _DATE)
_DONE_RE = re.compile(re.escape(DONE_MARKER) + r"\s*" + _DATE)
_ANY_DATE_TOKEN_RE = re.compile(
    "(?:" + "|".join(re.escape(m) for m in DATE_MARKERS) + r")\s*" + _DATE
)

_STOP_CLASS = "".join(re.escape(g) for g in RECURRENCE_STOP_GLYPHS)
_RECURRENCE_RE = re.compile(re.escape(RECURRENCE_MARKER) + rf"\s*([^{_STOP_CLASS}\n]*)")

_PRIORITY_GLYPH_RE = re.compile("|".join(re.escape(g) for g in PRIORITY_GLYPHS.values()))

_TAG_RE = re.compile(r"#[\w/]+")

_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------

def _extract_date(pattern: re.Pattern, content: str) -> Optional[str]:
    m = pattern.search(content)
    if not m or parse_iso_date(m.group(1)) is None:
        return None
    return m.group(1)


def _extract_recurrence(content: str) -> Optional[str]:
    m = _RECURRENCE_RE.search(content)
    if not m:
        return None
    return m.group(1).strip() or None


def resolve_priority(content: str) -> str:
    """
    Resolve the single priority of a line.

    All glyphs present are collected first and the winner is picked from the
    precedence table, so the result does not depend on where in the line
    each glyph appears. No glyph means "normal".
    """
    found = {GLYPH_TO_PRIORITY[g] for g in _PRIORITY_GLYPH_RE.findall(content)}
    for name in PRIORITY_GLYPHS:
        if name in found:
            return name
    return "normal"


def strip_metadata(content: str) -> str:
    """Remove date tokens, the recurrence rule and priority glyphs; collapse whitespace."""
    text = _ANY_DATE_TOKEN_RE.sub("", content)
    text = _RECURRENCE_RE.sub("", text)
    text = _PRIORITY_GLYPH_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def display_name_for(source_id: str) -> str:
    """'Projects/Home.md' → 'Home'."""
    name = source_id.rsplit("/", 1)[-1]
    return re.sub(r"\.md$", "", name)


def match_task_line(line: str) -> Optional[Tuple[bool, str]]:
    """Return (completed, content) if the line is a checklist item, else None."""
    m = _TASK_LINE_RE.match(line.rstrip("\r\n"))
    if not m:
        return None
    return m.group(1).lower() == "x", m.group(2)


# ---------------------------------------------------------------------------
# Main parse API
# ---------------------------------------------------------------------------

def parse_task_line(line: str, source_id: str, line_index: int) -> Optional[TaskRecord]:
    """
    Parse one line into a TaskRecord.

    Args:
        line: Raw line text (without the newline)
        source_id: Identifier of the owning document
        line_index: Zero-based index of the line in the document

    Returns:
        TaskRecord, or None if the line is not a checklist item
    """
    matched = match_task_line(line)
    if matched is None:
        return None
    completed, content = matched

    return TaskRecord(
        raw_line=line.strip(),
        text=strip_metadata(content),
        source_id=source_id,
        display_name=display_name_for(source_id),
        line_index=line_index,
        completed=completed,
        priority=resolve_priority(content),
        due_date=_extract_date(_DUE_RE, content),
        done_date=_extract_date(_DONE_RE, content),
        recurrence=_extract_recurrence(content),
        tags=tuple(_TAG_RE.findall(content)),
    )


def parse_document(content: str, source_id: str) -> List[TaskRecord]:
    """Parse every checklist line of a document, in line order."""
    records: List[TaskRecord] = []
    for index, line in enumerate(content.split("\n")):
        record = parse_task_line(line, source_id, index)
        if record is not None:
            records.append(record)
    return records
