"""
Text-level write-back for checklist lines.

Every function here takes and returns plain strings. The document is edited
one line at a time and anything the parser does not recognise is carried
through untouched, so a write-back never loses content.
"""

import re
from datetime import date
from typing import List, Optional

from tasks_overview.utils.dates import parse_iso_date
from tasks_overview.utils.formatting import (
    CREATED_MARKER,
    DONE_MARKER,
    DUE_MARKER,
    GLYPH_TO_PRIORITY,
    PRIORITY_GLYPHS,
    render_date_token,
)

_OPEN_BOX_RE = re.compile(r"\[ \]")
_DONE_BOX_RE = re.compile(r"\[x\]", re.IGNORECASE)
_DONE_TOKEN_RE = re.compile(re.escape(DONE_MARKER) + r"\s*\d{4}-\d{2}-\d{2}")


def split_lines(content: str) -> List[str]:
    """Split document content the same way the parser numbers lines."""
    return content.split("\n")


def join_lines(lines: List[str]) -> str:
    return "\n".join(lines)


def toggle_line(line: str, completed: bool, today: Optional[date] = None) -> str:
    """
    Flip the completion state of a checklist line.

    An open task gets ``[x]`` and a done date stamped with today. A completed
    task goes back to ``[ ]``, loses every done-date token and its trailing
    whitespace. A CRLF line keeps its carriage return.
    """
    eol = "\r" if line.endswith("\r") else ""
    line = line[: len(line) - len(eol)]
    if completed:
        line = _DONE_BOX_RE.sub("[ ]", line, count=1)
        return _DONE_TOKEN_RE.sub("", line).rstrip() + eol
    stamp = (today or date.today()).isoformat()
    line = _OPEN_BOX_RE.sub("[x]", line, count=1)
    return f"{line} {render_date_token(DONE_MARKER, stamp)}{eol}"


def priority_glyph(priority: Optional[str]) -> str:
    """
    Resolve a priority given as a glyph or a name to its glyph.

    Empty and "normal" have no glyph. Raises ValueError for anything else.
    """
    if not priority or priority == "normal":
        return ""
    if priority in GLYPH_TO_PRIORITY:
        return priority
    if priority in PRIORITY_GLYPHS:
        return PRIORITY_GLYPHS[priority]
    raise ValueError(f"Unknown priority '{priority}'")


def build_task_line(
    description: str,
    priority: Optional[str] = None,
    due_date: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """
    Synthesize a new open task line.

    Format: ``- [ ] <description> [<priority glyph>] [📅 <due>] ➕ <today>``

    Raises:
        ValueError: empty description, unknown priority, or a due date that
            is not a YYYY-MM-DD calendar date
    """
    description = description.strip()
    if not description:
        raise ValueError("Task description must not be empty")

    parts = [f"- [ ] {description}"]
    glyph = priority_glyph(priority)
    if glyph:
        parts.append(glyph)
    if due_date:
        if parse_iso_date(due_date) is None:
            raise ValueError(f"Invalid due date '{due_date}', expected YYYY-MM-DD")
        parts.append(render_date_token(DUE_MARKER, due_date))
    parts.append(render_date_token(CREATED_MARKER, (today or date.today()).isoformat()))
    return " ".join(parts)


def append_line(content: str, line: str) -> str:
    """
    Append a line at the end of a document.

    A newline is inserted first unless the content already ends with one, so
    an empty document gains a blank first line.
    """
    sep = "" if content.endswith("\n") else "\n"
    return f"{content}{sep}{line}\n"


def replace_line(content: str, index: int, new_line: str) -> str:
    """
    Replace the line at index.

    Raises IndexError if the document has no such line.
    """
    lines = split_lines(content)
    if index < 0 or index >= len(lines):
        raise IndexError(f"Line {index} out of range ({len(lines)} lines)")
    lines[index] = new_line
    return join_lines(lines)
