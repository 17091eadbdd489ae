"""
Calendar-date helpers: strict ISO parsing and relative due-date buckets.

All arithmetic is whole calendar days against a "today" reference that
defaults to the local date. Weekday and month names follow the process
locale (strftime).
"""

import re
from datetime import date
from typing import Optional

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Upper bound (inclusive) of the "soon" bucket, in days from today
SOON_DAYS = 7


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a strict YYYY-MM-DD string.

    Returns None for anything else, including well-shaped strings that are
    not real calendar dates ("2026-02-30").
    """
    if not value or not _ISO_DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def days_until(value: str, today: Optional[date] = None) -> Optional[int]:
    """Whole days from today to the given date (negative when in the past)."""
    due = parse_iso_date(value)
    if due is None:
        return None
    return (due - (today or date.today())).days


def due_date_status(value: Optional[str], today: Optional[date] = None) -> str:
    """
    Classify a due date into a bucket.

    Returns one of "overdue", "today", "soon", "future", or "none" when the
    date is absent.
    """
    diff = days_until(value, today) if value else None
    if diff is None:
        return "none"
    if diff < 0:
        return "overdue"
    if diff == 0:
        return "today"
    if diff <= SOON_DAYS:
        return "soon"
    return "future"


def format_due_date(value: str, today: Optional[date] = None) -> str:
    """
    Human label for a due date relative to today.

    "Today", "Tomorrow", "Yesterday", "3d overdue", a short weekday name for
    the coming week, otherwise "Jun 1".
    """
    due = parse_iso_date(value)
    if due is None:
        return value
    diff = (due - (today or date.today())).days
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff == -1:
        return "Yesterday"
    if diff < 0:
        return f"{abs(diff)}d overdue"
    if diff <= SOON_DAYS:
        return due.strftime("%a")
    return f"{due.strftime('%b')} {due.day}"
