"""
Unit tests for utils/dates.py
"""

import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from tasks_overview.utils.dates import due_date_status, format_due_date, parse_iso_date

TODAY = date(2024, 5, 1)  # a Wednesday


def _iso(days: int) -> str:
    return (TODAY + timedelta(days=days)).isoformat()


def test_parse_iso_date():
    assert parse_iso_date("2024-05-01") == date(2024, 5, 1)
    assert parse_iso_date("2024-5-1") is None
    assert parse_iso_date("2024-02-30") is None
    assert parse_iso_date("") is None
    assert parse_iso_date(None) is None


@pytest.mark.parametrize(
    "days,expected",
    [
        (-30, "overdue"),
        (-1, "overdue"),
        (0, "today"),
        (1, "soon"),
        (7, "soon"),
        (8, "future"),
        (400, "future"),
    ],
)
def test_due_date_status(days, expected):
    assert due_date_status(_iso(days), TODAY) == expected


def test_due_date_status_absent():
    assert due_date_status(None, TODAY) == "none"
    assert due_date_status("", TODAY) == "none"


def test_due_date_status_total():
    """Every real date lands in exactly one dated bucket."""
    for days in range(-60, 60):
        assert due_date_status(_iso(days), TODAY) in {"overdue", "today", "soon", "future"}


def test_due_date_status_crosses_year():
    assert due_date_status("2025-01-01", date(2024, 12, 31)) == "soon"


def test_format_relative_words():
    assert format_due_date(_iso(0), TODAY) == "Today"
    assert format_due_date(_iso(1), TODAY) == "Tomorrow"
    assert format_due_date(_iso(-1), TODAY) == "Yesterday"


def test_format_overdue_days():
    assert format_due_date(_iso(-5), TODAY) == "5d overdue"


def test_format_weekday_within_week():
    # 2024-05-03 is a Friday; strftime uses the C locale under pytest
    assert format_due_date("2024-05-03", TODAY) == date(2024, 5, 3).strftime("%a")
    assert format_due_date(_iso(7), TODAY) == (TODAY + timedelta(days=7)).strftime("%a")


def test_format_month_day_later():
    label = format_due_date("2024-06-01", TODAY)
    assert label == f"{date(2024, 6, 1).strftime('%b')} 1"
