"""
Tests for parsers/task_parser.py.

Covers:
- parse_task_line: checklist grammar, completion, dates, recurrence, tags
- resolve_priority: glyph precedence independent of position
- strip_metadata / display_name_for
- parse_document: line indexes, CRLF, non-task lines
"""

import sys
from pathlib import Path

# Add src to path so imports work without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from tasks_overview.parsers.line_edits import build_task_line
from tasks_overview.parsers.task_parser import (
    display_name_for,
    parse_document,
    parse_task_line,
    resolve_priority,
    strip_metadata,
)


def _parse(line: str):
    return parse_task_line(line, "Inbox.md", 0)


# ---------------------------------------------------------------------------
# Checklist grammar
# ---------------------------------------------------------------------------

class TestGrammar:
    @pytest.mark.parametrize(
        "line",
        [
            "- [ ] Open task",
            "* [ ] Star bullet",
            "    - [x] Indented done",
            "\t* [X] Tab indented",
            "-   [ ]   Extra spaces",
        ],
    )
    def test_matches(self, line):
        assert _parse(line) is not None

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "Plain text",
            "- Plain bullet",
            "- [/] In progress is not a task here",
            "- [ ]",
            "- [ ] ",
            "-[ ] No space after bullet",
            "1. [ ] Numbered",
            "# Heading",
        ],
    )
    def test_not_a_task(self, line):
        assert _parse(line) is None

    def test_completion(self):
        assert _parse("- [ ] Open").completed is False
        assert _parse("- [x] Done").completed is True
        assert _parse("- [X] Done upper").completed is True

    def test_raw_line_trimmed(self):
        task = _parse("    - [ ] Indented task   ")
        assert task.raw_line == "- [ ] Indented task"

    def test_coordinates(self):
        task = parse_task_line("- [ ] A task", "Projects/Home.md", 7)
        assert task.source_id == "Projects/Home.md"
        assert task.display_name == "Home"
        assert task.line_index == 7
        assert task.ref == "Projects/Home.md:7"


# ---------------------------------------------------------------------------
# Metadata extraction
# ---------------------------------------------------------------------------

class TestFields:
    def test_buy_milk_scenario(self):
        task = _parse("- [ ] Buy milk 📅 2024-05-01 #errand")
        assert task.text == "Buy milk #errand"
        assert task.due_date == "2024-05-01"
        assert task.tags == ("#errand",)
        assert task.priority == "normal"
        assert task.completed is False

    def test_done_date(self):
        task = _parse("- [x] Call dentist ✅ 2024-05-01")
        assert task.done_date == "2024-05-01"
        assert task.text == "Call dentist"

    def test_all_date_markers_stripped(self):
        task = _parse(
            "- [ ] Plan trip 📅 2024-06-01 ⏳ 2024-05-20 🛫 2024-05-18 ➕ 2024-05-01"
        )
        assert task.text == "Plan trip"
        assert task.due_date == "2024-06-01"
        assert task.done_date is None

    def test_date_without_space(self):
        assert _parse("- [ ] Tight 📅2024-05-01").due_date == "2024-05-01"

    def test_wrong_digit_count_is_absent(self):
        task = _parse("- [ ] Bad date 📅 2024-5-1")
        assert task.due_date is None
        assert "📅" in task.text

    def test_long_number_is_absent(self):
        assert _parse("- [ ] Too long 📅 2024-05-011").due_date is None

    def test_impossible_calendar_date_is_absent(self):
        task = _parse("- [ ] Nope 📅 2024-02-30")
        assert task.due_date is None

    def test_recurrence_up_to_next_marker(self):
        task = _parse("- [ ] Water plants 🔁 every week 📅 2024-05-03")
        assert task.recurrence == "every week"
        assert task.due_date == "2024-05-03"
        assert task.text == "Water plants"

    def test_recurrence_to_end_of_line(self):
        task = _parse("- [ ] Pay bills 🔁 every month on the 1st")
        assert task.recurrence == "every month on the 1st"
        assert task.text == "Pay bills"

    def test_recurrence_stops_at_priority(self):
        task = _parse("- [ ] Review 🔁 every day ⏫")
        assert task.recurrence == "every day"
        assert task.priority == "high"

    def test_empty_recurrence_is_absent(self):
        assert _parse("- [ ] Odd 🔁 📅 2024-05-01").recurrence is None

    def test_tags_in_order_with_duplicates(self):
        task = _parse("- [ ] Mixed #Work/Project #home #Work/Project")
        assert task.tags == ("#Work/Project", "#home", "#Work/Project")
        assert task.text == "Mixed #Work/Project #home #Work/Project"

    def test_no_metadata(self):
        task = _parse("- [ ] Just a task")
        assert task.text == "Just a task"
        assert task.due_date is None
        assert task.done_date is None
        assert task.recurrence is None
        assert task.tags == ()

    def test_unrecognised_content_kept_in_text(self):
        task = _parse("- [ ] See [[Note#Section]] 🆔 abc123")
        assert "[[Note#Section]]" in task.text
        assert "🆔 abc123" in task.text


# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------

class TestPriority:
    @pytest.mark.parametrize(
        "glyph,expected",
        [("🔺", "highest"), ("⏫", "high"), ("🔼", "medium"), ("🔽", "low"), ("⏬", "lowest")],
    )
    def test_single_glyph(self, glyph, expected):
        task = _parse(f"- [ ] Task {glyph}")
        assert task.priority == expected
        assert task.text == "Task"

    def test_default_normal(self):
        assert resolve_priority("Nothing here") == "normal"

    def test_multiple_glyphs_highest_precedence_wins(self):
        assert resolve_priority("a ⏬ b 🔺") == "highest"
        assert resolve_priority("a 🔺 b ⏬") == "highest"
        assert resolve_priority("🔽 then 🔼") == "medium"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_strip_metadata_collapses_whitespace(self):
        assert strip_metadata("A  ⏫  task 📅 2024-01-01   end") == "A task end"

    @pytest.mark.parametrize(
        "source_id,expected",
        [
            ("Inbox.md", "Inbox"),
            ("Projects/Home.md", "Home"),
            ("a/b/c.notes.md", "c.notes"),
            ("README", "README"),
        ],
    )
    def test_display_name(self, source_id, expected):
        assert display_name_for(source_id) == expected


# ---------------------------------------------------------------------------
# parse_document
# ---------------------------------------------------------------------------

class TestParseDocument:
    def test_line_indexes(self):
        content = "# Today\n\n- [ ] First\nnotes\n- [x] Second\n"
        tasks = parse_document(content, "Daily.md")
        assert [t.line_index for t in tasks] == [2, 4]
        assert [t.text for t in tasks] == ["First", "Second"]

    def test_crlf(self):
        tasks = parse_document("- [ ] One\r\n- [ ] Two 📅 2024-05-01\r\n", "Win.md")
        assert [t.text for t in tasks] == ["One", "Two"]
        assert tasks[1].due_date == "2024-05-01"
        assert tasks[1].raw_line == "- [ ] Two 📅 2024-05-01"

    def test_empty_document(self):
        assert parse_document("", "Empty.md") == []

    def test_parse_is_deterministic(self):
        content = "- [ ] A ⏫ #x\n- [x] B ✅ 2024-01-01\n"
        assert parse_document(content, "D.md") == parse_document(content, "D.md")


# ---------------------------------------------------------------------------
# Field round-trip through a synthesized line
# ---------------------------------------------------------------------------

class TestRoundTrip:
    @pytest.mark.parametrize(
        "line",
        [
            "- [ ] Pay rent ⏫ 📅 2024-06-01",
            "- [x] Old thing 🔽 ✅ 2024-01-02",
            "- [ ] Gym 🔁 every week 📅 2024-05-06 🔺",
        ],
    )
    def test_fields_survive_resynthesis(self, line):
        task = _parse(line)
        rebuilt = build_task_line(task.text, task.priority, task.due_date)
        if task.recurrence:
            rebuilt = f"{rebuilt} 🔁 {task.recurrence}"
        if task.completed:
            rebuilt = rebuilt.replace("[ ]", "[x]", 1)
        again = _parse(rebuilt)
        assert again.completed == task.completed
        assert again.priority == task.priority
        assert again.due_date == task.due_date
        assert again.recurrence == task.recurrence
