"""
Board pipeline: filter → sort → group.

build_board is the one call a display layer needs. It takes the current
snapshot and a ViewState value and returns a fresh Board; nothing is cached
between calls.
"""

from datetime import date
from typing import Optional, Sequence

from tasks_overview.models.task import TaskRecord
from tasks_overview.models.view_state import ViewState
from tasks_overview.utils.dates import due_date_status, format_due_date
from tasks_overview.utils.formatting import PRIORITY_COLORS
from tasks_overview.views.filters import apply_filters
from tasks_overview.views.grouping import Board, TaskGroup, group_tasks
from tasks_overview.views.sorting import apply_sort


def build_board(
    tasks: Sequence[TaskRecord],
    view: Optional[ViewState] = None,
    today: Optional[date] = None,
) -> Board:
    view = view or ViewState()
    visible = apply_filters(tasks, view, today)
    visible = apply_sort(visible, view.sort_by, view.sort_dir)
    return group_tasks(visible, view.mode, today)


# ---------------------------------------------------------------------------
# Serialization (shared by MCP tools and REST API)
# ---------------------------------------------------------------------------

def task_to_dict(task: TaskRecord, today: Optional[date] = None) -> dict:
    """Serialize a TaskRecord with its display chips to a JSON-serializable dict."""
    return {
        "ref": task.ref,
        "text": task.text,
        "raw_line": task.raw_line,
        "completed": task.completed,
        "priority": task.priority,
        "priority_color": PRIORITY_COLORS[task.priority],
        "due_date": task.due_date,
        "due_status": due_date_status(task.due_date, today),
        "due_label": format_due_date(task.due_date, today) if task.due_date else None,
        "done_date": task.done_date,
        "recurrence": task.recurrence,
        "tags": list(task.tags),
        "source_id": task.source_id,
        "display_name": task.display_name,
        "line_index": task.line_index,
    }


def group_to_dict(group: TaskGroup, today: Optional[date] = None) -> dict:
    return {
        "key": group.key,
        "label": group.label,
        "source_id": group.source_id,
        "color": group.color,
        "pending_count": group.pending_count,
        "tasks": [task_to_dict(t, today) for t in group.tasks],
    }


def board_to_dict(board: Board, view: ViewState, today: Optional[date] = None) -> dict:
    return {
        "view": view.to_dict(),
        "empty": board.is_empty,
        "message": board.message,
        "groups": [group_to_dict(g, today) for g in board.groups],
    }
