"""
Completion and due-date filters for the board.

Both stages are plain predicates over TaskRecord. The due-date stage only
kicks in when at least one of its toggles is on, and then keeps a record if
any enabled condition matches it.
"""

from datetime import date
from typing import Iterable, List, Optional

from tasks_overview.models.task import TaskRecord
from tasks_overview.models.view_state import ViewState
from tasks_overview.utils.dates import parse_iso_date


def passes_done_filter(task: TaskRecord, show_done: bool) -> bool:
    return show_done or not task.completed


def passes_date_filter(task: TaskRecord, view: ViewState, today: Optional[date] = None) -> bool:
    if not view.date_filter_active:
        return True
    due = parse_iso_date(task.due_date)
    if due is None:
        return view.filter_no_date
    today = today or date.today()
    if view.filter_this_month and due.year == today.year and due.month == today.month:
        return True
    if view.filter_this_year and due.year == today.year:
        return True
    return False


def apply_filters(
    tasks: Iterable[TaskRecord],
    view: ViewState,
    today: Optional[date] = None,
) -> List[TaskRecord]:
    """Apply the done filter, then the due-date filter, keeping input order."""
    kept = [t for t in tasks if passes_done_filter(t, view.show_done)]
    return [t for t in kept if passes_date_filter(t, view, today)]
