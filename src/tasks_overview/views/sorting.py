"""Board sort orders."""

import locale
from typing import Iterable, List

from tasks_overview.models.task import TaskRecord
from tasks_overview.models.view_state import SortDirection, SortKey

_SORT_KEYS = {
    SortKey.ALPHA.value: lambda t: locale.strxfrm(t.text.casefold()),
    SortKey.PRIORITY.value: lambda t: t.priority_rank,
}


def apply_sort(tasks: Iterable[TaskRecord], sort_by: str, sort_dir: str = "asc") -> List[TaskRecord]:
    """
    Sort tasks by "alpha" (case-insensitive collated text) or "priority" (highest first).

    The sort is stable in both directions; ties keep their incoming order.
    An unknown key leaves the order as it is.
    """
    tasks = list(tasks)
    key = _SORT_KEYS.get(getattr(sort_by, "value", sort_by))
    if key is None:
        return tasks
    descending = SortDirection(sort_dir) is SortDirection.DESC
    return sorted(tasks, key=key, reverse=descending)
