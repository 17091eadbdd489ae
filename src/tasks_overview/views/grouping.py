"""
Partition a (filtered, sorted) task list into labelled board groups.

Three modes:
    group_by_due_date   fixed buckets overdue → today → soon → future → none
    group_by_priority   fixed tiers highest → ... → lowest
    group_by_page       one group per source document, ordered by source_id

Members keep their incoming order inside each group, and empty groups are
dropped. The result is a Board, which says explicitly when nothing is left.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

from tasks_overview.models.task import PRIORITY_ORDER, TaskRecord
from tasks_overview.models.view_state import ViewMode
from tasks_overview.utils.dates import due_date_status
from tasks_overview.utils.formatting import (
    DUE_BUCKET_LABELS,
    EMPTY_BOARD_MESSAGE,
    PRIORITY_COLORS,
    PRIORITY_LABELS,
)

DUE_BUCKET_ORDER = ("overdue", "today", "soon", "future", "none")


@dataclass
class TaskGroup:
    key: str
    label: str
    tasks: List[TaskRecord] = field(default_factory=list)
    source_id: Optional[str] = None
    color: str = ""

    @property
    def pending_count(self) -> int:
        """Members that are not completed."""
        return sum(1 for t in self.tasks if not t.completed)


@dataclass
class Board:
    mode: ViewMode
    groups: List[TaskGroup] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.groups

    @property
    def message(self) -> Optional[str]:
        return EMPTY_BOARD_MESSAGE if self.is_empty else None

    def all_tasks(self) -> List[TaskRecord]:
        result: List[TaskRecord] = []
        for group in self.groups:
            result.extend(group.tasks)
        return result


def _non_empty(groups: Sequence[TaskGroup]) -> List[TaskGroup]:
    return [g for g in groups if g.tasks]


def group_by_due_date(tasks: Sequence[TaskRecord], today: Optional[date] = None) -> Board:
    buckets: Dict[str, TaskGroup] = {
        key: TaskGroup(key=key, label=DUE_BUCKET_LABELS[key]) for key in DUE_BUCKET_ORDER
    }
    for task in tasks:
        buckets[due_date_status(task.due_date, today)].tasks.append(task)
    return Board(mode=ViewMode.DUE_DATE, groups=_non_empty(list(buckets.values())))


def group_by_priority(tasks: Sequence[TaskRecord]) -> Board:
    tiers: Dict[str, TaskGroup] = {
        key: TaskGroup(key=key, label=PRIORITY_LABELS[key], color=PRIORITY_COLORS[key])
        for key in PRIORITY_ORDER
    }
    for task in tasks:
        tiers[task.priority].tasks.append(task)
    return Board(mode=ViewMode.PRIORITY, groups=_non_empty(list(tiers.values())))


def group_by_page(tasks: Sequence[TaskRecord]) -> Board:
    pages: Dict[str, List[TaskRecord]] = {}
    for task in tasks:
        pages.setdefault(task.source_id, []).append(task)
    groups = [
        TaskGroup(key=source_id, label=members[0].display_name, tasks=members, source_id=source_id)
        for source_id, members in sorted(pages.items())
    ]
    return Board(mode=ViewMode.PAGE, groups=groups)


def group_tasks(tasks: Sequence[TaskRecord], mode: ViewMode, today: Optional[date] = None) -> Board:
    mode = ViewMode(mode)
    if mode is ViewMode.DUE_DATE:
        return group_by_due_date(tasks, today)
    if mode is ViewMode.PRIORITY:
        return group_by_priority(tasks)
    return group_by_page(tasks)
