"""
Board view state.

The selections a display layer keeps between renders: grouping mode, the
three due-date filter toggles, done visibility and sort order. The state is
a plain value handed to views.board.build_board; the parsing and grouping
code never holds on to it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping


class ViewMode(str, Enum):
    DUE_DATE = "duedate"
    PRIORITY = "priority"
    PAGE = "page"


class SortKey(str, Enum):
    ALPHA = "alpha"
    PRIORITY = "priority"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Filter toggle names accepted by ViewState.toggle_filter
FILTER_FIELDS = {
    "this_month": "filter_this_month",
    "this_year": "filter_this_year",
    "no_date": "filter_no_date",
    "done": "show_done",
}


@dataclass(frozen=True)
class ViewState:
    mode: ViewMode = ViewMode.DUE_DATE
    filter_this_month: bool = False
    filter_this_year: bool = False
    filter_no_date: bool = False
    show_done: bool = False
    sort_by: SortKey = SortKey.ALPHA
    sort_dir: SortDirection = SortDirection.ASC

    @property
    def date_filter_active(self) -> bool:
        return self.filter_this_month or self.filter_this_year or self.filter_no_date

    def select_sort(self, key: SortKey) -> ViewState:
        """Pick a sort key; picking the current key again flips the direction."""
        key = SortKey(key)
        if key is self.sort_by:
            return self.toggle_direction()
        return replace(self, sort_by=key, sort_dir=SortDirection.ASC)

    def toggle_direction(self) -> ViewState:
        flipped = SortDirection.DESC if self.sort_dir is SortDirection.ASC else SortDirection.ASC
        return replace(self, sort_dir=flipped)

    def toggle_filter(self, name: str) -> ViewState:
        """Flip one of the boolean toggles ('this_month', 'this_year', 'no_date', 'done')."""
        if name not in FILTER_FIELDS:
            raise ValueError(f"Unknown filter '{name}'")
        attr = FILTER_FIELDS[name]
        return replace(self, **{attr: not getattr(self, attr)})

    def with_mode(self, mode: ViewMode) -> ViewState:
        return replace(self, mode=ViewMode(mode))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        data["sort_by"] = self.sort_by.value
        data["sort_dir"] = self.sort_dir.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ViewState:
        """Build a ViewState from a dict; missing keys keep their defaults."""
        values = {k: v for k, v in data.items() if k in cls.__dataclass_fields__ and v is not None}
        if "mode" in values:
            values["mode"] = ViewMode(values["mode"])
        if "sort_by" in values:
            values["sort_by"] = SortKey(values["sort_by"])
        if "sort_dir" in values:
            values["sort_dir"] = SortDirection(values["sort_dir"])
        return cls(**values)
