from .task import (
    PRIORITY_ORDER,
    MutationResult,
    MutationStatus,
    Priority,
    TaskRecord,
    split_ref,
)
from .view_state import SortDirection, SortKey, ViewMode, ViewState

__all__ = [
    "PRIORITY_ORDER",
    "MutationResult",
    "MutationStatus",
    "Priority",
    "TaskRecord",
    "split_ref",
    "SortDirection",
    "SortKey",
    "ViewMode",
    "ViewState",
]
