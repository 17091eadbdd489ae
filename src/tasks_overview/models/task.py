"""
Core task data models.

A TaskRecord is an immutable snapshot of one checklist line. Records are
rebuilt from the source documents on every scan and never edited in place;
write-back works on the raw document text (see parsers.line_edits), which is
why raw_line is kept verbatim next to the parsed fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Tuple

Priority = Literal["highest", "high", "medium", "normal", "low", "lowest"]

# Ordering used both for sorting and for the priority grouping.
PRIORITY_ORDER: Tuple[str, ...] = ("highest", "high", "medium", "normal", "low", "lowest")


@dataclass(frozen=True)
class TaskRecord:
    """
    A single checklist line parsed from a source document.

    line_index is the zero-based position of the line at scan time. It is a
    snapshot coordinate, not an identity: any mutation of the document can
    move it, so consumers re-derive the collection after writing.
    """

    raw_line: str
    text: str
    source_id: str
    display_name: str
    line_index: int
    completed: bool = False
    priority: Priority = "normal"
    due_date: Optional[str] = None
    done_date: Optional[str] = None
    recurrence: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ref(self) -> str:
        """Task reference in 'source_id:line_index' format."""
        return f"{self.source_id}:{self.line_index}"

    @property
    def priority_rank(self) -> int:
        return PRIORITY_ORDER.index(self.priority)


def split_ref(ref: str) -> Tuple[str, int]:
    """
    Split a 'source_id:line_index' reference.

    Raises ValueError if the reference has no numeric line suffix.
    """
    source_id, sep, index = ref.rpartition(":")
    if not sep or not source_id or not index.isdigit():
        raise ValueError(f"Invalid task reference: {ref!r}")
    return source_id, int(index)


class MutationStatus(str, Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CANCELLED = "cancelled"


@dataclass
class MutationResult:
    """
    Outcome of a write-back operation.

    Callers decide what to do with a conflict (rebuild and retry, or report
    it); nothing is written unless status is APPLIED.
    """

    status: MutationStatus
    source_id: str
    line_index: Optional[int] = None
    line: Optional[str] = None
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.status is MutationStatus.APPLIED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "source_id": self.source_id,
            "line_index": self.line_index,
            "line": self.line,
            "message": self.message,
        }
