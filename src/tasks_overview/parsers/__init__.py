from .task_parser import parse_task_line, parse_document, resolve_priority, display_name_for
from .line_edits import toggle_line, build_task_line, append_line, replace_line

__all__ = [
    "parse_task_line",
    "parse_document",
    "resolve_priority",
    "display_name_for",
    "toggle_line",
    "build_task_line",
    "append_line",
    "replace_line",
]
