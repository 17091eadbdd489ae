"""
Task tool handlers.

Core logic lives in handle_* functions (return dicts).
MCP wrappers in register_task_tools() serialize to JSON strings.
The REST routes in api.task_routes call the same handlers.
"""

import json
import logging
from datetime import date
from typing import Optional

from mcp.server.fastmcp import FastMCP

from tasks_overview.models.task import MutationResult, MutationStatus, split_ref
from tasks_overview.models.view_state import ViewState
from tasks_overview.parsers.task_parser import display_name_for
from tasks_overview.views.board import board_to_dict, task_to_dict

log = logging.getLogger(__name__)


def _mutation_to_dict(result: MutationResult, today: Optional[date] = None, cache=None) -> dict:
    d = result.to_dict()
    if not result.applied:
        d["error"] = result.message
    elif cache is not None and result.line_index is not None:
        task = cache.find_task(result.source_id, result.line_index)
        if task:
            d["task"] = task_to_dict(task, today)
    return d


def _missing_task(ref: str) -> dict:
    try:
        source_id, line_index = split_ref(ref)
    except ValueError as e:
        return {"status": MutationStatus.NOT_FOUND.value, "error": str(e)}
    return {
        "status": MutationStatus.NOT_FOUND.value,
        "source_id": source_id,
        "line_index": line_index,
        "error": f"Task '{ref}' not found",
    }


# ---------------------------------------------------------------------------
# Handler functions (return dicts, shared by MCP tools and REST API)
# ---------------------------------------------------------------------------


def handle_board(
    cache,
    *,
    mode: str = "duedate",
    show_done: bool = False,
    this_month: bool = False,
    this_year: bool = False,
    no_date: bool = False,
    sort_by: str = "alpha",
    sort_dir: str = "asc",
    today: Optional[date] = None,
) -> dict:
    view = ViewState.from_dict(
        {
            "mode": mode,
            "show_done": show_done,
            "filter_this_month": this_month,
            "filter_this_year": this_year,
            "filter_no_date": no_date,
            "sort_by": sort_by,
            "sort_dir": sort_dir,
        }
    )
    return board_to_dict(cache.board(view, today), view, today)


def handle_task_list(
    cache,
    *,
    completed: Optional[bool] = None,
    source_id: Optional[str] = None,
    priority: Optional[str] = None,
    tag: Optional[str] = None,
    due_before: Optional[str] = None,
    limit: int = 200,
) -> list[dict]:
    tasks = cache.query_tasks(
        completed=completed,
        source_id=source_id,
        priority=priority,
        tag=tag,
        due_before=due_before,
        limit=limit,
    )
    return [task_to_dict(t) for t in tasks]


def handle_task_get(cache, *, ref: str) -> dict:
    task = cache.get_task(ref)
    if not task:
        return {"error": f"Task '{ref}' not found"}
    return task_to_dict(task)


def handle_task_toggle(cache, *, ref: str, today: Optional[date] = None) -> dict:
    task = cache.get_task(ref)
    if not task:
        return _missing_task(ref)
    return _mutation_to_dict(cache.toggle_task(task, today), today, cache)


def handle_task_edit(cache, *, ref: str, new_line: Optional[str] = None) -> dict:
    task = cache.get_task(ref)
    if not task:
        return _missing_task(ref)
    return _mutation_to_dict(cache.edit_task(task, new_line=new_line), cache=cache)


def handle_task_open(cache, *, ref: str) -> dict:
    """Resolve where a task lives so the host editor can jump to it."""
    task = cache.get_task(ref)
    if not task:
        return {"error": f"Task '{ref}' not found"}
    return {
        "source_id": task.source_id,
        "display_name": task.display_name,
        "line_index": task.line_index,
        "location": cache.store.location(task.source_id),
    }


def handle_task_create(
    cache,
    *,
    description: str,
    source_id: str,
    priority: Optional[str] = None,
    due: Optional[str] = None,
    today: Optional[date] = None,
) -> dict:
    result = cache.create_task(
        source_id,
        description,
        priority=priority,
        due_date=due,
        today=today,
    )
    return _mutation_to_dict(result, today, cache)


def handle_documents(cache) -> list[dict]:
    open_counts: dict = {}
    for task in cache.tasks:
        if not task.completed:
            open_counts[task.source_id] = open_counts.get(task.source_id, 0) + 1
    return [
        {
            "source_id": source_id,
            "display_name": display_name_for(source_id),
            "location": cache.store.location(source_id),
            "open_tasks": open_counts.get(source_id, 0),
        }
        for source_id in cache.documents
    ]


def handle_rebuild(cache) -> dict:
    tasks = cache.rebuild()
    log.info("Manual rebuild: %d tasks", len(tasks))
    return cache.status()


def handle_cache_status(cache) -> dict:
    return cache.status()


# ---------------------------------------------------------------------------
# MCP tool registration (thin wrappers)
# ---------------------------------------------------------------------------


def register_task_tools(mcp: FastMCP, cache) -> None:
    """Register all task-related MCP tools onto the FastMCP instance."""

    @mcp.tool()
    def task_board(
        mode: str = "duedate",
        show_done: bool = False,
        this_month: bool = False,
        this_year: bool = False,
        no_date: bool = False,
        sort_by: str = "alpha",
        sort_dir: str = "asc",
    ) -> str:
        """
        Show the task board: tasks filtered, sorted and grouped.

        Args:
            mode: "duedate" (Overdue / Today / This week / Later / No date),
                  "priority" (Highest → Lowest), or "page" (one group per note)
            show_done: Include completed tasks
            this_month: Keep tasks due this calendar month
            this_year: Keep tasks due this calendar year
            no_date: Keep tasks without a due date
                     (the three date filters combine with OR; none set = no date filtering)
            sort_by: "alpha" or "priority"
            sort_dir: "asc" or "desc"

        Returns:
            JSON object with "groups" (label, pending_count, tasks) and "empty"
        """
        try:
            return json.dumps(
                handle_board(
                    cache,
                    mode=mode,
                    show_done=show_done,
                    this_month=this_month,
                    this_year=this_year,
                    no_date=no_date,
                    sort_by=sort_by,
                    sort_dir=sort_dir,
                ),
                indent=2,
            )
        except ValueError as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def task_list(
        completed: Optional[bool] = None,
        source_id: Optional[str] = None,
        priority: Optional[str] = None,
        tag: Optional[str] = None,
        due_before: Optional[str] = None,
        limit: int = 200,
    ) -> str:
        """
        List tasks from the current snapshot.

        Args:
            completed: True = only done, False = only open, omit = all
            source_id: Restrict to one note (path relative to the vault, e.g. "Projects/Home.md")
            priority: "highest", "high", "medium", "normal", "low" or "lowest"
            tag: Only tasks carrying this tag (e.g. "errand" or "#errand")
            due_before: ISO date (YYYY-MM-DD); tasks due on or before this date
            limit: Maximum number of results (default 200)

        Returns:
            JSON array of task objects; each has a "ref" used by the other tools
        """
        return json.dumps(
            handle_task_list(
                cache,
                completed=completed,
                source_id=source_id,
                priority=priority,
                tag=tag,
                due_before=due_before,
                limit=limit,
            ),
            indent=2,
        )

    @mcp.tool()
    def task_get(ref: str) -> str:
        """
        Get a single task by reference.

        Args:
            ref: Task reference "source_id:line_index" (e.g. "Inbox.md:4")
        """
        return json.dumps(handle_task_get(cache, ref=ref), indent=2)

    @mcp.tool()
    def task_toggle(ref: str) -> str:
        """
        Toggle a task between open and done.

        Completing stamps "✅ <today>"; reopening removes the done date.
        A "conflict" status means the note changed since the last scan:
        list the tasks again and retry with the fresh ref.

        Args:
            ref: Task reference "source_id:line_index"
        """
        return json.dumps(handle_task_toggle(cache, ref=ref), indent=2)

    @mcp.tool()
    def task_edit(ref: str, new_line: str) -> str:
        """
        Replace a task's line verbatim.

        Args:
            ref: Task reference "source_id:line_index"
            new_line: Full replacement line, e.g. "- [ ] Call dentist ⏫ 📅 2026-03-01"
        """
        return json.dumps(handle_task_edit(cache, ref=ref, new_line=new_line), indent=2)

    @mcp.tool()
    def task_open(ref: str) -> str:
        """
        Locate a task's note and line so it can be opened in an editor.

        Args:
            ref: Task reference "source_id:line_index"
        """
        return json.dumps(handle_task_open(cache, ref=ref), indent=2)

    @mcp.tool()
    def task_create(
        description: str,
        source_id: str,
        priority: Optional[str] = None,
        due: Optional[str] = None,
    ) -> str:
        """
        Append a new task to the end of a note.

        The line is written as "- [ ] <description> [priority] [📅 due] ➕ <today>".

        Args:
            description: What needs to be done
            source_id: Target note (path relative to the vault)
            priority: Glyph (🔺 ⏫ 🔼 🔽 ⏬) or name ("highest" … "lowest")
            due: Due date, YYYY-MM-DD

        Returns:
            JSON with the mutation status and the new task
        """
        try:
            return json.dumps(
                handle_task_create(
                    cache,
                    description=description,
                    source_id=source_id,
                    priority=priority,
                    due=due,
                ),
                indent=2,
            )
        except ValueError as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def task_documents() -> str:
        """List the notes that were scanned, with their open task counts."""
        return json.dumps(handle_documents(cache), indent=2)

    @mcp.tool()
    def cache_rebuild() -> str:
        """Re-read every note now and return the new cache statistics."""
        return json.dumps(handle_rebuild(cache), indent=2)

    @mcp.tool()
    def cache_status() -> str:
        """
        Show task cache statistics.

        Returns:
            JSON with document count, task count, last scan time, vault root, etc.
        """
        return json.dumps(handle_cache_status(cache), indent=2)
