"""REST API routes for the task board."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from tasks_overview.models.task import MutationStatus
from tasks_overview.tools.task_tools import (
    handle_board,
    handle_cache_status,
    handle_documents,
    handle_rebuild,
    handle_task_create,
    handle_task_edit,
    handle_task_get,
    handle_task_list,
    handle_task_open,
    handle_task_toggle,
)

# MutationResult status → HTTP status for anything that was not applied
_MUTATION_ERRORS = {
    MutationStatus.NOT_FOUND.value: 404,
    MutationStatus.CONFLICT.value: 409,
}


class TaskRefBody(BaseModel):
    ref: str


class TaskEditBody(BaseModel):
    ref: str
    new_line: Optional[str] = None


class TaskCreateBody(BaseModel):
    description: str
    source_id: str
    priority: Optional[str] = None
    due: Optional[str] = None


def _raise_for_mutation(result: dict) -> dict:
    status_code = _MUTATION_ERRORS.get(result.get("status"))
    if status_code:
        raise HTTPException(status_code=status_code, detail=result.get("error"))
    return result


def register_task_routes(app_router: APIRouter, cache) -> None:
    """Attach task REST routes that use the shared cache."""

    @app_router.get("/board")
    def get_board(
        mode: str = Query("duedate"),
        show_done: bool = Query(False),
        this_month: bool = Query(False),
        this_year: bool = Query(False),
        no_date: bool = Query(False),
        sort_by: str = Query("alpha"),
        sort_dir: str = Query("asc"),
    ):
        try:
            return handle_board(
                cache,
                mode=mode,
                show_done=show_done,
                this_month=this_month,
                this_year=this_year,
                no_date=no_date,
                sort_by=sort_by,
                sort_dir=sort_dir,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.get("/tasks")
    def list_tasks(
        completed: Optional[bool] = Query(None),
        source_id: Optional[str] = Query(None),
        priority: Optional[str] = Query(None),
        tag: Optional[str] = Query(None),
        due_before: Optional[str] = Query(None),
        limit: int = Query(200),
    ):
        return handle_task_list(
            cache,
            completed=completed,
            source_id=source_id,
            priority=priority,
            tag=tag,
            due_before=due_before,
            limit=limit,
        )

    @app_router.get("/tasks/lookup")
    def get_task(ref: str = Query(...)):
        result = handle_task_get(cache, ref=ref)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.get("/tasks/open")
    def open_task(ref: str = Query(...)):
        result = handle_task_open(cache, ref=ref)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.post("/tasks/toggle")
    def toggle_task(body: TaskRefBody):
        return _raise_for_mutation(handle_task_toggle(cache, ref=body.ref))

    @app_router.post("/tasks/edit")
    def edit_task(body: TaskEditBody):
        return _raise_for_mutation(handle_task_edit(cache, ref=body.ref, new_line=body.new_line))

    @app_router.post("/tasks", status_code=201)
    def create_task(body: TaskCreateBody):
        try:
            result = handle_task_create(cache, **body.model_dump())
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _raise_for_mutation(result)

    @app_router.get("/documents")
    def list_documents():
        return handle_documents(cache)

    @app_router.post("/cache/rebuild")
    def rebuild_cache():
        return handle_rebuild(cache)

    @app_router.get("/cache/status")
    def get_cache_status():
        return handle_cache_status(cache)
