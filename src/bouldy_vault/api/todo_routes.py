"""REST API routes for todos, archives and completion stats."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from bouldy_vault.tools.todo_tools import (
    handle_archive_completed,
    handle_archive_load,
    handle_archive_months,
    handle_schema_migrate,
    handle_schema_status,
    handle_set_daily_limit,
    handle_subtask_add,
    handle_subtask_delete,
    handle_subtask_toggle,
    handle_todo_bulk_due,
    handle_todo_create,
    handle_todo_delete,
    handle_todo_facets,
    handle_todo_list,
    handle_todo_metadata,
    handle_todo_reorder,
    handle_todo_set_due,
    handle_todo_set_tags,
    handle_todo_stats,
    handle_todo_toggle,
    handle_todo_update,
)


class TodoAddBody(BaseModel):
    title: str
    due: Optional[str] = None
    priority: Optional[str] = None
    projects: List[str] = Field(default_factory=list)
    contexts: List[str] = Field(default_factory=list)


class TodoUpdateBody(BaseModel):
    title: Optional[str] = None
    due: Optional[str] = None
    clear_due: bool = False


class TodoTagsBody(BaseModel):
    priority: Optional[str] = None
    projects: List[str] = Field(default_factory=list)
    contexts: List[str] = Field(default_factory=list)


class ReorderBody(BaseModel):
    old_index: int
    new_index: int


class DueUpdate(BaseModel):
    id: int
    due: Optional[str] = None


class BulkDueBody(BaseModel):
    updates: List[DueUpdate]


class SubtaskBody(BaseModel):
    title: str


class DailyLimitBody(BaseModel):
    daily_limit: int = Field(alias="dailyLimit")


class SchemaMigrateBody(BaseModel):
    target: int


def _call(fn, *args, **kwargs):
    """Run a handler: exceptions → 400, ``{"error"}`` results → 404."""
    try:
        result = fn(*args, **kwargs)
    except Exception as e:
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(result, dict) and "error" in result:
        raise HTTPException(status_code=404, detail=result["error"])
    return result


def register_todo_routes(app_router: APIRouter, ctx) -> None:
    """Attach todo REST routes that use the shared AppContext."""

    @app_router.get("/todos")
    def list_todos():
        return _call(handle_todo_list, ctx)

    @app_router.post("/todos", status_code=201)
    def add_todo(body: TodoAddBody):
        return _call(handle_todo_create, ctx, **body.model_dump())

    @app_router.patch("/todos/{todo_id}")
    def update_todo(todo_id: int, body: TodoUpdateBody):
        result = None
        if body.title is not None:
            result = _call(handle_todo_update, ctx, todo_id=todo_id, title=body.title)
        if body.due is not None or body.clear_due:
            result = _call(handle_todo_set_due, ctx, todo_id=todo_id, due=body.due)
        if result is None:
            raise HTTPException(status_code=400, detail="Nothing to update")
        return result

    @app_router.put("/todos/{todo_id}/tags")
    def set_tags(todo_id: int, body: TodoTagsBody):
        return _call(handle_todo_set_tags, ctx, todo_id=todo_id, **body.model_dump())

    @app_router.post("/todos/{todo_id}/toggle")
    def toggle_todo(todo_id: int):
        return _call(handle_todo_toggle, ctx, todo_id=todo_id)

    @app_router.delete("/todos/{todo_id}")
    def delete_todo(todo_id: int):
        return _call(handle_todo_delete, ctx, todo_id=todo_id)

    @app_router.post("/todos/reorder")
    def reorder_todos(body: ReorderBody):
        return _call(handle_todo_reorder, ctx, **body.model_dump())

    @app_router.post("/todos/due-dates")
    def bulk_due_dates(body: BulkDueBody):
        return _call(
            handle_todo_bulk_due, ctx, updates=[u.model_dump() for u in body.updates]
        )

    @app_router.post("/todos/{todo_id}/subtasks", status_code=201)
    def add_subtask(todo_id: int, body: SubtaskBody):
        return _call(handle_subtask_add, ctx, todo_id=todo_id, title=body.title)

    @app_router.post("/todos/{todo_id}/subtasks/{index}/toggle")
    def toggle_subtask(todo_id: int, index: int):
        return _call(handle_subtask_toggle, ctx, todo_id=todo_id, index=index)

    @app_router.delete("/todos/{todo_id}/subtasks/{index}")
    def delete_subtask(todo_id: int, index: int):
        return _call(handle_subtask_delete, ctx, todo_id=todo_id, index=index)

    @app_router.get("/todo-facets")
    def todo_facets():
        return _call(handle_todo_facets, ctx)

    @app_router.get("/todo-metadata")
    def todo_metadata():
        return _call(handle_todo_metadata, ctx)

    @app_router.put("/todo-metadata/daily-limit")
    def set_daily_limit(body: DailyLimitBody):
        return _call(handle_set_daily_limit, ctx, limit=body.daily_limit)

    @app_router.get("/todo-stats")
    def todo_stats():
        return _call(handle_todo_stats, ctx)

    @app_router.post("/archive")
    def archive_completed():
        return _call(handle_archive_completed, ctx)

    @app_router.get("/archive")
    def archive_months():
        return _call(handle_archive_months, ctx)

    @app_router.get("/archive/{month}")
    def archive_month(month: str):
        return _call(handle_archive_load, ctx, month=month)

    @app_router.get("/todo-schema")
    def schema_status():
        return _call(handle_schema_status, ctx)

    @app_router.post("/todo-schema/migrate")
    def schema_migrate(body: SchemaMigrateBody):
        return _call(handle_schema_migrate, ctx, target=body.target)
