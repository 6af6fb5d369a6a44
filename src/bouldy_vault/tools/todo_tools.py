"""
Todo and archive tool handlers.

Core logic lives in handle_* functions (return dicts), shared by the MCP
tools and the REST API. Every handler that rewrites todo.txt publishes
``todos_changed`` after the write succeeds; the vault watcher may report
the same write again a moment later.
"""

import json
import logging
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from bouldy_vault import events
from bouldy_vault.errors import TodoNotFoundError
from bouldy_vault.models.todo import TodoSchema
from bouldy_vault.store.archive import archive_completed, list_archive_months, load_archived
from bouldy_vault.utils.dates import parse_due_date

log = logging.getLogger(__name__)


def _normalize_due(due: Optional[str]) -> Optional[str]:
    """Natural-language due date → ISO; empty clears; unparseable raises."""
    if not due:
        return None
    parsed = parse_due_date(due)
    if parsed is None:
        raise ValueError(f"Unrecognised due date: {due!r}")
    return parsed


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [v.strip().lstrip("+@") for v in value.split(",") if v.strip()]


def _changed(ctx) -> None:
    ctx.bus.publish(events.TODOS_CHANGED)


# ---------------------------------------------------------------------------
# Handler functions (return dicts, shared by MCP tools and REST API)
# ---------------------------------------------------------------------------


def handle_todo_list(ctx) -> list[dict]:
    return [t.to_dict() for t in ctx.todo_store().load()]


def handle_todo_create(
    ctx,
    *,
    title: str,
    due: Optional[str] = None,
    priority: Optional[str] = None,
    projects: Optional[List[str]] = None,
    contexts: Optional[List[str]] = None,
) -> dict:
    item = ctx.todo_store().create(
        title,
        due_date=_normalize_due(due),
        priority=priority or None,
        projects=projects,
        contexts=contexts,
    )
    _changed(ctx)
    return item.to_dict()


def _mutation(ctx, fn, *args, **kwargs) -> dict:
    try:
        item = fn(*args, **kwargs)
    except TodoNotFoundError as e:
        return {"error": str(e)}
    _changed(ctx)
    return item.to_dict()


def handle_todo_update(ctx, *, todo_id: int, title: str) -> dict:
    return _mutation(ctx, ctx.todo_store().update_title, todo_id, title)


def handle_todo_toggle(ctx, *, todo_id: int) -> dict:
    return _mutation(ctx, ctx.todo_store().toggle, todo_id)


def handle_todo_set_due(ctx, *, todo_id: int, due: Optional[str]) -> dict:
    return _mutation(ctx, ctx.todo_store().set_due_date, todo_id, _normalize_due(due))


def handle_todo_set_tags(
    ctx,
    *,
    todo_id: int,
    priority: Optional[str] = None,
    projects: Optional[List[str]] = None,
    contexts: Optional[List[str]] = None,
) -> dict:
    return _mutation(
        ctx,
        ctx.todo_store().set_tags,
        todo_id,
        priority=priority,
        projects=projects or [],
        contexts=contexts or [],
    )


def handle_todo_delete(ctx, *, todo_id: int) -> dict:
    try:
        ctx.todo_store().delete(todo_id)
    except TodoNotFoundError as e:
        return {"error": str(e)}
    _changed(ctx)
    return {"deleted": todo_id}


def handle_todo_reorder(ctx, *, old_index: int, new_index: int) -> dict:
    ctx.todo_store().reorder(old_index, new_index)
    _changed(ctx)
    return {"old_index": old_index, "new_index": new_index}


def handle_todo_bulk_due(ctx, *, updates: List[dict]) -> dict:
    pairs = [(int(u["id"]), _normalize_due(u.get("due"))) for u in updates]
    matched = ctx.todo_store().bulk_set_due_dates(pairs)
    if matched:
        _changed(ctx)
    return {"updated": matched}


def handle_subtask_add(ctx, *, todo_id: int, title: str) -> dict:
    return _mutation(ctx, ctx.todo_store().add_subtask, todo_id, title)


def handle_subtask_toggle(ctx, *, todo_id: int, index: int) -> dict:
    return _mutation(ctx, ctx.todo_store().toggle_subtask, todo_id, index)


def handle_subtask_delete(ctx, *, todo_id: int, index: int) -> dict:
    return _mutation(ctx, ctx.todo_store().delete_subtask, todo_id, index)


def handle_todo_facets(ctx) -> dict:
    store = ctx.todo_store()
    return {
        "projects": store.list_projects(),
        "contexts": store.list_contexts(),
        "priorities": store.list_priorities(),
    }


def handle_todo_metadata(ctx) -> dict:
    return ctx.todo_store().load_metadata().model_dump(by_alias=True)


def handle_todo_stats(ctx) -> dict:
    return ctx.todo_store().load_metadata().stats.model_dump(by_alias=True)


def handle_set_daily_limit(ctx, *, limit: int) -> dict:
    if limit < 0:
        raise ValueError("Daily limit must be non-negative")
    return ctx.todo_store().set_daily_limit(limit).model_dump(by_alias=True)


def handle_archive_completed(ctx) -> dict:
    count = archive_completed(ctx.todo_store())
    if count:
        _changed(ctx)
    return {"archived": count}


def handle_archive_load(ctx, *, month: str) -> list[dict]:
    return [a.to_dict() for a in load_archived(ctx.todo_store(), month)]


def handle_archive_months(ctx) -> list[str]:
    return list_archive_months(ctx.todo_store())


def handle_schema_status(ctx) -> dict:
    store = ctx.todo_store()
    schema = store.schema()
    return {
        "version": int(schema),
        "name": schema.name.lower(),
        "marker": store.paths.schema_file.exists(),
    }


def handle_schema_migrate(ctx, *, target: int) -> dict:
    written = ctx.todo_store().migrate_schema(TodoSchema(target))
    if written:
        _changed(ctx)
    return {"version": target, "items_written": written}


# ---------------------------------------------------------------------------
# MCP tool registration (thin wrappers)
# ---------------------------------------------------------------------------


def _dump(fn, *args, **kwargs) -> str:
    try:
        return json.dumps(fn(*args, **kwargs), indent=2)
    except Exception as e:
        log.warning("Tool %s failed: %s", fn.__name__, e)
        return json.dumps({"error": str(e)})


def _dump_dict(fn, *args, **kwargs) -> dict:
    try:
        return fn(*args, **kwargs)
    except Exception as e:
        return {"error": str(e)}


def register_todo_tools(mcp: FastMCP, ctx) -> None:
    """Register todo, archive and schema tools onto the FastMCP instance."""

    @mcp.tool()
    def todo_list() -> str:
        """
        List todos from the vault's todo.txt in file order.

        Ids are line numbers at load time; re-list after any edit before
        using an id again.

        Returns:
            JSON array of todo objects
        """
        return _dump(handle_todo_list, ctx)

    @mcp.tool()
    def todo_add(
        title: str,
        due: Optional[str] = None,
        priority: Optional[str] = None,
        projects: Optional[str] = None,
        contexts: Optional[str] = None,
    ) -> str:
        """
        Append a todo. A creation date is stamped automatically.

        Args:
            title: Todo title
            due: Due date (ISO date or natural language: "Friday", "in 3 days")
            priority: Single uppercase letter, e.g. "A"
            projects: Comma-separated project tags (without "+")
            contexts: Comma-separated context tags (without "@")

        Returns:
            JSON object with the new todo
        """
        return _dump(
            handle_todo_create,
            ctx,
            title=title,
            due=due,
            priority=priority,
            projects=_split_csv(projects),
            contexts=_split_csv(contexts),
        )

    @mcp.tool()
    def todo_update(
        todo_id: int,
        title: Optional[str] = None,
        due: Optional[str] = None,
        priority: Optional[str] = None,
        projects: Optional[str] = None,
        contexts: Optional[str] = None,
    ) -> str:
        """
        Update a todo. Only fields you pass change; pass due="" to clear it.

        Passing any of priority/projects/contexts replaces all three.

        Args:
            todo_id: Line-number id from todo_list
            title: New title
            due: New due date (or "" to clear)
            priority: Single uppercase letter (or "" to clear)
            projects: Comma-separated project tags
            contexts: Comma-separated context tags

        Returns:
            Updated todo JSON or error message
        """
        result: dict = {"error": "Nothing to update"}
        if title is not None:
            result = handle_todo_update(ctx, todo_id=todo_id, title=title)
            if "error" in result:
                return json.dumps(result)
        if due is not None:
            result = _dump_dict(handle_todo_set_due, ctx, todo_id=todo_id, due=due)
            if "error" in result:
                return json.dumps(result)
        if priority is not None or projects is not None or contexts is not None:
            result = _dump_dict(
                handle_todo_set_tags,
                ctx,
                todo_id=todo_id,
                priority=priority,
                projects=_split_csv(projects),
                contexts=_split_csv(contexts),
            )
        return json.dumps(result, indent=2)

    @mcp.tool()
    def todo_toggle(todo_id: int) -> str:
        """Flip a todo between open and completed."""
        return _dump(handle_todo_toggle, ctx, todo_id=todo_id)

    @mcp.tool()
    def todo_delete(todo_id: int) -> str:
        """Delete a todo by line-number id."""
        return _dump(handle_todo_delete, ctx, todo_id=todo_id)

    @mcp.tool()
    def todo_reorder(old_index: int, new_index: int) -> str:
        """Move the todo at position old_index (0-based) to new_index."""
        return _dump(handle_todo_reorder, ctx, old_index=old_index, new_index=new_index)

    @mcp.tool()
    def todo_facets() -> str:
        """Distinct projects, contexts and priorities in use, sorted."""
        return _dump(handle_todo_facets, ctx)

    @mcp.tool()
    def todo_stats() -> str:
        """
        Completion statistics: total, current/longest streak, per-day and
        per-month counts.
        """
        return _dump(handle_todo_stats, ctx)

    @mcp.tool()
    def todo_set_daily_limit(limit: int) -> str:
        """Set the daily todo limit stored in the vault metadata."""
        return _dump(handle_set_daily_limit, ctx, limit=limit)

    @mcp.tool()
    def todo_archive() -> str:
        """
        Move completed todos into this month's archive and update stats.

        Returns:
            JSON with the number of todos archived (0 means nothing was written)
        """
        return _dump(handle_archive_completed, ctx)

    @mcp.tool()
    def archive_months() -> str:
        """List months (YYYY-MM) that have archive files, most recent first."""
        return _dump(handle_archive_months, ctx)

    @mcp.tool()
    def archive_get(month: str) -> str:
        """
        Archived todos for one month.

        Args:
            month: Month key, e.g. "2026-01"
        """
        return _dump(handle_archive_load, ctx, month=month)

    @mcp.tool()
    def todo_schema(migrate_to: Optional[int] = None) -> str:
        """
        Show the vault's todo.txt schema version, or migrate it once.

        Args:
            migrate_to: Target version (2 = tag schema). Downgrades are refused.
        """
        if migrate_to is None:
            return _dump(handle_schema_status, ctx)
        return _dump(handle_schema_migrate, ctx, target=migrate_to)
