"""REST API routes for vault events and watcher status."""

from typing import Optional

from fastapi import APIRouter, Query

from bouldy_vault.tools.vault_tools import handle_events, handle_watcher_status


def register_event_routes(app_router: APIRouter, ctx) -> None:
    @app_router.get("/events")
    def list_events(
        since: int = Query(0, ge=0),
        name: Optional[str] = Query(None),
    ):
        return handle_events(ctx, since=since, name=name)

    @app_router.get("/watcher/status")
    def watcher_status():
        return handle_watcher_status(ctx)
