"""Watcher and event-history tool handlers."""

import json
from typing import Optional

from mcp.server.fastmcp import FastMCP

from bouldy_vault.tools.note_tools import handle_migrate_vault


def handle_watcher_status(ctx) -> dict:
    return ctx.watcher_status()


def handle_events(ctx, *, since: int = 0, name: Optional[str] = None) -> dict:
    return {
        "last_seq": ctx.bus.last_seq,
        "events": ctx.bus.recent(since=since, name=name),
    }


def register_vault_tools(mcp: FastMCP, ctx) -> None:
    @mcp.tool()
    def watcher_status() -> str:
        """Vault watcher state: root, debounce window, batches processed."""
        return json.dumps(handle_watcher_status(ctx), indent=2)

    @mcp.tool()
    def vault_events(since: int = 0, name: Optional[str] = None) -> str:
        """
        Recent vault events (note, todo and prompt changes).

        Args:
            since: Only events with a sequence number greater than this
            name: Filter to one event name, e.g. "todos_changed"
        """
        return json.dumps(handle_events(ctx, since=since, name=name), indent=2)

    @mcp.tool()
    def vault_migrate_structure() -> str:
        """Move root-level notes into notes/ (only if notes/ does not exist yet)."""
        try:
            return json.dumps(handle_migrate_vault(ctx), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})
