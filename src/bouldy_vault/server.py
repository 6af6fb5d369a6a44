"""
Bouldy vault MCP server entry point.

Startup sequence:
1. Read settings (VAULT_ROOT, API_ENABLED, API_PORT, ...) from environment
2. Build the AppContext (event bus + vault stores)
3. Start the VaultWatcher (notes/, prompts/ and todo.txt, debounced)
4. Start REST API server in background thread (if API_ENABLED)
5. Register all MCP tools
6. Run MCP server (stdio transport)
"""

import logging
import sys
import threading

from mcp.server.fastmcp import FastMCP

from bouldy_vault.app_state import AppContext
from bouldy_vault.config import Settings
from bouldy_vault.errors import VaultError
from bouldy_vault.tools import register_all_tools

log = logging.getLogger(__name__)


def _start_api_server(ctx: AppContext, port: int) -> None:
    """Run the FastAPI/uvicorn server in a daemon thread."""
    import uvicorn

    from bouldy_vault.api.app import create_app

    app = create_app(ctx)
    log.info("Starting REST API on port %d", port)
    uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if settings.vault_root is None:
        log.error("VAULT_ROOT environment variable is not set")
        sys.exit(1)
    if not settings.vault_root.is_dir():
        log.error("VAULT_ROOT does not exist or is not a directory: %s", settings.vault_root)
        sys.exit(1)

    log.info("Vault root: %s", settings.vault_root)
    log.info("Todo schema default: v%d", int(settings.todo_schema))

    ctx = AppContext(settings)
    try:
        ctx.start_watcher()
    except VaultError as e:
        # notes/ missing on a fresh vault: tools still work, no live updates
        log.warning("Vault watcher not started: %s", e)

    if settings.api_enabled:
        api_thread = threading.Thread(
            target=_start_api_server, args=(ctx, settings.api_port), daemon=True
        )
        api_thread.start()

    mcp = FastMCP("bouldy-vault")
    register_all_tools(mcp, ctx)

    log.info("Starting bouldy-vault server")
    try:
        mcp.run(transport="stdio")
    finally:
        ctx.stop_watcher()


if __name__ == "__main__":
    main()
