"""FastAPI application factory for the vault REST API."""

from fastapi import APIRouter, FastAPI

from bouldy_vault.api.event_routes import register_event_routes
from bouldy_vault.api.note_routes import register_note_routes
from bouldy_vault.api.prompt_routes import register_prompt_routes
from bouldy_vault.api.todo_routes import register_todo_routes


def create_app(ctx) -> FastAPI:
    """Build and return a FastAPI app wired to the given AppContext."""
    app = FastAPI(title="bouldy-vault", docs_url="/api/docs", openapi_url="/api/openapi.json")

    api = APIRouter(prefix="/api")
    register_todo_routes(api, ctx)
    register_note_routes(api, ctx)
    register_prompt_routes(api, ctx)
    register_event_routes(api, ctx)
    app.include_router(api)

    return app
