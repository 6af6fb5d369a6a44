"""REST API routes for notes."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from bouldy_vault.tools.note_tools import (
    handle_migrate_vault,
    handle_note_delete,
    handle_note_list,
    handle_note_read,
    handle_note_write,
)


class NoteWriteBody(BaseModel):
    path: str
    content: str
    title: Optional[str] = None


def register_note_routes(app_router: APIRouter, ctx) -> None:
    @app_router.get("/notes")
    def list_notes():
        try:
            return handle_note_list(ctx)
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.get("/notes/content")
    def read_note(path: str = Query(...)):
        result = handle_note_read(ctx, path=path)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.put("/notes")
    def write_note(body: NoteWriteBody):
        try:
            return handle_note_write(ctx, **body.model_dump())
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.delete("/notes")
    def delete_note(path: str = Query(...)):
        try:
            result = handle_note_delete(ctx, path=path)
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.post("/vault/migrate")
    def migrate_vault():
        try:
            return handle_migrate_vault(ctx)
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
