"""REST API routes for the prompt library."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from bouldy_vault.tools.prompt_tools import (
    handle_prompt_delete,
    handle_prompt_get,
    handle_prompt_list,
    handle_prompt_track_usage,
    handle_prompt_write,
)


class PromptWriteBody(BaseModel):
    title: str
    content: str
    tags: Optional[List[str]] = None
    category: Optional[str] = None
    variables: Optional[List[str]] = None


def register_prompt_routes(app_router: APIRouter, ctx) -> None:
    @app_router.get("/prompts")
    def list_prompts():
        try:
            return handle_prompt_list(ctx)
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.get("/prompts/{prompt_id}")
    def get_prompt(prompt_id: str):
        result = handle_prompt_get(ctx, prompt_id=prompt_id)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.put("/prompts/{prompt_id}")
    def write_prompt(prompt_id: str, body: PromptWriteBody):
        try:
            return handle_prompt_write(ctx, prompt_id=prompt_id, **body.model_dump())
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.delete("/prompts/{prompt_id}")
    def delete_prompt(prompt_id: str):
        result = handle_prompt_delete(ctx, prompt_id=prompt_id)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.post("/prompts/{prompt_id}/use")
    def use_prompt(prompt_id: str):
        result = handle_prompt_track_usage(ctx, prompt_id=prompt_id)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result
