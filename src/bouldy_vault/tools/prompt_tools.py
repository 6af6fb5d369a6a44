"""Prompt library tool handlers."""

import json
import logging
import re
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from bouldy_vault import events
from bouldy_vault.errors import PromptNotFoundError

log = logging.getLogger(__name__)

_PROMPT_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


def _check_id(prompt_id: str) -> None:
    if not _PROMPT_ID_RE.match(prompt_id):
        raise ValueError(f"Invalid prompt id: {prompt_id!r}")


def handle_prompt_list(ctx) -> list[dict]:
    return [p.to_dict() for p in ctx.prompt_store().list()]


def handle_prompt_get(ctx, *, prompt_id: str) -> dict:
    try:
        return ctx.prompt_store().read(prompt_id).to_dict()
    except PromptNotFoundError as e:
        return {"error": str(e)}


def handle_prompt_write(
    ctx,
    *,
    prompt_id: str,
    title: str,
    content: str,
    tags: Optional[List[str]] = None,
    category: Optional[str] = None,
    variables: Optional[List[str]] = None,
) -> dict:
    _check_id(prompt_id)
    prompt = ctx.prompt_store().write(
        prompt_id,
        title=title,
        content=content,
        tags=tags,
        category=category,
        variables=variables,
    )
    data = prompt.to_dict()
    ctx.bus.publish(events.PROMPT_SAVED, data)
    return data


def handle_prompt_delete(ctx, *, prompt_id: str) -> dict:
    try:
        path = ctx.prompt_store().delete(prompt_id)
    except PromptNotFoundError as e:
        return {"error": str(e)}
    data = {"id": prompt_id, "path": str(path)}
    ctx.bus.publish(events.PROMPT_DELETED, data)
    return data


def handle_prompt_track_usage(ctx, *, prompt_id: str) -> dict:
    store = ctx.prompt_store()
    if not store.prompt_path(prompt_id).exists():
        return {"error": str(PromptNotFoundError(prompt_id))}
    stats = store.track_usage(prompt_id)
    return {"id": prompt_id, **stats.to_json()}


def register_prompt_tools(mcp: FastMCP, ctx) -> None:
    """Register prompt library tools onto the FastMCP instance."""

    @mcp.tool()
    def prompt_list() -> str:
        """List prompts: recently used first, then the rest by title."""
        try:
            return json.dumps(handle_prompt_list(ctx), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def prompt_get(prompt_id: str) -> str:
        """Get one prompt with its tags and usage counters."""
        try:
            return json.dumps(handle_prompt_get(ctx, prompt_id=prompt_id), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def prompt_save(
        prompt_id: str,
        title: str,
        content: str,
        tags: Optional[str] = None,
        category: Optional[str] = None,
        variables: Optional[str] = None,
    ) -> str:
        """
        Create or overwrite a prompt.

        Args:
            prompt_id: File-safe id (letters, digits, "-" and "_")
            title: Prompt title, stored as the file's "# " heading
            content: Prompt body
            tags: Comma-separated tags
            category: Optional category name
            variables: Comma-separated template variable names

        Returns:
            JSON object with the saved prompt or an error
        """
        def split(value):
            return [v.strip() for v in value.split(",") if v.strip()] if value else None

        try:
            result = handle_prompt_write(
                ctx,
                prompt_id=prompt_id,
                title=title,
                content=content,
                tags=split(tags),
                category=category,
                variables=split(variables),
            )
        except Exception as e:
            log.warning("prompt_save failed for %s: %s", prompt_id, e)
            return json.dumps({"error": str(e)})
        return json.dumps(result, indent=2)

    @mcp.tool()
    def prompt_delete(prompt_id: str) -> str:
        """Delete a prompt file and its metadata entry."""
        try:
            return json.dumps(handle_prompt_delete(ctx, prompt_id=prompt_id), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def prompt_use(prompt_id: str) -> str:
        """Record that a prompt was used (bumps useCount, sets lastUsed)."""
        try:
            return json.dumps(handle_prompt_track_usage(ctx, prompt_id=prompt_id), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})
