"""
Note tool handlers.

Saves publish ``note:saved`` and deletes publish ``note:deleted`` once the
file operation has succeeded.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from bouldy_vault import events
from bouldy_vault.errors import PathOutsideVaultError
from bouldy_vault.store.note_store import (
    delete_note,
    list_notes,
    migrate_vault_structure,
    read_note,
    title_from_filename,
    write_note,
)
from bouldy_vault.vault import NOTE_EXTENSION, validate_path_in_vault

log = logging.getLogger(__name__)


def _note_path(ctx, path: str) -> Path:
    """Absolute paths are used as-is; bare names resolve inside notes/."""
    p = Path(path)
    if p.is_absolute():
        return p
    if p.suffix != NOTE_EXTENSION:
        p = p.with_name(p.name + NOTE_EXTENSION)
    return ctx.paths.notes_dir / p


def handle_note_list(ctx) -> list[dict]:
    return [n.to_dict() for n in list_notes(ctx.paths)]


def handle_note_read(ctx, *, path: str) -> dict:
    note_path = _note_path(ctx, path)
    try:
        validate_path_in_vault(ctx.vault_root, note_path)
    except FileNotFoundError:
        return {"error": f"Note not found: {path}"}
    except PathOutsideVaultError as e:
        return {"error": str(e)}
    return read_note(note_path)


def handle_note_write(ctx, *, path: str, content: str, title: Optional[str] = None) -> dict:
    note_path = _note_path(ctx, path)
    # the file may not exist yet, so check where it would land
    validate_path_in_vault(ctx.vault_root, note_path.parent)
    payload = write_note(note_path, content, title or title_from_filename(note_path))
    ctx.bus.publish(events.NOTE_SAVED, payload.to_dict())
    return payload.to_dict()


def handle_note_delete(ctx, *, path: str) -> dict:
    note_path = _note_path(ctx, path)
    try:
        payload = delete_note(ctx.paths, note_path)
    except FileNotFoundError:
        return {"error": f"Note not found: {path}"}
    ctx.bus.publish(events.NOTE_DELETED, payload.to_dict())
    return payload.to_dict()


def handle_migrate_vault(ctx) -> dict:
    return {"moved": migrate_vault_structure(ctx.paths)}


def register_note_tools(mcp: FastMCP, ctx) -> None:
    """Register note tools onto the FastMCP instance."""

    @mcp.tool()
    def note_list() -> str:
        """List notes in the vault's notes folder, newest first."""
        try:
            return json.dumps(handle_note_list(ctx), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def note_read(path: str) -> str:
        """
        Read a note.

        Args:
            path: Absolute path, or a note name inside notes/ ("ideas" or "ideas.md")
        """
        return json.dumps(handle_note_read(ctx, path=path), indent=2)

    @mcp.tool()
    def note_write(path: str, content: str, title: Optional[str] = None) -> str:
        """
        Create or overwrite a note.

        Args:
            path: Absolute path, or a note name inside notes/
            content: Full markdown content
            title: Display title (defaults to the file name)
        """
        try:
            return json.dumps(
                handle_note_write(ctx, path=path, content=content, title=title), indent=2
            )
        except Exception as e:
            log.warning("note_write failed for %s: %s", path, e)
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def note_delete(path: str) -> str:
        """Delete a note. Paths outside the vault are refused."""
        try:
            return json.dumps(handle_note_delete(ctx, path=path), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})
