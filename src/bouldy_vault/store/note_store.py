"""
Notes: ``*.md`` files directly inside <vault>/notes.

The title of a note is its file stem; list order is modified time, newest
first. Callers emit note events; this module only touches the filesystem.
"""

import logging
from pathlib import Path
from typing import List, Optional

from bouldy_vault.models.note import NotePayload
from bouldy_vault.vault import NOTE_EXTENSION, VaultPaths, validate_path_in_vault

log = logging.getLogger(__name__)

UNTITLED = "Untitled"


def title_from_filename(path: Path) -> str:
    return path.stem or UNTITLED


def note_metadata(path: Path) -> Optional[NotePayload]:
    """Payload for an existing note, or None (wrong extension, vanished, unreadable)."""
    if path.suffix != NOTE_EXTENSION:
        return None
    try:
        modified = int(path.stat().st_mtime)
    except OSError:
        return None
    return NotePayload(
        path=str(path),
        name=path.name,
        title=title_from_filename(path),
        modified=modified,
    )


def scan_notes(notes_dir: Path) -> List[NotePayload]:
    """All notes in ``notes_dir`` (non-recursive), newest first."""
    notes = []
    for entry in notes_dir.iterdir():
        if entry.suffix != NOTE_EXTENSION:
            continue
        payload = note_metadata(entry)
        if payload is None:
            log.warning("Skipping %s: cannot stat (broken symlink?)", entry)
            continue
        notes.append(payload)
    notes.sort(key=lambda n: n.modified or 0, reverse=True)
    return notes


def list_notes(paths: VaultPaths) -> List[NotePayload]:
    """Notes folder listing; falls back to the vault root for pre-notes/ vaults."""
    read_dir = paths.notes_dir if paths.notes_dir.exists() else paths.root
    if not read_dir.exists():
        raise FileNotFoundError(f"Notes directory does not exist: {read_dir}")
    return scan_notes(read_dir)


def read_note(path: Path) -> dict:
    return {
        "title": title_from_filename(path),
        "content": path.read_text(encoding="utf-8"),
    }


def write_note(path: Path, content: str, title: str) -> NotePayload:
    path.write_text(content, encoding="utf-8")
    return NotePayload(
        path=str(path),
        name=path.name,
        title=title,
        modified=int(path.stat().st_mtime),
    )


def delete_note(paths: VaultPaths, path: Path) -> NotePayload:
    validate_path_in_vault(paths.root, path)
    path.unlink()
    return NotePayload.deleted(path)


def migrate_vault_structure(paths: VaultPaths) -> int:
    """
    Create notes/ and move root-level ``*.md`` files into it.

    Runs only when notes/ does not exist yet. Returns the number of files moved.
    """
    if paths.notes_dir.exists():
        return 0
    paths.notes_dir.mkdir()
    moved = 0
    for entry in list(paths.root.iterdir()):
        if entry.is_file() and entry.suffix == NOTE_EXTENSION:
            entry.rename(paths.notes_dir / entry.name)
            moved += 1
    log.info("Moved %d note(s) into %s", moved, paths.notes_dir)
    return moved
