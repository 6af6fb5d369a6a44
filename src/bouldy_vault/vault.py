"""
Vault layout.

    <vault>/
        notes/                      *.md notes (direct children only)
        prompts/                    <id>.md prompt files
        todo.txt                    live task file
        .bouldy/
            todo-metadata.json      daily limit + completion stats
            todo-schema.json        {"version": N}
            prompt-metadata.json    per-prompt tags / usage
            archives/done-YYYY-MM.txt
"""

from pathlib import Path
from typing import Union

from bouldy_vault.errors import PathOutsideVaultError

NOTES_DIR = "notes"
PROMPTS_DIR = "prompts"
TODO_FILE = "todo.txt"
APP_DIR = ".bouldy"
METADATA_FILE = "todo-metadata.json"
SCHEMA_FILE = "todo-schema.json"
PROMPT_METADATA_FILE = "prompt-metadata.json"
ARCHIVES_DIR = "archives"
NOTE_EXTENSION = ".md"

PathLike = Union[str, Path]


class VaultPaths:
    """Resolved paths for one vault root."""

    def __init__(self, root: PathLike) -> None:
        self.root = Path(root)

    @property
    def notes_dir(self) -> Path:
        return self.root / NOTES_DIR

    @property
    def prompts_dir(self) -> Path:
        return self.root / PROMPTS_DIR

    @property
    def todo_file(self) -> Path:
        return self.root / TODO_FILE

    @property
    def app_dir(self) -> Path:
        return self.root / APP_DIR

    @property
    def metadata_file(self) -> Path:
        return self.app_dir / METADATA_FILE

    @property
    def schema_file(self) -> Path:
        return self.app_dir / SCHEMA_FILE

    @property
    def prompt_metadata_file(self) -> Path:
        return self.app_dir / PROMPT_METADATA_FILE

    @property
    def archives_dir(self) -> Path:
        return self.app_dir / ARCHIVES_DIR

    def ensure_app_dir(self) -> Path:
        self.app_dir.mkdir(parents=True, exist_ok=True)
        return self.app_dir

    def __repr__(self) -> str:
        return f"VaultPaths({str(self.root)!r})"


def validate_path_in_vault(vault: PathLike, file_path: PathLike) -> Path:
    """
    Resolve ``file_path`` and make sure it lives inside ``vault``.

    A symlink is judged by where the link itself sits, not by its target, so
    notes linked in from elsewhere can still be managed.
    """
    root = Path(vault).resolve(strict=True)
    candidate = Path(file_path)

    if candidate.is_symlink():
        parent = candidate.parent.resolve(strict=True)
        if not parent.is_relative_to(root):
            raise PathOutsideVaultError(str(file_path))
        return candidate

    resolved = candidate.resolve(strict=True)
    if not resolved.is_relative_to(root):
        raise PathOutsideVaultError(str(file_path))
    return resolved
