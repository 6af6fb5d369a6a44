"""Note event payloads shared by the note commands and the vault watcher."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional


@dataclass
class NotePayload:
    path: str
    name: str
    title: Optional[str] = None
    modified: Optional[int] = None

    @classmethod
    def deleted(cls, path: Path) -> "NotePayload":
        """Payload for a note that no longer exists on disk."""
        return cls(path=str(path), name=path.name)

    def to_dict(self) -> dict:
        return asdict(self)
