"""
Prompt library: <vault>/prompts/<id>.md plus .bouldy/prompt-metadata.json.

The markdown file holds only the title and body; tags, category, variables
and usage counters live in the metadata JSON keyed by prompt id.
"""

import json
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from bouldy_vault.errors import MetadataError, PromptNotFoundError
from bouldy_vault.models.prompt import Prompt, PromptContent, PromptStats
from bouldy_vault.parsers.prompt_parser import (
    parse_prompt_content,
    serialize_prompt_content,
)
from bouldy_vault.vault import NOTE_EXTENSION, VaultPaths

log = logging.getLogger(__name__)

_STATS_ADAPTER = TypeAdapter(Dict[str, PromptStats])


class PromptStore:
    def __init__(self, paths: VaultPaths) -> None:
        self.paths = paths

    def prompt_path(self, prompt_id: str) -> Path:
        return self.paths.prompts_dir / f"{prompt_id}{NOTE_EXTENSION}"

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def load_stats(self) -> Dict[str, PromptStats]:
        path = self.paths.prompt_metadata_file
        if not path.exists():
            return {}
        try:
            return _STATS_ADAPTER.validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise MetadataError(f"Failed to parse prompt metadata {path}: {e}") from e

    def save_stats(self, stats: Dict[str, PromptStats]) -> None:
        self.paths.ensure_app_dir()
        raw = {pid: s.to_json() for pid, s in stats.items()}
        self.paths.prompt_metadata_file.write_text(
            json.dumps(raw, indent=2), encoding="utf-8"
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _extract(self, path: Path, prompt_id: str, stats: Dict[str, PromptStats]) -> Prompt:
        content = parse_prompt_content(path.read_text(encoding="utf-8"))
        st = path.stat()
        created = getattr(st, "st_birthtime", st.st_mtime)
        entry = stats.get(prompt_id) or PromptStats()
        return Prompt(
            id=prompt_id,
            title=content.title,
            content=content.content,
            path=str(path),
            created=int(created),
            modified=int(st.st_mtime),
            tags=list(entry.tags or []),
            category=entry.category,
            variables=list(entry.variables or []),
            last_used=entry.last_used,
            use_count=entry.use_count,
        )

    def list(self) -> List[Prompt]:
        """Recently used first, then never-used prompts by title."""
        prompts_dir = self.paths.prompts_dir
        if not prompts_dir.exists():
            prompts_dir.mkdir(parents=True)
            return []

        stats = self.load_stats()
        prompts = []
        for entry in prompts_dir.iterdir():
            if entry.suffix != NOTE_EXTENSION:
                continue
            try:
                prompts.append(self._extract(entry, entry.stem, stats))
            except (OSError, UnicodeDecodeError):
                log.warning("Skipping unreadable prompt %s", entry)

        used = sorted((p for p in prompts if p.last_used is not None),
                      key=lambda p: p.last_used, reverse=True)
        unused = sorted((p for p in prompts if p.last_used is None), key=lambda p: p.title)
        return used + unused

    def read(self, prompt_id: str) -> Prompt:
        path = self.prompt_path(prompt_id)
        if not path.exists():
            raise PromptNotFoundError(prompt_id)
        return self._extract(path, prompt_id, self.load_stats())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write(
        self,
        prompt_id: str,
        *,
        title: str,
        content: str,
        tags: Optional[List[str]] = None,
        category: Optional[str] = None,
        variables: Optional[List[str]] = None,
    ) -> Prompt:
        self.paths.prompts_dir.mkdir(parents=True, exist_ok=True)
        path = self.prompt_path(prompt_id)
        path.write_text(
            serialize_prompt_content(PromptContent(title=title, content=content)),
            encoding="utf-8",
        )

        stats = self.load_stats()
        previous = stats.get(prompt_id) or PromptStats()
        # usage counters survive edits
        stats[prompt_id] = PromptStats(
            tags=tags or None,
            category=category,
            variables=variables or None,
            last_used=previous.last_used,
            use_count=previous.use_count,
        )
        self.save_stats(stats)
        return self._extract(path, prompt_id, stats)

    def delete(self, prompt_id: str) -> Path:
        path = self.prompt_path(prompt_id)
        if not path.exists():
            raise PromptNotFoundError(prompt_id)
        path.unlink()
        stats = self.load_stats()
        if stats.pop(prompt_id, None) is not None:
            self.save_stats(stats)
        return path

    def track_usage(self, prompt_id: str, now: Optional[float] = None) -> PromptStats:
        stats = self.load_stats()
        entry = stats.setdefault(prompt_id, PromptStats())
        entry.use_count += 1
        entry.last_used = int(now if now is not None else time.time())
        self.save_stats(stats)
        return entry
