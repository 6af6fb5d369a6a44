"""
Runtime settings read from the environment.

    VAULT_ROOT          vault folder (required by the server)
    API_ENABLED         start the REST API thread (default: true)
    API_PORT            REST API port (default: 9400)
    DEBOUNCE_MS         watcher debounce window (default: 500)
    BOULDY_TODO_SCHEMA  todo.txt schema for vaults without a marker (default: 2)
    EVENT_HISTORY       events kept for /api/events (default: 200)
    LOG_LEVEL           logging level (default: INFO)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from bouldy_vault.models.todo import TodoSchema


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


@dataclass
class Settings:
    vault_root: Optional[Path] = None
    api_enabled: bool = True
    api_port: int = 9400
    debounce_ms: int = 500
    todo_schema: TodoSchema = TodoSchema.TAGS
    event_history: int = 200
    log_level: str = "INFO"

    @property
    def debounce(self) -> float:
        return self.debounce_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        vault = env.get("VAULT_ROOT", "")
        return cls(
            vault_root=Path(vault) if vault else None,
            api_enabled=_env_bool(env.get("API_ENABLED", "true")),
            api_port=int(env.get("API_PORT", "9400")),
            debounce_ms=int(env.get("DEBOUNCE_MS", "500")),
            todo_schema=TodoSchema(int(env.get("BOULDY_TODO_SCHEMA", "2"))),
            event_history=int(env.get("EVENT_HISTORY", "200")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
