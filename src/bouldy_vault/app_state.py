"""
Application-lifetime container.

AppContext owns the event bus, the settings and the single running
VaultWatcher. The watcher handle lives here, not in a module global.
Dropping it (stop_watcher, or leaving the ``with`` block) stops notification
delivery for good. Nothing restarts it automatically.

Single initialisation: start_watcher() refuses to start a second watcher
while one is running. To switch vaults, call stop_watcher() or set_vault()
and then start again.
"""

import logging
import threading
from pathlib import Path
from typing import Optional

from bouldy_vault.config import Settings
from bouldy_vault.errors import VaultError, WatcherError
from bouldy_vault.events import EventBus
from bouldy_vault.store.prompt_store import PromptStore
from bouldy_vault.store.todo_store import TodoStore
from bouldy_vault.vault import VaultPaths
from bouldy_vault.watcher.vault_watcher import VaultWatcher

log = logging.getLogger(__name__)


class AppContext:
    def __init__(self, settings: Optional[Settings] = None, bus: Optional[EventBus] = None) -> None:
        self.settings = settings or Settings()
        self.bus = bus or EventBus(history=self.settings.event_history)
        self._lock = threading.Lock()
        self._watcher: Optional[VaultWatcher] = None

    # ------------------------------------------------------------------
    # Vault access
    # ------------------------------------------------------------------

    @property
    def vault_root(self) -> Path:
        if self.settings.vault_root is None:
            raise VaultError("No vault selected")
        return self.settings.vault_root

    @property
    def paths(self) -> VaultPaths:
        return VaultPaths(self.vault_root)

    def todo_store(self) -> TodoStore:
        return TodoStore(self.paths, self.settings.todo_schema)

    def prompt_store(self) -> PromptStore:
        return PromptStore(self.paths)

    def set_vault(self, vault_root: Path) -> None:
        """Point the context at another vault; any running watcher is stopped."""
        self.stop_watcher()
        self.settings.vault_root = Path(vault_root)
        log.info("Vault set to %s", vault_root)

    # ------------------------------------------------------------------
    # Watcher lifetime
    # ------------------------------------------------------------------

    @property
    def watcher(self) -> Optional[VaultWatcher]:
        return self._watcher

    def start_watcher(self) -> VaultWatcher:
        with self._lock:
            if self._watcher is not None:
                raise WatcherError(
                    f"Watcher already running for {self._watcher.vault_root}"
                )
            watcher = VaultWatcher(self.vault_root, self.bus, debounce=self.settings.debounce)
            watcher.start()
            self._watcher = watcher
            return watcher

    def stop_watcher(self) -> None:
        with self._lock:
            watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()

    def watcher_status(self) -> dict:
        watcher = self._watcher
        if watcher is None:
            return {"running": False, "vault_root": None}
        return watcher.status()

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop_watcher()
