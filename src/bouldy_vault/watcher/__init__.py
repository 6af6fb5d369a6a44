from .vault_watcher import RawEvent, VaultWatcher, dedupe

__all__ = ["RawEvent", "VaultWatcher", "dedupe"]
