"""
Domain errors.

I/O failures are not wrapped: OSError from the filesystem propagates as-is
and aborts only the operation that raised it.
"""


class VaultError(Exception):
    """Base class for vault-level failures."""


class TodoNotFoundError(VaultError):
    def __init__(self, todo_id: int) -> None:
        super().__init__(f"Todo not found: {todo_id}")
        self.todo_id = todo_id


class PromptNotFoundError(VaultError):
    def __init__(self, prompt_id: str) -> None:
        super().__init__(f"Prompt not found: {prompt_id}")
        self.prompt_id = prompt_id


class MetadataError(VaultError):
    """The metadata JSON exists but cannot be decoded or validated."""


class SchemaError(VaultError):
    """Operation not valid for the vault's task-file schema version."""


class WatcherError(VaultError):
    """Watcher could not be started (missing root, already running, ...)."""


class PathOutsideVaultError(VaultError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Path is outside vault: {path}")
        self.path = path
