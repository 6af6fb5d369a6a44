"""
bouldy-vault: the synchronization core of a plain-text note/todo/prompt vault.

Main API:
    from bouldy_vault.parsers import parse_todos, serialize_todos
    from bouldy_vault.store import TodoStore, archive_completed
    from bouldy_vault.app_state import AppContext
"""

__version__ = "0.3.0"
