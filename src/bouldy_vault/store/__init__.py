from .todo_store import TodoStore, find_todo
from .archive import (
    archive_completed,
    calculate_streak,
    list_archive_months,
    load_archived,
    record_completions,
)
from .prompt_store import PromptStore

__all__ = [
    "TodoStore",
    "find_todo",
    "archive_completed",
    "calculate_streak",
    "list_archive_months",
    "load_archived",
    "record_completions",
    "PromptStore",
]
