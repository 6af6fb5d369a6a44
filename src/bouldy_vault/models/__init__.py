from .todo import (
    ArchivedTodo,
    Subtask,
    TodoItem,
    TodoMetadata,
    TodoSchema,
    TodoStats,
)
from .note import NotePayload
from .prompt import Prompt, PromptContent, PromptStats

__all__ = [
    "ArchivedTodo",
    "Subtask",
    "TodoItem",
    "TodoMetadata",
    "TodoSchema",
    "TodoStats",
    "NotePayload",
    "Prompt",
    "PromptContent",
    "PromptStats",
]
