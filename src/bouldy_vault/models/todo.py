"""
Core todo data models.

TodoItem / Subtask / ArchivedTodo are plain dataclasses materialised fresh on
every load and discarded after serialisation; the live todo.txt is the only
source of truth. TodoMetadata / TodoStats mirror the persisted JSON file and
use pydantic so field aliases and validation match the on-disk camelCase keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

DEFAULT_DAILY_LIMIT = 5


class TodoSchema(IntEnum):
    """Version of the todo.txt line grammar active in a vault."""

    SUBTASKS = 1  # completion, title, due:, indented subtask lines
    TAGS = 2      # completion, (P), created date, title, +project, @context, due:


@dataclass
class Subtask:
    title: str
    completed: bool = False


@dataclass
class TodoItem:
    """
    A single top-level line of todo.txt.

    ``id`` is the 1-based line number at parse time. It is not stable across
    edits that change the line count; callers re-load before every command.
    """

    id: int
    title: str
    completed: bool = False
    due_date: Optional[str] = None
    priority: Optional[str] = None
    projects: List[str] = field(default_factory=list)
    contexts: List[str] = field(default_factory=list)
    created_date: Optional[str] = None
    subtasks: List[Subtask] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "dueDate": self.due_date,
            "priority": self.priority,
            "projects": list(self.projects),
            "contexts": list(self.contexts),
            "createdDate": self.created_date,
            "subtasks": [
                {"title": s.title, "completed": s.completed} for s in self.subtasks
            ],
        }


@dataclass
class ArchivedTodo:
    title: str
    completed_date: str
    subtasks: List[Subtask] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "completedDate": self.completed_date,
            "subtasks": [
                {"title": s.title, "completed": s.completed} for s in self.subtasks
            ],
        }


class TodoStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_completed: NonNegativeInt = Field(0, alias="totalCompleted")
    current_streak: NonNegativeInt = Field(0, alias="currentStreak")
    longest_streak: NonNegativeInt = Field(0, alias="longestStreak")
    completions_by_month: Dict[str, NonNegativeInt] = Field(
        default_factory=dict, alias="completionsByMonth"
    )
    completions_by_day: Dict[str, NonNegativeInt] = Field(
        default_factory=dict, alias="completionsByDay"
    )


class TodoMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    daily_limit: NonNegativeInt = Field(DEFAULT_DAILY_LIMIT, alias="dailyLimit")
    stats: TodoStats = Field(default_factory=TodoStats)
