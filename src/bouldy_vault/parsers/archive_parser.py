"""
Parser for month-partitioned archive files (``done-YYYY-MM.txt``).

Format:
    [2026-01-03] Task title
      - open subtask
      x - finished subtask

Subtask lines are only attached in the SUBTASKS schema; in the TAGS schema
they are ignored. A subtask line before any ``[date]`` line is dropped.
"""

import logging
import re
from typing import List, Optional

from bouldy_vault.models.todo import ArchivedTodo, Subtask, TodoItem, TodoSchema
from bouldy_vault.parsers.todo_parser import format_subtask, parse_subtask_line

log = logging.getLogger(__name__)

ARCHIVE_PREFIX = "done-"
ARCHIVE_SUFFIX = ".txt"
_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def archive_file_name(month: str) -> str:
    if not _MONTH_RE.match(month):
        raise ValueError(f"Month must be YYYY-MM: {month!r}")
    return f"{ARCHIVE_PREFIX}{month}{ARCHIVE_SUFFIX}"


def month_from_file_name(name: str) -> Optional[str]:
    """Return the ``YYYY-MM`` key encoded in an archive file name, or None."""
    if not (name.startswith(ARCHIVE_PREFIX) and name.endswith(ARCHIVE_SUFFIX)):
        return None
    month = name[len(ARCHIVE_PREFIX):-len(ARCHIVE_SUFFIX)]
    return month if _MONTH_RE.match(month) else None


def format_archive_entries(
    items: List[TodoItem], completed_date: str, schema: TodoSchema
) -> str:
    lines: List[str] = []
    for item in items:
        lines.append(f"[{completed_date}] {item.title}")
        if schema == TodoSchema.SUBTASKS:
            lines.extend(format_subtask(s) for s in item.subtasks)
    return "".join(f"{line}\n" for line in lines)


def parse_archive(text: str, schema: TodoSchema) -> List[ArchivedTodo]:
    archived: List[ArchivedTodo] = []
    current: Optional[ArchivedTodo] = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        if line.startswith("["):
            end = line.find("]")
            if end == -1:
                log.debug("Skipping archive line %d: no closing bracket", line_number)
                continue
            current = ArchivedTodo(
                title=line[end + 1:].strip(),
                completed_date=line[1:end],
            )
            archived.append(current)
            continue

        stripped = line.strip()
        if not (stripped.startswith("- ") or stripped.startswith("x ")):
            continue
        if schema != TodoSchema.SUBTASKS:
            continue
        if current is None:
            log.debug("Dropping orphan archive subtask on line %d", line_number)
            continue
        result = parse_subtask_line(line, line_number)
        if result.subtask is not None:
            current.subtasks.append(result.subtask)

    return archived
