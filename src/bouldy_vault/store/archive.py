"""
Archive completed todos and maintain completion statistics.

archive_completed() runs three writes in order:
    1. append completed items to .bouldy/archives/done-<YYYY-MM>.txt
    2. rewrite .bouldy/todo-metadata.json with the bumped stats
    3. rewrite todo.txt with only the incomplete items

The sequence is not transactional. If step 2 or 3 fails, the earlier writes
stay on disk and the OSError propagates to the caller. A retry will archive
the same items again.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from bouldy_vault.models.todo import ArchivedTodo, TodoStats
from bouldy_vault.parsers.archive_parser import (
    archive_file_name,
    format_archive_entries,
    month_from_file_name,
    parse_archive,
)
from bouldy_vault.store.todo_store import TodoStore
from bouldy_vault.utils.dates import day_key, month_key, previous_day, today

log = logging.getLogger(__name__)


def calculate_streak(completions_by_day: Dict[str, int], on: Optional[date] = None) -> int:
    """
    Count consecutive days with completions, walking back from ``on`` (today).

    A day without a non-zero entry ends the walk, so a vault whose last
    completion was yesterday has a current streak of 0 as of today.
    """
    streak = 0
    current = today(on)
    while completions_by_day.get(day_key(current), 0) > 0:
        streak += 1
        current = previous_day(current)
    return streak


def record_completions(stats: TodoStats, count: int, on: Optional[date] = None) -> TodoStats:
    """Bump counters for ``count`` completions on ``on`` and refresh streaks."""
    day = today(on)
    stats.total_completed += count
    dk, mk = day_key(day), month_key(day)
    stats.completions_by_day[dk] = stats.completions_by_day.get(dk, 0) + count
    stats.completions_by_month[mk] = stats.completions_by_month.get(mk, 0) + count
    stats.current_streak = calculate_streak(stats.completions_by_day, day)
    if stats.current_streak > stats.longest_streak:
        stats.longest_streak = stats.current_streak
    return stats


def archive_completed(store: TodoStore, on: Optional[date] = None) -> int:
    """
    Move completed items out of todo.txt into this month's archive file.

    Returns the number of items archived. With nothing completed, no file is
    touched and 0 is returned.
    """
    schema = store.schema()
    items = store.load(schema)
    completed = [t for t in items if t.completed]
    if not completed:
        return 0

    day = today(on)
    metadata = store.load_metadata()

    archives_dir = store.paths.archives_dir
    archives_dir.mkdir(parents=True, exist_ok=True)
    archive_path = archives_dir / archive_file_name(month_key(day))
    with open(archive_path, "a", encoding="utf-8") as f:
        f.write(format_archive_entries(completed, day_key(day), schema))

    record_completions(metadata.stats, len(completed), day)
    store.save_metadata(metadata)

    remaining = [t for t in items if not t.completed]
    store.save(remaining)

    log.info(
        "Archived %d todo(s) to %s (streak %d)",
        len(completed), archive_path.name, metadata.stats.current_streak,
    )
    return len(completed)


def load_archived(store: TodoStore, month: str) -> List[ArchivedTodo]:
    """Entries of one month's archive in file order; a missing month is empty."""
    path = store.paths.archives_dir / archive_file_name(month)
    if not path.exists():
        return []
    return parse_archive(path.read_text(encoding="utf-8"), store.schema())


def list_archive_months(store: TodoStore) -> List[str]:
    """``YYYY-MM`` keys of archive files on disk, most recent first."""
    archives_dir = store.paths.archives_dir
    if not archives_dir.is_dir():
        return []
    months = []
    for entry in archives_dir.iterdir():
        month = month_from_file_name(entry.name)
        if month and entry.is_file():
            months.append(month)
    return sorted(months, reverse=True)
