"""
File-backed todo store.

There is no cache and no index: every call re-reads todo.txt, and every
mutation rewrites the whole file. A missing todo.txt is an empty collection;
any other I/O failure propagates as OSError and aborts only that call.

Usage:
    store = TodoStore(VaultPaths(vault_root))
    items = store.load()
    store.toggle(items[0].id)
"""

import json
import logging
import re
from datetime import date
from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError

from bouldy_vault.errors import MetadataError, SchemaError, TodoNotFoundError
from bouldy_vault.models.todo import Subtask, TodoItem, TodoMetadata, TodoSchema
from bouldy_vault.parsers.todo_parser import (
    format_item,
    format_subtask,
    parse_line,
    parse_subtask_line,
    parse_todos,
    serialize_todos,
)
from bouldy_vault.utils.dates import day_key, today
from bouldy_vault.vault import VaultPaths

log = logging.getLogger(__name__)

DEFAULT_SCHEMA = TodoSchema.TAGS

_PRIORITY_RE = re.compile(r"^[A-Z]$")


def find_todo(items: List[TodoItem], todo_id: int) -> TodoItem:
    for item in items:
        if item.id == todo_id:
            return item
    raise TodoNotFoundError(todo_id)


def _check_title(title: str) -> str:
    """Collapse whitespace; raise ValueError for empty or multi-line titles."""
    if "\n" in title or "\r" in title:
        raise ValueError("Title must be a single line")
    title = " ".join(title.split())
    if not title:
        raise ValueError("Title must not be empty")
    return title


def _item_fields(item: TodoItem, schema: TodoSchema) -> tuple:
    fields = (item.title, item.completed, item.due_date)
    if schema == TodoSchema.TAGS:
        fields += (item.priority, list(item.projects), list(item.contexts), item.created_date)
    return fields


def _reads_back(item: TodoItem, schema: TodoSchema) -> bool:
    """True when the line written for ``item`` parses to the same fields."""
    result = parse_line(format_item(item, schema), item.id, schema)
    if result.kind != "item" or _item_fields(result.item, schema) != _item_fields(item, schema):
        return False
    if schema == TodoSchema.SUBTASKS:
        for sub in item.subtasks:
            if parse_subtask_line(format_subtask(sub)).subtask != sub:
                return False
    return True


def _check_round_trip(item: TodoItem, schema: TodoSchema) -> None:
    if not _reads_back(item, schema):
        raise ValueError(
            f"Todo {item.title!r} would not read back unchanged from todo.txt "
            "(tag-like words, a leading x, or a due date with spaces?)"
        )


class TodoStore:
    """Todo, metadata and schema-marker access for a single vault."""

    def __init__(self, paths: VaultPaths, default_schema: TodoSchema = DEFAULT_SCHEMA) -> None:
        self.paths = paths
        self.default_schema = TodoSchema(default_schema)

    # ------------------------------------------------------------------
    # Schema marker
    # ------------------------------------------------------------------

    def schema(self) -> TodoSchema:
        """Schema recorded in .bouldy/todo-schema.json, else the configured default."""
        path = self.paths.schema_file
        if not path.exists():
            return self.default_schema
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return TodoSchema(int(raw["version"]))
        except (ValueError, KeyError, TypeError) as e:
            raise SchemaError(f"Invalid schema marker {path}: {e}") from e

    def write_schema(self, schema: TodoSchema) -> None:
        self.paths.ensure_app_dir()
        self.paths.schema_file.write_text(
            json.dumps({"version": int(schema)}, indent=2), encoding="utf-8"
        )

    def migrate_schema(self, target: TodoSchema) -> int:
        """
        One-time migration of todo.txt to ``target``.

        SUBTASKS → TAGS flattens each subtask into its own top-level item
        directly after its parent. Returns the number of items written, or 0
        when the vault is already at ``target``.

        Text that was plain title text under SUBTASKS may read as tags under
        TAGS (``(B)``, ``+x``, ``@y``, a leading date). Any such item aborts
        the migration with SchemaError before anything is written.
        """
        target = TodoSchema(target)
        current = self.schema()
        if current == target:
            return 0
        if target < current:
            raise SchemaError(
                f"Cannot downgrade todo schema from v{int(current)} to v{int(target)}"
            )

        items = self.load(schema=current)
        migrated: List[TodoItem] = []
        for item in items:
            migrated.append(
                TodoItem(
                    id=0,
                    title=item.title,
                    completed=item.completed,
                    due_date=item.due_date,
                )
            )
            for sub in item.subtasks:
                migrated.append(TodoItem(id=0, title=sub.title, completed=sub.completed))

        changed = [t.title for t in migrated if not _reads_back(t, target)]
        if changed:
            listed = ", ".join(repr(title) for title in changed[:5])
            more = f" and {len(changed) - 5} more" if len(changed) > 5 else ""
            raise SchemaError(
                f"Cannot migrate to schema v{int(target)}: {len(changed)} title(s) would be "
                f"read as tags: {listed}{more}. Edit those titles first."
            )

        self._write(migrated, target)
        self.write_schema(target)
        log.info(
            "Migrated %s from schema v%d to v%d (%d items)",
            self.paths.todo_file, int(current), int(target), len(migrated),
        )
        return len(migrated)

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self, schema: Optional[TodoSchema] = None) -> List[TodoItem]:
        path = self.paths.todo_file
        if not path.exists():
            return []
        return parse_todos(path.read_text(encoding="utf-8"), schema or self.schema())

    def save(self, items: List[TodoItem]) -> None:
        self._write(items, self.schema())

    def _write(self, items: List[TodoItem], schema: TodoSchema) -> None:
        self.paths.todo_file.write_text(serialize_todos(items, schema), encoding="utf-8")

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def load_metadata(self) -> TodoMetadata:
        path = self.paths.metadata_file
        if not path.exists():
            return TodoMetadata()
        content = path.read_text(encoding="utf-8")
        try:
            return TodoMetadata.model_validate_json(content)
        except ValidationError as e:
            raise MetadataError(f"Failed to parse metadata {path}: {e}") from e

    def save_metadata(self, metadata: TodoMetadata) -> None:
        self.paths.ensure_app_dir()
        self.paths.metadata_file.write_text(
            json.dumps(metadata.model_dump(by_alias=True), indent=2), encoding="utf-8"
        )

    def set_daily_limit(self, limit: int) -> TodoMetadata:
        metadata = self.load_metadata()
        metadata.daily_limit = limit
        self.save_metadata(metadata)
        return metadata

    # ------------------------------------------------------------------
    # Mutations (load → change → rewrite)
    # ------------------------------------------------------------------

    def create(
        self,
        title: str,
        *,
        due_date: Optional[str] = None,
        priority: Optional[str] = None,
        projects: Optional[List[str]] = None,
        contexts: Optional[List[str]] = None,
        on: Optional[date] = None,
    ) -> TodoItem:
        if priority and not _PRIORITY_RE.match(priority):
            raise ValueError(f"Priority must be a single uppercase letter: {priority!r}")
        title = _check_title(title)
        schema = self.schema()
        items = self.load(schema)
        # The rewrite drops blank and malformed lines, so the new item's line
        # number is one past the serialized length of what precedes it.
        line_number = len(serialize_todos(items, schema).splitlines()) + 1
        item = TodoItem(id=line_number, title=title, due_date=due_date or None)
        if schema == TodoSchema.TAGS:
            item.priority = priority or None
            item.projects = list(projects or [])
            item.contexts = list(contexts or [])
            item.created_date = day_key(today(on))
        _check_round_trip(item, schema)
        items.append(item)
        self._write(items, schema)
        return item

    def update_title(self, todo_id: int, title: str) -> TodoItem:
        title = _check_title(title)
        return self._mutate(todo_id, lambda t: setattr(t, "title", title))

    def toggle(self, todo_id: int) -> TodoItem:
        return self._mutate(todo_id, lambda t: setattr(t, "completed", not t.completed))

    def set_due_date(self, todo_id: int, due_date: Optional[str]) -> TodoItem:
        return self._mutate(todo_id, lambda t: setattr(t, "due_date", due_date or None))

    def set_tags(
        self,
        todo_id: int,
        *,
        priority: Optional[str],
        projects: List[str],
        contexts: List[str],
    ) -> TodoItem:
        self._require(TodoSchema.TAGS, "priority/project/context tags")
        if priority and not _PRIORITY_RE.match(priority):
            raise ValueError(f"Priority must be a single uppercase letter: {priority!r}")

        def apply(t: TodoItem) -> None:
            t.priority = priority or None
            t.projects = list(projects)
            t.contexts = list(contexts)

        return self._mutate(todo_id, apply)

    def delete(self, todo_id: int) -> None:
        schema = self.schema()
        items = self.load(schema)
        remaining = [t for t in items if t.id != todo_id]
        if len(remaining) == len(items):
            raise TodoNotFoundError(todo_id)
        self._write(remaining, schema)

    def reorder(self, old_index: int, new_index: int) -> None:
        schema = self.schema()
        items = self.load(schema)
        if not (0 <= old_index < len(items) and 0 <= new_index < len(items)):
            raise ValueError("Invalid index for reordering")
        if old_index == new_index:
            return
        items.insert(new_index, items.pop(old_index))
        self._write(items, schema)

    def bulk_set_due_dates(self, updates: Iterable[Tuple[int, Optional[str]]]) -> int:
        """Apply (id, due) pairs; unknown ids are ignored. Returns how many matched."""
        schema = self.schema()
        items = self.load(schema)
        by_id = {t.id: t for t in items}
        matched = 0
        for todo_id, due in updates:
            item = by_id.get(todo_id)
            if item is None:
                log.debug("bulk due-date update: unknown id %s", todo_id)
                continue
            item.due_date = due or None
            _check_round_trip(item, schema)
            matched += 1
        if matched:
            self._write(items, schema)
        return matched

    # ------------------------------------------------------------------
    # Subtasks (SUBTASKS schema only)
    # ------------------------------------------------------------------

    def add_subtask(self, todo_id: int, title: str) -> TodoItem:
        self._require(TodoSchema.SUBTASKS, "subtasks")
        title = _check_title(title)
        return self._mutate(todo_id, lambda t: t.subtasks.append(Subtask(title=title)))

    def toggle_subtask(self, todo_id: int, index: int) -> TodoItem:
        self._require(TodoSchema.SUBTASKS, "subtasks")

        def apply(t: TodoItem) -> None:
            sub = _subtask_at(t, index)
            sub.completed = not sub.completed

        return self._mutate(todo_id, apply)

    def delete_subtask(self, todo_id: int, index: int) -> TodoItem:
        self._require(TodoSchema.SUBTASKS, "subtasks")

        def apply(t: TodoItem) -> None:
            _subtask_at(t, index)
            del t.subtasks[index]

        return self._mutate(todo_id, apply)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_projects(self) -> List[str]:
        return sorted({p for t in self.load() for p in t.projects})

    def list_contexts(self) -> List[str]:
        return sorted({c for t in self.load() for c in t.contexts})

    def list_priorities(self) -> List[str]:
        return sorted({t.priority for t in self.load() if t.priority})

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _mutate(self, todo_id: int, apply) -> TodoItem:
        schema = self.schema()
        items = self.load(schema)
        item = find_todo(items, todo_id)
        apply(item)
        _check_round_trip(item, schema)
        self._write(items, schema)
        return item

    def _require(self, schema: TodoSchema, feature: str) -> None:
        current = self.schema()
        if current != schema:
            raise SchemaError(
                f"{feature} require todo schema v{int(schema)}, vault is v{int(current)}"
            )


def _subtask_at(item: TodoItem, index: int) -> Subtask:
    if not 0 <= index < len(item.subtasks):
        raise ValueError(f"Subtask index out of range: {index}")
    return item.subtasks[index]
