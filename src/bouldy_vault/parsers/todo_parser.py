"""
Codec for todo.txt files.

Main API:
    parse_todos(text, schema)      → List[TodoItem]
    serialize_todos(items, schema) → str

Parsing is strictly line-oriented and never raises on content: every physical
line yields a LineResult, and parse_todos() keeps the items and subtasks and
drops the rest (blank lines, malformed lines, orphan subtasks). Only file I/O
can fail, and that lives in store.todo_store.

Round-trip law: for text produced by serialize_todos(), parsing and
serialising again is byte-identical. Ids are line numbers and may be
renumbered by the re-parse.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Literal, Optional

from bouldy_vault.models.todo import Subtask, TodoItem, TodoSchema

log = logging.getLogger(__name__)

_COMPLETED_RE = re.compile(r"^x\s*")
_SUBTASK_RE = re.compile(r"^  (?:- |x )")
_PRIORITY_RE = re.compile(r"^\(([A-Z])\)$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DUE_PREFIX = "due:"

LineKind = Literal["item", "subtask", "blank", "invalid"]


@dataclass
class LineResult:
    """Outcome of parsing one physical line."""

    line_number: int
    kind: LineKind
    item: Optional[TodoItem] = None
    subtask: Optional[Subtask] = None
    reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Low-level parsers
# ---------------------------------------------------------------------------

def split_completion(text: str) -> tuple:
    """Return (completed, remainder) for an already-trimmed line."""
    m = _COMPLETED_RE.match(text)
    if m:
        return True, text[m.end():]
    return False, text


def _take_due(tokens: List[str]) -> tuple:
    """Remove every ``due:`` token; the first non-empty value wins."""
    due: Optional[str] = None
    kept = []
    for tok in tokens:
        if tok.startswith(DUE_PREFIX) and len(tok) > len(DUE_PREFIX):
            if due is None:
                due = tok[len(DUE_PREFIX):]
            continue
        kept.append(tok)
    return due, kept


def _parse_subtask_grammar_item(text: str, line_number: int) -> LineResult:
    completed, rest = split_completion(text)
    due, tokens = _take_due(rest.split())
    title = " ".join(tokens)
    if not title:
        return LineResult(line_number, "invalid", reason="empty title")
    item = TodoItem(id=line_number, title=title, completed=completed, due_date=due)
    return LineResult(line_number, "item", item=item)


def _parse_tag_grammar_item(text: str, line_number: int) -> LineResult:
    completed, rest = split_completion(text)
    due, tokens = _take_due(rest.split())

    priority = None
    if tokens:
        m = _PRIORITY_RE.match(tokens[0])
        if m:
            priority = m.group(1)
            tokens = tokens[1:]

    created = None
    for i, tok in enumerate(tokens):
        if _ISO_DATE_RE.match(tok):
            created = tok
            del tokens[i]
            break

    projects: List[str] = []
    contexts: List[str] = []
    words: List[str] = []
    for tok in tokens:
        if tok.startswith("+") and len(tok) > 1:
            projects.append(tok[1:])
        elif tok.startswith("@") and len(tok) > 1:
            contexts.append(tok[1:])
        else:
            words.append(tok)

    title = " ".join(words)
    if not title:
        return LineResult(line_number, "invalid", reason="empty title")

    item = TodoItem(
        id=line_number,
        title=title,
        completed=completed,
        due_date=due,
        priority=priority,
        projects=projects,
        contexts=contexts,
        created_date=created,
    )
    return LineResult(line_number, "item", item=item)


def parse_subtask_line(line: str, line_number: int = 0) -> LineResult:
    """Parse ``  - title`` / ``  x - title``."""
    text = line.strip()
    completed = False
    if text.startswith("x ") or text == "x":
        completed = True
        text = text[1:].lstrip()
    if text.startswith("- "):
        text = text[2:]
    elif text == "-":
        text = ""
    title = " ".join(text.split())
    if not title:
        return LineResult(line_number, "invalid", reason="empty subtask")
    return LineResult(line_number, "subtask", subtask=Subtask(title=title, completed=completed))


def parse_line(line: str, line_number: int, schema: TodoSchema) -> LineResult:
    """Classify and parse a single physical line."""
    if not line.strip():
        return LineResult(line_number, "blank")

    if _SUBTASK_RE.match(line):
        if schema == TodoSchema.SUBTASKS:
            return parse_subtask_line(line, line_number)
        return LineResult(line_number, "invalid", reason="subtask line in tag schema")

    text = line.strip()
    if schema == TodoSchema.SUBTASKS:
        return _parse_subtask_grammar_item(text, line_number)
    return _parse_tag_grammar_item(text, line_number)


def parse_lines(text: str, schema: TodoSchema) -> Iterator[LineResult]:
    for line_number, line in enumerate(text.splitlines(), start=1):
        yield parse_line(line, line_number, schema)


# ---------------------------------------------------------------------------
# Main parse / serialize API
# ---------------------------------------------------------------------------

def parse_todos(text: str, schema: TodoSchema = TodoSchema.TAGS) -> List[TodoItem]:
    """
    Parse todo.txt content into items.

    Blank lines, malformed lines and subtasks that precede every top-level
    item are discarded; nothing here raises.
    """
    items: List[TodoItem] = []
    for result in parse_lines(text, schema):
        if result.kind == "item":
            items.append(result.item)
        elif result.kind == "subtask":
            if not items:
                log.debug("Dropping orphan subtask on line %d", result.line_number)
                continue
            items[-1].subtasks.append(result.subtask)
        elif result.kind == "invalid":
            log.debug("Skipping line %d: %s", result.line_number, result.reason)
    return items


def format_subtask(subtask: Subtask) -> str:
    prefix = "x " if subtask.completed else ""
    return f"  {prefix}- {subtask.title}"


def format_item(item: TodoItem, schema: TodoSchema = TodoSchema.TAGS) -> str:
    """
    Render one item as its top-level line.

    Token order: completion, priority, creation date, title, projects,
    contexts, due date.
    """
    parts: List[str] = []
    if item.completed:
        parts.append("x")
    if schema == TodoSchema.TAGS:
        if item.priority:
            parts.append(f"({item.priority})")
        if item.created_date:
            parts.append(item.created_date)
        parts.append(item.title)
        parts.extend(f"+{p}" for p in item.projects)
        parts.extend(f"@{c}" for c in item.contexts)
    else:
        parts.append(item.title)
    if item.due_date:
        parts.append(f"{DUE_PREFIX}{item.due_date}")
    return " ".join(parts)


def serialize_todos(items: List[TodoItem], schema: TodoSchema = TodoSchema.TAGS) -> str:
    """Serialize items to todo.txt text (one ``\\n``-terminated line per item)."""
    lines: List[str] = []
    for item in items:
        lines.append(format_item(item, schema))
        if schema == TodoSchema.SUBTASKS:
            lines.extend(format_subtask(s) for s in item.subtasks)
    return "".join(f"{line}\n" for line in lines)
