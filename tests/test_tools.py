"""
Tests for the MCP tool layer (tools/*.py).

Uses a real AppContext backed by a temporary vault on disk and exercises the
registered tool functions directly (bypasses transport).
"""

import json
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from bouldy_vault import events
from bouldy_vault.app_state import AppContext
from bouldy_vault.config import Settings
from bouldy_vault.tools import register_all_tools
from bouldy_vault.tools.todo_tools import handle_todo_bulk_due


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    (vault / "notes").mkdir(parents=True)
    (vault / "notes" / "ideas.md").write_text("# Ideas\n", encoding="utf-8")
    (vault / "todo.txt").write_text(
        "(A) 2024-01-01 Write report +Work @Office due:2024-01-10\n"
        "x Call mom @phone\n"
        "Water plants\n",
        encoding="utf-8",
    )
    return vault


class _FakeMCP:
    """Minimal fake to capture tool registrations."""

    def __init__(self):
        self._tools = {}

    def tool(self, *args, **kwargs):
        """Decorator that records functions by name."""
        def decorator(fn):
            self._tools[fn.__name__] = fn
            return fn
        return decorator

    def get(self, name: str):
        return self._tools[name]


@pytest.fixture
def setup(tmp_path):
    vault = _make_vault(tmp_path)
    ctx = AppContext(Settings(vault_root=vault))
    mcp = _FakeMCP()
    register_all_tools(mcp, ctx)
    return mcp, ctx, vault


def _call(mcp, name, **kwargs):
    return json.loads(mcp.get(name)(**kwargs))


def _event_names(ctx):
    return [e["name"] for e in ctx.bus.recent()]


# ---------------------------------------------------------------------------
# Todo tools
# ---------------------------------------------------------------------------

class TestTodoTools:
    def test_list(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "todo_list")
        assert [t["id"] for t in data] == [1, 2, 3]
        assert data[0]["dueDate"] == "2024-01-10"
        assert data[0]["projects"] == ["Work"]
        assert data[1]["completed"] is True

    def test_add_publishes_change(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "todo_add", title="Buy milk", due="2024-03-03",
                     priority="B", projects="Home, +Errands", contexts="@shop")
        assert data["id"] == 4
        assert data["projects"] == ["Home", "Errands"]
        assert data["contexts"] == ["shop"]
        assert data["createdDate"] is not None
        assert _event_names(ctx) == [events.TODOS_CHANGED]

    def test_add_bad_due(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "todo_add", title="Later", due="someday maybe")
        assert "error" in data
        assert _event_names(ctx) == []

    def test_toggle_missing(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "todo_toggle", todo_id=99)
        assert data == {"error": "Todo not found: 99"}
        assert _event_names(ctx) == []

    def test_update_fields(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "todo_update", todo_id=3, title="Water all plants",
                     due="2024-04-04", projects="Home")
        assert data["title"] == "Water all plants"
        assert data["dueDate"] == "2024-04-04"
        assert data["projects"] == ["Home"]
        text = (vault / "todo.txt").read_text(encoding="utf-8")
        assert text.splitlines()[2] == "Water all plants +Home due:2024-04-04"

    def test_update_clears_due(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "todo_update", todo_id=1, due="")
        assert data["dueDate"] is None

    def test_update_nothing(self, setup):
        mcp, ctx, vault = setup
        assert "error" in _call(mcp, "todo_update", todo_id=1)

    def test_facets(self, setup):
        mcp, ctx, vault = setup
        assert _call(mcp, "todo_facets") == {
            "projects": ["Work"],
            "contexts": ["Office", "phone"],
            "priorities": ["A"],
        }

    def test_bulk_due_without_match_publishes_nothing(self, setup):
        mcp, ctx, vault = setup
        before = (vault / "todo.txt").read_text(encoding="utf-8")
        assert handle_todo_bulk_due(ctx, updates=[{"id": 42, "due": "2024-01-01"}]) == {"updated": 0}
        assert _event_names(ctx) == []
        assert (vault / "todo.txt").read_text(encoding="utf-8") == before

    def test_bulk_due_publishes_once(self, setup):
        mcp, ctx, vault = setup
        result = handle_todo_bulk_due(ctx, updates=[{"id": 3, "due": "tomorrow"}, {"id": 42}])
        assert result == {"updated": 1}
        assert _event_names(ctx) == [events.TODOS_CHANGED]

    def test_add_multi_line_title_refused(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "todo_add", title="Buy milk\nx pay rent")
        assert "error" in data
        assert len(_call(mcp, "todo_list")) == 3
        assert _event_names(ctx) == []

    def test_archive_and_stats(self, setup):
        mcp, ctx, vault = setup
        assert _call(mcp, "todo_archive") == {"archived": 1}
        assert _event_names(ctx) == [events.TODOS_CHANGED]
        stats = _call(mcp, "todo_stats")
        assert stats["totalCompleted"] == 1
        assert stats["currentStreak"] == 1

        month = date.today().strftime("%Y-%m")
        assert _call(mcp, "archive_months") == [month]
        archived = _call(mcp, "archive_get", month=month)
        assert [a["title"] for a in archived] == ["Call mom"]

    def test_archive_nothing(self, setup):
        mcp, ctx, vault = setup
        _call(mcp, "todo_archive")
        ctx.bus.recent()
        before = ctx.bus.last_seq
        assert _call(mcp, "todo_archive") == {"archived": 0}
        assert ctx.bus.last_seq == before

    def test_daily_limit(self, setup):
        mcp, ctx, vault = setup
        assert _call(mcp, "todo_set_daily_limit", limit=3)["dailyLimit"] == 3
        assert "error" in _call(mcp, "todo_set_daily_limit", limit=-1)

    def test_schema_status_and_migrate(self, setup):
        mcp, ctx, vault = setup
        status = _call(mcp, "todo_schema")
        assert status == {"version": 2, "name": "tags", "marker": False}
        assert "error" in _call(mcp, "todo_schema", migrate_to=1)


# ---------------------------------------------------------------------------
# Note tools
# ---------------------------------------------------------------------------

class TestNoteTools:
    def test_write_publishes_saved(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "note_write", path="journal", content="today", title="Journal")
        assert data["name"] == "journal.md"
        assert (vault / "notes" / "journal.md").read_text(encoding="utf-8") == "today"
        event = ctx.bus.recent()[-1]
        assert event["name"] == events.NOTE_SAVED
        assert event["payload"]["title"] == "Journal"

    def test_read(self, setup):
        mcp, ctx, vault = setup
        assert _call(mcp, "note_read", path="ideas.md") == {"title": "ideas", "content": "# Ideas\n"}
        assert "error" in _call(mcp, "note_read", path="missing")

    def test_delete_publishes_deleted(self, setup):
        mcp, ctx, vault = setup
        data = _call(mcp, "note_delete", path=str(vault / "notes" / "ideas.md"))
        assert data["name"] == "ideas.md"
        assert _event_names(ctx) == [events.NOTE_DELETED]

    def test_write_outside_vault(self, setup, tmp_path):
        mcp, ctx, vault = setup
        data = _call(mcp, "note_write", path=str(tmp_path / "escape.md"), content="x")
        assert "error" in data
        assert not (tmp_path / "escape.md").exists()
        assert _event_names(ctx) == []

    def test_list(self, setup):
        mcp, ctx, vault = setup
        assert [n["name"] for n in _call(mcp, "note_list")] == ["ideas.md"]


# ---------------------------------------------------------------------------
# Prompt tools
# ---------------------------------------------------------------------------

class TestPromptTools:
    def test_save_and_delete_events(self, setup):
        mcp, ctx, vault = setup
        saved = _call(mcp, "prompt_save", prompt_id="review", title="Review",
                      content="Review {{code}}", tags="dev, review", variables="code")
        assert saved["tags"] == ["dev", "review"]
        assert saved["variables"] == ["code"]

        deleted = _call(mcp, "prompt_delete", prompt_id="review")
        assert deleted == {"id": "review", "path": str(vault / "prompts" / "review.md")}

        recent = ctx.bus.recent()
        assert [e["name"] for e in recent] == [events.PROMPT_SAVED, events.PROMPT_DELETED]
        assert recent[0]["payload"]["id"] == "review"
        assert recent[0]["payload"]["path"] == str(vault / "prompts" / "review.md")

    def test_bad_id(self, setup):
        mcp, ctx, vault = setup
        assert "error" in _call(mcp, "prompt_save", prompt_id="../x", title="X", content="")

    def test_use(self, setup):
        mcp, ctx, vault = setup
        _call(mcp, "prompt_save", prompt_id="p", title="P", content="")
        assert _call(mcp, "prompt_use", prompt_id="p")["useCount"] == 1
        assert "error" in _call(mcp, "prompt_use", prompt_id="nope")

    def test_get_missing(self, setup):
        mcp, ctx, vault = setup
        assert _call(mcp, "prompt_get", prompt_id="nope") == {"error": "Prompt not found: nope"}


# ---------------------------------------------------------------------------
# Vault tools
# ---------------------------------------------------------------------------

class TestVaultTools:
    def test_events_since(self, setup):
        mcp, ctx, vault = setup
        _call(mcp, "todo_toggle", todo_id=3)
        _call(mcp, "todo_toggle", todo_id=3)
        data = _call(mcp, "vault_events", since=1)
        assert data["last_seq"] == 2
        assert [e["seq"] for e in data["events"]] == [2]

    def test_watcher_status_when_stopped(self, setup):
        mcp, ctx, vault = setup
        assert _call(mcp, "watcher_status") == {"running": False, "vault_root": None}

    def test_migrate_structure_noop(self, setup):
        mcp, ctx, vault = setup
        assert _call(mcp, "vault_migrate_structure") == {"moved": 0}
