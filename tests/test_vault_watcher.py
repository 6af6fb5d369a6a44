"""
Tests for watcher/vault_watcher.py.

Most tests feed RawEvents through submit() + flush() with a fake observer so
batching is deterministic. TestDebounceLoop runs the real processor thread
and TestRealObserver drives an actual watchdog Observer.
"""

import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from bouldy_vault import events
from bouldy_vault.errors import WatcherError
from bouldy_vault.events import EventBus
from bouldy_vault.watcher.vault_watcher import RawEvent, VaultWatcher, dedupe


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _FakeObserver:
    """Records schedule() calls; never emits anything by itself."""

    def __init__(self):
        self.scheduled = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path, recursive=False):
        self.scheduled.append((path, recursive))

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def join(self, timeout=None):
        pass


def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    (vault / "notes").mkdir(parents=True)
    (vault / "notes" / "alpha.md").write_text("# Alpha\n", encoding="utf-8")
    (vault / "notes" / "beta.md").write_text("# Beta\n", encoding="utf-8")
    (vault / "todo.txt").write_text("Task\n", encoding="utf-8")
    return vault


def _names(bus: EventBus) -> list:
    return [e["name"] for e in bus.recent()]


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return False


@pytest.fixture
def vault(tmp_path):
    return _make_vault(tmp_path)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def watcher(vault, bus):
    w = VaultWatcher(vault, bus, debounce=0.05, observer_factory=_FakeObserver)
    yield w
    w.stop()


# ---------------------------------------------------------------------------
# dedupe / classify
# ---------------------------------------------------------------------------

class TestDedupe:
    def test_keeps_first_of_each_pair(self, tmp_path):
        a = tmp_path / "a.md"
        b = tmp_path / "b.md"
        batch = [
            RawEvent("modified", a),
            RawEvent("modified", b),
            RawEvent("modified", a),
            RawEvent("removed", a),
        ]
        assert dedupe(batch) == [
            RawEvent("modified", a),
            RawEvent("modified", b),
            RawEvent("removed", a),
        ]


class TestClassify:
    def test_note_kinds(self, watcher, vault):
        note = vault / "notes" / "alpha.md"
        assert watcher.classify(RawEvent("created", note))[0] == events.NOTE_CREATED
        assert watcher.classify(RawEvent("modified", note))[0] == events.NOTE_UPDATED
        assert watcher.classify(RawEvent("removed", note))[0] == events.NOTE_DELETED

    def test_wrong_extension_ignored(self, watcher, vault):
        assert watcher.classify(RawEvent("modified", vault / "notes" / "image.png")) is None

    def test_todo_file_by_exact_path(self, watcher, vault):
        todo = vault / "todo.txt"
        assert watcher.classify(RawEvent("created", todo))[0] == events.TODOS_CHANGED
        assert watcher.classify(RawEvent("modified", todo))[0] == events.TODOS_CHANGED
        assert watcher.classify(RawEvent("removed", todo)) is None

    def test_other_txt_ignored(self, watcher, vault):
        assert watcher.classify(RawEvent("modified", vault / "other.txt")) is None
        assert watcher.classify(RawEvent("modified", vault / "notes" / "todo.txt")) is None

    def test_markdown_outside_roots_ignored(self, watcher, vault):
        assert watcher.classify(RawEvent("modified", vault / "README.md")) is None
        assert watcher.classify(RawEvent("modified", vault.parent / "elsewhere.md")) is None

    def test_prompt_changes_not_reported(self, watcher, vault):
        assert watcher.classify(RawEvent("modified", vault / "prompts" / "p.md")) is None

    def test_nested_note_folders_ignored(self, watcher, vault):
        nested = vault / "notes" / "archive" / "old.md"
        assert watcher.classify(RawEvent("created", nested)) is None
        assert watcher.classify(RawEvent("modified", nested)) is None


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------

class TestProcessBatch:
    def test_burst_of_modifications_coalesces(self, watcher, bus, vault):
        note = vault / "notes" / "alpha.md"
        for _ in range(5):
            watcher.submit(RawEvent("modified", note))
        assert watcher.flush() == 5

        assert _names(bus) == [events.NOTE_UPDATED, events.NOTE_LIST_UPDATED]
        updated = bus.recent(name=events.NOTE_UPDATED)[0]["payload"]
        assert updated["name"] == "alpha.md"
        assert updated["title"] == "alpha"
        assert isinstance(updated["modified"], int)
        assert watcher.batches_processed == 1

    def test_list_refresh_holds_every_note(self, watcher, bus, vault):
        watcher.submit(RawEvent("modified", vault / "notes" / "beta.md"))
        watcher.flush()
        listing = bus.recent(name=events.NOTE_LIST_UPDATED)[0]["payload"]["notes"]
        assert sorted(n["name"] for n in listing) == ["alpha.md", "beta.md"]

    def test_deleted_payload_has_no_title(self, watcher, bus, vault):
        gone = vault / "notes" / "gone.md"
        watcher.submit(RawEvent("removed", gone))
        watcher.flush()
        payload = bus.recent(name=events.NOTE_DELETED)[0]["payload"]
        assert payload["name"] == "gone.md"
        assert payload["title"] is None
        assert payload["modified"] is None
        assert events.NOTE_LIST_UPDATED in _names(bus)

    def test_vanished_note_skipped(self, watcher, bus, vault):
        watcher.submit(RawEvent("created", vault / "notes" / "ghost.md"))
        watcher.flush()
        assert _names(bus) == []

    def test_todo_writes_single_signal(self, watcher, bus, vault):
        todo = vault / "todo.txt"
        watcher.submit(RawEvent("created", todo))
        watcher.submit(RawEvent("modified", todo))
        watcher.submit(RawEvent("modified", todo))
        watcher.flush()
        assert _names(bus) == [events.TODOS_CHANGED]
        assert bus.recent()[0]["payload"] is None

    def test_mixed_batch_order(self, watcher, bus, vault):
        watcher.submit(RawEvent("modified", vault / "todo.txt"))
        watcher.submit(RawEvent("created", vault / "notes" / "alpha.md"))
        watcher.flush()
        assert _names(bus) == [
            events.NOTE_CREATED,
            events.NOTE_LIST_UPDATED,
            events.TODOS_CHANGED,
        ]

    def test_ignored_only_batch_publishes_nothing(self, watcher, bus, vault):
        watcher.submit(RawEvent("modified", vault / "notes" / "image.png"))
        watcher.flush()
        assert _names(bus) == []
        assert watcher.batches_processed == 1

    def test_error_in_batch_is_contained(self, watcher, bus, vault, monkeypatch):
        def boom(batch):
            raise RuntimeError("boom")

        monkeypatch.setattr(watcher, "process_batch", boom)
        watcher.submit(RawEvent("modified", vault / "todo.txt"))
        watcher.flush()
        assert watcher.batches_processed == 1


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_missing_notes_dir(self, tmp_path, bus):
        vault = tmp_path / "empty"
        vault.mkdir()
        w = VaultWatcher(vault, bus, observer_factory=_FakeObserver)
        with pytest.raises(WatcherError):
            w.start()

    def test_creates_prompts_dir_and_schedules_roots(self, vault, bus):
        observers = []

        def factory():
            obs = _FakeObserver()
            observers.append(obs)
            return obs

        w = VaultWatcher(vault, bus, debounce=0.05, observer_factory=factory)
        w.start()
        try:
            assert (vault / "prompts").is_dir()
            obs = observers[0]
            assert obs.started
            assert {Path(p).name for p, _ in obs.scheduled} == {"vault", "notes", "prompts"}
            assert all(recursive is False for _, recursive in obs.scheduled)
            assert w.running
        finally:
            w.stop()
        assert obs.stopped
        assert not w.running

    def test_double_start_refused(self, watcher):
        watcher.start()
        with pytest.raises(WatcherError):
            watcher.start()

    def test_no_restart_after_stop(self, watcher):
        watcher.start()
        watcher.stop()
        with pytest.raises(WatcherError):
            watcher.start()

    def test_status(self, watcher, vault):
        st = watcher.status()
        assert st["running"] is False
        assert st["debounce_ms"] == 50
        assert st["vault_root"] == str(vault.absolute())


class TestDebounceLoop:
    def test_burst_within_window_is_one_batch(self, watcher, bus, vault):
        watcher.start()
        note = vault / "notes" / "alpha.md"
        for _ in range(10):
            watcher.submit(RawEvent("modified", note))

        assert _wait_for(lambda: watcher.batches_processed >= 1)
        time.sleep(0.15)
        assert watcher.batches_processed == 1
        assert _names(bus) == [events.NOTE_UPDATED, events.NOTE_LIST_UPDATED]

    def test_stop_processes_pending_batch(self, vault, bus):
        w = VaultWatcher(vault, bus, debounce=5.0, observer_factory=_FakeObserver)
        w.start()
        w.submit(RawEvent("modified", vault / "todo.txt"))
        time.sleep(0.05)
        w.stop()
        assert _names(bus) == [events.TODOS_CHANGED]


class TestRealObserver:
    def test_new_note_is_reported(self, vault, bus):
        w = VaultWatcher(vault, bus, debounce=0.1)
        w.start()
        try:
            (vault / "notes" / "fresh.md").write_text("hello", encoding="utf-8")
            assert _wait_for(lambda: events.NOTE_LIST_UPDATED in _names(bus))
            note_events = [
                e for e in bus.recent()
                if e["name"] in (events.NOTE_CREATED, events.NOTE_UPDATED)
            ]
            assert any(e["payload"]["name"] == "fresh.md" for e in note_events)
        finally:
            w.stop()

    def test_todo_write_is_reported(self, vault, bus):
        w = VaultWatcher(vault, bus, debounce=0.1)
        w.start()
        try:
            (vault / "todo.txt").write_text("Task\nAnother\n", encoding="utf-8")
            assert _wait_for(lambda: events.TODOS_CHANGED in _names(bus))
        finally:
            w.stop()
