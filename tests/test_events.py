"""Tests for events.EventBus."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bouldy_vault import events
from bouldy_vault.events import EventBus


class TestEventBus:
    def test_publish_delivers_to_subscribers(self):
        bus = EventBus()
        seen = []
        bus.subscribe(seen.append)
        event = bus.publish(events.TODOS_CHANGED)
        assert seen == [event]
        assert event["seq"] == 1
        assert event["name"] == "todos_changed"
        assert event["payload"] is None

    def test_unsubscribe(self):
        bus = EventBus()
        seen = []
        unsubscribe = bus.subscribe(seen.append)
        bus.publish(events.NOTE_SAVED, {"path": "a.md"})
        unsubscribe()
        unsubscribe()
        bus.publish(events.NOTE_SAVED, {"path": "b.md"})
        assert len(seen) == 1

    def test_failing_handler_does_not_block_others(self):
        bus = EventBus()
        seen = []

        def broken(event):
            raise RuntimeError("handler bug")

        bus.subscribe(broken)
        bus.subscribe(seen.append)
        bus.publish(events.PROMPT_DELETED, {"id": "x", "path": "/v/prompts/x.md"})
        assert len(seen) == 1

    def test_recent_since_and_name(self):
        bus = EventBus()
        bus.publish(events.NOTE_CREATED, {"path": "a"})
        bus.publish(events.TODOS_CHANGED)
        bus.publish(events.NOTE_CREATED, {"path": "b"})
        assert [e["seq"] for e in bus.recent(since=1)] == [2, 3]
        assert [e["payload"]["path"] for e in bus.recent(name=events.NOTE_CREATED)] == ["a", "b"]
        assert bus.last_seq == 3

    def test_history_is_bounded(self):
        bus = EventBus(history=3)
        for _ in range(5):
            bus.publish(events.TODOS_CHANGED)
        assert [e["seq"] for e in bus.recent()] == [3, 4, 5]
        assert bus.last_seq == 5
