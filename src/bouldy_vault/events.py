"""
In-process event bus.

Commands and the vault watcher publish semantic events here; UI-facing
surfaces (MCP tools, the REST /events route) subscribe or poll recent
history. Delivery is synchronous on the publisher's thread. Consumers must
tolerate duplicates: a command and the watcher may both report the same
change.
"""

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

log = logging.getLogger(__name__)

NOTE_CREATED = "note:created"
NOTE_UPDATED = "note:updated"
NOTE_DELETED = "note:deleted"
NOTE_SAVED = "note:saved"
NOTE_LIST_UPDATED = "note:list-updated"
TODOS_CHANGED = "todos_changed"
PROMPT_SAVED = "prompt:saved"
PROMPT_DELETED = "prompt:deleted"

EventHandler = Callable[[Dict[str, Any]], None]

_DEFAULT_HISTORY = 200


class EventBus:
    """Thread-safe pub/sub with a bounded history of recent events."""

    def __init__(self, history: int = _DEFAULT_HISTORY) -> None:
        self._lock = threading.Lock()
        self._handlers: List[EventHandler] = []
        self._history: Deque[Dict[str, Any]] = deque(maxlen=history)
        self._seq = 0

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        with self._lock:
            self._handlers.append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return _unsubscribe

    def publish(self, name: str, payload: Any = None) -> Dict[str, Any]:
        with self._lock:
            self._seq += 1
            event = {
                "seq": self._seq,
                "name": name,
                "ts": datetime.now(tz=timezone.utc).isoformat(),
                "payload": payload,
            }
            self._history.append(event)
            handlers = list(self._handlers)

        log.debug("Event %s #%d", name, event["seq"])
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                log.exception("Event handler failed for %s", name)
        return event

    def recent(self, since: int = 0, name: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return buffered events with ``seq > since``, optionally filtered by name."""
        with self._lock:
            events = [e for e in self._history if e["seq"] > since]
        if name:
            events = [e for e in events if e["name"] == name]
        return events

    @property
    def last_seq(self) -> int:
        with self._lock:
            return self._seq
