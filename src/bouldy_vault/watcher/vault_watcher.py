"""
Vault file system watcher: watchdog events, debounced.

The watchdog Observer thread only converts OS notifications into RawEvent
messages on a queue. A single processor thread owns all root-path state and
handles one batch per debounce window:

1. Block until the first raw event arrives, then keep collecting until the
   window (default 500 ms) closes
2. De-duplicate the batch by (kind, path)
3. Classify each path against the tracked roots and publish note events
4. If any note changed, rescan notes/ and publish one full list refresh
5. If todo.txt was created or modified, publish a single todos_changed

Batches never run concurrently. Errors inside a batch are logged and the
loop keeps going. Writes made by the app's own commands are observed like
any other change, so consumers may see a command event and a watcher event
for the same write.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Literal, Optional, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from bouldy_vault import events
from bouldy_vault.errors import WatcherError
from bouldy_vault.events import EventBus
from bouldy_vault.models.note import NotePayload
from bouldy_vault.store.note_store import note_metadata, scan_notes
from bouldy_vault.vault import NOTE_EXTENSION, VaultPaths

log = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 0.5

RawKind = Literal["created", "modified", "removed"]

_NOTE_EVENT_FOR_KIND = {
    "created": events.NOTE_CREATED,
    "modified": events.NOTE_UPDATED,
    "removed": events.NOTE_DELETED,
}

_STOP = object()


@dataclass(frozen=True)
class RawEvent:
    kind: RawKind
    path: Path


class _QueueingHandler(FileSystemEventHandler):
    """Runs on the observer thread: translate and enqueue, nothing else."""

    def __init__(self, submit: Callable[[RawEvent], None]) -> None:
        super().__init__()
        self._submit = submit

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._submit(RawEvent("created", Path(event.src_path)))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._submit(RawEvent("modified", Path(event.src_path)))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._submit(RawEvent("removed", Path(event.src_path)))

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._submit(RawEvent("removed", Path(event.src_path)))
            self._submit(RawEvent("created", Path(event.dest_path)))


def dedupe(batch: List[RawEvent]) -> List[RawEvent]:
    """Keep the first occurrence of each (kind, path) pair, in arrival order."""
    seen = set()
    unique = []
    for raw in batch:
        key = (raw.kind, raw.path)
        if key in seen:
            continue
        seen.add(key)
        unique.append(raw)
    return unique


class VaultWatcher:
    """
    Debounced watcher for one vault.

    Usage:
        watcher = VaultWatcher(vault_root, bus)
        watcher.start()
        ...
        watcher.stop()

    The instance must be kept alive for notifications to continue; once
    stopped it is not restarted, so build a new one.
    """

    def __init__(
        self,
        vault_root: Path,
        bus: EventBus,
        debounce: float = DEFAULT_DEBOUNCE,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        paths = VaultPaths(Path(vault_root).absolute())
        self._paths = paths
        self._bus = bus
        self._debounce = debounce
        self._observer_factory = observer_factory
        self._observer = None
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._batch_lock = threading.Lock()
        self._stopped = False

        # Root state, read only by the processing side
        self._notes_dir = Path(paths.notes_dir).absolute().resolve()
        self._prompts_dir = Path(paths.prompts_dir).absolute().resolve()
        self._todo_file = _normalize(paths.todo_file)

        self.batches_processed = 0

    @property
    def vault_root(self) -> Path:
        return self._paths.root

    @property
    def debounce(self) -> float:
        return self._debounce

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Validate roots, schedule non-recursive watches, start processing."""
        if self._stopped:
            raise WatcherError("Watcher was stopped; create a new one")
        if self.running:
            raise WatcherError("Watcher already running")

        paths = self._paths
        if not paths.notes_dir.is_dir():
            raise WatcherError(f"Notes directory does not exist: {paths.notes_dir}")
        if not paths.prompts_dir.exists():
            try:
                paths.prompts_dir.mkdir()
            except OSError as e:
                raise WatcherError(f"Failed to create prompts directory: {e}") from e

        handler = _QueueingHandler(self.submit)
        observer = self._observer_factory()
        try:
            for root in (paths.root, paths.notes_dir, paths.prompts_dir):
                observer.schedule(handler, str(root), recursive=False)
            observer.start()
        except OSError as e:
            raise WatcherError(f"Failed to watch vault {paths.root}: {e}") from e
        self._observer = observer

        self._thread = threading.Thread(
            target=self._process_loop, daemon=True, name="vault-watcher"
        )
        self._thread.start()
        log.info(
            "Watching vault %s (debounce %.0f ms)", paths.root, self._debounce * 1000
        )

    def stop(self) -> None:
        """Stop the observer, finish any batch in flight, stop the processor."""
        log.info("Stopping vault watcher")
        self._stopped = True
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        self._queue.put(_STOP)
        if self._thread:
            self._thread.join(timeout=self._debounce + 5)
            self._thread = None

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def submit(self, raw: RawEvent) -> None:
        """Enqueue a raw event (observer thread, or tests)."""
        self._queue.put(raw)

    def flush(self) -> int:
        """Process everything queued right now as one batch; returns its raw size."""
        batch = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is _STOP:
                self._queue.put(_STOP)
                break
            batch.append(item)
        if batch:
            self._handle_batch(batch)
        return len(batch)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _process_loop(self) -> None:
        while True:
            first = self._queue.get()
            if first is _STOP:
                break
            batch = [first]
            stop_after = False
            deadline = time.monotonic() + self._debounce
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                try:
                    item = self._queue.get(timeout=remaining)
                except queue.Empty:
                    break
                if item is _STOP:
                    stop_after = True
                    break
                batch.append(item)

            self._handle_batch(batch)
            if stop_after:
                break

    def _handle_batch(self, batch: List[RawEvent]) -> None:
        with self._batch_lock:
            try:
                self.process_batch(batch)
            except Exception:
                log.exception("Error processing watcher batch (%d events)", len(batch))
            self.batches_processed += 1

    def classify(self, raw: RawEvent) -> Optional[Tuple[str, Path]]:
        """
        Map a raw event to (event name, path), or None when it is ignored.

        todo.txt matches by exact path regardless of extension. Everything else
        must be a ``.md`` file directly inside a tracked root; nested folders
        are ignored. Prompt changes are already announced by the prompt
        commands, so they map to None here.
        """
        path = _normalize(raw.path)

        if path == self._todo_file:
            if raw.kind in ("created", "modified"):
                return events.TODOS_CHANGED, path
            return None

        if path.suffix != NOTE_EXTENSION:
            return None

        if path.parent == self._notes_dir:
            return _NOTE_EVENT_FOR_KIND[raw.kind], path

        if path.parent == self._prompts_dir:
            log.debug("Prompt %s %s (announced by prompt commands)", raw.kind, path.name)
        return None

    def process_batch(self, batch: List[RawEvent]) -> List[str]:
        """Classify a batch and publish its events; returns the published names."""
        published: List[str] = []
        notes_changed = False
        todos_changed = False

        for raw in dedupe(batch):
            classified = self.classify(raw)
            if classified is None:
                log.debug("Ignoring %s %s", raw.kind, raw.path)
                continue
            name, path = classified

            if name == events.TODOS_CHANGED:
                todos_changed = True
                continue

            if name == events.NOTE_DELETED:
                payload = NotePayload.deleted(path)
            else:
                payload = note_metadata(path)
                if payload is None:
                    log.debug("Note vanished before %s could be reported: %s", name, path)
                    continue
            self._bus.publish(name, payload.to_dict())
            published.append(name)
            notes_changed = True

        if notes_changed:
            notes = scan_notes(self._notes_dir)
            self._bus.publish(
                events.NOTE_LIST_UPDATED, {"notes": [n.to_dict() for n in notes]}
            )
            published.append(events.NOTE_LIST_UPDATED)

        if todos_changed:
            self._bus.publish(events.TODOS_CHANGED)
            published.append(events.TODOS_CHANGED)

        return published

    def status(self) -> dict:
        return {
            "vault_root": str(self._paths.root),
            "running": self.running,
            "debounce_ms": int(self._debounce * 1000),
            "batches_processed": self.batches_processed,
            "pending_events": self._queue.qsize(),
        }


def _normalize(path: Path) -> Path:
    """Resolve symlinks in the parent so observer paths compare equal to roots."""
    path = Path(path).absolute()
    return path.parent.resolve() / path.name
