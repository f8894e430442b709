"""
Continuous replication of source-side filesystem changes.

Raw notifications arrive from a :class:`WatchSubscription`.  The
:class:`ChangeWatcher` consumes them one at a time on the calling thread,
so destination side effects happen in exactly the order the events were
delivered and the source manifest has a single writer.
"""
import os
import queue
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ..exceptions import ConfigurationError, UnhandledEventError
from ..utils.logger import get_logger
from .locations import LocationKind, LocationRole

log = get_logger(__name__)


class EventOp(Enum):
    CREATED = "created"
    WRITTEN = "written"
    REMOVED = "removed"
    RENAMED = "renamed"


@dataclass(frozen=True)
class ChangeEvent:
    """One filesystem change notification.

    Attributes:
        path: Absolute path the event refers to
        op: Operation tag (an :class:`EventOp` value, or anything else the
            watch layer produced)
        is_directory: Whether *path* is a directory, when the watch layer knows
        dest_path: New path for ``renamed`` events
    """

    path: str
    op: str
    is_directory: bool = False
    dest_path: Optional[str] = None


# ---------------------------------------------------------------------------
# Watch subscription (watchdog adapter)
# ---------------------------------------------------------------------------

class WatchSubscription(ABC):
    """Blocking subscription on a set of directories."""

    @abstractmethod
    def add(self, path: str) -> None:
        """Start watching *path* (not its subdirectories)."""

    @abstractmethod
    def remove(self, path: str) -> None:
        """Stop watching *path* and every watched directory below it."""

    @abstractmethod
    def events(self) -> Iterator[ChangeEvent]:
        """Yield events in delivery order; blocks between events."""

    def close(self) -> None:
        pass


class _QueueingHandler(FileSystemEventHandler):
    """Translates watchdog callbacks into :class:`ChangeEvent` queue entries."""

    def __init__(self, event_queue):
        self.event_queue = event_queue

    def on_created(self, event):
        self.event_queue.put(ChangeEvent(event.src_path, EventOp.CREATED.value, event.is_directory))

    def on_modified(self, event):
        # Directory mtime bumps just mirror changes to their children
        if event.is_directory:
            return
        self.event_queue.put(ChangeEvent(event.src_path, EventOp.WRITTEN.value, False))

    def on_deleted(self, event):
        self.event_queue.put(ChangeEvent(event.src_path, EventOp.REMOVED.value, event.is_directory))

    def on_moved(self, event):
        self.event_queue.put(
            ChangeEvent(event.src_path, EventOp.RENAMED.value, event.is_directory, event.dest_path)
        )


class WatchdogSubscription(WatchSubscription):
    """:class:`WatchSubscription` backed by a watchdog ``Observer``.

    Each added directory gets its own non-recursive schedule, so coverage
    is exactly the set of directories registered.  A deleted directory
    must be removed before it can be watched again: its old schedule is
    dead and would otherwise shadow the new one.
    """

    def __init__(self, observer=None):
        self.event_queue = queue.Queue()
        self.handler = _QueueingHandler(self.event_queue)
        self.observer = observer or Observer()
        self.watches = {}
        self._started = False

    def add(self, path):
        path = os.path.abspath(path)
        if path in self.watches:
            return
        self.watches[path] = self.observer.schedule(self.handler, path, recursive=False)
        log.debug("Watching %s", path)

    def remove(self, path):
        path = os.path.abspath(path)
        below = path + os.sep
        for watched in sorted(p for p in self.watches if p == path or p.startswith(below)):
            self.observer.unschedule(self.watches.pop(watched))
            log.debug("Stopped watching %s", watched)

    def start(self):
        """Start delivering events; called by :meth:`events` if needed."""
        if not self._started:
            self.observer.start()
            self._started = True

    def events(self):
        self.start()
        while True:
            yield self.event_queue.get()

    def close(self):
        if self._started:
            self.observer.stop()
            self.observer.join(timeout=10)
            self._started = False


# ---------------------------------------------------------------------------
# Change watcher
# ---------------------------------------------------------------------------

class ChangeWatcher:
    """Applies source change events to the paired destination.

    Args:
        source: Source :class:`FilesystemLocation` already paired with a destination
        config: :class:`SyncConfig` (uses ``recursive`` and ``rename_policy``)
        subscription: :class:`WatchSubscription`; defaults to watchdog

    Raises:
        ConfigurationError: If *source* is not a paired filesystem source
    """

    def __init__(self, source, config, subscription=None):
        if source.role is not LocationRole.SOURCE or source.destination is None:
            raise ConfigurationError(
                f"Cannot watch {source.role.value} {source}: only a paired source is watched"
            )
        if source.kind is not LocationKind.FILESYSTEM:
            raise ConfigurationError(f"Cannot watch {source}: change notifications need a local directory")
        self.source = source
        self.destination = source.destination
        self.config = config
        self.subscription = subscription or WatchdogSubscription()
        self._handlers = {
            EventOp.CREATED.value: self._on_created,
            EventOp.WRITTEN.value: self._on_written,
            EventOp.REMOVED.value: self._on_removed,
            EventOp.RENAMED.value: self._on_renamed,
        }

    def start(self):
        """Register the source root, plus every subdirectory when recursive."""
        self.subscription.add(self.source.root)
        if self.config.recursive:
            for directory in self.source.subdirectories():
                self.subscription.add(directory)
        log.info("Watching %s for changes (recursive=%s)", self.source, self.config.recursive)

    def run(self):
        """Register watches and process events until the subscription ends."""
        self.start()
        try:
            for event in self.subscription.events():
                self.handle_event(event)
        finally:
            self.subscription.close()

    def handle_event(self, event):
        """Apply one event to the source manifest and the destination.

        Raises:
            UnhandledEventError: For operation tags this watcher does not model
            BackendError: If the destination put/delete fails
        """
        op = event.op.value if isinstance(event.op, EventOp) else event.op
        log.debug("event %s on %s", op, event.path)
        handler = self._handlers.get(op)
        if handler is None:
            raise UnhandledEventError(op, event.path)
        try:
            handler(event)
        except ValueError as e:
            # The path has no key under the source root (e.g. the root itself went away)
            raise UnhandledEventError(op, event.path) from e

    # ── Per-operation handlers ─────────────────────────────────────────

    def _on_created(self, event):
        if event.is_directory or os.path.isdir(event.path):
            if self.config.recursive:
                self.subscription.add(event.path)
            return
        self._push(event.path)

    def _on_written(self, event):
        if event.is_directory or os.path.isdir(event.path):
            return
        self._push(event.path)

    def _on_removed(self, event):
        key = self.source.key_for(event.path)
        if event.is_directory:
            self.subscription.remove(event.path)
            self._remove_tree(key)
            return
        log.info("deleting %s from destination.", key)
        self.destination.delete(key)
        self.source.manifest.remove(key)

    def _on_renamed(self, event):
        if self.config.rename_policy != "delete-create":
            raise UnhandledEventError(EventOp.RENAMED.value, event.path)

        self._on_removed(ChangeEvent(event.path, EventOp.REMOVED.value, event.is_directory))
        if event.dest_path and self._inside_source(event.dest_path):
            if event.is_directory:
                self._push_tree(event.dest_path)
            else:
                self._on_created(ChangeEvent(event.dest_path, EventOp.CREATED.value, False))

    # ── Helpers ────────────────────────────────────────────────────────

    def _push(self, path):
        key = self.source.key_for(path)
        try:
            descriptor = self.source.describe_path(path)
        except FileNotFoundError:
            # Gone again before we got to it; the removal event follows
            log.debug("%s vanished before it could be pushed", path)
            return
        self.source.manifest.insert(descriptor)
        log.info("pushing %s to destination.", key)
        self.destination.put(key, descriptor)

    def _remove_tree(self, key):
        prefix = key + "/"
        for child in sorted(k for k in self.source.manifest.keys() if k.startswith(prefix)):
            log.info("deleting %s from destination.", child)
            self.destination.delete(child)
            self.source.manifest.remove(child)

    def _push_tree(self, directory):
        if self.config.recursive:
            self.subscription.add(directory)
        for dirpath, dirnames, filenames in os.walk(directory):
            dirnames.sort()
            if self.config.recursive and dirpath != directory:
                self.subscription.add(dirpath)
            for name in sorted(filenames):
                self._push(os.path.join(dirpath, name))

    def _inside_source(self, path):
        try:
            self.source.key_for(path)
        except ValueError:
            return False
        return True
