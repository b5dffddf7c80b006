"""Watch resource built on the watchdog library."""

import logging
import os
import queue
import threading
import time
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Optional, Set, Tuple, Union

from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch
from watchdog.events import (
    FileSystemEventHandler,
    DirCreatedEvent,
    DirMovedEvent,
    FileModifiedEvent,
)

from .exceptions import SubscribeError, WatchResourceError
from .models import ChangeEvent, ChangeKind

logger = logging.getLogger(__name__)


class ChannelClosed:
    """Marker put on both queues once the watch resource is closed."""

    def __repr__(self) -> str:
        return "CHANNEL_CLOSED"


CHANNEL_CLOSED = ChannelClosed()


class FSEventHandler(FileSystemEventHandler):
    """
    Handler that converts watchdog events to ChangeEvents.

    on_directory_gone, if given, is called with the path of every
    directory deleted or moved away, before the event is delivered.
    """

    def __init__(
        self,
        callback: Callable[[ChangeEvent], None],
        on_directory_gone: Optional[Callable[[Path], None]] = None,
    ):
        super().__init__()
        self.callback = callback
        self.on_directory_gone = on_directory_gone

    def _directory_gone(self, path: str):
        if self.on_directory_gone:
            self.on_directory_gone(Path(path))

    def _emit(self, path: str, kind: ChangeKind, is_directory: bool):
        self.callback(ChangeEvent(
            path=Path(path),
            kind=kind,
            is_directory=is_directory,
            timestamp=time.time(),
        ))

    def on_created(self, event):
        is_dir = isinstance(event, DirCreatedEvent)
        self._emit(event.src_path, ChangeKind.CREATED, is_dir)

    def on_modified(self, event):
        if isinstance(event, FileModifiedEvent):
            self._emit(event.src_path, ChangeKind.WRITTEN, False)
        else:
            self._emit(event.src_path, ChangeKind.OTHER, True)

    def on_deleted(self, event):
        if event.is_directory:
            self._directory_gone(event.src_path)
        self._emit(event.src_path, ChangeKind.OTHER, event.is_directory)

    def on_moved(self, event):
        # A directory moved in is new coverage; a file moved over a source
        # file (atomic save) counts as a write to the destination.
        if isinstance(event, DirMovedEvent):
            self._directory_gone(event.src_path)
            self._emit(event.dest_path, ChangeKind.CREATED, True)
        else:
            self._emit(event.dest_path, ChangeKind.WRITTEN, False)


class FSWatchResource:
    """
    OS watch subscription for a growing set of directories.
    
    Each directory is scheduled non-recursively on a single watchdog
    observer. Change events and asynchronous errors are delivered on
    two thread-safe queues; after close() both queues receive
    CHANNEL_CLOSED.
    """

    def __init__(self, join_timeout: float = 5.0):
        """
        Create the watch resource and start its observer thread.
        
        Args:
            join_timeout: Seconds to wait for the observer thread on close
            
        Raises:
            WatchResourceError: If the observer cannot be started
        """
        self.events: "queue.Queue" = queue.Queue()
        self.errors: "queue.Queue" = queue.Queue()
        self.join_timeout = join_timeout
        self._handler = FSEventHandler(self.events.put, self._mark_gone)
        self._observer = Observer()
        self._watches: Dict[Path, ObservedWatch] = {}
        self._identities: Dict[Path, Tuple[int, int]] = {}
        self._gone: Set[Path] = set()
        self._gone_lock = threading.Lock()
        self._closed = False
        self._failure_reported = False
        self._lock = threading.Lock()
        
        try:
            self._observer.start()
        except (OSError, RuntimeError) as e:
            raise WatchResourceError(f"Failed to start filesystem observer: {e}") from e

    def add(self, directory: Union[str, Path]) -> bool:
        """
        Add a directory to the watch set.

        A path that is already watched is subscribed again when its
        watch went stale: the directory was deleted or moved away, or
        the path now names a different directory.

        Args:
            directory: Directory to subscribe

        Returns:
            True if newly subscribed, False if already watched

        Raises:
            SubscribeError: If the resource is closed or the OS call fails
        """
        directory = Path(directory)

        with self._lock:
            if self._closed:
                raise SubscribeError(f"Cannot watch {directory}: watch resource is closed")

            watch = self._watches.get(directory)
            if watch is not None:
                if not self._is_stale(directory):
                    return False
                logger.debug(f"Re-subscribing recreated directory {directory}")
                self._unschedule(directory, watch)

            try:
                identity = self._identity(directory)
                watch = self._observer.schedule(self._handler, str(directory), recursive=False)
            except OSError as e:
                raise SubscribeError(f"Failed to watch {directory}: {e}") from e

            self._watches[directory] = watch
            self._identities[directory] = identity
            return True

    def _mark_gone(self, directory: Path) -> None:
        # Called on the observer thread; must not take self._lock.
        with self._gone_lock:
            self._gone.add(directory)

    @staticmethod
    def _identity(directory: Path) -> Tuple[int, int]:
        st = os.stat(directory)
        return st.st_dev, st.st_ino

    def _is_stale(self, directory: Path) -> bool:
        with self._gone_lock:
            if directory in self._gone:
                return True
        try:
            return self._identity(directory) != self._identities.get(directory)
        except OSError:
            return True

    def _unschedule(self, directory: Path, watch: ObservedWatch) -> None:
        try:
            self._observer.unschedule(watch)
        except KeyError:
            logger.debug(f"Watch for {directory} was already released")
        del self._watches[directory]
        self._identities.pop(directory, None)
        with self._gone_lock:
            self._gone.discard(directory)

    def check_health(self) -> None:
        """Report a dead observer thread on the error queue, once."""
        with self._lock:
            if self._closed or self._failure_reported:
                return
            if not self._observer.is_alive():
                self._failure_reported = True
                self.errors.put(WatchResourceError("Filesystem observer stopped unexpectedly"))

    def close(self) -> None:
        """
        Stop the observer and mark both queues closed.
        
        Raises:
            WatchResourceError: If the observer thread cannot be stopped
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        
        try:
            self._observer.stop()
            self._observer.join(timeout=self.join_timeout)
        except RuntimeError as e:
            raise WatchResourceError(f"Failed to stop filesystem observer: {e}") from e
        finally:
            self.events.put(CHANNEL_CLOSED)
            self.errors.put(CHANNEL_CLOSED)
        
        if self._observer.is_alive():
            raise WatchResourceError(
                f"Filesystem observer did not stop within {self.join_timeout}s"
            )

    @property
    def watched(self) -> FrozenSet[Path]:
        """Directories currently subscribed."""
        with self._lock:
            return frozenset(self._watches)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        """Return the number of watched directories."""
        with self._lock:
            return len(self._watches)

    def __contains__(self, directory) -> bool:
        with self._lock:
            return Path(directory) in self._watches
