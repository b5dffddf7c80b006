"""Watch engine: keeps a build of the watched program running."""

import logging
import queue
import subprocess
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from .config import GowatchConfig
from .discovery import discover_directories
from .exceptions import (
    CompileError,
    EngineNotInitializedError,
    ShutdownError,
    StopRequested,
    SubscribeError,
    WatchResourceError,
    WatcherAlreadyRunningError,
    WatcherError,
)
from .fs_watcher import CHANNEL_CLOSED, FSWatchResource
from .models import ChangeEvent, ChangeKind, WatcherState
from .path_filter import PathFilter
from .runner import App, AppRunner

logger = logging.getLogger(__name__)

_STOP = "stop"
_EVENT = "event"
_ERROR = "error"


class Watcher:
    """
    Watches a source tree and restarts the program on source changes.

    run() compiles and starts the program, subscribes every directory
    under the root, then loops over three sources until stop() is called
    or a fatal error occurs:

    - the stop signal
    - change events from the watch resource
    - asynchronous errors from the watch resource

    Compile errors during a restart are logged and the loop keeps going.
    Every other error tears down the watch resource and the child process
    and is re-raised from run().
    """

    def __init__(
        self,
        config: GowatchConfig,
        app: Optional[App] = None,
        resource_factory: Optional[Callable[[], FSWatchResource]] = None,
    ):
        """
        Initialize the watcher.

        Args:
            config: Root directory, flags and ignore patterns
            app: Build-and-run controller (defaults to AppRunner)
            resource_factory: Creates the watch resource when run() starts
        """
        self.config = config
        self.root_dir = config.root_dir
        self.app = app or AppRunner(config)
        self.path_filter = PathFilter(config.ignore_patterns, root=config.root_dir)
        self._resource_factory = resource_factory or FSWatchResource
        self._resource = None
        self._process: Optional[subprocess.Popen] = None
        self._stop_event = threading.Event()
        self._errors_first = False
        self._state = WatcherState.NOT_STARTED
        self._lock = threading.Lock()

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def resource(self):
        """The watch resource, once run() has created it."""
        return self._resource

    def stop(self) -> None:
        """
        Ask the event loop to stop.

        Safe to call from any thread or a signal handler. The request is
        honored between loop iterations; a restart in progress completes
        first.
        """
        self._stop_event.set()

    def run(self) -> None:
        """
        Compile, start and watch until stopped.

        Returns normally after stop(). Any fatal error is re-raised after
        the watch resource is released and the child process terminated.

        Raises:
            WatcherAlreadyRunningError: If run() was already called
            PatternError: If an ignore pattern is malformed
            CompileError: If the initial build fails
            LaunchError: If the program cannot be started
            ShutdownError: If teardown failed while unwinding another error
            WatcherError: Any other fatal error from the loop
        """
        with self._lock:
            if self._state != WatcherState.NOT_STARTED:
                raise WatcherAlreadyRunningError("Watcher has already been started")
            self._state = WatcherState.WATCHING

        try:
            self.path_filter.validate()
            self.app.compile()
            self._process = self.app.start()
        except WatcherError:
            self._state = WatcherState.STOPPED
            raise

        try:
            self._resource = self._resource_factory()
            self._add_directories(self._discover(self.root_dir))
            logger.info(f"Watching {len(self._resource)} directories under {self.root_dir}")
            while True:
                self._process_next()
        except StopRequested:
            logger.info("Stop requested, shutting down")
            self._teardown(None)
        except BaseException as e:
            logger.debug(f"Event loop terminated: {e!r}")
            self._teardown(e)
            raise

    def shutdown(self) -> None:
        """
        Release the watch resource.

        Raises:
            EngineNotInitializedError: If no watch resource was ever created
        """
        logger.debug("clean up...")
        if self._resource is None:
            raise EngineNotInitializedError("Watch resource was never created")
        self._resource.close()

    def _teardown(self, error: Optional[BaseException]) -> None:
        """Release the watch resource and the child process exactly once."""
        self._state = WatcherState.SHUTTING_DOWN
        failures: List[BaseException] = []

        if self._resource is not None:
            try:
                self.shutdown()
            except WatcherError as e:
                failures.append(e)

        try:
            self.app.shutdown(self._process)
        except (WatcherError, OSError) as e:
            failures.append(e)

        self._state = WatcherState.STOPPED

        if failures:
            if error is None:
                raise failures[0]
            raise ShutdownError(error, failures[0]) from error

    def _select(self) -> Tuple[str, object]:
        """
        Wait for whichever source is ready first.

        The event and error queues take turns going first, so a burst
        on one cannot hold back the other.
        """
        poll_interval = self.config.poll_interval_ms / 1000.0
        channels = [(_EVENT, self._resource.events), (_ERROR, self._resource.errors)]

        while True:
            if self._stop_event.is_set():
                return _STOP, None

            order = reversed(channels) if self._errors_first else channels
            for source, channel in order:
                try:
                    item = channel.get_nowait()
                except queue.Empty:
                    continue
                self._errors_first = source == _EVENT
                return source, item

            self._resource.check_health()
            self._stop_event.wait(timeout=poll_interval)

    def _process_next(self) -> None:
        """Handle exactly one ready item from the three sources."""
        source, item = self._select()

        if source == _STOP:
            raise StopRequested("stop requested")

        if source == _EVENT:
            if item is CHANNEL_CLOSED:
                return
            self._handle_event(item)
            return

        if item is CHANNEL_CLOSED:
            return
        if isinstance(item, WatcherError):
            raise item
        raise WatchResourceError(f"watcher files changes error: {item}")

    def _handle_event(self, event: ChangeEvent) -> None:
        if event.is_directory_creation:
            new_directories = self._discover(event.path)
            logger.debug(f"find new directories: {sorted(map(str, new_directories))}")
            self._add_directories(new_directories)
            return

        if event.kind == ChangeKind.WRITTEN and event.has_suffix(self.config.source_suffix):
            self._restart(event)

    def _restart(self, event: ChangeEvent) -> None:
        if self.path_filter.should_ignore(event.path):
            return

        logger.info(f"Modified file: {event.path}")
        try:
            self._process = self.app.restart(self._process)
        except CompileError as e:
            logger.error(f"{e}; waiting for the next change\n{e.output}")

    def _discover(self, root: Path):
        return discover_directories(root, follow_symlinks=self.config.follow_symlinks)

    def _add_directories(self, directories: Iterable[Path]) -> None:
        for directory in directories:
            try:
                self._resource.add(directory)
            except SubscribeError:
                raise
            except OSError as e:
                raise SubscribeError(f"Failed to watch {directory}: {e}") from e
