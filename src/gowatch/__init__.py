"""
gowatch

Live-reload loop for Go programs: watches a source tree, rebuilds the
program when a source file is written and restarts it.

Features:
- Recursive directory discovery with dynamic watch-set growth
- Glob-based ignore patterns
- Compile errors keep the loop alive until the next successful edit
- Single-shot, thread-safe stop signal with ordered shutdown
"""

from .models import (
    ChangeKind,
    ChangeEvent,
    WatcherState,
    ProcessState,
)

from .config import GowatchConfig

from .exceptions import (
    WatcherError,
    CompileError,
    LaunchError,
    SubscribeError,
    TraversalError,
    PatternError,
    EngineNotInitializedError,
    WatchResourceError,
    WatcherAlreadyRunningError,
    ShutdownError,
    StopRequested,
)

from .path_filter import PathFilter, validate_pattern
from .discovery import discover_directories
from .fs_watcher import FSWatchResource, FSEventHandler, CHANNEL_CLOSED
from .runner import App, AppRunner
from .watcher import Watcher


__all__ = [
    # Models
    "ChangeKind",
    "ChangeEvent",
    "WatcherState",
    "ProcessState",
    # Config
    "GowatchConfig",
    # Exceptions
    "WatcherError",
    "CompileError",
    "LaunchError",
    "SubscribeError",
    "TraversalError",
    "PatternError",
    "EngineNotInitializedError",
    "WatchResourceError",
    "WatcherAlreadyRunningError",
    "ShutdownError",
    "StopRequested",
    # Components
    "PathFilter",
    "validate_pattern",
    "discover_directories",
    "FSWatchResource",
    "FSEventHandler",
    "CHANNEL_CLOSED",
    "App",
    "AppRunner",
    # Engine
    "Watcher",
]

__version__ = "0.1.0"
