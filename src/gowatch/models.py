"""Data models for the gowatch package."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import time


class ChangeKind(Enum):
    """Kinds of filesystem changes the engine distinguishes."""
    CREATED = "created"
    WRITTEN = "written"
    OTHER = "other"


class WatcherState(Enum):
    """Lifecycle states of the watch engine."""
    NOT_STARTED = "not_started"
    WATCHING = "watching"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class ProcessState(Enum):
    """Lifecycle states of the build-and-run controller."""
    IDLE = "idle"
    COMPILING = "compiling"
    COMPILED = "compiled"
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class ChangeEvent:
    """
    A single filesystem change reported by the watch resource.
    
    Attributes:
        path: Path that changed
        kind: What happened to it (CREATED, WRITTEN, OTHER)
        is_directory: Whether the path is a directory
        timestamp: Unix timestamp when the event was received
    """
    path: Path
    kind: ChangeKind
    is_directory: bool = False
    timestamp: float = field(default_factory=time.time)

    @property
    def is_directory_creation(self) -> bool:
        return self.kind == ChangeKind.CREATED and self.is_directory

    def has_suffix(self, suffix: str) -> bool:
        """
        Check whether the changed path ends with a source-file suffix.
        
        Paths that are not longer than the suffix are never considered
        tracked, so a bare ".go" is not a Go source file.
        """
        name = str(self.path)
        if not suffix or len(name) <= len(suffix):
            return False
        return name.endswith(suffix)
