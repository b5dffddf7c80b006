"""Configuration for the gowatch package."""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class GowatchConfig:
    """
    Configuration options for the watch/restart loop.
    
    Attributes:
        root_dir: Directory tree to watch and build
        build_flags: Extra flags passed to the build command
        run_flags: Flags passed to the compiled program
        ignore_patterns: Glob patterns for files that never trigger a restart
        build_command: Build toolchain invocation (without output/flags)
        source_suffix: Suffix of files whose writes trigger a restart
        shutdown_timeout_s: Seconds to wait for the child after SIGTERM
        poll_interval_ms: Idle wait between event loop polls
        follow_symlinks: Whether directory discovery follows symbolic links
    """
    root_dir: Path = field(default_factory=Path.cwd)
    build_flags: List[str] = field(default_factory=list)
    run_flags: List[str] = field(default_factory=list)
    ignore_patterns: List[str] = field(default_factory=list)
    build_command: List[str] = field(default_factory=lambda: ["go", "build"])
    source_suffix: str = ".go"
    shutdown_timeout_s: float = 5.0
    poll_interval_ms: int = 100
    follow_symlinks: bool = False

    def __post_init__(self):
        if isinstance(self.root_dir, str):
            self.root_dir = Path(self.root_dir)
        if not self.build_command:
            raise ValueError("build_command must not be empty")
        if self.poll_interval_ms <= 0:
            raise ValueError(f"poll_interval_ms must be positive: {self.poll_interval_ms}")

    @property
    def binary_name(self) -> str:
        """Name of the compiled program: the root directory's final segment."""
        name = self.root_dir.name
        if not name:
            # "/" or "." have no usable final segment
            name = self.root_dir.resolve().name
        return name or "main"

    @property
    def binary_path(self) -> Path:
        return self.root_dir / self.binary_name

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "GowatchConfig":
        """
        Build a config from GOWATCH_* environment variables.
        
        Flag lists are split with shell quoting rules; ignore patterns are
        comma separated.
        
        Args:
            environ: Mapping to read instead of os.environ
            
        Returns:
            Config with environment overrides applied to the defaults
        """
        env = os.environ if environ is None else environ
        config = cls()
        
        if env.get("GOWATCH_DIR"):
            config.root_dir = Path(env["GOWATCH_DIR"])
        if env.get("GOWATCH_BUILD_FLAGS"):
            config.build_flags = shlex.split(env["GOWATCH_BUILD_FLAGS"])
        if env.get("GOWATCH_RUN_FLAGS"):
            config.run_flags = shlex.split(env["GOWATCH_RUN_FLAGS"])
        if env.get("GOWATCH_IGNORE"):
            config.ignore_patterns = [
                p.strip() for p in env["GOWATCH_IGNORE"].split(",") if p.strip()
            ]
        if env.get("GOWATCH_SUFFIX"):
            config.source_suffix = env["GOWATCH_SUFFIX"]
        
        return config
