"""Build-and-run lifecycle of the watched program."""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from .config import GowatchConfig
from .exceptions import CompileError, LaunchError
from .models import ProcessState

logger = logging.getLogger(__name__)


class App(ABC):
    """Compile, start, restart and stop a program."""

    @abstractmethod
    def compile(self) -> None:
        """
        Build the program.
        
        Raises:
            CompileError: If the build fails
        """
        pass

    @abstractmethod
    def start(self) -> subprocess.Popen:
        """
        Launch the compiled program.
        
        Returns:
            Handle of the running child process
            
        Raises:
            LaunchError: If the program cannot be spawned
        """
        pass

    @abstractmethod
    def restart(self, process: Optional[subprocess.Popen]) -> subprocess.Popen:
        """
        Stop process, rebuild and launch a fresh instance.
        
        Raises:
            CompileError: If the rebuild fails; no new process is started
            LaunchError: If the new instance cannot be spawned
        """
        pass

    @abstractmethod
    def shutdown(self, process: Optional[subprocess.Popen]) -> None:
        """Stop process if it is still alive."""
        pass


class AppRunner(App):
    """
    Runs the configured build command and the resulting binary.
    
    Only one child process is alive at a time: restart() always waits
    for the old process to exit before the new one is spawned.
    """

    def __init__(self, config: GowatchConfig):
        self.config = config
        self.root_dir = config.root_dir
        self.build_flags: List[str] = list(config.build_flags)
        self.run_flags: List[str] = list(config.run_flags)
        self.binary_name = config.binary_name
        self._process: Optional[subprocess.Popen] = None
        self._state = ProcessState.IDLE

    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def process(self) -> Optional[subprocess.Popen]:
        """The current child process, if one was started."""
        return self._process

    def build_args(self) -> List[str]:
        return [*self.config.build_command, "-o", self.binary_name, *self.build_flags]

    def compile(self) -> None:
        args = self.build_args()
        logger.info(f"Compiling {self.root_dir}: {' '.join(args)}")
        self._state = ProcessState.COMPILING
        
        try:
            result = subprocess.run(
                args,
                cwd=str(self.root_dir),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            self._state = ProcessState.IDLE
            raise CompileError(f"Failed to run build command {args[0]!r}: {e}", output=str(e)) from e
        
        if result.returncode != 0:
            self._state = ProcessState.IDLE
            raise CompileError(
                f"Build failed with exit code {result.returncode}",
                output=result.stdout or "",
                returncode=result.returncode,
            )
        
        self._state = ProcessState.COMPILED
        logger.debug(f"Build output: {result.stdout}")

    def start(self) -> subprocess.Popen:
        binary = Path(self.root_dir) / self.binary_name
        args = [str(binary.resolve()), *self.run_flags]
        
        try:
            process = subprocess.Popen(args, cwd=str(self.root_dir))
        except OSError as e:
            raise LaunchError(f"Failed to start {binary}: {e}") from e
        
        self._process = process
        self._state = ProcessState.RUNNING
        logger.info(f"Started {self.binary_name} (pid {process.pid})")
        return process

    def restart(self, process: Optional[subprocess.Popen]) -> subprocess.Popen:
        self._terminate(process)
        self.compile()
        return self.start()

    def shutdown(self, process: Optional[subprocess.Popen]) -> None:
        self._terminate(process)

    def _terminate(self, process: Optional[subprocess.Popen]) -> None:
        """Stop process, escalating to SIGKILL after the shutdown timeout."""
        if process is None:
            return
        
        if process.poll() is None:
            logger.info(f"Stopping {self.binary_name} (pid {process.pid})")
            process.terminate()
            try:
                process.wait(timeout=self.config.shutdown_timeout_s)
            except subprocess.TimeoutExpired:
                logger.warning(f"pid {process.pid} did not exit after SIGTERM; killing it")
                process.kill()
                process.wait()
        
        if process is self._process:
            self._state = ProcessState.TERMINATED
