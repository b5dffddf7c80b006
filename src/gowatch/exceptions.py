"""Custom exceptions for the gowatch package."""


class WatcherError(Exception):
    """Base exception for all gowatch errors."""
    pass


class CompileError(WatcherError):
    """The build toolchain exited with a nonzero status."""

    def __init__(self, message: str, output: str = "", returncode: int = -1):
        super().__init__(message)
        self.output = output
        self.returncode = returncode


class LaunchError(WatcherError):
    """The compiled binary could not be spawned."""
    pass


class SubscribeError(WatcherError):
    """A directory could not be added to the watch resource."""
    pass


class TraversalError(WatcherError):
    """Walking a directory tree failed."""
    pass


class PatternError(WatcherError):
    """An ignore pattern is not a valid glob."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"invalid ignore pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class EngineNotInitializedError(WatcherError):
    """Shutdown was requested but no watch resource was ever created."""
    pass


class WatchResourceError(WatcherError):
    """The watch resource reported an asynchronous failure."""
    pass


class WatcherAlreadyRunningError(WatcherError):
    """Watcher has already been started."""
    pass


class ShutdownError(WatcherError):
    """Teardown failed while unwinding another error."""

    def __init__(self, error: BaseException, shutdown_error: BaseException):
        super().__init__(f"{error} (shutdown also failed: {shutdown_error})")
        self.error = error
        self.shutdown_error = shutdown_error


class StopRequested(WatcherError):
    """Raised inside the event loop when a stop was requested. Not a failure."""
    pass
