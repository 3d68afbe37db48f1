"""
Typed failures raised by the home resolver, environment store, log path
manager, PID registry and process supervisor.

Advisories (AlreadyRunning, PidRegistryEmpty) are reported to the operator but
do not fail the invocation. OrphanCleanupFailure is the one fatal condition:
it means a live dataserver process exists that nothing is tracking.
"""
from pathlib import Path
from typing import Optional


class RubberDuckError(Exception):
    """Base class for all failures raised by the CLI core."""


class Advisory(RubberDuckError):
    """A user-facing notice rather than a crash."""


#* --- Home Resolver ---
class HomeUnavailable(RubberDuckError):
    def __init__(self, env_var: str) -> None:
        super().__init__(f"Failed to get system home directory. Set {env_var} to correct this error.")


class DirectoryCreateError(RubberDuckError):
    def __init__(self, path: Path, reason: Exception) -> None:
        super().__init__(f"Could not create directory '{path}': {reason}")
        self.path = path


#* --- Environment Store ---
class StoreIOError(RubberDuckError):
    def __init__(self, path: Path, reason: Exception) -> None:
        super().__init__(f"Environment store '{path}' could not be read or written: {reason}")
        self.path = path


#* --- Log Path Manager ---
class LogDirCreateError(RubberDuckError):
    def __init__(self, path: Path, reason: Exception) -> None:
        super().__init__(f"Could not create log directory '{path}': {reason}")
        self.path = path


class LogFileCreateError(RubberDuckError):
    def __init__(self, path: Path, reason: Exception) -> None:
        super().__init__(f"Could not create log file '{path}': {reason}")
        self.path = path


#* --- PID Registry ---
class PidWriteError(RubberDuckError):
    def __init__(self, path: Path, reason: Exception) -> None:
        super().__init__(f"Failed to write PID file '{path}': {reason}")
        self.path = path


class PidReadError(RubberDuckError):
    def __init__(self, path: Path, reason: Exception) -> None:
        super().__init__(f"Failed to read or remove PID file '{path}': {reason}")
        self.path = path


class PidRegistryEmpty(Advisory):
    def __init__(self, path: Path) -> None:
        super().__init__(f"No PID file found at '{path}'. Nothing to stop.")
        self.path = path


class PidParseError(RubberDuckError):
    def __init__(self, path: Path, content: str) -> None:
        super().__init__(f"PID file '{path}' does not contain a process id: {content!r}")
        self.path = path
        self.content = content


#* --- Process Supervisor ---
class AlreadyRunning(Advisory):
    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Dataserver appears to be running (PID file '{path}' exists). Use 'dataserver stop' first."
        )
        self.path = path


class SpawnFailure(RubberDuckError):
    def __init__(self, args: list, reason: Exception) -> None:
        super().__init__(f"Failed to start dataserver process {args}: {reason}")


class SignalDeliveryFailure(RubberDuckError):
    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"Could not terminate process {pid}: {reason}")
        self.pid = pid


class OrphanCleanupFailure(RubberDuckError):
    def __init__(self, pid: int, reason: Exception) -> None:
        super().__init__(
            f"FATAL: could not kill untracked dataserver process {pid}: {reason}. "
            "Terminate it manually; it may still hold the bound port."
        )
        self.pid = pid


class PidPersistFailure(RubberDuckError):
    def __init__(self, pid: int, reason: PidWriteError, cleanup_error: Optional[OrphanCleanupFailure] = None) -> None:
        message = f"Dataserver process {pid} was started but its PID could not be recorded: {reason}"
        if cleanup_error is None:
            message += " The process has been killed."
        super().__init__(message)
        self.pid = pid
        self.cleanup_error = cleanup_error

    @property
    def is_fatal(self) -> bool:
        return self.cleanup_error is not None
