import logging
from pathlib import Path
from typing import Any, Dict, Optional

from rubberduck.local.config import MergedSettings
from rubberduck.local.errors import OrphanCleanupFailure, PidPersistFailure, PidWriteError, SignalDeliveryFailure
from rubberduck.local.supervisor import process_utils, shutdown, startup
from rubberduck.local.supervisor.persistence import PidRegistry
from rubberduck.log.files import resolve_log_path

log = logging.getLogger(__name__)


class ProcessManager:
    """
    Manages the lifecycle of the single detached dataserver process.

    The PID file is the only record of a running dataserver: start creates it,
    stop consumes it. Nothing here keeps state between CLI invocations.
    """

    def __init__(self, home: Path, config: MergedSettings) -> None:
        """
        :param home: The resolved home directory.
        :param config: The merged settings for this invocation.
        """
        self.home = home
        self.config = config
        self.registry = PidRegistry(home)

    def _resolve_bind(self, host: Optional[str], port: Optional[int], workers: Optional[int]):
        return (
            host if host is not None else self.config.DATASERVER_HOST,
            port if port is not None else self.config.DATASERVER_PORT,
            workers if workers is not None else self.config.DATASERVER_WORKERS,
        )

    def start(self, host: Optional[str] = None, port: Optional[int] = None,
              workers: Optional[int] = None, wait: bool = False) -> int:
        """
        Starts the dataserver as a detached process and records its PID.

        :param wait: If True, poll the health endpoint after spawning.
        :return: The PID of the new process.
        :raises AlreadyRunning: If a PID record already exists.
        :raises SpawnFailure: If the process could not be launched.
        :raises PidPersistFailure: If the PID could not be recorded. The child
            is killed first; `cleanup_error` is set if that kill failed too.
        """
        host, port, workers = self._resolve_bind(host, port, workers)

        # Exclusive create; a second concurrent start fails here.
        self.registry.claim()
        try:
            log_path = resolve_log_path(self.home)
            args = process_utils.get_dataserver_args(self.config.PYTHON_EXECUTABLE, self.home, host, port, workers)
            proc = process_utils.launch_detached(args, log_path, self.config.BASE_DIR)
        except Exception:
            self.registry.release()
            raise

        try:
            self.registry.write(proc.pid)
        except PidWriteError as e:
            log.error(f"Could not record PID {proc.pid}: {e}. Killing the untracked process.")
            cleanup_error = self._kill_orphan(proc.pid)
            self._release_quietly()
            raise PidPersistFailure(proc.pid, e, cleanup_error) from e

        log.info(f"Dataserver started on {host}:{port} with {workers} worker(s) (PID {proc.pid}).")
        if wait:
            startup.wait_for_dataserver(
                host, port,
                timeout=self.config.HEALTH_CHECK_TIMEOUT,
                interval=self.config.HEALTH_CHECK_INTERVAL,
                path=self.config.HEALTH_CHECK_PATH,
            )
        return proc.pid

    def _kill_orphan(self, pid: int) -> Optional[OrphanCleanupFailure]:
        try:
            outcome = shutdown.kill_process_tree(pid, self.config.STOP_TIMEOUT)
        except SignalDeliveryFailure as e:
            failure = OrphanCleanupFailure(pid, e)
            log.critical(str(failure))
            return failure
        if outcome == shutdown.TIMEOUT:
            failure = OrphanCleanupFailure(pid, TimeoutError(f"still alive after {self.config.STOP_TIMEOUT}s"))
            log.critical(str(failure))
            return failure
        return None

    def _release_quietly(self) -> None:
        try:
            self.registry.release()
        except OSError as e:
            log.error(f"Could not remove PID file '{self.registry.path}': {e}")

    def raw_start(self, host: Optional[str] = None, port: Optional[int] = None,
                  workers: Optional[int] = None) -> None:
        """
        Runs the dataserver in this process, blocking until it exits.

        No child is spawned and no PID is recorded. This is also the body of
        the detached process started by `start`.
        """
        from rubberduck.web.server import serve

        host, port, workers = self._resolve_bind(host, port, workers)
        log.info(f"Starting dataserver in the foreground at {host}:{port}...")
        serve(host, port, workers)

    def stop(self) -> str:
        """
        Stops the tracked dataserver.

        The PID record is consumed before the kill; it is not recreated
        whatever the outcome.

        :return: shutdown.KILLED, shutdown.ALREADY_GONE or shutdown.TIMEOUT.
        :raises PidRegistryEmpty: If nothing is tracked. No signal is sent.
        :raises PidParseError: If the PID record is malformed.
        :raises SignalDeliveryFailure: If the kill could not be delivered.
        """
        pid = self.registry.read_and_remove()
        log.info(f"Stopping dataserver (PID {pid})...")
        return shutdown.kill_process_tree(pid, self.config.STOP_TIMEOUT)

    def get_pid_info(self) -> Optional[int]:
        """Returns the recorded PID without consuming it, or None."""
        return self.registry.peek()

    def status(self, host: Optional[str] = None, port: Optional[int] = None) -> Dict[str, Any]:
        """
        Reports the PID record, whether that process is alive, and whether the
        health check answers. Never modifies the PID record.
        """
        host, port, _ = self._resolve_bind(host, port, None)
        pid = self.get_pid_info()
        info: Dict[str, Any] = {
            "pid_file": str(self.registry.path),
            "pid": pid,
            "process": "not tracked",
            "healthy": False,
        }
        if pid is None:
            return info
        info["process"] = process_utils.get_proc_status_string(pid)
        if info["process"].startswith("running"):
            info["healthy"] = startup.check_health(host, port, self.config.HEALTH_CHECK_PATH)
        return info
