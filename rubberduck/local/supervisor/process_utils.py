import sys
import psutil
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, List

from rubberduck.local.errors import SpawnFailure

log = logging.getLogger(__name__)

DATASERVER_ENTRY_MODULE = "rubberduck.local.entry.dataserver"


#* --- Process Status ---
def get_process_from_pid(pid: int) -> psutil.Process:
    """A wrapper for psutil.Process for easy testing/mocking if needed."""
    return psutil.Process(pid)

def get_proc_status_string(pid: int) -> str:
    """Gets a string representation of a process status."""
    try:
        if get_process_from_pid(pid).status() == psutil.STATUS_ZOMBIE:
            return "zombie"
        return "running"
    except psutil.NoSuchProcess:
        return "stopped"
    except psutil.AccessDenied:
        return "running (access denied)"
    except psutil.Error:
        return "unknown"


#* --- Process Creation ---
def _get_popen_creation_flags() -> Dict[str, Any]:
    """Returns platform-specific kwargs that detach the child from this console."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}

def get_dataserver_args(python_executable: str, home: Path, host: str, port: int, workers: int) -> List[str]:
    """
    Returns the command line that runs the dataserver in the foreground.

    The home directory is passed explicitly so the child uses the same one as
    the parent regardless of its inherited environment.
    """
    return [
        python_executable, "-m", DATASERVER_ENTRY_MODULE,
        "--home", str(home),
        "--host", host,
        "--port", str(port),
        "--workers", str(workers),
    ]

def launch_detached(args: List[str], log_path: Path, cwd: Path) -> subprocess.Popen:
    """
    Launches a process in its own session with stdout and stderr appended to
    `log_path`. The log handle is closed in this process once the child holds it.

    :raises SpawnFailure: If the process could not be started.
    """
    log.info(f"Starting process: {' '.join(args)}")
    try:
        with log_path.open("ab") as log_file:
            p = subprocess.Popen(
                args,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                cwd=str(cwd),
                **_get_popen_creation_flags(),
            )
    except (OSError, ValueError) as e:
        log.critical(f"Failed to start process: {e}", exc_info=True)
        raise SpawnFailure(args, e) from e
    log.info(f"Process started with PID {p.pid}; output goes to '{log_path}'.")
    return p
