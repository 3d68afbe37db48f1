import psutil
import logging
from typing import List

from rubberduck.local.errors import SignalDeliveryFailure
from rubberduck.local.supervisor.process_utils import get_process_from_pid

log = logging.getLogger(__name__)

KILLED = "killed"
ALREADY_GONE = "already-gone"
TIMEOUT = "timeout"


def identify_processes_to_stop(proc: psutil.Process) -> List[psutil.Process]:
    """
    Returns the process and all of its descendants.

    Hypercorn workers are children of the dataserver process, so killing the
    parent alone would leave them holding the port.
    """
    procs = [proc]
    try:
        procs.extend(proc.children(recursive=True))
    except psutil.NoSuchProcess:
        log.warning(f"Process {proc.pid} no longer exists, skipping children retrieval.")
    return procs


def _forceful_kill(processes: List[psutil.Process]) -> None:
    for proc in processes:
        try:
            log.debug(f"Sending SIGKILL to PID {proc.pid}")
            proc.kill()
        except psutil.NoSuchProcess:
            log.debug(f"Process {proc.pid} no longer exists, skipping kill.")
            continue


def kill_process_tree(pid: int, timeout: float) -> str:
    """
    Forcefully kills a process and its descendants, then waits up to
    `timeout` seconds for all of them to disappear.

    :return: KILLED, ALREADY_GONE, or TIMEOUT if something is still alive at the deadline.
    :raises SignalDeliveryFailure: If the signal could not be delivered (e.g. permission denied).
    """
    try:
        proc = get_process_from_pid(pid)
    except psutil.NoSuchProcess:
        log.info(f"Process {pid} is already gone.")
        return ALREADY_GONE

    processes = identify_processes_to_stop(proc)
    try:
        _forceful_kill(processes)
    except psutil.AccessDenied as e:
        raise SignalDeliveryFailure(pid, "permission denied") from e
    except psutil.Error as e:
        raise SignalDeliveryFailure(pid, str(e)) from e

    try:
        _, alive = psutil.wait_procs(processes, timeout=timeout)
    except psutil.Error as e:
        log.debug(f"Waiting for process {pid} failed: {e}")
        alive = [p for p in processes if p.is_running()]

    if alive:
        log.error(f"{len(alive)} process(es) still alive {timeout}s after SIGKILL: {[p.pid for p in alive]}")
        return TIMEOUT
    log.info(f"Process {pid} terminated.")
    return KILLED
