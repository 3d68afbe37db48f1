"""
Day-bucketed log files for the detached dataserver.

Each calendar day bucket (epoch seconds // 86400) maps to exactly one file,
`<home>/logs/output-<day_bucket>.log`. Files are never rotated by size;
`prune_logs` is an explicit maintenance step, never part of start or stop.
"""
import re
import time
import logging
from pathlib import Path
from typing import List, Optional

from rubberduck import settings
from rubberduck.local.errors import LogDirCreateError, LogFileCreateError

log = logging.getLogger(__name__)

_LOG_FILE_PATTERN = re.compile(r"^output-(\d+)\.log$")


def day_bucket(now: Optional[float] = None) -> int:
    """Returns the day bucket for a unix timestamp (defaults to now)."""
    seconds = time.time() if now is None else now
    return int(seconds // settings.SECONDS_PER_DAY)


def logs_dir(home: Path) -> Path:
    return home / settings.LOGS_DIR_NAME


def resolve_log_path(home: Path, now: Optional[float] = None) -> Path:
    """
    Returns today's log file, creating the logs directory and the file if needed.

    An existing file is returned untouched.

    :param home: The resolved home directory.
    :param now: Unix timestamp to resolve for (defaults to the current time).
    :raises LogDirCreateError: If the logs directory cannot be created.
    :raises LogFileCreateError: If the log file cannot be created.
    """
    directory = logs_dir(home)
    try:
        directory.mkdir(exist_ok=True)
    except OSError as e:
        raise LogDirCreateError(directory, e) from e

    log_path = directory / settings.LOG_FILE_TEMPLATE.format(day_bucket=day_bucket(now))
    if not log_path.exists():
        try:
            log_path.touch(exist_ok=True)
        except OSError as e:
            raise LogFileCreateError(log_path, e) from e
        log.debug(f"Created log file '{log_path}'.")
    return log_path


def prune_logs(home: Path, keep_days: int, now: Optional[float] = None) -> List[Path]:
    """
    Deletes day-bucket log files older than `keep_days` buckets.

    Today's bucket and the `keep_days - 1` before it are kept. Files in the
    logs directory that do not follow the naming scheme are left alone.

    :return: The paths that were deleted.
    """
    directory = logs_dir(home)
    if not directory.is_dir():
        return []

    oldest_kept = day_bucket(now) - max(keep_days, 1) + 1
    removed: List[Path] = []
    for path in sorted(directory.iterdir()):
        match = _LOG_FILE_PATTERN.match(path.name)
        if not match or int(match.group(1)) >= oldest_kept:
            continue
        try:
            path.unlink()
            removed.append(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            log.warning(f"Could not delete old log file '{path}': {e}")
    if removed:
        log.info(f"Pruned {len(removed)} log file(s) older than {keep_days} day(s).")
    return removed
