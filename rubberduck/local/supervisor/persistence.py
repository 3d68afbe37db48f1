import os
import logging
from pathlib import Path
from typing import Optional

from rubberduck import settings
from rubberduck.local.errors import AlreadyRunning, PidParseError, PidReadError, PidRegistryEmpty, PidWriteError

log = logging.getLogger(__name__)


class PidRegistry:
    """
    Tracks at most one supervised dataserver through `<home>/server.pid`.

    The presence of the file means a process is believed to be running. A
    successful read only proves a PID was recorded, not that it is alive.
    """

    def __init__(self, home: Path) -> None:
        self.path = home / settings.PID_FILE_NAME

    def exists(self) -> bool:
        """Returns True if a PID record is present."""
        return self.path.exists()

    def claim(self) -> Path:
        """
        Atomically creates an empty PID record, failing if one already exists.

        This exclusive create is the gate for starting the dataserver, so two
        concurrent starts cannot both pass it.

        :raises AlreadyRunning: If a record already exists.
        :raises PidWriteError: On any other filesystem failure.
        """
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as e:
            raise AlreadyRunning(self.path) from e
        except OSError as e:
            raise PidWriteError(self.path, e) from e
        os.close(fd)
        log.debug(f"Claimed PID file '{self.path}'.")
        return self.path

    def write(self, pid: int) -> Path:
        """
        Writes the PID as decimal text, replacing any previous contents, and
        forces it to disk.

        :raises PidWriteError: On any filesystem failure.
        """
        try:
            with self.path.open("w", encoding="utf-8") as f:
                f.write(str(pid))
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise PidWriteError(self.path, e) from e
        log.debug(f"Recorded PID {pid} in '{self.path}'.")
        return self.path

    def _parse(self) -> int:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError) as e:
            raise PidReadError(self.path, e) from e
        try:
            pid = int(content.strip())
        except ValueError as e:
            raise PidParseError(self.path, content) from e
        if pid <= 0:
            raise PidParseError(self.path, content)
        return pid

    def peek(self) -> Optional[int]:
        """
        Returns the recorded PID without removing it, or None if there is no
        record. Used for status reporting only.

        :raises PidParseError: If the record is malformed.
        :raises PidReadError: If the record cannot be read.
        """
        try:
            return self._parse()
        except FileNotFoundError:
            return None

    def read_and_remove(self) -> int:
        """
        Reads the recorded PID and deletes the record.

        :raises PidRegistryEmpty: If there is no record.
        :raises PidParseError: If the record is malformed; the file is kept.
        :raises PidReadError: If the record cannot be read or deleted.
        """
        try:
            pid = self._parse()
        except FileNotFoundError as e:
            raise PidRegistryEmpty(self.path) from e
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PidReadError(self.path, e) from e
        log.debug(f"Removed PID file '{self.path}' (PID {pid}).")
        return pid

    def release(self) -> None:
        """Deletes the record regardless of its contents."""
        self.path.unlink(missing_ok=True)
