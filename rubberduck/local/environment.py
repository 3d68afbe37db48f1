import os
import logging
from pathlib import Path
from typing import Dict, MutableMapping, Optional

from rubberduck import settings
from rubberduck.local.errors import StoreIOError

log = logging.getLogger(__name__)


def parse_env_text(text: str) -> Dict[str, str]:
    """
    Parses the contents of a base.env file.

    Each line is split on its first '=' only, so values may contain '='.
    Lines without a separator, or with an empty key, are skipped.

    :param text: The raw file contents.
    :return: A mapping of variable names to values.
    """
    records: Dict[str, str] = {}
    for line in text.splitlines():
        key, separator, value = line.partition("=")
        if not separator:
            continue
        key = key.strip()
        if not key:
            continue
        records[key] = value.strip()
    return records


def render_env_text(records: Dict[str, str]) -> str:
    """Renders records as `key=value` lines, one per record."""
    return "".join(f"{key}={value}\n" for key, value in records.items())


class EnvironmentStore:
    """
    A flat-file key-value store persisted as `<home>/base.env`.

    Every mutation reads the full map, applies the change, and rewrites the
    whole file through a temporary file that is fsynced and then renamed over
    the original, so the file is either fully replaced or left untouched.
    """

    def __init__(self, home: Path) -> None:
        """
        :param home: The resolved home directory (see resolve_home).
        """
        self.home = home
        self.path = home / settings.ENV_FILE_NAME

    def _ensure_file(self) -> None:
        """Creates the store seeded with the home directory path if absent."""
        if self.path.exists():
            return
        log.info(f"Creating environment store at '{self.path}'.")
        self._write({})

    def _write(self, records: Dict[str, str]) -> None:
        # The home record always names the directory the store lives in.
        records = dict(records, **{settings.HOME_ENV_VAR: str(self.home)})
        temp_path = self.path.with_suffix(".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as f:
                f.write(render_env_text(records))
                f.flush()
                os.fsync(f.fileno())
            temp_path.replace(self.path)
        except OSError as e:
            raise StoreIOError(self.path, e) from e
        finally:
            temp_path.unlink(missing_ok=True)

    def get_all(self) -> Dict[str, str]:
        """
        Returns every record in the store, creating the file on first use.

        A store whose home record is missing or points elsewhere (for example
        after a hand edit) is rewritten with the correct home path.

        :raises StoreIOError: If the file cannot be created, read or repaired.
        """
        self._ensure_file()
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreIOError(self.path, e) from e
        records = parse_env_text(text)
        if records.get(settings.HOME_ENV_VAR) != str(self.home):
            log.warning(f"Restoring {settings.HOME_ENV_VAR}={self.home} in '{self.path}'.")
            self._write(records)
            records[settings.HOME_ENV_VAR] = str(self.home)
        return records

    def _check_key(self, key: str) -> str:
        key = key.strip()
        if not key or "=" in key:
            raise ValueError(f"Invalid environment variable name: {key!r}")
        if key == settings.HOME_ENV_VAR:
            raise ValueError(
                f"'{key}' records the home directory and cannot be changed in the store. "
                f"Export {key} in the shell instead."
            )
        return key

    def set(self, key: str, value: str) -> None:
        """
        Inserts or overwrites a record and durably rewrites the store.

        :param key: A non-empty variable name without '='.
        :param value: The value, which may be empty.
        :raises ValueError: If the key is empty, contains '=' or is the home record.
        :raises StoreIOError: If the store cannot be read or rewritten.
        """
        key = self._check_key(key)
        if "\n" in value or "\r" in value:
            raise ValueError(f"Value for '{key}' must be a single line.")

        records = self.get_all()
        records[key] = value.strip()
        self._write(records)
        log.debug(f"Set '{key}' in environment store.")

    def remove(self, key: str) -> bool:
        """
        Removes a record; removing an unknown key is a no-op.

        :return: True if a record was removed.
        :raises ValueError: If the key is the home record.
        :raises StoreIOError: If the store cannot be read or rewritten.
        """
        key = self._check_key(key)
        records = self.get_all()
        if records.pop(key, None) is None:
            log.debug(f"'{key}' is not in the environment store. Nothing to remove.")
            return False
        self._write(records)
        log.debug(f"Removed '{key}' from environment store.")
        return True

    def apply_to_process_environment(self, environ: Optional[MutableMapping[str, str]] = None) -> None:
        """
        Installs every record into the process environment, overwriting
        existing variables of the same name.

        This is a one-time initialization step run at program start; nothing
        should call it again mid-run.

        :param environ: The mapping to install into (defaults to os.environ).
        """
        environ = os.environ if environ is None else environ
        records = self.get_all()
        for key, value in records.items():
            environ[key] = value
        log.debug(f"Applied {len(records)} environment store records to the process environment.")
