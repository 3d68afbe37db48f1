import os
import logging
from pathlib import Path
from typing import Mapping, Optional

from rubberduck import settings
from rubberduck.local.errors import DirectoryCreateError, HomeUnavailable

log = logging.getLogger(__name__)


def resolve_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Resolves the Rubber Duck home directory, creating it if it does not exist.

    The override variable (RD_HOME) wins; otherwise the directory is `.rd`
    inside the user's home directory. Creation is not recursive, so the
    parent directory must already exist.

    :param environ: The environment to read the override from (defaults to os.environ).
    :return: The path of the existing home directory.
    :raises HomeUnavailable: If no override is set and the user home cannot be determined.
    :raises DirectoryCreateError: If the directory is missing and cannot be created.
    """
    environ = os.environ if environ is None else environ
    override = environ.get(settings.HOME_ENV_VAR)

    if override:
        home_directory = Path(override)
    else:
        try:
            home_directory = Path.home() / settings.HOME_DIR_NAME
        except (RuntimeError, KeyError) as e:
            log.debug(f"User home lookup failed: {e}")
            raise HomeUnavailable(settings.HOME_ENV_VAR) from e

    if not home_directory.is_dir():
        try:
            home_directory.mkdir()
        except FileExistsError as e:
            # Another invocation may have created it in the meantime.
            if not home_directory.is_dir():
                raise DirectoryCreateError(home_directory, e) from e
        except OSError as e:
            raise DirectoryCreateError(home_directory, e) from e
        log.debug(f"Created home directory at '{home_directory}'.")

    return home_directory
