import os
import logging
from typing import Any, Dict, Mapping, Optional

import rubberduck.settings as default_settings

log = logging.getLogger(__name__)


def coerce_value(original_value: Any, value: str) -> Any:
    """
    Coerces a raw string to the type of the setting's default value.

    :raises ValueError: If the string cannot be converted.
    """
    if isinstance(original_value, bool):
        return str(value).lower() in ('true', '1', 't', 'yes', 'y')
    if original_value is not None:
        return type(original_value)(value)
    return value


class MergedSettings:
    """
    Merges the defaults in `settings.py` with per-machine overrides.

    Precedence:
    1. Base values from `settings.py`.
    2. `RD_<NAME>` variables from the environment, usually seeded from the
       environment store, for names listed in `MODIFIABLE_SETTINGS`.

    Built once after the environment store has been applied, then handed to
    the components that need it.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._config: Dict[str, Any] = {}
        self._load_defaults()
        self._load_overrides(os.environ if environ is None else environ)

    def _load_defaults(self) -> None:
        """Loads all uppercase attributes from settings.py as the baseline."""
        for key in dir(default_settings):
            if key.isupper():
                self._config[key] = getattr(default_settings, key)

    def _load_overrides(self, environ: Mapping[str, str]) -> None:
        prefix = self._config["SETTINGS_ENV_PREFIX"]
        for key in sorted(self._config["MODIFIABLE_SETTINGS"]):
            raw = environ.get(prefix + key)
            if raw is None:
                continue
            try:
                self._config[key] = coerce_value(self._config.get(key), raw)
                log.debug(f"Overridden setting: {key} = {self._config[key]}")
            except (ValueError, TypeError) as e:
                log.warning(f"Ignoring {prefix}{key}={raw!r}: could not convert value. Error: {e}")

    def get(self, item: str, default: Any = None) -> Any:
        """Provides dictionary-like access to settings with a default value."""
        return self._config.get(item, default)

    def __getattr__(self, name: str) -> Any:
        """Allows attribute access to settings, raising an AttributeError if not found."""
        config = self.__dict__.get("_config", {})
        if name in config:
            return config[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")

    def get_all_settings(self) -> Dict[str, Any]:
        """Returns the entire configuration dictionary."""
        return dict(self._config)
