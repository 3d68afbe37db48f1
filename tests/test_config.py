"""Tests for MergedSettings."""

import pytest

from rubberduck import settings
from rubberduck.local.config import MergedSettings, coerce_value


def test_defaults_come_from_settings_module():
    config = MergedSettings(environ={})
    assert config.DATASERVER_HOST == "0.0.0.0"
    assert config.DATASERVER_PORT == 5555
    assert config.PID_FILE_NAME == "server.pid"
    assert config.get("MISSING", "fallback") == "fallback"


def test_modifiable_settings_overridden_with_type():
    config = MergedSettings(environ={
        "RD_DATASERVER_PORT": "6001",
        "RD_STOP_TIMEOUT": "2.5",
        "RD_DATASERVER_HOST": "127.0.0.1",
    })
    assert config.DATASERVER_PORT == 6001
    assert config.STOP_TIMEOUT == 2.5
    assert config.DATASERVER_HOST == "127.0.0.1"


def test_non_modifiable_settings_ignored():
    config = MergedSettings(environ={"RD_PID_FILE_NAME": "other.pid"})
    assert config.PID_FILE_NAME == "server.pid"


def test_bad_override_keeps_default():
    config = MergedSettings(environ={"RD_DATASERVER_PORT": "not-a-port"})
    assert config.DATASERVER_PORT == settings.DATASERVER_PORT


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        MergedSettings(environ={}).NOT_A_SETTING


def test_get_all_settings_is_a_copy():
    config = MergedSettings(environ={})
    everything = config.get_all_settings()
    everything["DATASERVER_PORT"] = 1
    assert config.DATASERVER_PORT == 5555


@pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False), ("False", False)])
def test_coerce_bool(raw, expected):
    assert coerce_value(False, raw) is expected


def test_coerce_without_default():
    assert coerce_value(None, "raw") == "raw"
