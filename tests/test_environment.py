"""Tests for the persistent environment store."""

import os

import pytest

from rubberduck.local import environment as env_mod
from rubberduck.local.environment import EnvironmentStore, parse_env_text
from rubberduck.local.errors import StoreIOError


def test_first_use_seeds_home_path(rd_home):
    store = EnvironmentStore(rd_home)
    assert not store.path.exists()
    records = store.get_all()
    assert records == {"RD_HOME": str(rd_home)}
    assert store.path.read_text(encoding="utf-8") == f"RD_HOME={rd_home}\n"


def test_set_then_get(rd_home):
    store = EnvironmentStore(rd_home)
    store.set("K", "V")
    assert store.get_all()["K"] == "V"
    # A fresh store instance reads the same file.
    assert EnvironmentStore(rd_home).get_all()["K"] == "V"


def test_set_overwrites(rd_home):
    store = EnvironmentStore(rd_home)
    store.set("K", "one")
    store.set("K", "two")
    assert store.get_all()["K"] == "two"
    assert store.path.read_text(encoding="utf-8").count("K=") == 1


def test_remove(rd_home):
    store = EnvironmentStore(rd_home)
    store.set("K", "V")
    store.remove("K")
    records = store.get_all()
    assert "K" not in records
    assert "RD_HOME" in records


def test_remove_missing_key_is_noop(rd_home):
    store = EnvironmentStore(rd_home)
    store.get_all()
    before = store.path.read_text(encoding="utf-8")
    assert store.remove("NOPE") is False
    assert store.path.read_text(encoding="utf-8") == before


def test_remove_reports_removal(rd_home):
    store = EnvironmentStore(rd_home)
    store.set("K", "V")
    assert store.remove("K") is True


#* --- Home record ---
def test_home_record_cannot_be_removed(rd_home):
    store = EnvironmentStore(rd_home)
    with pytest.raises(ValueError):
        store.remove("RD_HOME")
    assert store.get_all()["RD_HOME"] == str(rd_home)


def test_home_record_cannot_be_repointed(rd_home):
    store = EnvironmentStore(rd_home)
    with pytest.raises(ValueError):
        store.set("RD_HOME", "/somewhere/else")
    assert store.get_all()["RD_HOME"] == str(rd_home)


def test_hand_edited_home_record_is_restored(rd_home):
    store = EnvironmentStore(rd_home)
    store.path.write_text("RD_HOME=/nonexistent/elsewhere\nK=V\n", encoding="utf-8")
    assert store.get_all() == {"RD_HOME": str(rd_home), "K": "V"}
    assert f"RD_HOME={rd_home}\n" in store.path.read_text(encoding="utf-8")


def test_missing_home_record_is_restored(rd_home):
    store = EnvironmentStore(rd_home)
    store.path.write_text("K=V\n", encoding="utf-8")
    environ = {}
    store.apply_to_process_environment(environ)
    assert environ == {"K": "V", "RD_HOME": str(rd_home)}
    assert "RD_HOME" in parse_env_text(store.path.read_text(encoding="utf-8"))


def test_value_containing_equals_round_trips(rd_home):
    store = EnvironmentStore(rd_home)
    store.set("URL", "postgres://u:p@host/db?sslmode=require")
    assert store.get_all()["URL"] == "postgres://u:p@host/db?sslmode=require"


def test_empty_value_allowed(rd_home):
    store = EnvironmentStore(rd_home)
    store.set("EMPTY", "")
    assert store.get_all()["EMPTY"] == ""


def test_permissive_parsing_skips_lines_without_separator(rd_home):
    store = EnvironmentStore(rd_home)
    store.path.write_text(
        f"RD_HOME={rd_home}\n"
        "this line has no separator\n"
        "\n"
        "  SPACED  =  padded value  \n"
        "=no key\n"
        "URL=postgres://u:p@host/db\n",
        encoding="utf-8",
    )
    assert store.get_all() == {
        "RD_HOME": str(rd_home),
        "SPACED": "padded value",
        "URL": "postgres://u:p@host/db",
    }


def test_parse_splits_on_first_separator_only():
    assert parse_env_text("A=b=c=d") == {"A": "b=c=d"}


@pytest.mark.parametrize("key", ["", "  ", "A=B"])
def test_invalid_keys_rejected(rd_home, key):
    store = EnvironmentStore(rd_home)
    with pytest.raises(ValueError):
        store.set(key, "v")


def test_multiline_value_rejected(rd_home):
    store = EnvironmentStore(rd_home)
    with pytest.raises(ValueError):
        store.set("K", "a\nB=c")


def test_failed_flush_leaves_previous_contents(rd_home, monkeypatch):
    store = EnvironmentStore(rd_home)
    store.set("K", "old")
    before = store.path.read_text(encoding="utf-8")

    def broken_fsync(fd):
        raise OSError("disk on fire")

    monkeypatch.setattr(env_mod.os, "fsync", broken_fsync)
    with pytest.raises(StoreIOError):
        store.set("K", "new")
    assert store.path.read_text(encoding="utf-8") == before
    assert not store.path.with_suffix(".tmp").exists()


def test_unreadable_store(rd_home):
    store = EnvironmentStore(rd_home)
    store.path.write_bytes(b"\xff\xfe\x00bad")
    with pytest.raises(StoreIOError):
        store.get_all()


def test_apply_to_process_environment_overwrites(rd_home):
    store = EnvironmentStore(rd_home)
    store.set("RD_TEST_VALUE", "from-store")
    environ = {"RD_TEST_VALUE": "pre-existing", "OTHER": "kept"}
    store.apply_to_process_environment(environ)
    assert environ["RD_TEST_VALUE"] == "from-store"
    assert environ["RD_HOME"] == str(rd_home)
    assert environ["OTHER"] == "kept"


def test_apply_defaults_to_os_environ(rd_home, monkeypatch):
    monkeypatch.setenv("RD_TEST_VALUE", "placeholder")
    store = EnvironmentStore(rd_home)
    store.set("RD_TEST_VALUE", "from-store")
    store.apply_to_process_environment()
    assert os.environ["RD_TEST_VALUE"] == "from-store"
