"""Tests for rubberduck.local.home."""

from pathlib import Path

import pytest

from rubberduck.local import home as home_mod
from rubberduck.local.errors import DirectoryCreateError, HomeUnavailable


def test_override_is_created(tmp_path):
    target = tmp_path / "custom"
    resolved = home_mod.resolve_home({"RD_HOME": str(target)})
    assert resolved == target
    assert target.is_dir()


def test_resolution_is_idempotent(tmp_path):
    env = {"RD_HOME": str(tmp_path / "custom")}
    first = home_mod.resolve_home(env)
    (first / "marker").write_text("x")
    second = home_mod.resolve_home(env)
    assert first == second
    assert (second / "marker").read_text() == "x"


def test_reads_os_environ_by_default(rd_home):
    assert home_mod.resolve_home() == rd_home


def test_falls_back_to_user_home(tmp_path, monkeypatch):
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    resolved = home_mod.resolve_home({})
    assert resolved == tmp_path / ".rd"
    assert resolved.is_dir()


def test_no_user_home_and_no_override(monkeypatch):
    def no_home(cls):
        raise RuntimeError("Could not determine home directory.")

    monkeypatch.setattr(Path, "home", classmethod(no_home))
    with pytest.raises(HomeUnavailable) as exc:
        home_mod.resolve_home({})
    assert "RD_HOME" in str(exc.value)


def test_creation_is_not_recursive(tmp_path):
    target = tmp_path / "missing-parent" / "home"
    with pytest.raises(DirectoryCreateError):
        home_mod.resolve_home({"RD_HOME": str(target)})
    assert not target.parent.exists()


def test_override_pointing_at_a_file(tmp_path):
    target = tmp_path / "not-a-dir"
    target.write_text("")
    with pytest.raises(DirectoryCreateError):
        home_mod.resolve_home({"RD_HOME": str(target)})
