"""
Test configuration: add project root to sys.path and isolate the Rubber Duck
home directory for every test.
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from rubberduck.local.config import MergedSettings


@pytest.fixture
def rd_home(tmp_path, monkeypatch):
    """A fresh home directory exported as RD_HOME."""
    home = tmp_path / "rd-home"
    home.mkdir()
    monkeypatch.setenv("RD_HOME", str(home))
    return home


@pytest.fixture
def config():
    """Default settings with no RD_* overrides and a short stop timeout."""
    return MergedSettings(environ={"RD_STOP_TIMEOUT": "0.5"})


class FakeProcess:
    """Stands in for a psutil.Process in kill/wait tests."""

    def __init__(self, pid, children=(), deny=False):
        self.pid = pid
        self._children = list(children)
        self.deny = deny
        self.killed = False

    def children(self, recursive=False):
        return self._children

    def kill(self):
        if self.deny:
            import psutil
            raise psutil.AccessDenied(self.pid)
        self.killed = True

    def is_running(self):
        return not self.killed


@pytest.fixture
def fake_process():
    return FakeProcess
