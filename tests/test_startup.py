"""Tests for the dataserver health checks."""

import requests

from rubberduck.local.supervisor import startup


class DummyResponse:
    def __init__(self, status_code):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code}")


def test_health_url_maps_wildcard_to_loopback():
    assert startup.health_url("0.0.0.0", 5555) == "http://127.0.0.1:5555/"
    assert startup.health_url("10.0.0.2", 80, "/health") == "http://10.0.0.2:80/health"


def test_check_health_ok(monkeypatch):
    seen = {}

    def fake_get(url, timeout):
        seen["url"] = url
        return DummyResponse(200)

    monkeypatch.setattr(requests, "get", fake_get)
    assert startup.check_health("0.0.0.0", 5555) is True
    assert seen["url"] == "http://127.0.0.1:5555/"


def test_check_health_error_status(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout: DummyResponse(503))
    assert startup.check_health("127.0.0.1", 5555) is False


def test_check_health_connection_refused(monkeypatch):
    def refused(url, timeout):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", refused)
    assert startup.check_health("127.0.0.1", 5555) is False


def test_wait_returns_once_healthy(monkeypatch):
    answers = iter([False, False, True])
    monkeypatch.setattr(startup, "check_health", lambda host, port, path: next(answers))
    monkeypatch.setattr(startup.time, "sleep", lambda s: None)
    assert startup.wait_for_dataserver("127.0.0.1", 5555, timeout=5) is True


def test_wait_times_out(monkeypatch):
    monkeypatch.setattr(startup, "check_health", lambda host, port, path: False)
    assert startup.wait_for_dataserver("127.0.0.1", 5555, timeout=0) is False
