"""Tests for the subprocess, port and HTTP helpers."""

import socket

import pytest
import requests

from jenkins_dind import utils


def test_port_in_use_detects_listener():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]

        assert utils.port_in_use(port)


def test_port_in_use_detects_ipv6_only_listener():
    try:
        server = socket.socket(socket.AF_INET6, socket.SOCK_STREAM)
    except OSError:
        pytest.skip("IPv6 not available")
    with server:
        try:
            server.bind(("::1", 0))
        except OSError:
            pytest.skip("IPv6 loopback not available")
        server.listen(1)
        port = server.getsockname()[1]

        assert utils.port_in_use(port)


def test_port_free_after_close():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.bind(("127.0.0.1", 0))
        port = server.getsockname()[1]

    assert not utils.port_in_use(port)


class Response:
    def __init__(self, status_code):
        self.status_code = status_code


def test_wait_for_http_succeeds(monkeypatch):
    answers = [requests.exceptions.ConnectionError("refused"), Response(503), Response(200)]

    def fake_get(url, timeout, allow_redirects):
        answer = answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    monkeypatch.setattr(utils.requests, "get", fake_get)
    monkeypatch.setattr(utils.time, "sleep", lambda seconds: None)

    assert utils.wait_for_http("http://localhost:8080/login", timeout=10, interval=1)
    assert answers == []


def test_wait_for_http_times_out(monkeypatch):
    monkeypatch.setattr(utils.requests, "get", lambda url, timeout, allow_redirects: Response(503))
    monkeypatch.setattr(utils.time, "sleep", lambda seconds: None)

    assert not utils.wait_for_http("http://localhost:8080/login", timeout=4, interval=2)


def test_run_command_captures_output(monkeypatch):
    seen = {}

    def fake_run(command, cwd, capture_output, text, check):
        seen.update(command=command, capture_output=capture_output, check=check)
        return "done"

    monkeypatch.setattr(utils.subprocess, "run", fake_run)

    assert utils.run_command(["docker", "info"], check=False) == "done"
    assert seen == {"command": ["docker", "info"], "capture_output": True, "check": False}


def test_wait_for_http_ignores_forbidden(monkeypatch):
    monkeypatch.setattr(utils.requests, "get", lambda url, timeout, allow_redirects: Response(403))
    monkeypatch.setattr(utils.time, "sleep", lambda seconds: None)

    assert not utils.wait_for_http("http://localhost:8080/login", timeout=2, interval=1)
