"""Tests for the precondition checks."""

import pytest

from jenkins_dind import preconditions
from jenkins_dind.config import get_config
from jenkins_dind.utils import MissingDependencyError, ResourceConflictError


def test_all_checks_pass(docker, capsys):
    preconditions.check_all(docker, get_config())

    out = capsys.readouterr().out
    assert "daemon is running" in out
    assert "Ports 2376 8080 50000 are free to use." in out


def test_missing_cli(monkeypatch, docker):
    monkeypatch.setattr("jenkins_dind.docker.shutil.which", lambda binary: None)

    with pytest.raises(MissingDependencyError, match="not installed"):
        preconditions.check_all(docker, get_config())


def test_daemon_unreachable(runtime, docker):
    runtime.daemon_up = False

    with pytest.raises(MissingDependencyError, match="docker group"):
        preconditions.check_all(docker, get_config())


@pytest.mark.parametrize("port", [2376, 8080, 50000])
def test_port_in_use(busy_ports, docker, port):
    busy_ports.add(port)

    with pytest.raises(ResourceConflictError, match=f"port {port} is already in use"):
        preconditions.check_all(docker, get_config())


def test_first_busy_port_is_reported(busy_ports):
    busy_ports.update({8080, 50000})

    with pytest.raises(ResourceConflictError, match="8080"):
        preconditions.check_ports([2376, 8080, 50000])
