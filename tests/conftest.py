"""Shared fixtures: a fake docker runtime, free ports and a clean configuration."""

import pytest

from jenkins_dind import config
from jenkins_dind.docker import Docker

from .fakes import FakeDockerRuntime

ENV_VARS = (
    "JENKINS_NETWORK",
    "JENKINS_DIND_CONTAINER",
    "JENKINS_CONTAINER",
    "JENKINS_DIND_IMAGE",
    "JENKINS_DIND_ALIAS",
    "JENKINS_IMAGE",
    "JENKINS_BUILD_CONTEXT",
    "JENKINS_CERTS_VOLUME",
    "JENKINS_DATA_VOLUME",
    "JENKINS_DAEMON_PORT",
    "JENKINS_PORT",
    "JENKINS_AGENT_PORT",
    "JENKINS_URL",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config.reset_config()
    yield
    config.reset_config()


@pytest.fixture
def runtime(monkeypatch):
    fake = FakeDockerRuntime()
    monkeypatch.setattr("jenkins_dind.docker.run_command", fake)
    monkeypatch.setattr("jenkins_dind.docker.shutil.which", lambda binary: f"/usr/bin/{binary}")
    return fake


@pytest.fixture
def busy_ports(monkeypatch):
    """Ports reported as having a listener; empty by default."""
    ports = set()
    monkeypatch.setattr("jenkins_dind.preconditions.port_in_use", lambda port: port in ports)
    return ports


@pytest.fixture
def docker(runtime, busy_ports):
    return Docker()
