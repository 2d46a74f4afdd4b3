"""Precondition checks run before any Docker resource is touched."""

import logging
from typing import Optional

from .config import Config, get_config
from .docker import Docker
from .utils import port_in_use, MissingDependencyError, ResourceConflictError

logger = logging.getLogger(__name__)


def check_docker_cli(docker: Docker) -> None:
    if not docker.available():
        raise MissingDependencyError(
            "Docker is not installed or not available in PATH. "
            "Please install Docker and try again."
        )


def check_daemon(docker: Docker) -> None:
    if not docker.daemon_running():
        raise MissingDependencyError(
            "Docker daemon is not running or is not accessible. Please start the Docker "
            "service and ensure your user has permission (e.g., in the docker group)."
        )


def check_ports(ports) -> None:
    """
    Ensure nothing is listening on any of the given ports.

    Args:
        ports: Port numbers to check, in order

    Raises:
        ResourceConflictError: On the first port already in use
    """
    for port in ports:
        logger.debug("Checking port %s", port)
        if port_in_use(port):
            raise ResourceConflictError(
                f"Required port {port} is already in use on this system. Please free up "
                f"port {port} or change the configuration before proceeding."
            )


def check_all(docker: Docker, config: Optional[Config] = None) -> None:
    """
    Run every precondition check, stopping at the first failure.

    Args:
        docker: Docker client
        config: Config instance (default: global config)

    Raises:
        MissingDependencyError: If the CLI or the daemon is unavailable
        ResourceConflictError: If a required port is taken
    """
    config = config or get_config()

    check_docker_cli(docker)
    check_daemon(docker)
    print("Docker is installed and the daemon is running.")

    # Ports published by a previous run are freed when its containers are removed.
    owned = set()
    for name in (config.dind_container, config.jenkins_container):
        owned |= docker.published_ports(name)
    if owned:
        logger.info("Ports published by existing setup containers: %s", sorted(owned))
    check_ports(port for port in config.required_ports if port not in owned)
    print(f"Ports {' '.join(str(p) for p in config.required_ports)} are free to use.")
