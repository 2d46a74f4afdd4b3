"""Utility functions for subprocess calls, port probing, HTTP polling and errors."""

import errno
import logging
import socket
import subprocess
import time
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class SetupError(Exception):
    """Base exception for Jenkins DinD setup errors."""
    pass


class MissingDependencyError(SetupError):
    """Exception raised when Docker or its daemon is not usable."""
    pass


class ResourceConflictError(SetupError):
    """Exception raised when a port or container name is already taken."""
    pass


class DockerError(SetupError):
    """Exception raised for Docker operations errors."""

    def __init__(self, message: str, command: Optional[list[str]] = None,
                 returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


def run_command(
    command: list[str],
    cwd: Optional[str] = None,
    check: bool = True,
    capture_output: bool = True,
) -> subprocess.CompletedProcess:
    """
    Run a command and wait for it to finish.

    Args:
        command: Command and arguments as list
        cwd: Working directory
        check: Whether to raise exception on non-zero exit
        capture_output: Whether to capture stdout/stderr (False streams to the terminal)

    Returns:
        CompletedProcess instance

    Raises:
        subprocess.CalledProcessError: If check=True and command fails
    """
    logger.debug("Running: %s", " ".join(command))
    return subprocess.run(command, cwd=cwd, capture_output=capture_output, text=True, check=check)


def port_in_use(port: int) -> bool:
    """
    Check whether a local TCP port is taken on any address.

    Binds the wildcard address of each available family, the way a published
    container port would, so listeners on loopback, ::1 or a single interface
    all count.

    Args:
        port: Port number

    Returns:
        True if the port cannot be bound
    """
    for family, host in ((socket.AF_INET, ""), (socket.AF_INET6, "::")):
        try:
            sock = socket.socket(family, socket.SOCK_STREAM)
        except OSError as e:
            logger.debug("Address family %s unavailable: %s", family.name, e)
            continue
        with sock:
            try:
                sock.bind((host, port))
            except OSError as e:
                if e.errno == errno.EADDRINUSE:
                    return True
                logger.debug("Could not probe port %s on %s: %s", port, family.name, e)
    return False


def wait_for_http(url: str, timeout: int = 60, interval: int = 2) -> bool:
    """
    Wait for an HTTP endpoint to become available.

    Args:
        url: The URL to check
        timeout: Maximum time to wait in seconds (default: 60)
        interval: Time between checks in seconds (default: 2)

    Returns:
        True if endpoint becomes available, False if timeout
    """
    elapsed = 0
    while elapsed < timeout:
        try:
            response = requests.get(url, timeout=5, allow_redirects=True)
            if response.status_code in (200, 302):
                return True
        except requests.exceptions.RequestException as e:
            logger.debug("%s not reachable yet: %s", url, e)

        time.sleep(interval)
        elapsed += interval

    return False
