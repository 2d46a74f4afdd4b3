"""Docker CLI client: networks, containers, volumes and image builds."""

import enum
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Optional

from .utils import run_command, DockerError, MissingDependencyError


class ContainerState(enum.Enum):
    """Existence state of a named container."""

    ABSENT = "absent"
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class ContainerSpec:
    """Arguments of a single ``docker run`` invocation.

    Attributes:
        name: Container name.
        image: Image to run.
        network: Network to attach to.
        network_alias: Optional alias on that network.
        privileged: Run with extended privileges.
        restart: Restart policy (e.g. "on-failure").
        env: Environment variables.
        volumes: Volume mounts as "source:target[:mode]".
        ports: Published ports as "host:container".
    """

    name: str
    image: str
    network: Optional[str] = None
    network_alias: Optional[str] = None
    privileged: bool = False
    restart: Optional[str] = None
    env: dict[str, str] = field(default_factory=dict)
    volumes: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)

    def to_args(self) -> list[str]:
        """Render the arguments following the docker binary."""
        args = ["run", "--name", self.name, "--detach"]
        if self.privileged:
            args.append("--privileged")
        if self.restart:
            args.append(f"--restart={self.restart}")
        if self.network:
            args.extend(["--network", self.network])
        if self.network_alias:
            args.extend(["--network-alias", self.network_alias])
        for key, value in self.env.items():
            args.extend(["--env", f"{key}={value}"])
        for volume in self.volumes:
            args.extend(["--volume", volume])
        for port in self.ports:
            args.extend(["--publish", port])
        args.append(self.image)
        return args


class Docker:
    """Thin wrapper over the ``docker`` command line.

    Queries answer "not found" with a falsy result; mutations raise
    DockerError on a non-zero exit.
    """

    def __init__(self, binary: str = "docker"):
        self.binary = binary

    def _run(self, *args: str, capture_output: bool = True) -> subprocess.CompletedProcess:
        try:
            return run_command([self.binary, *args], check=False, capture_output=capture_output)
        except OSError as e:
            raise MissingDependencyError(
                f"Could not run '{self.binary}': {e}. Docker is not installed or not available "
                "in PATH. Please install Docker and try again."
            ) from e

    def _mutate(self, message: str, *args: str, capture_output: bool = True) -> subprocess.CompletedProcess:
        result = self._run(*args, capture_output=capture_output)
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            detail = f"{message} (exit code {result.returncode})"
            if stderr:
                detail = f"{detail}: {stderr}"
            raise DockerError(
                detail,
                command=[self.binary, *args],
                returncode=result.returncode,
                stderr=stderr,
            )
        return result

    def available(self) -> bool:
        """Check if the docker CLI is on PATH."""
        return shutil.which(self.binary) is not None

    def daemon_running(self) -> bool:
        """Check if the daemon answers ``docker info``."""
        return self._run("info").returncode == 0

    # Networks

    def network_exists(self, name: str) -> bool:
        return self._run("network", "inspect", name).returncode == 0

    def create_network(self, name: str) -> None:
        self._mutate(f"Failed to create network '{name}'", "network", "create", name)

    def remove_network(self, name: str) -> None:
        self._mutate(f"Failed to remove network '{name}'", "network", "rm", name)

    # Containers

    def container_state(self, name: str) -> ContainerState:
        """
        Get the state of a container, running or stopped.

        Args:
            name: Exact container name

        Returns:
            ContainerState of the container

        Raises:
            DockerError: If the daemon cannot list containers
        """
        result = self._mutate(
            f"Failed to look up container '{name}'",
            "container", "ls", "--all",
            "--filter", f"name=^{name}$",
            "--format", "{{.State}}",
        )
        states = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not states:
            return ContainerState.ABSENT
        if states[0] == "running":
            return ContainerState.RUNNING
        return ContainerState.STOPPED

    def remove_container(self, name: str) -> None:
        """Stop and remove a container."""
        self._mutate(f"Failed to remove container '{name}'", "rm", "-f", name)

    def published_ports(self, name: str) -> set[int]:
        """
        Get the host ports a container currently publishes.

        Args:
            name: Container name

        Returns:
            Host port numbers; empty when the container is absent or stopped
        """
        result = self._run("port", name)
        if result.returncode != 0:
            return set()

        # e.g. "8080/tcp -> 0.0.0.0:8080" or "8080/tcp -> [::]:8080"
        ports = set()
        for line in result.stdout.splitlines():
            if "->" in line:
                ports.add(int(line.rsplit(":", 1)[1]))
        return ports

    def run_container(self, spec: ContainerSpec) -> str:
        """
        Start a detached container.

        Args:
            spec: ContainerSpec describing the container

        Returns:
            The new container ID

        Raises:
            DockerError: If docker run fails
        """
        result = self._mutate(f"Failed to start container '{spec.name}'", *spec.to_args())
        return result.stdout.strip()

    def exec(self, name: str, command: list[str]) -> subprocess.CompletedProcess:
        """Execute a command inside a running container."""
        return self._run("exec", name, *command)

    # Images

    def build_image(self, tag: str, context: str = ".") -> None:
        """
        Build an image from a build context, streaming the build output.

        Args:
            tag: Image tag
            context: Build context directory

        Raises:
            DockerError: If the build fails
        """
        self._mutate(f"Failed to build image '{tag}'", "build", "-t", tag, context, capture_output=False)

    # Volumes

    def volume_exists(self, name: str) -> bool:
        return self._run("volume", "inspect", name).returncode == 0

    def remove_volume(self, name: str) -> None:
        self._mutate(f"Failed to remove volume '{name}'", "volume", "rm", name)
