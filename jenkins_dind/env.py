"""Environment lifecycle: provision, inspect and tear down the Jenkins DinD setup."""

import enum
import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

from . import preconditions
from .config import CERTS_DIR, CLIENT_CERTS_DIR, JENKINS_HOME, Config, get_config
from .docker import ContainerSpec, ContainerState, Docker
from .utils import wait_for_http, DockerError, ResourceConflictError, SetupError

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


class SetupState(enum.Enum):
    """Stages of the setup procedure, in order."""

    INIT = "init"
    CHECKED = "checked"
    NETWORK_READY = "network-ready"
    CONTAINERS_CLEAR = "containers-clear"
    IMAGE_BUILT = "image-built"
    DIND_RUNNING = "dind-running"
    JENKINS_RUNNING = "jenkins-running"
    DONE = "done"
    ABORTED = "aborted"


def decline(prompt: str) -> bool:
    """Confirm callback answering "no" to everything."""
    return False


def reconcile_network(docker: Docker, config: Config, confirm: Confirm) -> None:
    """
    Create the bridge network, or recreate an existing one if confirmed.

    Declining recreation keeps the existing network, and so does a failed
    removal (e.g. containers from a previous run are still attached).
    """
    name = config.network_name
    if docker.network_exists(name):
        print(f"Docker network '{name}' already exists.")
        if confirm(f"Do you want to delete and recreate the '{name}' network?"):
            print(f"Removing existing Docker network '{name}'...")
            try:
                docker.remove_network(name)
            except DockerError as e:
                logger.debug("Network removal failed: %s", e.stderr)
                print(f"Warning: could not remove Docker network '{name}': {e}")
                print(f"Keeping the existing Docker network '{name}'.")
                return
            print(f"Recreating Docker network '{name}'...")
            docker.create_network(name)
        else:
            print(f"Keeping the existing Docker network '{name}'.")
            print("Proceeding with the existing network.")
    else:
        print(f"Creating Docker network '{name}'...")
        docker.create_network(name)


def reconcile_containers(docker: Docker, config: Config, confirm: Confirm) -> None:
    """
    Make sure neither container name is taken.

    Raises:
        ResourceConflictError: If a container exists and its removal is declined
    """
    for name in (config.dind_container, config.jenkins_container):
        state = docker.container_state(name)
        logger.debug("Container %s is %s", name, state.value)
        if state is ContainerState.ABSENT:
            continue

        print(f"Container '{name}' already exists ({state.value}).")
        if not confirm(f"Do you want to remove the existing container '{name}'?"):
            raise ResourceConflictError(
                f"Cannot continue with an existing container '{name}'. "
                "Please remove or rename the container and run the setup again."
            )
        print(f"Stopping and removing container '{name}'...")
        docker.remove_container(name)
        print(f"Removed container {name}.")


def build_image(docker: Docker, config: Config) -> None:
    """Build the Jenkins image from the build context, always rebuilding."""
    print("Building the Jenkins Blue Ocean Docker image (this may take a few minutes)...")
    try:
        docker.build_image(config.jenkins_image, config.build_context)
    except DockerError as e:
        raise DockerError(
            f"{e}. Please check the Dockerfile and try again.",
            command=e.command, returncode=e.returncode, stderr=e.stderr,
        ) from e
    print(f"Successfully built Docker image '{config.jenkins_image}'.")


def dind_spec(config: Config) -> ContainerSpec:
    """Container spec for the Docker-in-Docker daemon."""
    return ContainerSpec(
        name=config.dind_container,
        image=config.dind_image,
        privileged=True,
        network=config.network_name,
        network_alias=config.dind_alias,
        env={"DOCKER_TLS_CERTDIR": CERTS_DIR},
        volumes=[
            f"{config.certs_volume}:{CLIENT_CERTS_DIR}",
            f"{config.data_volume}:{JENKINS_HOME}",
        ],
        ports=[f"{config.daemon_port}:2376"],
    )


def jenkins_spec(config: Config) -> ContainerSpec:
    """Container spec for Jenkins, wired to the DinD daemon over TLS."""
    return ContainerSpec(
        name=config.jenkins_container,
        image=config.jenkins_image,
        restart="on-failure",
        network=config.network_name,
        env={
            "DOCKER_HOST": config.docker_host,
            "DOCKER_CERT_PATH": CLIENT_CERTS_DIR,
            "DOCKER_TLS_VERIFY": "1",
        },
        ports=[
            f"{config.jenkins_port}:8080",
            f"{config.agent_port}:50000",
        ],
        volumes=[
            f"{config.data_volume}:{JENKINS_HOME}",
            f"{config.certs_volume}:{CLIENT_CERTS_DIR}:ro",
        ],
    )


def start_dind(docker: Docker, config: Config) -> None:
    print(f"Starting Docker daemon container ('{config.dind_container}')...")
    try:
        docker.run_container(dind_spec(config))
    except DockerError as e:
        raise DockerError(
            f"{e}. Ensure Docker image '{config.dind_image}' is available "
            "and the Docker daemon supports privileged containers.",
            command=e.command, returncode=e.returncode, stderr=e.stderr,
        ) from e
    print(f"Docker DinD container '{config.dind_container}' is running.")


def start_jenkins(docker: Docker, config: Config) -> None:
    print(f"Starting Jenkins container ('{config.jenkins_container}')...")
    try:
        docker.run_container(jenkins_spec(config))
    except DockerError as e:
        raise DockerError(
            f"{e}. Please check the Docker run options and try again.",
            command=e.command, returncode=e.returncode, stderr=e.stderr,
        ) from e
    print(f"Jenkins container '{config.jenkins_container}' started successfully.")


def setup(
    docker: Optional[Docker] = None,
    confirm: Optional[Confirm] = None,
    wait: bool = False,
) -> SetupState:
    """
    Provision the Jenkins DinD environment.

    This function:
    1. Checks Docker, the daemon and the required ports
    2. Creates (or recreates) the bridge network
    3. Clears the container names
    4. Builds the Jenkins image
    5. Starts the DinD container
    6. Starts the Jenkins container

    Resources touched by earlier steps are left as they are when a later step fails.

    Args:
        docker: Docker client (default: a new one)
        confirm: Yes/no callback for the recreate/remove prompts (default: always no)
        wait: Wait for the Jenkins UI to answer before returning

    Returns:
        SetupState.DONE

    Raises:
        SetupError: If any step fails
    """
    config = get_config()
    docker = docker or Docker()
    confirm = confirm or decline

    state = SetupState.INIT
    steps = [
        (SetupState.CHECKED, lambda: preconditions.check_all(docker, config)),
        (SetupState.NETWORK_READY, lambda: reconcile_network(docker, config, confirm)),
        (SetupState.CONTAINERS_CLEAR, lambda: reconcile_containers(docker, config, confirm)),
        (SetupState.IMAGE_BUILT, lambda: build_image(docker, config)),
        (SetupState.DIND_RUNNING, lambda: start_dind(docker, config)),
        (SetupState.JENKINS_RUNNING, lambda: start_jenkins(docker, config)),
    ]
    for next_state, step in steps:
        try:
            step()
        except SetupError:
            logger.debug("Setup state: %s -> %s", state.value, SetupState.ABORTED.value)
            raise
        logger.debug("Setup state: %s -> %s", state.value, next_state.value)
        state = next_state

    if wait:
        login_url = f"{config.jenkins_url}/login"
        print(f"Waiting for Jenkins to become ready at {login_url} ...")
        if wait_for_http(login_url, timeout=180, interval=3):
            print("Jenkins is up.")
        else:
            print("Warning: Jenkins did not answer within the timeout; it may still be starting.")

    print("✅ Setup complete! Jenkins is initializing.")
    print(f"You can access Jenkins at: {config.jenkins_url}")
    print(f"To follow Jenkins startup logs: docker logs -f {config.jenkins_container}")
    return SetupState.DONE


def initial_admin_password(docker: Optional[Docker] = None) -> str:
    """
    Read the initial admin password generated by Jenkins on first start.

    Args:
        docker: Docker client (default: a new one)

    Returns:
        The password

    Raises:
        SetupError: If Jenkins is not running or has not written the file yet
    """
    config = get_config()
    docker = docker or Docker()

    if docker.container_state(config.jenkins_container) is not ContainerState.RUNNING:
        raise SetupError(f"Jenkins container '{config.jenkins_container}' is not running.")

    result = docker.exec(
        config.jenkins_container,
        ["cat", f"{JENKINS_HOME}/secrets/initialAdminPassword"],
    )
    if result.returncode != 0 or not result.stdout.strip():
        raise SetupError(
            "Initial admin password is not available yet. Jenkins may still be starting; "
            f"follow it with: docker logs -f {config.jenkins_container}"
        )
    return result.stdout.strip()


def status(docker: Optional[Docker] = None) -> dict[str, str]:
    """
    Report the state of every resource the setup manages.

    Args:
        docker: Docker client (default: a new one)

    Returns:
        Mapping of "kind name" to state
    """
    config = get_config()
    docker = docker or Docker()

    report = {
        f"network {config.network_name}":
            "present" if docker.network_exists(config.network_name) else "absent",
    }
    for name in (config.dind_container, config.jenkins_container):
        report[f"container {name}"] = docker.container_state(name).value
    for name in (config.certs_volume, config.data_volume):
        report[f"volume {name}"] = "present" if docker.volume_exists(name) else "absent"
    return report


def teardown(docker: Optional[Docker] = None, volumes: bool = False) -> None:
    """
    Remove the containers and the network, and optionally the volumes.

    Args:
        docker: Docker client (default: a new one)
        volumes: Also remove the certificate and Jenkins home volumes

    Raises:
        DockerError: If a removal fails
    """
    config = get_config()
    docker = docker or Docker()

    for name in (config.jenkins_container, config.dind_container):
        if docker.container_state(name) is not ContainerState.ABSENT:
            print(f"Removing container '{name}'...")
            docker.remove_container(name)

    if docker.network_exists(config.network_name):
        print(f"Removing network '{config.network_name}'...")
        docker.remove_network(config.network_name)

    if volumes:
        for name in (config.certs_volume, config.data_volume):
            if docker.volume_exists(name):
                print(f"Removing volume '{name}'...")
                docker.remove_volume(name)

    print("✅ Jenkins DinD environment teardown complete!")


def write_dockerfile(target_dir: str, force: bool = False) -> Path:
    """
    Write the bundled Jenkins Dockerfile into a build context.

    Args:
        target_dir: Directory to write the Dockerfile to
        force: Overwrite an existing Dockerfile

    Returns:
        Path of the written Dockerfile

    Raises:
        SetupError: If a Dockerfile exists and force is not set
    """
    config = get_config()
    target_path = Path(target_dir)
    dockerfile = target_path / "Dockerfile"

    if dockerfile.exists() and not force:
        raise SetupError(f"Dockerfile already exists at '{dockerfile}'; use --force to overwrite.")

    target_path.mkdir(parents=True, exist_ok=True)
    shutil.copy(config.get_template_path("Dockerfile"), dockerfile)
    print(f"Wrote {dockerfile}")
    return dockerfile
