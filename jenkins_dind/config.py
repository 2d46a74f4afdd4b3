"""Configuration management for the Jenkins DinD setup."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

CERTS_DIR = "/certs"
CLIENT_CERTS_DIR = "/certs/client"
JENKINS_HOME = "/var/jenkins_home"


class Config:
    """Configuration class for resource names and ports, overridable through environment variables."""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Optional path to .env file.
        """
        self.package_dir = Path(__file__).parent.resolve()
        self.template_dir = self.package_dir / "templates"

        if env_file:
            load_dotenv(env_file)

    @property
    def network_name(self) -> str:
        """Bridge network shared by both containers."""
        return os.getenv("JENKINS_NETWORK", "jenkins")

    @property
    def dind_container(self) -> str:
        """Docker-in-Docker container name."""
        return os.getenv("JENKINS_DIND_CONTAINER", "jenkins-docker")

    @property
    def jenkins_container(self) -> str:
        """Jenkins container name."""
        return os.getenv("JENKINS_CONTAINER", "jenkins-blueocean")

    @property
    def dind_image(self) -> str:
        return os.getenv("JENKINS_DIND_IMAGE", "docker:dind")

    @property
    def dind_alias(self) -> str:
        """Network alias Jenkins uses to reach the DinD daemon."""
        return os.getenv("JENKINS_DIND_ALIAS", "docker")

    @property
    def jenkins_image(self) -> str:
        """Tag of the Jenkins image built from the build context."""
        return os.getenv("JENKINS_IMAGE", "myjenkins-blueocean:latest")

    @property
    def build_context(self) -> str:
        return os.getenv("JENKINS_BUILD_CONTEXT", ".")

    @property
    def certs_volume(self) -> str:
        """Named volume holding the generated TLS client certificates."""
        return os.getenv("JENKINS_CERTS_VOLUME", "jenkins-docker-certs")

    @property
    def data_volume(self) -> str:
        """Named volume holding the Jenkins home."""
        return os.getenv("JENKINS_DATA_VOLUME", "jenkins-data")

    @property
    def daemon_port(self) -> int:
        """Docker daemon TLS port."""
        return int(os.getenv("JENKINS_DAEMON_PORT", "2376"))

    @property
    def jenkins_port(self) -> int:
        """Jenkins web UI port."""
        return int(os.getenv("JENKINS_PORT", "8080"))

    @property
    def agent_port(self) -> int:
        """Jenkins inbound agent port."""
        return int(os.getenv("JENKINS_AGENT_PORT", "50000"))

    @property
    def required_ports(self) -> tuple[int, int, int]:
        return (self.daemon_port, self.jenkins_port, self.agent_port)

    @property
    def jenkins_url(self) -> str:
        """Jenkins URL as seen from the host."""
        return os.getenv("JENKINS_URL", f"http://localhost:{self.jenkins_port}")

    @property
    def docker_host(self) -> str:
        """DOCKER_HOST value handed to the Jenkins container."""
        return f"tcp://{self.dind_alias}:2376"

    def get_template_path(self, template_name: str) -> Path:
        """
        Get path to a bundled template file.

        Args:
            template_name: Template name relative to templates directory (e.g., "Dockerfile")

        Returns:
            Path to template file

        Raises:
            FileNotFoundError: If template doesn't exist
        """
        template_path = self.template_dir / template_name
        if not template_path.exists():
            raise FileNotFoundError(f"Template not found: {template_path}")
        return template_path


# Global config instance
_config: Optional[Config] = None


def get_config(env_file: Optional[str] = None) -> Config:
    """
    Get or create the global configuration instance.

    Args:
        env_file: Optional path to .env file

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config(env_file)
    return _config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
