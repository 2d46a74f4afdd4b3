"""Jenkins DinD - provision a local Jenkins CI server backed by a Docker-in-Docker daemon."""

__version__ = "0.1.0"

from . import config, docker, env, preconditions, utils

__all__ = ["config", "docker", "env", "preconditions", "utils"]
