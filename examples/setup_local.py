#!/usr/bin/env python3
"""
Example usage of the jenkins_dind library.

Provisions the Jenkins DinD environment, waits for Jenkins and prints the
initial admin password. Run it from a directory holding the Jenkins Dockerfile
(`jenkins-dind dockerfile` writes one).
"""

import sys

from jenkins_dind import config, env
from jenkins_dind.utils import SetupError


def main():
    cfg = config.get_config()

    print("=" * 60)
    print("Jenkins DinD - Example Usage")
    print("=" * 60)

    response = input("\nRecreate the network and replace existing containers if present? (yes/no): ")
    recreate = response.lower() in ("yes", "y")

    try:
        env.setup(confirm=lambda prompt: recreate, wait=True)
    except SetupError as e:
        print(f"\n❌ {e}")
        sys.exit(1)

    try:
        password = env.initial_admin_password()
    except SetupError as e:
        password = f"unavailable ({e})"

    print("\n" + "=" * 60)
    print(f"Jenkins: {cfg.jenkins_url}")
    print(f"Initial admin password: {password}")
    print("=" * 60)
    print("\nTeardown with: jenkins-dind down")


if __name__ == "__main__":
    main()
