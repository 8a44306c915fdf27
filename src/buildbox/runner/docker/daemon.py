"""Docker daemon reachability check."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import docker
from docker.errors import DockerException

__all__ = ["check_docker_daemon"]

logger = logging.getLogger(__name__)


def check_docker_daemon(api_timeout: int = 10) -> Tuple[bool, Optional[str]]:
    """Ping the daemon the ``docker`` CLI would talk to.

    Returns:
        Tuple of (is_reachable, error_message)
    """
    try:
        client = docker.from_env(timeout=int(api_timeout))
    except DockerException as exc:
        logger.debug("Docker client creation failed: %s", exc)
        return False, f"Failed to connect to Docker daemon: {exc}"

    try:
        client.ping()
        return True, None
    except DockerException as exc:
        logger.error("Docker validation failed: %s", exc)
        return False, f"Docker daemon did not answer: {exc}"
    finally:
        try:
            client.close()
        except Exception:
            pass
