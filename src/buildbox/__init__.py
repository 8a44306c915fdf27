"""Buildbox public API surface.

Runs a single ephemeral build container and reaps whatever a previous,
interrupted invocation left behind.
"""

from .config.models import RunParameters, RunnerContext
from .host import HostContext
from .runner.docker.lifecycle import ContainerLifecycle
from .version import __version__

__all__ = [
    "ContainerLifecycle",
    "HostContext",
    "RunParameters",
    "RunnerContext",
    "__version__",
]
