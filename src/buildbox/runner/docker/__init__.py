"""Docker command construction and container lifecycle."""

from ...exceptions import DockerError, IdentityFileError
from .builders import BUILDERS, CommandBuilder, select_builder
from .invocation import RunInvocation
from .lifecycle import CLEANUP_SCRIPT, ContainerLifecycle

__all__ = [
    "BUILDERS",
    "CLEANUP_SCRIPT",
    "CommandBuilder",
    "ContainerLifecycle",
    "DockerError",
    "IdentityFileError",
    "RunInvocation",
    "select_builder",
]
