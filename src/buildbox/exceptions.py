"""Buildbox exception hierarchy."""

from __future__ import annotations

from typing import Optional, Sequence

__all__ = [
    "BuildboxError",
    "DockerError",
    "IdentityFileError",
    "ProcessExitError",
    "ProcessLaunchError",
    "UnsupportedPlatformError",
    "ValidationError",
]


class BuildboxError(Exception):
    """Base class for buildbox exceptions."""


class DockerError(BuildboxError):
    """Raised when Docker operations fail."""


class UnsupportedPlatformError(BuildboxError):
    """Raised when the host platform cannot run build containers."""

    def __init__(self, platform: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Operating system, {platform}, is not supported yet."
        )
        self.platform = platform


class ProcessLaunchError(BuildboxError):
    """Raised when a process cannot be started at all."""

    def __init__(self, argv: Sequence[str], reason: str) -> None:
        tool = argv[0] if argv else "<empty>"
        super().__init__(f"Unable to launch {tool}: {reason}")
        self.argv = list(argv)
        self.reason = reason


class ProcessExitError(BuildboxError):
    """Raised for a non-zero exit when the caller did not ask to tolerate it."""

    def __init__(self, argv: Sequence[str], exit_code: int) -> None:
        tool = argv[0] if argv else "<empty>"
        super().__init__(f"{tool} failed with exit code {exit_code}")
        self.argv = list(argv)
        self.exit_code = exit_code


class IdentityFileError(DockerError):
    """Raised when a container identity file cannot be consumed."""


class ValidationError(BuildboxError):
    """Raised when input validation fails."""
