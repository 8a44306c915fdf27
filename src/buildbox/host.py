"""
Host context for buildbox.

Collects every read of the surrounding process (platform, working directory,
process id and environment) in one place so the rest of the code can be
driven by a plain value in tests.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .config.models import RunnerContext
from .exceptions import UnsupportedPlatformError

__all__ = [
    "CONTAINER_PLATFORMS",
    "SUPPORTED_PLATFORMS",
    "HostContext",
    "check_compatibility",
]

SUPPORTED_PLATFORMS = ("linux", "win32", "darwin")
# Platforms with a container command builder
CONTAINER_PLATFORMS = ("linux", "win32")


@dataclass(frozen=True)
class HostContext:
    """Snapshot of the host process."""

    platform: str
    cwd: str
    pid: int
    environ: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_process(cls) -> "HostContext":
        """Capture the current interpreter's platform, cwd, pid and env."""
        return cls(
            platform=sys.platform,
            cwd=os.getcwd(),
            pid=os.getpid(),
            environ=dict(os.environ),
        )

    def getenv(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.environ.get(key)
        return value if value not in (None, "") else default

    @property
    def is_running_locally(self) -> bool:
        """True when not executing inside a hosted CI runner."""
        return "RUNNER_WORKSPACE" not in self.environ

    @property
    def workspace(self) -> str:
        return self.getenv("GITHUB_WORKSPACE", self.cwd) or self.cwd

    def runner_context(self) -> RunnerContext:
        """
        Build the run identity for this invocation.

        Falls back to the working directory when ``RUNNER_TEMP`` is unset and
        to the process id when ``GITHUB_ACTION`` is unset, so a local run still
        gets a stable identity for its whole lifetime.
        """
        return RunnerContext(
            runner_temporary_path=self.getenv("RUNNER_TEMP", self.cwd) or self.cwd,
            run_identifier=self.getenv("GITHUB_ACTION", str(self.pid))
            or str(self.pid),
        )


def check_compatibility(host: HostContext) -> None:
    """Reject hosts buildbox does not know how to operate on."""
    if host.platform not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatformError(
            host.platform,
            f"Currently {host.platform}-platform is not supported",
        )
