"""Configuration dataclasses shared across layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

__all__ = ["RunParameters", "RunnerContext"]


@dataclass(frozen=True)
class RunnerContext:
    """Identifies one invocation on the host.

    ``runner_temporary_path`` is where per-run scratch files live and
    ``run_identifier`` namespaces them from concurrent or past runs.
    """

    runner_temporary_path: str
    run_identifier: str


@dataclass(frozen=True)
class RunParameters:
    """Fully resolved inputs for a single build container."""

    workspace: str
    action_folder: str
    docker_workspace_path: str
    docker_cpu_limit: str
    docker_memory_limit: str
    runner_temporary_path: str
    run_identifier: str
    ssh_agent: Optional[str] = None
    ssh_public_keys_directory_path: Optional[str] = None
    git_private_token: Optional[str] = None
    docker_isolation_mode: str = "default"
    # Handed untouched to the environment injection collaborator
    environment: Mapping[str, str] = field(default_factory=dict)

    @property
    def context(self) -> RunnerContext:
        return RunnerContext(
            runner_temporary_path=self.runner_temporary_path,
            run_identifier=self.run_identifier,
        )
