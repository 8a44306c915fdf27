"""``docker run`` construction for Linux hosts."""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional

from ...config.models import RunParameters
from ..environment import (
    EnvironmentProvider,
    StringKeyValuePair,
    build_env_argument_string,
)
from ..identity import container_id_file_path
from .invocation import RunInvocation, split_fragment

__all__ = ["DEFAULT_ENTRYPOINT", "LinuxCommandBuilder", "select_shell"]

logger = logging.getLogger(__name__)

DEFAULT_ENTRYPOINT = "/entrypoint.sh"
_MINIMAL_IMAGES = frozenset({"alpine"})
_KNOWN_HOSTS = "/home/runner/.ssh/known_hosts"


def select_shell(image: str) -> str:
    """``/bin/sh`` for minimal base images, ``/bin/bash`` for everything else."""
    name = image.split("@", 1)[0]
    if ":" in name.rsplit("/", 1)[-1]:
        name = name.rsplit(":", 1)[0]
    return "/bin/sh" if name in _MINIMAL_IMAGES else "/bin/bash"


def ensure_directory(path: str) -> None:
    # Not exclusive: a concurrent creator winning the race is fine
    os.makedirs(path, exist_ok=True)


class LinuxCommandBuilder:
    """Build a synchronous ``docker run --rm`` with POSIX mounts and a cidfile."""

    platform = "linux"

    def __init__(self, env_provider: EnvironmentProvider = build_env_argument_string):
        self.env_provider = env_provider

    def build(
        self,
        image: str,
        parameters: RunParameters,
        override_command: str = "",
        additional_variables: Optional[Iterable[StringKeyValuePair]] = None,
        entrypoint_bash: bool = False,
    ) -> RunInvocation:
        github_home = os.path.join(parameters.runner_temporary_path, "_github_home")
        github_workflow = os.path.join(
            parameters.runner_temporary_path, "_github_workflow"
        )
        ensure_directory(github_home)
        ensure_directory(github_workflow)

        cidfile = container_id_file_path(parameters.context)
        shell = select_shell(image)
        dws = parameters.docker_workspace_path
        af = parameters.action_folder
        env_fragment = self.env_provider(parameters, list(additional_variables or ()))

        args: List[str] = [
            "docker",
            "run",
            "--workdir",
            dws,
            f"--cidfile={cidfile}",
            "--rm",
        ]
        args.extend(split_fragment(env_fragment))
        args += ["--env", f"GITHUB_WORKSPACE={dws}", "--env", "GIT_CONFIG_EXTENSIONS"]
        if parameters.git_private_token:
            args += ["--env", f"GIT_PRIVATE_TOKEN={parameters.git_private_token}"]
        if parameters.ssh_agent:
            args += ["--env", "SSH_AUTH_SOCK=/ssh-agent"]

        for source, target in (
            (github_home, "/root"),
            (github_workflow, "/github/workflow"),
            (parameters.workspace, dws),
            (f"{af}/default-build-script", "/UnityBuilderAction"),
            (f"{af}/platforms/ubuntu/steps", "/steps"),
            (f"{af}/platforms/ubuntu/entrypoint.sh", "/entrypoint.sh"),
            (f"{af}/unity-config", "/usr/share/unity3d/config/"),
            (f"{af}/BlankProject", "/BlankProject"),
        ):
            args += ["--volume", f"{source}:{target}:z"]

        args += [
            f"--cpus={parameters.docker_cpu_limit}",
            f"--memory={parameters.docker_memory_limit}",
        ]

        if parameters.ssh_agent:
            args += ["--volume", f"{parameters.ssh_agent}:/ssh-agent"]
            if not parameters.ssh_public_keys_directory_path:
                args += ["--volume", f"{_KNOWN_HOSTS}:/root/.ssh/known_hosts:ro"]
        if parameters.ssh_public_keys_directory_path:
            args += [
                "--volume",
                f"{parameters.ssh_public_keys_directory_path}:/root/.ssh:ro",
            ]

        if entrypoint_bash:
            args += ["--entrypoint", shell, image, "-c"]
        else:
            args += [image, shell, "-c"]
        args.append(override_command if override_command else DEFAULT_ENTRYPOINT)

        logger.debug(
            "Built linux run: image=%s shell=%s cidfile=%s", image, shell, cidfile
        )
        return RunInvocation(args=tuple(args), platform=self.platform)
