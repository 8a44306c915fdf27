"""``docker run`` construction for Windows hosts."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ...config.models import RunParameters
from ..environment import (
    EnvironmentProvider,
    StringKeyValuePair,
    build_env_argument_string,
)
from .invocation import RunInvocation, split_fragment

__all__ = ["TOOLCHAIN_MOUNTS", "WindowsCommandBuilder"]

logger = logging.getLogger(__name__)

# Bind-mounted read/write from the identical host path
TOOLCHAIN_MOUNTS = (
    "c:/regkeys",
    "C:/Program Files/Microsoft Visual Studio",
    "C:/Program Files (x86)/Microsoft Visual Studio",
    "C:/Program Files (x86)/Windows Kits",
    "C:/ProgramData/Microsoft/VisualStudio",
)
_ENTRYPOINT = ("powershell", "c:/steps/entrypoint.ps1")


class WindowsCommandBuilder:
    """Build a synchronous ``docker run --rm`` with Windows volume syntax.

    The container's fixed PowerShell entrypoint is always used, so command
    overrides, extra variables and entrypoint overrides do not apply here and
    no cidfile is requested.
    """

    platform = "win32"

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
        if override_command or entrypoint_bash or additional_variables:
            logger.debug("Ignoring command/entrypoint/variable overrides on Windows")

        dws = f"c:{parameters.docker_workspace_path}"
        af = parameters.action_folder

        args: List[str] = ["docker", "run", "--workdir", dws, "--rm"]
        args.extend(split_fragment(self.env_provider(parameters, [])))
        args += ["--env", f"GITHUB_WORKSPACE={dws}"]
        if parameters.git_private_token:
            args += ["--env", f"GIT_PRIVATE_TOKEN={parameters.git_private_token}"]

        args += ["--volume", f"{parameters.workspace}:{dws}"]
        for path in TOOLCHAIN_MOUNTS:
            args += ["--volume", f"{path}:{path}"]
        for source, target in (
            (f"{af}/default-build-script", "c:/UnityBuilderAction"),
            (f"{af}/platforms/windows", "c:/steps"),
            (f"{af}/unity-config", "C:/ProgramData/Unity/config"),
            (f"{af}/BlankProject", "c:/BlankProject"),
        ):
            args += ["--volume", f"{source}:{target}"]

        args += [
            f"--cpus={parameters.docker_cpu_limit}",
            f"--memory={parameters.docker_memory_limit}",
            f"--isolation={parameters.docker_isolation_mode}",
            image,
            *_ENTRYPOINT,
        ]
        return RunInvocation(args=tuple(args), platform=self.platform)
