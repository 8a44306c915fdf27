"""
Build container lifecycle.

Reaps a container left behind by an interrupted invocation and runs a new
one. The cidfile written by Docker is the only state carried between the two:

    ABSENT -> RUNNING -> STOPPED -> REAPED

``ensure_container_removal`` is the only way out of RUNNING/STOPPED and is a
no-op once the cidfile is gone.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from ...config.models import RunnerContext, RunParameters
from ...exceptions import IdentityFileError
from ...host import HostContext
from ...utils.redaction import SecretRedactor
from ..environment import (
    EnvironmentProvider,
    StringKeyValuePair,
    build_env_argument_string,
)
from ..identity import container_id_file_path
from ..process import ExecOptions, ProcessRunner, SubprocessRunner
from .builders import select_builder
from .invocation import RunInvocation

__all__ = ["CLEANUP_SCRIPT", "ContainerLifecycle"]

logger = logging.getLogger(__name__)

CLEANUP_SCRIPT = "/cleanup.sh"
DOCKER = "docker"


class ContainerLifecycle:
    """Coordinates leftover-container reaping and new container runs."""

    def __init__(
        self,
        host: Optional[HostContext] = None,
        process_runner: Optional[ProcessRunner] = None,
        env_provider: EnvironmentProvider = build_env_argument_string,
    ) -> None:
        self.host = host or HostContext.from_process()
        self.process_runner = process_runner or SubprocessRunner()
        self.env_provider = env_provider

    async def ensure_container_removal(self, context: RunnerContext) -> None:
        """Remove a possible leftover container created by :meth:`run`.

        The in-container cleanup script and the forced removal are both
        attempted once a cidfile is found, whatever their exit codes. A
        runtime binary that cannot be launched propagates and leaves the
        cidfile in place; failing to delete the cidfile raises
        :class:`IdentityFileError`.
        """
        cidfile = container_id_file_path(context)
        if not cidfile.exists():
            logger.debug("No container identity at %s; nothing to reap", cidfile)
            return

        try:
            container = cidfile.read_text(encoding="ascii").strip()
        except (OSError, UnicodeDecodeError) as exc:
            raise IdentityFileError(
                f"Failed to read container identity {cidfile}: {exc}"
            ) from exc

        if container:
            logger.info("Reaping leftover container %s", container)
            cleanup_rc = await self.process_runner.execute(
                DOCKER,
                ["exec", container, "/bin/bash", "-c", CLEANUP_SCRIPT],
                ExecOptions(silent=False, ignore_return_code=True),
            )
            if cleanup_rc != 0:
                logger.warning(
                    "Cleanup script in %s exited with %d", container, cleanup_rc
                )
            remove_rc = await self.process_runner.execute(
                DOCKER,
                ["rm", "--force", "--volumes", container],
                ExecOptions(silent=True, ignore_return_code=True),
            )
            if remove_rc != 0:
                # --rm usually got there first
                logger.debug("docker rm %s exited with %d", container, remove_rc)
        else:
            logger.warning("Container identity %s is empty; discarding it", cidfile)

        try:
            cidfile.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise IdentityFileError(
                f"Failed to delete container identity {cidfile}: {exc}"
            ) from exc
        logger.info("Removed container identity %s", cidfile)

    def build_invocation(
        self,
        image: str,
        parameters: RunParameters,
        override_command: str = "",
        additional_variables: Optional[Iterable[StringKeyValuePair]] = None,
        entrypoint_bash: bool = False,
    ) -> RunInvocation:
        builder = select_builder(self.host.platform, self.env_provider)
        return builder.build(
            image,
            parameters,
            override_command=override_command,
            additional_variables=additional_variables,
            entrypoint_bash=entrypoint_bash,
        )

    async def run(
        self,
        image: str,
        parameters: RunParameters,
        silent: bool = False,
        override_command: str = "",
        additional_variables: Optional[Iterable[StringKeyValuePair]] = None,
        options: Optional[ExecOptions] = None,
        entrypoint_bash: bool = False,
    ) -> int:
        """Run the build container to completion and return its exit code.

        A non-zero exit is the build's result, not a failure of this call.
        """
        invocation = self.build_invocation(
            image,
            parameters,
            override_command=override_command,
            additional_variables=additional_variables,
            entrypoint_bash=entrypoint_bash,
        )
        exec_options = replace(
            options or ExecOptions(), silent=silent, ignore_return_code=True
        )

        redactor = SecretRedactor(secrets=[parameters.git_private_token])
        # Scrub tokens before quoting so shell escaping cannot split a secret
        shown = RunInvocation(
            args=tuple(redactor.scrub(token) for token in invocation.args),
            platform=invocation.platform,
        )
        logger.info("Starting container: %s", shown.command_line)

        exit_code = await self.process_runner.execute(
            invocation.args, None, exec_options
        )
        logger.info("Container exited with code %d", exit_code)
        return exit_code
