"""``run`` and ``cleanup`` commands."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict

from rich.console import Console

from ..config import build_run_parameters, load_config
from ..config.models import RunnerContext
from ..exceptions import BuildboxError, UnsupportedPlatformError
from ..host import CONTAINER_PLATFORMS, HostContext, check_compatibility
from ..runner.docker.daemon import check_docker_daemon
from ..runner.docker.lifecycle import ContainerLifecycle
from ..utils.structured_logging import setup_structured_logging
from .parser import parse_env_pairs

__all__ = ["build_cli_config", "run_build", "run_cleanup"]

logger = logging.getLogger(__name__)

_RUNNER_FLAGS = (
    "cpu_limit",
    "memory_limit",
    "isolation_mode",
    "docker_workspace_path",
    "ssh_agent",
    "ssh_public_keys_directory_path",
    "git_private_token",
)


def build_cli_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Map parsed flags onto the config layout; unset flags stay ``None``."""
    cli: Dict[str, Any] = {
        "image": getattr(args, "image", None),
        "workspace": getattr(args, "workspace", None),
        "action_folder": getattr(args, "action_folder", None),
        "logs_dir": getattr(args, "logs_dir", None),
        "runner": {key: getattr(args, key, None) for key in _RUNNER_FLAGS},
    }
    return cli


def _setup_logging(args: argparse.Namespace, config: Dict[str, Any], run_id: str):
    logs_dir = Path(str(config.get("logs_dir") or "./logs"))
    return setup_structured_logging(
        logs_dir, run_id, debug=bool(args.debug), quiet=bool(args.quiet)
    )


async def run_build(console: Console, args: argparse.Namespace) -> int:
    """Reap, run, reap again; return the container's exit code verbatim."""
    host = HostContext.from_process()
    try:
        check_compatibility(host)
        if host.platform not in CONTAINER_PLATFORMS:
            raise UnsupportedPlatformError(host.platform)
        additional_variables = parse_env_pairs(args.env_pairs)
        config = load_config(
            build_cli_config(args), yaml_path=args.config, environ=host.environ
        )
        params = build_run_parameters(config, host)
    except (BuildboxError, argparse.ArgumentTypeError) as exc:
        console.print(str(exc), style="red", markup=False)
        return 1

    image = config.get("image")
    if not image:
        console.print("[red]No image given (pass IMAGE or set BUILDBOX_IMAGE)[/red]")
        return 1

    logs = _setup_logging(args, config, params.run_identifier)
    logger.debug("Logging to %s", logs)

    if not args.no_preflight:
        ok, message = check_docker_daemon()
        if not ok:
            console.print(message, style="red", markup=False)
            return 1

    lifecycle = ContainerLifecycle(host=host)
    try:
        await lifecycle.ensure_container_removal(params.context)
        try:
            exit_code = await lifecycle.run(
                image,
                params,
                silent=bool(args.silent),
                override_command=args.command or "",
                additional_variables=additional_variables,
                entrypoint_bash=bool(args.entrypoint_bash),
            )
        finally:
            if not args.no_reap:
                await lifecycle.ensure_container_removal(params.context)
    except BuildboxError as exc:
        logger.error("Run failed: %s", exc)
        console.print(str(exc), style="red", markup=False)
        return 1

    if not args.quiet:
        style = "green" if exit_code == 0 else "yellow"
        console.print(f"[{style}]Build container exited with code {exit_code}[/{style}]")
    return exit_code


async def run_cleanup(console: Console, args: argparse.Namespace) -> int:
    host = HostContext.from_process()
    default = host.runner_context()
    context = RunnerContext(
        runner_temporary_path=args.temp_dir or default.runner_temporary_path,
        run_identifier=args.run_id or default.run_identifier,
    )
    try:
        config = load_config(
            build_cli_config(args), yaml_path=args.config, environ=host.environ
        )
        _setup_logging(args, config, context.run_identifier)
        await ContainerLifecycle(host=host).ensure_container_removal(context)
    except BuildboxError as exc:
        console.print(str(exc), style="red", markup=False)
        return 1
    return 0
