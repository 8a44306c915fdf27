"""CLI parser builder for buildbox.

`create_parser()` assembles one sub-parser per command via small helpers.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from ..version import __version__

__all__ = ["create_parser", "parse_env_pairs"]


def _epilog() -> str:
    return (
        "Quick examples:\n"
        "  # Run the default entrypoint in a build image\n"
        "  buildbox run unityci/editor:ubuntu-2022.3.0f1-base-3\n\n"
        "  # Run an ad-hoc command with a shell entrypoint\n"
        "  buildbox run alpine --entrypoint-bash --command 'ls /steps'\n\n"
        "  # Reap whatever an interrupted run left behind\n"
        "  buildbox cleanup\n\n"
        "  # Diagnostics\n"
        "  buildbox doctor\n"
        "  buildbox config print --json\n"
    )


def parse_env_pairs(values: list[str] | None) -> list[tuple[str, str]]:
    """Parse repeated ``KEY=VALUE`` options, keeping their order."""
    pairs: list[tuple[str, str]] = []
    for raw in values or []:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{raw}'")
        pairs.append((key.strip(), value))
    return pairs


def add_global_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", type=Path, help="Project config file (default: ./buildbox.yaml)"
    )
    parser.add_argument("--logs-dir", type=Path, help="Directory for JSONL logs")
    parser.add_argument("--debug", action="store_true", help="Verbose console logs")
    parser.add_argument("--quiet", action="store_true", help="Errors only")


def add_limits_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Container")
    g.add_argument("--cpus", dest="cpu_limit", help="Value for docker --cpus")
    g.add_argument("--memory", dest="memory_limit", help="Value for docker --memory")
    g.add_argument(
        "--isolation", dest="isolation_mode", help="Windows isolation mode"
    )
    g.add_argument(
        "--docker-workspace-path", help="Workspace mount path inside the container"
    )


def add_path_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Paths")
    g.add_argument("--workspace", help="Host directory mounted as the workspace")
    g.add_argument(
        "--action-folder", help="Host directory holding build and step scripts"
    )


def add_auth_args(parser: argparse.ArgumentParser) -> None:
    g = parser.add_argument_group("Credentials")
    g.add_argument("--ssh-agent", help="SSH agent socket to forward")
    g.add_argument(
        "--ssh-public-keys-directory-path",
        help="Directory mounted read-only as /root/.ssh",
    )
    g.add_argument("--git-private-token", help="Token exported as GIT_PRIVATE_TOKEN")


def add_run_parser(subparsers) -> None:
    p = subparsers.add_parser("run", help="Run a build container to completion")
    p.add_argument("image", nargs="?", help="Image reference (or BUILDBOX_IMAGE)")
    p.add_argument(
        "--command", default="", help="Command to run instead of /entrypoint.sh"
    )
    p.add_argument(
        "--entrypoint-bash",
        action="store_true",
        help="Override the image entrypoint with the shell",
    )
    p.add_argument("--silent", action="store_true", help="Do not stream output")
    p.add_argument(
        "-e",
        "--env",
        action="append",
        dest="env_pairs",
        metavar="KEY=VALUE",
        help="Extra variable for the container (repeatable)",
    )
    p.add_argument(
        "--no-preflight", action="store_true", help="Skip the Docker daemon ping"
    )
    p.add_argument(
        "--no-reap",
        action="store_true",
        help="Leave this run's container identity for a later cleanup",
    )
    add_path_args(p)
    add_limits_args(p)
    add_auth_args(p)


def add_cleanup_parser(subparsers) -> None:
    p = subparsers.add_parser("cleanup", help="Reap a leftover build container")
    p.add_argument("--temp-dir", help="Temporary directory (default: $RUNNER_TEMP)")
    p.add_argument("--run-id", help="Run identifier (default: $GITHUB_ACTION)")


def add_doctor_parser(subparsers) -> None:
    p = subparsers.add_parser("doctor", help="Check the host environment")
    add_path_args(p)


def add_config_parser(subparsers) -> None:
    p = subparsers.add_parser("config", help="Configuration helpers")
    p.add_argument("action", choices=["print"], help="Only 'print' is supported")
    p.add_argument("--json", action="store_true", help="Emit JSON with provenance")
    p.add_argument(
        "--redact",
        default="true",
        choices=["true", "false"],
        help="Redact secrets (false requires BUILDBOX_ALLOW_UNREDACTED=1)",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildbox",
        description=(
            "Run a build job in a single ephemeral Docker container and reap\n"
            "any container an interrupted run left behind."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    add_global_args(parser)
    subparsers = parser.add_subparsers(dest="command_name", metavar="COMMAND")
    subparsers.required = True
    add_run_parser(subparsers)
    add_cleanup_parser(subparsers)
    add_doctor_parser(subparsers)
    add_config_parser(subparsers)
    return parser
