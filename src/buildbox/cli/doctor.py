"""Environment diagnostics (doctor) for the buildbox CLI."""

from __future__ import annotations

import argparse
import os
from pathlib import Path

from rich.console import Console

from ..exceptions import BuildboxError
from ..host import CONTAINER_PLATFORMS, HostContext, check_compatibility
from ..runner.docker.daemon import check_docker_daemon

__all__ = ["run_doctor"]

Row = tuple[str, str, str, list[str]]

# Relative to the action folder, as mounted by the linux and windows builders
_ACTION_FOLDER_ENTRIES = (
    "default-build-script",
    "platforms/ubuntu/steps",
    "platforms/ubuntu/entrypoint.sh",
    "platforms/windows",
    "unity-config",
    "BlankProject",
)


def _print_rows(console: Console, rows: list[Row]) -> int:
    ok = all(status != "✗" for status, *_ in rows)
    for status, title, message, tries in rows:
        colour = {"✓": "green", "✗": "red"}.get(status, "cyan")
        label = status if status in ("✓", "✗") else "i"
        console.print(f"{label} {title}: {message}", style=colour, markup=False)
        if status == "✗" and tries:
            console.print("Try:")
            for t in tries[:3]:
                console.print(f"  • {t}", markup=False)
    return 0 if ok else 1


def _check_platform(host: HostContext, rows: list[Row]) -> None:
    try:
        check_compatibility(host)
    except BuildboxError as e:
        rows.append(("✗", "platform", str(e), ["use a linux or windows host"]))
        return
    if host.platform in CONTAINER_PLATFORMS:
        rows.append(("✓", "platform", host.platform, []))
    else:
        rows.append(
            ("i", "platform", f"{host.platform}: containers are not run here", [])
        )


def _check_docker(rows: list[Row]) -> None:
    valid, message = check_docker_daemon()
    rows.append(
        (
            "✓" if valid else "✗",
            "docker",
            "ok" if valid else (message or "cannot connect to docker daemon"),
            (
                ["start Docker", "check $DOCKER_HOST", "run: docker info"]
                if not valid
                else []
            ),
        )
    )


def _check_temp(host: HostContext, rows: list[Row]) -> None:
    td = Path(host.runner_context().runner_temporary_path)
    try:
        td.mkdir(parents=True, exist_ok=True)
        test = td / "_buildbox_doctor.tmp"
        test.write_text("ok", encoding="utf-8")
        test.unlink(missing_ok=True)
        rows.append(("✓", "temp", str(td), []))
    except OSError as e:  # pragma: no cover - platform dependent
        rows.append(
            ("✗", "temp", f"not writable: {e}", ["adjust permissions", "set RUNNER_TEMP"])
        )


def _check_action_folder(folder: Path, rows: list[Row]) -> None:
    if not folder.is_dir():
        rows.append(
            (
                "✗",
                "action_folder",
                f"not found: {folder}",
                ["pass --action-folder", "set BUILDBOX_ACTION_FOLDER"],
            )
        )
        return
    missing = [e for e in _ACTION_FOLDER_ENTRIES if not (folder / e).exists()]
    if missing:
        rows.append(("i", "action_folder", f"missing: {', '.join(missing)}", []))
    else:
        rows.append(("✓", "action_folder", str(folder), []))


async def run_doctor(console: Console, args: argparse.Namespace) -> int:
    host = HostContext.from_process()
    rows: list[Row] = []
    _check_platform(host, rows)
    _check_docker(rows)
    _check_temp(host, rows)
    folder = Path(
        getattr(args, "action_folder", None)
        or host.getenv("BUILDBOX_ACTION_FOLDER")
        or os.path.join(host.cwd, "dist")
    )
    _check_action_folder(folder, rows)
    if host.is_running_locally:
        rows.append(("i", "runner", "running locally (RUNNER_WORKSPACE unset)", []))
    return _print_rows(console, rows)
