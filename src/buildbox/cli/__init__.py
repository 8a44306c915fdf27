#!/usr/bin/env python3
"""buildbox CLI entrypoint.

A thin shell that parses arguments and hands off to one coroutine per
command.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Final

from rich.console import Console

from . import commands, config_print, doctor
from .parser import create_parser

__all__: Final = ["main"]


async def _dispatch(console: Console, args: argparse.Namespace) -> int:
    cmd = args.command_name
    if cmd == "run":
        return await commands.run_build(console, args)
    if cmd == "cleanup":
        return await commands.run_cleanup(console, args)
    if cmd == "doctor":
        return await doctor.run_doctor(console, args)
    if cmd == "config":
        return await config_print.run_config_print(console, args)
    console.print(f"unknown command: {cmd}", style="red", markup=False)
    return 2


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = Console(stderr=True)

    rc = asyncio.run(_dispatch(console, args))
    sys.exit(int(rc))


if __name__ == "__main__":
    main()
