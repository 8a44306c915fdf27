"""Process execution boundary."""

from __future__ import annotations

import asyncio
import logging
import shlex
import sys
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Protocol, Sequence, Union

from ..exceptions import ProcessExitError, ProcessLaunchError

__all__ = ["ExecOptions", "ProcessRunner", "SubprocessRunner", "to_argv"]

logger = logging.getLogger(__name__)

Command = Union[str, Sequence[str]]
_CHUNK_SIZE = 64 * 1024
# Longest partial line held back waiting for a newline
_LINE_LIMIT = 1024 * 1024


@dataclass
class ExecOptions:
    """Options for a single process execution."""

    silent: bool = False
    ignore_return_code: bool = False
    cwd: Optional[str] = None
    env: Optional[Mapping[str, str]] = None
    # Called with every output line, silent or not
    listener: Optional[Callable[[str], None]] = None


class ProcessRunner(Protocol):
    async def execute(
        self,
        command: Command,
        args: Optional[Sequence[str]] = None,
        options: Optional[ExecOptions] = None,
    ) -> int: ...


def to_argv(command: Command, args: Optional[Sequence[str]] = None) -> List[str]:
    """Normalize a command line or token list plus extra args into argv."""
    if isinstance(command, str):
        argv = shlex.split(command)
    else:
        argv = [str(token) for token in command]
    argv.extend(str(a) for a in (args or ()))
    return argv


class SubprocessRunner:
    """Run processes with asyncio, merging stderr into stdout."""

    def __init__(self, stream=None) -> None:
        self._stream = stream

    async def execute(
        self,
        command: Command,
        args: Optional[Sequence[str]] = None,
        options: Optional[ExecOptions] = None,
    ) -> int:
        opts = options or ExecOptions()
        argv = to_argv(command, args)
        if not argv:
            raise ProcessLaunchError(argv, "empty command")

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=opts.cwd,
                env=dict(opts.env) if opts.env is not None else None,
            )
        except (FileNotFoundError, PermissionError, NotADirectoryError) as exc:
            raise ProcessLaunchError(argv, str(exc)) from exc

        assert proc.stdout is not None
        try:
            await self._pump(proc.stdout, opts)
        except BaseException:
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
            await proc.wait()
            raise

        exit_code = await proc.wait()
        logger.debug("%s exited with %d", argv[0], exit_code)
        if exit_code != 0 and not opts.ignore_return_code:
            raise ProcessExitError(argv, exit_code)
        return exit_code

    async def _pump(self, reader: asyncio.StreamReader, opts: ExecOptions) -> None:
        # Chunked reads; readline() gives up on lines longer than its limit
        pending = b""
        while True:
            chunk = await reader.read(_CHUNK_SIZE)
            if not chunk:
                break
            pending += chunk
            while True:
                newline = pending.find(b"\n")
                if newline < 0:
                    break
                self._emit(pending[: newline + 1], opts)
                pending = pending[newline + 1 :]
            if len(pending) >= _LINE_LIMIT:
                self._emit(pending, opts)
                pending = b""
        if pending:
            self._emit(pending, opts)

    def _emit(self, raw: bytes, opts: ExecOptions) -> None:
        line = raw.decode("utf-8", errors="replace")
        if not opts.silent:
            stream = self._stream or sys.stdout
            stream.write(line)
            stream.flush()
        if opts.listener is not None:
            opts.listener(line.rstrip("\r\n"))
