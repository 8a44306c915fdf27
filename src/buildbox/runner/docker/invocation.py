"""Container run invocation value."""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from typing import Tuple

__all__ = ["RunInvocation", "split_fragment"]


@dataclass(frozen=True)
class RunInvocation:
    """Ordered argv for ``docker run`` for one target platform."""

    args: Tuple[str, ...]
    platform: str

    @property
    def command_line(self) -> str:
        """Join the tokens once, using the quoting rules of the target shell."""
        if self.platform == "win32":
            return subprocess.list2cmdline(self.args)
        return shlex.join(self.args)


def split_fragment(fragment: str) -> Tuple[str, ...]:
    """Tokenize an opaque, shell-ready fragment without re-escaping it."""
    if not fragment or not fragment.strip():
        return ()
    return tuple(shlex.split(fragment))
