"""Default environment injection for build containers."""

from __future__ import annotations

import shlex
from typing import Callable, Iterable, Optional, Tuple

from ..config.models import RunParameters

__all__ = ["EnvironmentProvider", "StringKeyValuePair", "build_env_argument_string"]

StringKeyValuePair = Tuple[str, str]
EnvironmentProvider = Callable[[RunParameters, Iterable[StringKeyValuePair]], str]


def build_env_argument_string(
    parameters: RunParameters,
    additional_variables: Optional[Iterable[StringKeyValuePair]] = None,
) -> str:
    """Render ``--env`` flags for the parameter mapping plus extra pairs.

    The result is shell-ready; values are quoted here and nowhere else.
    """
    pairs = list(parameters.environment.items()) + list(additional_variables or ())
    parts = []
    for name, value in pairs:
        if value is None or value == "":
            continue
        parts.append(f"--env {name}={shlex.quote(str(value))}")
    return " ".join(parts)
