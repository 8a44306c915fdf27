"""Platform dispatch for container run builders."""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol, Type

from ...config.models import RunParameters
from ...exceptions import UnsupportedPlatformError
from ..environment import (
    EnvironmentProvider,
    StringKeyValuePair,
    build_env_argument_string,
)
from .invocation import RunInvocation
from .linux import LinuxCommandBuilder
from .windows import WindowsCommandBuilder

__all__ = ["BUILDERS", "CommandBuilder", "select_builder"]


class CommandBuilder(Protocol):
    platform: str

    def build(
        self,
        image: str,
        parameters: RunParameters,
        override_command: str = "",
        additional_variables: Optional[Iterable[StringKeyValuePair]] = None,
        entrypoint_bash: bool = False,
    ) -> RunInvocation: ...


BUILDERS: Dict[str, Type] = {
    LinuxCommandBuilder.platform: LinuxCommandBuilder,
    WindowsCommandBuilder.platform: WindowsCommandBuilder,
}


def select_builder(
    platform: str,
    env_provider: EnvironmentProvider = build_env_argument_string,
) -> CommandBuilder:
    """Return the builder for ``platform`` or raise before anything is built."""
    try:
        builder_cls = BUILDERS[platform]
    except KeyError:
        raise UnsupportedPlatformError(platform) from None
    return builder_cls(env_provider)
