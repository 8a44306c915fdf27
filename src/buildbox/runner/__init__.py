"""Container runner: identity tracking, process execution, docker builders."""

from .identity import container_id_file_path
from .process import ExecOptions, ProcessRunner, SubprocessRunner

__all__ = [
    "ExecOptions",
    "ProcessRunner",
    "SubprocessRunner",
    "container_id_file_path",
]
