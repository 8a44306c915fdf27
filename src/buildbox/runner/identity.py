"""Container identity (cidfile) location."""

from __future__ import annotations

from pathlib import Path

from ..config.models import RunnerContext

__all__ = ["container_id_file_path"]


def container_id_file_path(context: RunnerContext) -> Path:
    """
    Return the ``--cidfile`` path for ``context``.

    Docker writes the started container's id here. The path only depends on
    the temporary directory and run identifier, so repeated calls during the
    same run agree on it and cleanup can be re-entered safely.
    """
    return Path(context.runner_temporary_path) / f"container_{context.run_identifier}"
