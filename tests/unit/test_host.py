import os
import sys
from pathlib import Path

import pytest

from buildbox.exceptions import UnsupportedPlatformError
from buildbox.host import HostContext, check_compatibility


def test_runner_context_falls_back_to_cwd_and_pid() -> None:
    host = HostContext(platform="linux", cwd="/srv/job", pid=812, environ={})

    context = host.runner_context()

    assert context.runner_temporary_path == "/srv/job"
    assert context.run_identifier == "812"


def test_runner_context_prefers_runner_environment() -> None:
    host = HostContext(
        platform="linux",
        cwd="/srv/job",
        pid=812,
        environ={"RUNNER_TEMP": "/runner/_temp", "GITHUB_ACTION": "__run_2"},
    )

    context = host.runner_context()

    assert context.runner_temporary_path == "/runner/_temp"
    assert context.run_identifier == "__run_2"


def test_empty_environment_values_fall_back() -> None:
    host = HostContext(
        platform="linux", cwd="/c", pid=1, environ={"RUNNER_TEMP": "", "GITHUB_ACTION": ""}
    )

    assert host.runner_context().runner_temporary_path == "/c"
    assert host.runner_context().run_identifier == "1"


def test_locality_and_workspace() -> None:
    local = HostContext(platform="linux", cwd="/src", pid=1, environ={})
    hosted = HostContext(
        platform="linux",
        cwd="/src",
        pid=1,
        environ={"RUNNER_WORKSPACE": "/w", "GITHUB_WORKSPACE": "/w/repo"},
    )

    assert local.is_running_locally is True
    assert local.workspace == "/src"
    assert hosted.is_running_locally is False
    assert hosted.workspace == "/w/repo"


def test_from_process_reads_current_interpreter() -> None:
    host = HostContext.from_process()

    assert host.platform == sys.platform
    assert host.pid == os.getpid()
    assert Path(host.cwd) == Path.cwd()


@pytest.mark.parametrize("platform", ["linux", "win32", "darwin"])
def test_supported_platforms_pass(platform: str) -> None:
    check_compatibility(HostContext(platform=platform, cwd="/", pid=1))


def test_other_platforms_are_rejected() -> None:
    with pytest.raises(UnsupportedPlatformError, match="sunos5"):
        check_compatibility(HostContext(platform="sunos5", cwd="/", pid=1))
