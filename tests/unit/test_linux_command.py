from pathlib import Path
from typing import Any

import pytest

from buildbox.config.models import RunParameters
from buildbox.runner.docker.linux import (
    DEFAULT_ENTRYPOINT,
    LinuxCommandBuilder,
    select_shell,
)


def _params(tmp_path: Path, **overrides: Any) -> RunParameters:
    values: dict[str, Any] = dict(
        workspace="/home/runner/work/game",
        action_folder="/opt/action/dist",
        docker_workspace_path="/github/workspace",
        docker_cpu_limit="2",
        docker_memory_limit="4g",
        runner_temporary_path=str(tmp_path),
        run_identifier="run-1",
    )
    values.update(overrides)
    return RunParameters(**values)


def _volumes(args: tuple[str, ...]) -> list[str]:
    return [args[i + 1] for i, a in enumerate(args) if a == "--volume"]


def test_default_linux_run(tmp_path: Path) -> None:
    invocation = LinuxCommandBuilder().build("unityci/editor:2022", _params(tmp_path))
    args = invocation.args

    assert args[:2] == ("docker", "run")
    assert "--cpus=2" in args
    assert "--memory=4g" in args
    assert "--rm" in args
    assert "SSH_AUTH_SOCK" not in invocation.command_line
    assert "GIT_PRIVATE_TOKEN" not in invocation.command_line
    assert args[-4:] == ("unityci/editor:2022", "/bin/bash", "-c", DEFAULT_ENTRYPOINT)


def test_identical_inputs_give_identical_command(tmp_path: Path) -> None:
    builder = LinuxCommandBuilder()
    params = _params(tmp_path, git_private_token="tok", ssh_agent="/tmp/agent.sock")

    first = builder.build("img", params, "make", [("A", "1")], True)
    second = builder.build("img", params, "make", [("A", "1")], True)

    assert first.command_line == second.command_line
    assert first.args == second.args


def test_cidfile_points_at_identity_path(tmp_path: Path) -> None:
    invocation = LinuxCommandBuilder().build("img", _params(tmp_path))

    expected = tmp_path / "container_run-1"
    assert f"--cidfile={expected}" in invocation.args


def test_auxiliary_directories_are_created(tmp_path: Path) -> None:
    (tmp_path / "_github_home").mkdir()

    LinuxCommandBuilder().build("img", _params(tmp_path))

    assert (tmp_path / "_github_home").is_dir()
    assert (tmp_path / "_github_workflow").is_dir()


def test_mounts_follow_fixed_container_paths(tmp_path: Path) -> None:
    volumes = _volumes(LinuxCommandBuilder().build("img", _params(tmp_path)).args)

    assert volumes == [
        f"{tmp_path / '_github_home'}:/root:z",
        f"{tmp_path / '_github_workflow'}:/github/workflow:z",
        "/home/runner/work/game:/github/workspace:z",
        "/opt/action/dist/default-build-script:/UnityBuilderAction:z",
        "/opt/action/dist/platforms/ubuntu/steps:/steps:z",
        "/opt/action/dist/platforms/ubuntu/entrypoint.sh:/entrypoint.sh:z",
        "/opt/action/dist/unity-config:/usr/share/unity3d/config/:z",
        "/opt/action/dist/BlankProject:/BlankProject:z",
    ]


def test_ssh_agent_without_keys_dir_uses_known_hosts(tmp_path: Path) -> None:
    invocation = LinuxCommandBuilder().build(
        "img", _params(tmp_path, ssh_agent="/tmp/ssh-XYZ/agent.1")
    )
    volumes = _volumes(invocation.args)

    assert "SSH_AUTH_SOCK=/ssh-agent" in invocation.args
    assert "/tmp/ssh-XYZ/agent.1:/ssh-agent" in volumes
    assert "/home/runner/.ssh/known_hosts:/root/.ssh/known_hosts:ro" in volumes
    assert not any(v.endswith(":/root/.ssh:ro") for v in volumes)


def test_public_keys_dir_takes_precedence_over_known_hosts(tmp_path: Path) -> None:
    invocation = LinuxCommandBuilder().build(
        "img",
        _params(
            tmp_path,
            ssh_agent="/tmp/agent.sock",
            ssh_public_keys_directory_path="/home/runner/keys",
        ),
    )
    volumes = _volumes(invocation.args)

    assert "/home/runner/keys:/root/.ssh:ro" in volumes
    assert not any("known_hosts" in v for v in volumes)


def test_public_keys_dir_alone_does_not_forward_agent(tmp_path: Path) -> None:
    invocation = LinuxCommandBuilder().build(
        "img", _params(tmp_path, ssh_public_keys_directory_path="/keys")
    )

    assert "/keys:/root/.ssh:ro" in _volumes(invocation.args)
    assert "SSH_AUTH_SOCK" not in invocation.command_line


def test_private_token_is_only_added_when_set(tmp_path: Path) -> None:
    with_token = LinuxCommandBuilder().build(
        "img", _params(tmp_path, git_private_token="s3cr3t")
    )
    empty_token = LinuxCommandBuilder().build(
        "img", _params(tmp_path, git_private_token="")
    )

    assert "GIT_PRIVATE_TOKEN=s3cr3t" in with_token.args
    assert "GIT_PRIVATE_TOKEN" not in empty_token.command_line


def test_entrypoint_override_passes_command_to_shell_entrypoint(
    tmp_path: Path,
) -> None:
    invocation = LinuxCommandBuilder().build(
        "img", _params(tmp_path), override_command="echo hi", entrypoint_bash=True
    )
    args = invocation.args

    idx = args.index("--entrypoint")
    assert args[idx + 1] == "/bin/bash"
    assert args[-3:] == ("img", "-c", "echo hi")


def test_override_command_without_entrypoint_override(tmp_path: Path) -> None:
    invocation = LinuxCommandBuilder().build(
        "img", _params(tmp_path), override_command="ls /steps"
    )

    assert "--entrypoint" not in invocation.args
    assert invocation.args[-4:] == ("img", "/bin/bash", "-c", "ls /steps")


@pytest.mark.parametrize(
    "image, shell",
    [
        ("alpine", "/bin/sh"),
        ("alpine:3.19", "/bin/sh"),
        ("ubuntu:22.04", "/bin/bash"),
        ("unityci/editor:ubuntu-2022.3.0f1-base-3", "/bin/bash"),
        ("myorg/alpine", "/bin/bash"),
    ],
)
def test_select_shell(image: str, shell: str) -> None:
    assert select_shell(image) == shell


def test_alpine_uses_sh_for_entrypoint_override(tmp_path: Path) -> None:
    invocation = LinuxCommandBuilder().build(
        "alpine", _params(tmp_path), entrypoint_bash=True
    )

    idx = invocation.args.index("--entrypoint")
    assert invocation.args[idx + 1] == "/bin/sh"


def test_environment_fragment_is_inserted_verbatim(tmp_path: Path) -> None:
    seen: dict[str, Any] = {}

    def provider(params: RunParameters, extra: Any) -> str:
        seen["extra"] = list(extra)
        return '--env UNITY_SERIAL="AB CD" --env BUILD_TARGET'

    invocation = LinuxCommandBuilder(env_provider=provider).build(
        "img", _params(tmp_path), additional_variables=[("X", "1")]
    )
    args = invocation.args

    start = args.index("--rm") + 1
    assert args[start : start + 4] == (
        "--env",
        "UNITY_SERIAL=AB CD",
        "--env",
        "BUILD_TARGET",
    )
    assert seen["extra"] == [("X", "1")]


def test_default_environment_provider_renders_mapping_and_extras(
    tmp_path: Path,
) -> None:
    params = _params(tmp_path, environment={"UNITY_VERSION": "2022.3.0f1"})

    invocation = LinuxCommandBuilder().build(
        "img", params, additional_variables=[("NOTE", "two words")]
    )

    assert "UNITY_VERSION=2022.3.0f1" in invocation.args
    assert "NOTE=two words" in invocation.args
