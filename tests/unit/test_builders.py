import pytest

from buildbox.exceptions import UnsupportedPlatformError
from buildbox.runner.docker.builders import select_builder
from buildbox.runner.docker.linux import LinuxCommandBuilder
from buildbox.runner.docker.windows import WindowsCommandBuilder


def test_selects_builder_per_platform() -> None:
    assert isinstance(select_builder("linux"), LinuxCommandBuilder)
    assert isinstance(select_builder("win32"), WindowsCommandBuilder)


@pytest.mark.parametrize("platform", ["darwin", "freebsd13", "aix"])
def test_unsupported_platform_is_rejected(platform: str) -> None:
    with pytest.raises(UnsupportedPlatformError) as excinfo:
        select_builder(platform)

    assert excinfo.value.platform == platform
    assert platform in str(excinfo.value)


def test_selected_builder_uses_given_env_provider() -> None:
    def provider(params, extra) -> str:
        return ""

    assert select_builder("linux", provider).env_provider is provider
