"""Configuration management utilities for buildbox."""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values

from ..exceptions import ValidationError
from .models import RunParameters

if TYPE_CHECKING:  # pragma: no cover - for type checking only
    from ..host import HostContext

__all__ = [
    "build_run_parameters",
    "deep_merge",
    "get_default_config",
    "load_config",
    "load_dotenv_config",
    "load_env_config",
    "load_global_config",
    "load_yaml_config",
    "merge_config",
]

logger = logging.getLogger(__name__)

_RUNNER_SECTION = "runner"
_PROJECT_CONFIG = "buildbox.yaml"
# env var -> (section or None for top level, key)
_ENV_TO_CONFIG_KEY = {
    "GIT_PRIVATE_TOKEN": (_RUNNER_SECTION, "git_private_token"),
    "BUILDBOX_CPU_LIMIT": (_RUNNER_SECTION, "cpu_limit"),
    "BUILDBOX_MEMORY_LIMIT": (_RUNNER_SECTION, "memory_limit"),
    "BUILDBOX_ISOLATION_MODE": (_RUNNER_SECTION, "isolation_mode"),
    "BUILDBOX_DOCKER_WORKSPACE_PATH": (_RUNNER_SECTION, "docker_workspace_path"),
    "BUILDBOX_SSH_AGENT": (_RUNNER_SECTION, "ssh_agent"),
    "BUILDBOX_SSH_PUBLIC_KEYS_DIRECTORY_PATH": (
        _RUNNER_SECTION,
        "ssh_public_keys_directory_path",
    ),
    "BUILDBOX_ACTION_FOLDER": (None, "action_folder"),
    "BUILDBOX_IMAGE": (None, "image"),
}


def merge_config(
    cli_args: Dict[str, Any],
    env_config: Dict[str, Any],
    dotenv_config: Dict[str, Any],
    file_config: Dict[str, Any],
    defaults: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge configuration dictionaries honoring precedence order."""
    merged = copy.deepcopy(defaults)
    deep_merge(merged, file_config)
    deep_merge(merged, dotenv_config)
    deep_merge(merged, env_config)
    cli_filtered = {key: value for key, value in cli_args.items() if value is not None}
    deep_merge(merged, cli_filtered)
    return merged


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> None:
    """Recursively merge ``overlay`` into ``base`` in place."""
    for key, value in overlay.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        elif isinstance(value, dict):
            base[key] = {k: v for k, v in value.items() if v is not None}
        elif value is not None:
            base[key] = value


def load_yaml_config(yaml_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from ``buildbox.yaml``.

    A missing default file yields an empty dict; an explicit path that does
    not exist or does not hold a mapping is a validation error.
    """
    path = yaml_path or Path(_PROJECT_CONFIG)
    if not path.exists():
        if yaml_path is not None:
            raise ValidationError(f"config file not found: {path}")
        return {}

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (yaml.YAMLError, OSError) as exc:
        raise ValidationError(f"failed to read config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValidationError(f"invalid config format (expected mapping): {path}")
    return data


def load_global_config() -> Dict[str, Any]:
    """Load user-level configuration from standard locations."""
    try:
        home = Path.home()
    except (OSError, RuntimeError):
        return {}

    for candidate in (
        home / ".buildbox" / "config.yaml",
        home / ".config" / "buildbox" / "config.yaml",
    ):
        try:
            if candidate.exists():
                with candidate.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle) or {}
                if isinstance(data, dict):
                    return data
        except (yaml.YAMLError, OSError) as exc:
            logger.warning("Failed to load %s: %s", candidate, exc)
            continue
    return {}


def load_dotenv_config(dotenv_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load supported variables from a ``.env`` file."""
    path = dotenv_path or Path(".env")
    if not path.exists():
        return {}

    return _config_from_mapping(dotenv_values(path))


def load_env_config(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Load supported variables from the process (or given) environment."""
    return _config_from_mapping(os.environ if environ is None else environ)


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of buildbox's default configuration."""
    return {
        "image": None,
        "workspace": None,
        "action_folder": Path("./dist"),
        "logs_dir": Path("./logs"),
        _RUNNER_SECTION: {
            "docker_workspace_path": "/github/workspace",
            "cpu_limit": str(os.cpu_count() or 1),
            "memory_limit": "4g",
            "isolation_mode": "default",
            "ssh_agent": None,
            "ssh_public_keys_directory_path": None,
            "git_private_token": None,
            "environment": {},
        },
        "logging": {
            "level": "INFO",
        },
    }


def load_config(
    cli_args: Optional[Dict[str, Any]] = None,
    yaml_path: Optional[Path] = None,
    dotenv_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Load configuration from defaults, files, environment, and CLI."""
    defaults = get_default_config()
    deep_merge(defaults, load_global_config())
    config = merge_config(
        cli_args=cli_args or {},
        env_config=load_env_config(environ),
        dotenv_config=load_dotenv_config(dotenv_path),
        file_config=load_yaml_config(yaml_path),
        defaults=defaults,
    )
    _apply_yaml_aliases(config)
    return config


def build_run_parameters(config: Dict[str, Any], host: "HostContext") -> RunParameters:
    """Resolve a merged config into :class:`RunParameters` for ``host``."""
    runner = config.get(_RUNNER_SECTION) or {}
    context = host.runner_context()

    workspace = config.get("workspace") or host.workspace
    action_folder = config.get("action_folder")
    if not action_folder:
        raise ValidationError("action_folder is required")
    action_folder_path = Path(str(action_folder))
    if not action_folder_path.is_absolute():
        action_folder_path = Path(host.cwd) / action_folder_path

    environment = runner.get("environment") or {}
    if not isinstance(environment, dict):
        raise ValidationError("runner.environment must be a mapping")

    params = RunParameters(
        workspace=str(workspace),
        action_folder=action_folder_path.as_posix(),
        docker_workspace_path=_required(runner, "docker_workspace_path"),
        docker_cpu_limit=_required(runner, "cpu_limit"),
        docker_memory_limit=_required(runner, "memory_limit"),
        runner_temporary_path=context.runner_temporary_path,
        run_identifier=context.run_identifier,
        ssh_agent=_optional(runner, "ssh_agent"),
        ssh_public_keys_directory_path=_optional(
            runner, "ssh_public_keys_directory_path"
        ),
        git_private_token=_optional(runner, "git_private_token"),
        docker_isolation_mode=_optional(runner, "isolation_mode") or "default",
        environment={str(k): str(v) for k, v in environment.items() if v is not None},
    )
    logger.debug(
        "Resolved run parameters: workspace=%s action_folder=%s run=%s",
        params.workspace,
        params.action_folder,
        params.run_identifier,
    )
    return params


def _required(section: Dict[str, Any], key: str) -> str:
    value = section.get(key)
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{_RUNNER_SECTION}.{key} is required")
    return str(value).strip()


def _optional(section: Dict[str, Any], key: str) -> Optional[str]:
    value = section.get(key)
    if value is None or str(value).strip() == "":
        return None
    return str(value)


def _apply_yaml_aliases(config: Dict[str, Any]) -> None:
    """Normalize legacy YAML keys to their canonical names in place."""

    def _set_runner(key: str, value: Any) -> None:
        config.setdefault(_RUNNER_SECTION, {})[key] = value

    if "container_cpu" in config:
        _set_runner("cpu_limit", config.pop("container_cpu"))
    if "container_memory" in config:
        _set_runner("memory_limit", config.pop("container_memory"))

    runner = config.get(_RUNNER_SECTION, {})
    if "container_cpu" in runner:
        _set_runner("cpu_limit", runner.pop("container_cpu"))
    if "container_memory" in runner:
        _set_runner("memory_limit", runner.pop("container_memory"))


def _config_from_mapping(values: Mapping[str, Optional[str]]) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    for env_key, (section, config_key) in _ENV_TO_CONFIG_KEY.items():
        value = values.get(env_key)
        if value is None or value == "":
            continue
        if section is None:
            config[config_key] = value
        else:
            config.setdefault(section, {})[config_key] = value
    return config
