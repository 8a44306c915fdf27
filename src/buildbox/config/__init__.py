"""Configuration models, loading, and defaults."""

from buildbox.config.models import RunnerContext, RunParameters
from buildbox.config.defaults import (
    build_run_parameters,
    deep_merge,
    get_default_config,
    load_config,
    load_dotenv_config,
    load_env_config,
    load_global_config,
    load_yaml_config,
    merge_config,
)

__all__ = [
    "RunnerContext",
    "RunParameters",
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
