# docmirror Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from docmirror.config.defaults import DEFAULT_CONFIG, generate_default_config, get_default_config
from docmirror.config.loader import (
    CONFIG_ENV_VAR,
    ensure_config_exists,
    get_config_path,
    load_config,
    save_config,
    validate_config_file,
)
from docmirror.config.schema import (
    MirrorConfig,
    MirrorSettings,
    OutputConfig,
    SchedulerConfig,
    SourceConfig,
)

__all__ = [
    # Schema
    "MirrorConfig",
    "SourceConfig",
    "MirrorSettings",
    "SchedulerConfig",
    "OutputConfig",
    # Loader
    "CONFIG_ENV_VAR",
    "load_config",
    "save_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "get_default_config",
    "generate_default_config",
]
