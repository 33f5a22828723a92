"""Configuration system for the model provisioner.

The configuration document is reloaded every cycle; runtime settings are read
once at process start.
"""

from .exceptions import ConfigError
from .loader import load_config, load_runtime_settings, load_yaml_file, resolve_env_vars
from .schema import (
    BackendConfig,
    GatewayConfig,
    OverrideRule,
    ProvisionerConfig,
    RuntimeSettings,
    normalize_url,
)

__all__ = [
    "ConfigError",
    "BackendConfig",
    "GatewayConfig",
    "OverrideRule",
    "ProvisionerConfig",
    "RuntimeSettings",
    "load_config",
    "load_runtime_settings",
    "load_yaml_file",
    "normalize_url",
    "resolve_env_vars",
]
