"""Configuration loader module.

This module loads the configuration document from YAML, substitutes
``${VAR}`` placeholders from the environment, and validates the result into a
:class:`ProvisionerConfig`. It also reads the process knobs into
:class:`RuntimeSettings`.
"""

import logging
import os
import re
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .schema import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SECRETS_DIR,
    DEFAULT_SLEEP_INTERVAL,
    ProvisionerConfig,
    RuntimeSettings,
)

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")
_TRUTHY = {"1", "true", "yes", "on"}


def resolve_env_vars(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Replace ${VAR} patterns with environment variables.

    Dictionaries and lists are walked recursively; unknown variables resolve
    to an empty string.

    Args:
        value: Parsed configuration value
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Value with environment variables resolved
    """
    env = os.environ if environ is None else environ
    if isinstance(value, dict):
        return {key: resolve_env_vars(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_env_vars(item, env) for item in value]
    if isinstance(value, str) and "${" in value:
        return _ENV_PATTERN.sub(lambda match: env.get(match.group(1), ""), value)
    return value


def load_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary containing configuration from YAML

    Raises:
        ConfigError: If file is missing, cannot be read or parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration in {path} must be a mapping, got {type(data).__name__}"
        )
    return data


def load_config(
    path: Union[str, Path] = DEFAULT_CONFIG_PATH,
    environ: Optional[Mapping[str, str]] = None,
) -> ProvisionerConfig:
    """Load and validate the configuration document.

    Args:
        path: Location of the YAML document
        environ: Environment used for ``${VAR}`` substitution

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the document cannot be loaded or fails validation
    """
    raw = resolve_env_vars(load_yaml_file(path), environ)
    try:
        config = ProvisionerConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    url_counts = Counter(backend.url for backend in config.backends)
    for url, count in url_counts.items():
        if count > 1:
            logger.warning("%d backends share URL %s; their models will collide", count, url)
    return config


def _parse_bool(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


def _parse_positive_float(name: str, value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError:
        logger.warning("Invalid %s=%r; using default %s", name, value, default)
        return default
    if parsed <= 0:
        logger.warning("Non-positive %s=%r; using default %s", name, value, default)
        return default
    return parsed


def load_runtime_settings(environ: Optional[Mapping[str, str]] = None) -> RuntimeSettings:
    """Read process knobs from the environment.

    Recognized variables: ``SLEEP_INTERVAL``, ``DEBUG``, ``CONFIG_PATH``,
    ``SECRETS_DIR`` and ``REQUEST_TIMEOUT``. Invalid numeric values fall back
    to their defaults instead of preventing startup.
    """
    env = os.environ if environ is None else environ
    return RuntimeSettings(
        sleep_interval=_parse_positive_float(
            "SLEEP_INTERVAL", env.get("SLEEP_INTERVAL"), DEFAULT_SLEEP_INTERVAL
        ),
        debug=_parse_bool(env.get("DEBUG")),
        config_path=Path(env.get("CONFIG_PATH") or DEFAULT_CONFIG_PATH),
        secrets_dir=Path(env.get("SECRETS_DIR") or DEFAULT_SECRETS_DIR),
        request_timeout=_parse_positive_float(
            "REQUEST_TIMEOUT", env.get("REQUEST_TIMEOUT"), DEFAULT_REQUEST_TIMEOUT
        ),
    )
