"""Configuration schema module.

This module defines the data structures read from the provisioner's
configuration document and from the process environment. Pattern fields are
kept as plain strings: they are compiled per backend during collection so an
invalid pattern only takes its own backend out of a cycle.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

DEFAULT_CONFIG_PATH = Path("/etc/config/config.yaml")
DEFAULT_SECRETS_DIR = Path("/etc/secrets")
DEFAULT_SLEEP_INTERVAL = 60.0
DEFAULT_REQUEST_TIMEOUT = 10.0


def normalize_url(url: str) -> str:
    """Strip whitespace and trailing slashes so URLs compare equal."""
    return url.strip().rstrip("/")


class OverrideRule(BaseModel):
    """Force-set capabilities for models whose identifier matches ``regex``.

    Attributes:
        regex: Regular expression searched within the model identifier.
        capabilities: Capability map applied wholesale on match.
    """

    regex: str
    capabilities: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}


class BackendConfig(BaseModel):
    """A single inference server whose models are published to the gateway.

    Attributes:
        name: Backend name, also the name of its credential file.
        url: OpenAI-compatible base URL (``/models`` and ``/chat/completions``
            are appended).
        discovery: Probe newly added models for tool-use and vision support.
        filter_regex: Only model identifiers matching this pattern are published.
        overrides: Ordered override rules; the first match wins.
        model_info_defaults: Capability map applied to every model of the backend.
        provider: Provider prefix used for the gateway model string.
    """

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    discovery: bool = False
    filter_regex: Optional[str] = None
    overrides: List[OverrideRule] = Field(default_factory=list)
    model_info_defaults: Dict[str, Any] = Field(default_factory=dict)
    provider: str = "openai"

    model_config = {"extra": "ignore"}

    @field_validator("url")
    @classmethod
    def normalize_url_field(cls, value: str) -> str:
        return normalize_url(value)

    @field_validator("filter_regex")
    @classmethod
    def blank_filter_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("overrides", "model_info_defaults", mode="before")
    @classmethod
    def null_is_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name == "overrides" else {}
        return value


class GatewayConfig(BaseModel):
    """Location of the gateway management API."""

    url: str = Field(min_length=1)

    model_config = {"extra": "ignore"}

    @field_validator("url")
    @classmethod
    def normalize_url_field(cls, value: str) -> str:
        return normalize_url(value)


class ProvisionerConfig(BaseModel):
    """Root configuration document.

    The gateway section is spelled ``litellm`` in the YAML document.

    Attributes:
        gateway: Gateway management API location.
        backends: Backends in scope for reconciliation.
    """

    gateway: GatewayConfig = Field(alias="litellm")
    backends: List[BackendConfig] = Field(default_factory=list)

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("backends", mode="before")
    @classmethod
    def null_backends(cls, value: Any) -> Any:
        return [] if value is None else value


class RuntimeSettings(BaseModel):
    """Process-level knobs supplied through the environment.

    Attributes:
        sleep_interval: Seconds to wait between cycles.
        debug: Verbose logging toggle.
        config_path: Location of the configuration document.
        secrets_dir: Directory holding one credential file per name.
        request_timeout: Per-call HTTP timeout in seconds.
    """

    sleep_interval: float = Field(default=DEFAULT_SLEEP_INTERVAL, gt=0)
    debug: bool = False
    config_path: Path = DEFAULT_CONFIG_PATH
    secrets_dir: Path = DEFAULT_SECRETS_DIR
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
