"""Capability resolution for backend models.

A model's capability map starts from its backend's ``model_info_defaults``.
The first override rule whose pattern matches the model identifier replaces
that map entirely. For backends with discovery enabled, capabilities still
missing after that are probed live, but only for models being added to the
gateway in the current cycle.

Examples:
    >>> from modelprovisioner.core.config import BackendConfig
    >>> backend = BackendConfig(
    ...     name="local",
    ...     url="http://localhost:11434/v1",
    ...     overrides=[
    ...         {"regex": "a.*", "capabilities": {"x": 1}},
    ...         {"regex": ".*", "capabilities": {"x": 2}},
    ...     ],
    ... )
    >>> CapabilityPolicy.from_backend(backend).static_capabilities("abc")
    {'x': 1}
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

from modelprovisioner.core.config.schema import BackendConfig
from modelprovisioner.core.exceptions import InvalidPatternError
from modelprovisioner.models.discovery.types import CapabilityMap

logger = logging.getLogger(__name__)

SUPPORTS_FUNCTION_CALLING = "supports_function_calling"
SUPPORTS_VISION = "supports_vision"


class CapabilityProber(Protocol):
    """Live capability checks against a backend's completion endpoint.

    Implementations return ``False`` for any failure; they never raise.
    """

    def probe_tool_use(self, model: str) -> bool: ...

    def probe_vision(self, model: str) -> bool: ...


@dataclass(frozen=True)
class CompiledOverride:
    """An override rule with its pattern compiled."""

    pattern: re.Pattern[str]
    capabilities: Mapping[str, Any]

    def matches(self, model: str) -> bool:
        return self.pattern.search(model) is not None


def _compile(backend: str, pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise InvalidPatternError(backend=backend, pattern=pattern, reason=str(exc)) from exc


@dataclass(frozen=True)
class CapabilityPolicy:
    """Precompiled filter and capability rules for one backend.

    Attributes:
        backend: Backend name, used in log messages.
        defaults: Capability map applied when no override matches.
        overrides: Override rules in configured order.
        model_filter: Inclusion pattern; ``None`` admits every model.
        discovery: Whether new models are probed for missing capabilities.
    """

    backend: str
    defaults: Mapping[str, Any] = field(default_factory=dict)
    overrides: Tuple[CompiledOverride, ...] = ()
    model_filter: Optional[re.Pattern[str]] = None
    discovery: bool = False

    @classmethod
    def from_backend(cls, backend: BackendConfig) -> "CapabilityPolicy":
        """Compile *backend*'s patterns.

        Raises:
            InvalidPatternError: If the filter or any override pattern is invalid.
        """
        model_filter = None
        if backend.filter_regex is not None:
            model_filter = _compile(backend.name, backend.filter_regex)
        overrides = tuple(
            CompiledOverride(
                pattern=_compile(backend.name, rule.regex),
                capabilities=dict(rule.capabilities),
            )
            for rule in backend.overrides
        )
        return cls(
            backend=backend.name,
            defaults=dict(backend.model_info_defaults),
            overrides=overrides,
            model_filter=model_filter,
            discovery=backend.discovery,
        )

    def admits(self, model: str) -> bool:
        """Return True if *model* passes the backend's inclusion filter."""
        return self.model_filter is None or self.model_filter.search(model) is not None

    def static_capabilities(self, model: str) -> CapabilityMap:
        """Defaults, replaced wholesale by the first matching override."""
        for override in self.overrides:
            if override.matches(model):
                return dict(override.capabilities)
        return dict(self.defaults)


def discover_capabilities(
    model: str, known: Mapping[str, Any], prober: CapabilityProber
) -> CapabilityMap:
    """Probe for discoverable capabilities that *known* does not already set.

    Returns:
        Only the probed keys; callers layer them over the static map.
    """
    probes = (
        (SUPPORTS_FUNCTION_CALLING, prober.probe_tool_use),
        (SUPPORTS_VISION, prober.probe_vision),
    )
    discovered: Dict[str, Any] = {}
    for capability, probe in probes:
        if capability in known:
            continue
        discovered[capability] = bool(probe(model))
        logger.debug("Discovered %s=%s for model %s", capability, discovered[capability], model)
    return discovered


def resolve_capabilities(
    model: str,
    policy: CapabilityPolicy,
    *,
    newly_added: bool,
    prober: Optional[CapabilityProber] = None,
) -> CapabilityMap:
    """Resolve the capability map for *model* on the backend described by *policy*.

    Args:
        model: Model identifier as reported by the backend.
        policy: The owning backend's compiled rules.
        newly_added: Whether the model is being added to the gateway this cycle.
            Already registered models are never probed.
        prober: Live prober for the owning backend; required for discovery.

    Returns:
        The resolved capability map.
    """
    capabilities = policy.static_capabilities(model)
    if policy.discovery and newly_added and prober is not None:
        capabilities.update(discover_capabilities(model, capabilities, prober))
    return capabilities


__all__ = [
    "SUPPORTS_FUNCTION_CALLING",
    "SUPPORTS_VISION",
    "CapabilityPolicy",
    "CapabilityProber",
    "CompiledOverride",
    "discover_capabilities",
    "resolve_capabilities",
]
