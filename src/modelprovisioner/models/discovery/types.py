"""Shared dataclasses for desired and registered gateway models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, NamedTuple, Optional

from modelprovisioner.core.config.schema import normalize_url

CapabilityMap = Dict[str, Any]


class ModelKey(NamedTuple):
    """Identity of a gateway model: the model name plus its owning backend URL."""

    model_name: str
    api_base: str

    @classmethod
    def of(cls, model_name: str, api_base: str) -> "ModelKey":
        return cls(model_name, normalize_url(api_base))

    def __str__(self) -> str:
        return f"{self.model_name}@{self.api_base}"


@dataclass(frozen=True)
class CandidateEntry:
    """A model registration that should exist on the gateway."""

    model_name: str
    api_base: str
    api_key: str
    provider_model: str
    backend: str
    capabilities: Mapping[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> ModelKey:
        return ModelKey.of(self.model_name, self.api_base)

    def with_capabilities(self, capabilities: Mapping[str, Any]) -> "CandidateEntry":
        """Return a copy carrying *capabilities* instead of the current map."""

        return replace(self, capabilities=dict(capabilities))

    def to_payload(self) -> Dict[str, Any]:
        """Render the gateway add-model request body."""

        return {
            "model_name": self.model_name,
            "litellm_params": {
                "model": self.provider_model,
                "api_base": self.api_base,
                "api_key": self.api_key,
            },
            "model_info": dict(self.capabilities),
        }


@dataclass(frozen=True)
class RegisteredEntry:
    """A model registration reported by the gateway."""

    model_name: str
    api_base: str
    model_id: Optional[str] = None
    provider_model: Optional[str] = None
    model_info: Mapping[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> ModelKey:
        return ModelKey.of(self.model_name, self.api_base)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RegisteredEntry":
        """Build an entry from one element of the gateway's ``/model/info`` data."""

        params = payload.get("litellm_params") or {}
        info = payload.get("model_info") or {}
        if not isinstance(params, Mapping):
            params = {}
        if not isinstance(info, Mapping):
            info = {}
        raw_id = info.get("id")
        return cls(
            model_name=str(payload.get("model_name") or ""),
            api_base=normalize_url(str(params.get("api_base") or "")),
            model_id=str(raw_id) if raw_id not in (None, "") else None,
            provider_model=params.get("model"),
            model_info=dict(info),
        )


__all__ = ["CapabilityMap", "CandidateEntry", "ModelKey", "RegisteredEntry"]
