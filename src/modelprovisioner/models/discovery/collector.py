"""Inventory collection across configured backends.

The collector turns the configured backends into the desired model set for one
cycle. Failures are contained per backend: a backend whose patterns do not
compile or whose inventory cannot be fetched contributes no candidates and is
reported as *unavailable*, which keeps its existing gateway registrations out of
the removal diff. A transient outage must never look like "this backend now
serves zero models".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from modelprovisioner.core.config.schema import BackendConfig
from modelprovisioner.core.credentials import CredentialStore
from modelprovisioner.core.exceptions import BackendAPIError, InvalidPatternError
from modelprovisioner.models.discovery.capabilities import CapabilityPolicy
from modelprovisioner.models.discovery.types import CandidateEntry, ModelKey
from modelprovisioner.models.providers.backend import BackendClient

logger = logging.getLogger(__name__)

BackendClientFactory = Callable[[str, str], BackendClient]


@dataclass(frozen=True)
class BackendHandle:
    """Per-cycle view of a reachable backend used for discovery at add time."""

    config: BackendConfig
    policy: CapabilityPolicy
    client: BackendClient


@dataclass
class Inventory:
    """Result of one collection pass.

    Attributes:
        candidates: Desired entries with static capabilities resolved.
        configured: URLs of every configured backend (the in-scope set).
        unavailable: Configured URLs skipped this cycle; their registrations
            are neither compared nor removed.
        backends: Handles for backends that were collected successfully.
    """

    candidates: List[CandidateEntry] = field(default_factory=list)
    configured: Set[str] = field(default_factory=set)
    unavailable: Set[str] = field(default_factory=set)
    backends: Dict[str, BackendHandle] = field(default_factory=dict)

    @property
    def comparable(self) -> Set[str]:
        """Backend URLs whose registrations take part in the diff."""
        return self.configured - self.unavailable


class InventoryCollector:
    """Fetch and filter model inventories from every configured backend."""

    def __init__(
        self,
        credentials: CredentialStore,
        client_factory: Optional[BackendClientFactory] = None,
    ) -> None:
        self._credentials = credentials
        self._client_factory = client_factory or (lambda url, key: BackendClient(url, key))

    def collect(self, backends: Iterable[BackendConfig]) -> Inventory:
        """Build the desired model set for *backends*."""
        inventory = Inventory()
        seen: Set[ModelKey] = set()

        for backend in backends:
            inventory.configured.add(backend.url)
            try:
                handle = self._collect_backend(backend, inventory, seen)
            except InvalidPatternError as exc:
                logger.warning("Skipping backend %s: %s", backend.name, exc)
                inventory.unavailable.add(backend.url)
                continue
            except BackendAPIError as exc:
                logger.warning("Error getting models from %s: %s", backend.name, exc)
                inventory.unavailable.add(backend.url)
                continue
            inventory.backends.setdefault(backend.url, handle)

        return inventory

    def _collect_backend(
        self, backend: BackendConfig, inventory: Inventory, seen: Set[ModelKey]
    ) -> BackendHandle:
        policy = CapabilityPolicy.from_backend(backend)
        api_key = self._credentials.get_backend_key(backend.name)
        client = self._client_factory(backend.url, api_key)
        models = client.list_models()

        admitted = 0
        for model in models:
            if not policy.admits(model):
                continue
            entry = CandidateEntry(
                model_name=model,
                api_base=backend.url,
                api_key=api_key,
                provider_model=f"{backend.provider}/{model}",
                backend=backend.name,
                capabilities=policy.static_capabilities(model),
            )
            if entry.key in seen:
                logger.debug("Ignoring duplicate model %s", entry.key)
                continue
            seen.add(entry.key)
            inventory.candidates.append(entry)
            admitted += 1

        logger.debug(
            "Backend %s: %d models reported, %d admitted", backend.name, len(models), admitted
        )
        return BackendHandle(config=backend, policy=policy, client=client)


__all__ = ["BackendHandle", "Inventory", "InventoryCollector"]
