"""Desired-state primitives: entry types, capability rules and collection."""

from .capabilities import (  # noqa: F401
    CapabilityPolicy,
    CapabilityProber,
    discover_capabilities,
    resolve_capabilities,
)
from .collector import BackendHandle, Inventory, InventoryCollector  # noqa: F401
from .types import CandidateEntry, CapabilityMap, ModelKey, RegisteredEntry  # noqa: F401

__all__ = [
    "BackendHandle",
    "CandidateEntry",
    "CapabilityMap",
    "CapabilityPolicy",
    "CapabilityProber",
    "Inventory",
    "InventoryCollector",
    "ModelKey",
    "RegisteredEntry",
    "discover_capabilities",
    "resolve_capabilities",
]
