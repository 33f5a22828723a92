"""Diff the desired model set against the gateway and apply the changes.

The comparison is keyed on :class:`ModelKey` (model name, backend URL) and is
restricted to backends that are configured and were collected successfully.
Registrations owned by any other backend URL are invisible to the diff, so
models published by other tooling or by backends removed from configuration
are never touched.

Examples:
    >>> from modelprovisioner.models.discovery.collector import Inventory
    >>> plan = plan_changes(Inventory(configured={"http://x"}), [])
    >>> plan.additions, plan.removals
    ([], [])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from modelprovisioner.core.exceptions import GatewayAPIError
from modelprovisioner.models.discovery.capabilities import resolve_capabilities
from modelprovisioner.models.discovery.collector import Inventory
from modelprovisioner.models.discovery.types import CandidateEntry, ModelKey, RegisteredEntry
from modelprovisioner.models.providers.gateway import GatewayClient

logger = logging.getLogger(__name__)


@dataclass
class ReconcilePlan:
    """Changes needed to converge the gateway on the desired set."""

    additions: List[CandidateEntry] = field(default_factory=list)
    removals: List[RegisteredEntry] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.additions and not self.removals


@dataclass
class ReconcileReport:
    """Outcome of applying a :class:`ReconcilePlan`."""

    added: List[ModelKey] = field(default_factory=list)
    removed: List[ModelKey] = field(default_factory=list)
    failed_additions: List[ModelKey] = field(default_factory=list)
    failed_removals: List[ModelKey] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.failed_additions or self.failed_removals)

    def summary(self) -> str:
        return (
            f"added={len(self.added)} removed={len(self.removed)} "
            f"failed_additions={len(self.failed_additions)} "
            f"failed_removals={len(self.failed_removals)}"
        )


def plan_changes(inventory: Inventory, registered: Sequence[RegisteredEntry]) -> ReconcilePlan:
    """Compute additions and removals.

    Args:
        inventory: Desired state plus backend scope from the collector.
        registered: Every registration currently reported by the gateway.

    Returns:
        A plan with additions and removals sorted by identity key.
    """
    scope = inventory.comparable

    current: Dict[ModelKey, RegisteredEntry] = {}
    for entry in registered:
        if entry.key.api_base not in scope:
            continue
        if entry.key in current:
            logger.warning("Gateway holds duplicate registrations for %s", entry.key)
            continue
        current[entry.key] = entry

    desired: Dict[ModelKey, CandidateEntry] = {}
    for candidate in inventory.candidates:
        if candidate.key.api_base in scope:
            desired.setdefault(candidate.key, candidate)

    additions = [desired[key] for key in sorted(desired.keys() - current.keys())]
    removals = [current[key] for key in sorted(current.keys() - desired.keys())]
    return ReconcilePlan(additions=additions, removals=removals)


class Reconciler:
    """Apply reconciliation plans through the gateway client.

    Each change is attempted exactly once; a failed change is logged and left
    for the next cycle, which recomputes both sets from scratch.
    """

    def __init__(self, gateway: GatewayClient) -> None:
        self._gateway = gateway

    def reconcile(
        self, inventory: Inventory, registered: Sequence[RegisteredEntry]
    ) -> ReconcileReport:
        """Plan against *registered* and apply every resulting change."""
        plan = plan_changes(inventory, registered)
        if plan.empty:
            logger.debug("Gateway is in sync; nothing to do")
        return self.apply(plan, inventory)

    def apply(self, plan: ReconcilePlan, inventory: Inventory) -> ReconcileReport:
        report = ReconcileReport()

        for candidate in plan.additions:
            entry = self._discover(candidate, inventory)
            logger.info("Adding model %s from %s", entry.model_name, entry.api_base)
            try:
                self._gateway.add_model(entry)
            except GatewayAPIError as exc:
                logger.warning("Error adding model %s: %s", entry.model_name, exc)
                report.failed_additions.append(entry.key)
            else:
                report.added.append(entry.key)

        for registered in plan.removals:
            if registered.model_id is None:
                logger.warning(
                    "Cannot remove model %s from %s: gateway reported no ID",
                    registered.model_name,
                    registered.api_base,
                )
                report.failed_removals.append(registered.key)
                continue
            logger.info(
                "Removing model %s from %s with ID %s",
                registered.model_name,
                registered.api_base,
                registered.model_id,
            )
            try:
                self._gateway.delete_model(registered.model_id)
            except GatewayAPIError as exc:
                logger.warning(
                    "Error removing model %s with ID %s: %s",
                    registered.model_name,
                    registered.model_id,
                    exc,
                )
                report.failed_removals.append(registered.key)
            else:
                report.removed.append(registered.key)

        return report

    @staticmethod
    def _discover(candidate: CandidateEntry, inventory: Inventory) -> CandidateEntry:
        handle = inventory.backends.get(candidate.api_base)
        if handle is None or not handle.policy.discovery:
            return candidate
        capabilities = resolve_capabilities(
            candidate.model_name,
            handle.policy,
            newly_added=True,
            prober=handle.client,
        )
        return candidate.with_capabilities(capabilities)


__all__ = ["ReconcilePlan", "ReconcileReport", "Reconciler", "plan_changes"]
