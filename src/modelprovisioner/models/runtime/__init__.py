"""Reconciliation engine and the cycle loop around it."""

from .cycle import CycleDriver  # noqa: F401
from .reconciler import ReconcilePlan, ReconcileReport, Reconciler, plan_changes  # noqa: F401

__all__ = ["CycleDriver", "ReconcilePlan", "ReconcileReport", "Reconciler", "plan_changes"]
