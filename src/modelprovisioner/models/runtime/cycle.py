"""The reconciliation loop.

One cycle loads configuration and the gateway credential, fetches the
gateway's registrations, collects backend inventories and applies the diff.
The first three stages are all-or-nothing: if any of them fails the cycle is
abandoned and retried after the sleep interval. Everything after that degrades
per backend or per entry.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from modelprovisioner.core.config.exceptions import ConfigError
from modelprovisioner.core.config.loader import load_config
from modelprovisioner.core.config.schema import ProvisionerConfig, RuntimeSettings
from modelprovisioner.core.credentials import CredentialError, CredentialStore
from modelprovisioner.core.exceptions import CycleAbortedError, GatewayAPIError
from modelprovisioner.models.discovery.collector import InventoryCollector
from modelprovisioner.models.providers.backend import BackendClient
from modelprovisioner.models.providers.gateway import GatewayClient
from modelprovisioner.models.runtime.reconciler import ReconcileReport, Reconciler

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], ProvisionerConfig]
GatewayFactory = Callable[[str, str], GatewayClient]
BackendFactory = Callable[[str, str], BackendClient]


class CycleDriver:
    """Run reconciliation cycles separated by a fixed sleep.

    Args:
        settings: Process knobs (interval, timeouts, file locations).
        config_loader: Returns a fresh configuration each call.
        credentials: Secret lookup for the gateway and backends.
        gateway_factory: Builds a gateway client from (url, api_key).
        backend_factory: Builds a backend client from (url, api_key).
        sleep: Blocking sleep used between cycles.
    """

    def __init__(
        self,
        settings: RuntimeSettings,
        *,
        config_loader: Optional[ConfigLoader] = None,
        credentials: Optional[CredentialStore] = None,
        gateway_factory: Optional[GatewayFactory] = None,
        backend_factory: Optional[BackendFactory] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self._load_config = config_loader or (lambda: load_config(settings.config_path))
        self._credentials = credentials or CredentialStore(settings.secrets_dir)
        self._gateway_factory = gateway_factory or (
            lambda url, key: GatewayClient(url, key, timeout=settings.request_timeout)
        )
        self._backend_factory = backend_factory or (
            lambda url, key: BackendClient(url, key, timeout=settings.request_timeout)
        )
        self._sleep = sleep

    def run_cycle(self) -> ReconcileReport:
        """Run one reconciliation pass.

        Raises:
            CycleAbortedError: If configuration, the gateway credential or the
                gateway's registration list cannot be obtained.
        """
        try:
            config = self._load_config()
        except ConfigError as exc:
            raise CycleAbortedError(stage="config", reason=str(exc)) from exc

        try:
            gateway_key = self._credentials.get_gateway_key()
        except CredentialError as exc:
            raise CycleAbortedError(stage="credentials", reason=str(exc)) from exc

        gateway = self._gateway_factory(config.gateway.url, gateway_key)
        try:
            registered = gateway.list_models()
        except GatewayAPIError as exc:
            raise CycleAbortedError(stage="gateway list", reason=str(exc)) from exc

        collector = InventoryCollector(self._credentials, client_factory=self._backend_factory)
        inventory = collector.collect(config.backends)
        report = Reconciler(gateway).reconcile(inventory, registered)

        if inventory.unavailable:
            logger.info(
                "Skipped %d unavailable backend(s) this cycle: %s",
                len(inventory.unavailable),
                ", ".join(sorted(inventory.unavailable)),
            )
        logger.info("Cycle complete: %s", report.summary())
        return report

    def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """Run cycles until the process is stopped (or *max_cycles* have run)."""
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            cycles += 1
            try:
                self.run_cycle()
            except CycleAbortedError as exc:
                logger.error("%s", exc)
            except Exception:
                logger.exception("Unexpected error during reconciliation cycle")
            self._sleep(self.settings.sleep_interval)


__all__ = ["CycleDriver"]
