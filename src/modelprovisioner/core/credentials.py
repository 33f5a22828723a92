"""Credential lookup for backends and the gateway.

Secrets are mounted as one file per name inside a secrets directory:

    /etc/secrets/
      litellm        # gateway master key
      openrouter     # backend "openrouter"

Files are re-read on every lookup so rotated secrets take effect on the next
cycle without a restart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from modelprovisioner.core.config.schema import DEFAULT_SECRETS_DIR
from modelprovisioner.core.exceptions import ProvisionerError

logger = logging.getLogger(__name__)

GATEWAY_CREDENTIAL_NAME = "litellm"
BLANK_CREDENTIAL = "BLANK"


class CredentialError(ProvisionerError):
    """Base class for credential related failures."""


class CredentialNotFoundError(CredentialError):
    """Raised when a credential cannot be located."""


@dataclass(slots=True)
class CredentialStore:
    """Read secrets from ``<secrets_dir>/<name>``."""

    secrets_dir: Path = field(default_factory=lambda: DEFAULT_SECRETS_DIR)

    def __post_init__(self) -> None:
        if not isinstance(self.secrets_dir, Path):
            self.secrets_dir = Path(self.secrets_dir)

    def get(self, name: str) -> str:
        """Return the secret stored under *name* or raise if missing."""
        if not name or "/" in name or name in {".", ".."}:
            raise CredentialNotFoundError(f"Invalid credential name {name!r}")

        path = self.secrets_dir / name
        try:
            value = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CredentialNotFoundError(f"No credential stored for '{name}' at {path}") from exc
        except OSError as exc:
            raise CredentialNotFoundError(f"Cannot read credential for '{name}': {exc}") from exc

        cleaned = value.strip()
        if not cleaned:
            raise CredentialNotFoundError(f"Credential for '{name}' is empty")
        return cleaned

    def get_gateway_key(self) -> str:
        """Return the gateway master key; there is no fallback."""
        return self.get(GATEWAY_CREDENTIAL_NAME)

    def get_backend_key(self, backend: str) -> str:
        """Return the key for *backend*, or ``BLANK`` when none is stored.

        Keyless backends (local inference servers) simply have no secret file,
        so a missing credential never takes a backend out of the cycle.
        """
        try:
            return self.get(backend)
        except CredentialNotFoundError as exc:
            logger.debug("API key not found for backend %s, using %s: %s", backend, BLANK_CREDENTIAL, exc)
            return BLANK_CREDENTIAL


__all__ = [
    "BLANK_CREDENTIAL",
    "GATEWAY_CREDENTIAL_NAME",
    "CredentialError",
    "CredentialNotFoundError",
    "CredentialStore",
]
