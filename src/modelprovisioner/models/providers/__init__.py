"""HTTP clients for inference backends and the gateway."""

from .backend import BackendClient  # noqa: F401
from .gateway import GatewayClient  # noqa: F401

__all__ = ["BackendClient", "GatewayClient"]
