"""Client for the LiteLLM gateway's model management API."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from modelprovisioner.core.config.schema import DEFAULT_REQUEST_TIMEOUT, normalize_url
from modelprovisioner.core.exceptions import GatewayAPIError
from modelprovisioner.core.utils.logging import obfuscate_key
from modelprovisioner.models.discovery.types import CandidateEntry, RegisteredEntry

logger = logging.getLogger(__name__)


class GatewayClient:
    """List, add and delete model registrations on the gateway.

    Every call is a single attempt; a failure raises :class:`GatewayAPIError`
    and the caller decides whether it is fatal.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = normalize_url(base_url)
        self.timeout = timeout
        self._api_key = api_key
        self._transport = transport

    def _request(
        self, operation: str, method: str, path: str, payload: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.debug(
            "Gateway %s: URL=%s, Method=%s, Authorization=Bearer %s",
            operation,
            url,
            method,
            obfuscate_key(self._api_key),
        )
        headers = {"Authorization": f"Bearer {self._api_key}"}
        content = None
        if payload is not None:
            try:
                content = json.dumps(payload)
            except (TypeError, ValueError) as exc:
                raise GatewayAPIError(
                    operation=operation, reason=f"payload is not JSON-serializable: {exc}"
                ) from exc
            headers["Content-Type"] = "application/json"

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport, headers=headers) as client:
                resp = client.request(method, url, content=content)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise GatewayAPIError(operation=operation, reason=str(exc) or type(exc).__name__) from exc

        logger.debug("Gateway %s response: Status=%d, Body=%s", operation, resp.status_code, resp.text)
        if resp.status_code != 200:
            raise GatewayAPIError(
                operation=operation, reason=resp.text, status_code=resp.status_code
            )
        return resp

    def list_models(self) -> List[RegisteredEntry]:
        """Return every registration the gateway reports via ``/model/info``."""
        resp = self._request("list", "GET", "/model/info")
        try:
            data = resp.json().get("data")
            if data is None:
                data = []
            entries = [RegisteredEntry.from_payload(item) for item in data]
        except (ValueError, AttributeError, TypeError) as exc:
            raise GatewayAPIError(operation="list", reason=f"malformed model list: {exc}") from exc

        for entry in entries:
            logger.debug("Current model: %s from %s", entry.model_name, entry.api_base)
        return entries

    def add_model(self, entry: CandidateEntry) -> None:
        """Register *entry* via ``/model/new``."""
        self._request("add", "POST", "/model/new", entry.to_payload())

    def delete_model(self, model_id: str) -> None:
        """Delete the registration with gateway identifier *model_id*."""
        self._request("delete", "POST", "/model/delete", {"id": model_id})


__all__ = ["GatewayClient"]
