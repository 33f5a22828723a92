"""Client for OpenAI-compatible inference backends.

Only two endpoints are used: ``GET /models`` for the inventory and
``POST /chat/completions`` for capability probes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from modelprovisioner.core.config.schema import DEFAULT_REQUEST_TIMEOUT, normalize_url
from modelprovisioner.core.exceptions import BackendAPIError
from modelprovisioner.core.utils.logging import obfuscate_key

logger = logging.getLogger(__name__)

# 1x1 transparent PNG.
PROBE_IMAGE = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z/C/HgAGgwJ/lK3Q6wAAAABJRU5ErkJggg=="
)

TOOL_PROBE_TOOLS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "get_weather",
            "parameters": {
                "type": "object",
                "properties": {"location": {"type": "string"}},
            },
        },
    }
]


class BackendClient:
    """Thin wrapper over one backend's REST API.

    Attributes:
        base_url: Backend base URL without trailing slash.
        timeout: Per-request timeout in seconds.
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

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

    def list_models(self) -> List[str]:
        """Return the identifiers the backend currently serves.

        Raises:
            BackendAPIError: On transport failure, timeout, non-200 status or
                a body that is not ``{"data": [{"id": ...}, ...]}``.
        """
        url = f"{self.base_url}/models"
        logger.debug(
            "Fetching models: URL=%s, Method=GET, Authorization=Bearer %s",
            url,
            obfuscate_key(self._api_key),
        )
        try:
            with self._client() as client:
                resp = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise BackendAPIError(backend_url=self.base_url, reason=str(exc) or type(exc).__name__) from exc

        logger.debug("Response body from %s: %s", url, resp.text)
        if resp.status_code != 200:
            raise BackendAPIError(
                backend_url=self.base_url,
                reason=f"non-200 status {resp.status_code}: {resp.text}",
            )
        try:
            data = resp.json().get("data")
            models = [str(item["id"]) for item in data]
        except (ValueError, AttributeError, TypeError, KeyError) as exc:
            raise BackendAPIError(
                backend_url=self.base_url, reason=f"malformed model list: {exc}"
            ) from exc

        logger.debug("Fetched models from %s: %s", self.base_url, models)
        return models

    def _complete(self, body: Dict[str, Any]) -> Optional[httpx.Response]:
        url = f"{self.base_url}/chat/completions"
        try:
            with self._client() as client:
                return client.post(url, json=body)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Probe of %s for %s failed: %s", url, body.get("model"), exc)
            return None

    def probe_tool_use(self, model: str) -> bool:
        """Return True if *model* answers a tool-eliciting prompt with a tool call."""
        resp = self._complete(
            {
                "model": model,
                "messages": [{"role": "user", "content": "What is the weather?"}],
                "tools": TOOL_PROBE_TOOLS,
            }
        )
        if resp is None or resp.status_code != 200:
            return False
        try:
            message = resp.json()["choices"][0]["message"]
            tool_calls = message.get("tool_calls")
        except (ValueError, KeyError, IndexError, TypeError, AttributeError):
            return False
        return isinstance(tool_calls, list) and len(tool_calls) > 0

    def probe_vision(self, model: str) -> bool:
        """Return True if *model* accepts a request carrying an inline image."""
        resp = self._complete(
            {
                "model": model,
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": "Describe this image"},
                            {"type": "image_url", "image_url": {"url": PROBE_IMAGE}},
                        ],
                    }
                ],
            }
        )
        return resp is not None and resp.status_code == 200


__all__ = ["BackendClient", "PROBE_IMAGE", "TOOL_PROBE_TOOLS"]
