from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

_logger = logging.getLogger(__name__)


class FlomoAPIError(Exception):
    """The flomo incoming-webhook request failed."""


class FlomoClient:
    """Single-request client for a flomo incoming-webhook URL. No retries."""

    def __init__(
        self,
        api_url: str,
        *,
        timeout_s: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_url:
            raise ValueError("Flomo API URL is not set")
        self.api_url = api_url
        self.timeout_s = timeout_s
        self._client = client

    async def write_note(self, content: str) -> dict[str, Any]:
        if not content:
            raise ValueError("invalid content")
        if self._client is not None:
            return await self._post(self._client, content)
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            return await self._post(client, content)

    async def _post(self, client: httpx.AsyncClient, content: str) -> dict[str, Any]:
        try:
            resp = await client.post(self.api_url, json={"content": content})
        except httpx.HTTPError as exc:
            raise FlomoAPIError(f"request failed: {exc}") from exc
        if resp.is_error:
            raise FlomoAPIError(f"request failed with status {resp.status_code} {resp.reason_phrase}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise FlomoAPIError("response is not valid JSON") from exc
        _logger.debug("flomo response: %s", payload)
        return payload if isinstance(payload, dict) else {}


__all__ = ["FlomoClient", "FlomoAPIError"]
