"""Conversation token acquisition for public agents."""

from __future__ import annotations

import logging

import httpx
import orjson

from convai.errors import TokenFetchError, InvalidArgumentError
from convai.config.endpoints import (
    TOKEN_PATH,
    TOKEN_RESPONSE_KEY,
    DEFAULT_API_ENDPOINT,
    TOKEN_QUERY_AGENT_ID,
    DEFAULT_TOKEN_TIMEOUT_S,
)

logger = logging.getLogger(__name__)


class TokenService:
    """Fetch short-lived conversation tokens from the convai REST API.

    No retries happen here; the session controller surfaces the first failure.
    Pass ``client`` to share a connection pool (or to inject a mock transport).
    """

    def __init__(
        self,
        api_endpoint: str | None = None,
        *,
        timeout_s: float = DEFAULT_TOKEN_TIMEOUT_S,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_endpoint = (api_endpoint or DEFAULT_API_ENDPOINT).rstrip("/")
        self._timeout_s = timeout_s
        self._client = client

    def token_url(self) -> str:
        return f"{self.api_endpoint}{TOKEN_PATH}"

    async def fetch_token(self, agent_id: str) -> str:
        agent_id = (agent_id or "").strip()
        if not agent_id:
            raise InvalidArgumentError("agent_id must be a non-empty string")

        response = await self._get(agent_id)

        if response.status_code != 200:
            body = response.text
            logger.warning("token request for agent %s failed: %s", agent_id, response.status_code)
            raise TokenFetchError(
                f"Failed to fetch token: {response.status_code} - {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            data = orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            raise TokenFetchError(
                "token response is not valid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        token = data.get(TOKEN_RESPONSE_KEY) if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise TokenFetchError(
                f"token response is missing '{TOKEN_RESPONSE_KEY}'",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info("token fetched for agent %s", agent_id)
        return token

    async def _get(self, agent_id: str) -> httpx.Response:
        params = {TOKEN_QUERY_AGENT_ID: agent_id}
        try:
            if self._client is not None:
                return await self._client.get(self.token_url(), params=params)
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                return await client.get(self.token_url(), params=params)
        except httpx.HTTPError as exc:
            raise TokenFetchError(f"token request failed: {exc}") from exc


__all__ = ["TokenService"]
