"""Streaming client for the upstream chat completion endpoint.

The upstream response is handed back still open so the HTTP layer can
forward its bytes as they arrive. There is no retry: a failed completion
is surfaced to the caller with the upstream status and body.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx

from chat_playground.errors import UpstreamServiceError, ValidationError

logger = logging.getLogger(__name__)


class CompletionClient:
    """Opens streamed chat completions against an OpenAI-compatible API."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()

    async def open_stream(
        self,
        model: str,
        messages: Sequence[dict[str, Any]],
        temperature: float,
        max_tokens: int,
    ) -> httpx.Response:
        """Start a streamed completion.

        Args:
            model: Upstream model id.
            messages: Role/content messages to send.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.

        Returns:
            The open upstream response. The caller must close it.

        Raises:
            ValidationError: If no API key is configured.
            UpstreamServiceError: On network failure (502) or a non-2xx
                upstream status (same status, upstream body as details).
        """
        if not self.api_key:
            raise ValidationError("API key not configured")

        request = self._client().build_request(
            "POST",
            self.endpoint,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            json={
                "model": model,
                "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
                "temperature": temperature,
                "max_tokens": max_tokens,
                "stream": True,
            },
        )

        logger.info(f"Requesting completion: model={model}, messages={len(messages)}")

        try:
            response = await self._client().send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"Completion request failed: {e}")
            raise UpstreamServiceError("Failed to reach completion service", details=str(e)) from e

        if not response.is_success:
            try:
                body = (await response.aread()).decode("utf-8", errors="replace")
            finally:
                await response.aclose()
            logger.error(f"API Error: {response.status_code} {body[:500]}")
            raise UpstreamServiceError(
                f"API request failed: {response.status_code}",
                details=body,
                status_code=response.status_code,
            )

        return response


async def forward_stream(response: httpx.Response) -> AsyncIterator[bytes]:
    """Yield upstream bytes as they arrive, releasing the response at the end.

    Content encoding is decoded, since the bytes are re-sent without the
    upstream headers. Closing the generator early (client disconnect) also
    closes the upstream response. A read failure mid-stream is re-raised so
    the client connection aborts instead of ending like a complete answer.
    """
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as e:
        logger.error(f"Completion stream interrupted: {e}")
        raise
    finally:
        await response.aclose()
