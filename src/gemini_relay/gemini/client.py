"""Client for the Gemini streamGenerateContent endpoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog

from gemini_relay.config import Settings
from gemini_relay.errors import UpstreamError
from gemini_relay.gemini.models import GenerateContentRequest

logger = structlog.get_logger()


class GeminiClient:
    """Async client for Gemini's streaming generation API.

    One ``httpx.AsyncClient`` is shared by all requests and created lazily;
    call ``close()`` on shutdown to release its connection pool.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = settings.gemini_api_key
        self._model = settings.gemini_model
        self._timeout = settings.gemini_timeout
        self._url = (
            f"{settings.gemini_api_base.rstrip('/')}"
            f"/models/{settings.gemini_model}:streamGenerateContent"
        )
        # Tests inject httpx.MockTransport here
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def stream_url(self) -> str:
        return self._url

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._http_client

    @asynccontextmanager
    async def stream_generate(self, prompt: str) -> AsyncIterator[httpx.Response]:
        """Open a streaming generation call for a single user prompt.

        Yields the upstream response with its body still unread. The
        response is closed when the block exits, whichever way it exits.

        Raises:
            UpstreamError: Gemini answered with a non-2xx status. The raw
                error body is logged and kept on the exception.
            httpx.HTTPError: the request could not be sent.
        """
        client = await self._get_http_client()
        payload = GenerateContentRequest.from_prompt(prompt).model_dump(exclude_none=True)

        logger.info(
            "gemini_stream_start",
            model=self._model,
            prompt_length=len(prompt),
        )

        async with client.stream(
            "POST",
            self._url,
            params={"key": self._api_key},
            json=payload,
        ) as response:
            if not response.is_success:
                await response.aread()
                error_body = response.text
                logger.error(
                    "gemini_api_error",
                    model=self._model,
                    status=response.status_code,
                    body=error_body,
                )
                raise UpstreamError(response.status_code, error_body)
            yield response

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
