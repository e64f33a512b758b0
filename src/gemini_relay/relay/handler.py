"""Prompt relay handler: validate, call Gemini, stream text back."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing

import httpx
import structlog
from aiohttp import web
from pydantic import ValidationError

from gemini_relay.config import Settings
from gemini_relay.errors import (
    InternalError,
    InvalidRequest,
    MethodNotAllowed,
    Misconfigured,
    PayloadTooLarge,
    RelayError,
    StreamTransportError,
)
from gemini_relay.gemini.client import GeminiClient
from gemini_relay.gemini.models import PromptRequest
from gemini_relay.relay.stream import JSONArrayStreamParser, iter_fragments

logger = structlog.get_logger()

STREAM_HEADERS = {
    "Content-Type": "text/plain; charset=utf-8",
    "Cache-Control": "no-cache",
}


class PromptRelayHandler:
    """aiohttp handler relaying one prompt to Gemini per request.

    Errors raised before the plain-text response is prepared become JSON
    error responses. Errors raised after that propagate, and aiohttp drops
    the connection mid-body.
    """

    def __init__(self, settings: Settings, client: GeminiClient) -> None:
        self._api_key = settings.gemini_api_key
        self._carry_partial = settings.stream_parser == "incremental"
        self._client = client

    async def handle(self, request: web.Request) -> web.StreamResponse:
        response = web.StreamResponse(status=200, headers=STREAM_HEADERS)
        try:
            prompt = await self._read_prompt(request)
            if not self._api_key:
                raise Misconfigured()

            async with self._client.stream_generate(prompt) as upstream:
                await response.prepare(request)
                fragment_count = 0
                async with aclosing(self._fragments(upstream)) as fragments:
                    async for fragment in fragments:
                        await response.write(fragment.encode("utf-8"))
                        fragment_count += 1
                await response.write_eof()

            logger.info("relay_stream_complete", fragments=fragment_count)
            return response

        except RelayError as exc:
            if response.prepared:
                raise
            logger.warning(
                "relay_request_rejected",
                status=exc.status,
                error=exc.message,
                method=request.method,
            )
            return exc.to_response()
        except Exception:
            if response.prepared:
                raise
            logger.exception("relay_internal_error")
            return InternalError().to_response()

    async def _read_prompt(self, request: web.Request) -> str:
        if request.method != "POST":
            raise MethodNotAllowed()

        try:
            raw = await request.read()
        except web.HTTPRequestEntityTooLarge as exc:
            raise PayloadTooLarge() from exc

        try:
            body = PromptRequest.model_validate_json(raw)
        except ValidationError as exc:
            raise InvalidRequest() from exc
        return body.prompt

    async def _fragments(self, upstream: httpx.Response) -> AsyncIterator[str]:
        parser = JSONArrayStreamParser(carry_partial=self._carry_partial)
        try:
            async for fragment in iter_fragments(upstream.aiter_bytes(), parser):
                yield fragment
        except httpx.HTTPError as exc:
            logger.error("stream_read_error", error=str(exc), error_type=type(exc).__name__)
            raise StreamTransportError(str(exc)) from exc
