"""Pytest fixtures for gemini-relay tests."""

import json
import os
from contextlib import asynccontextmanager
from unittest.mock import patch

import httpx
import pytest
from aiohttp.test_utils import TestClient, TestServer

from gemini_relay.config import Settings
from gemini_relay.gemini.client import GeminiClient
from gemini_relay.main import create_app


def gemini_object(text: str) -> str:
    """One element of Gemini's streamed array, serialized."""
    return json.dumps({
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": "STOP",
                "index": 0,
            }
        ]
    }, ensure_ascii=False)


def gemini_array(*texts: str) -> str:
    """Full streamed body for the given texts, framed the way Gemini frames it."""
    return "[" + ",\r\n".join(gemini_object(t) for t in texts) + "]"


class GeminiStub:
    """httpx.MockTransport handler standing in for streamGenerateContent.

    Each call replays ``chunks`` as separate body reads. ``fail_with`` is
    raised after the last chunk, ``connect_error`` before any response.
    """

    def __init__(self) -> None:
        self.chunks: list[bytes] = []
        self.status = 200
        self.error_body = ""
        self.fail_with: Exception | None = None
        self.connect_error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def set_chunks(self, *chunks: str | bytes) -> None:
        self.chunks = [c.encode("utf-8") if isinstance(c, str) else c for c in chunks]

    async def _body(self):
        for chunk in self.chunks:
            yield chunk
        if self.fail_with is not None:
            raise self.fail_with

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.connect_error is not None:
            raise self.connect_error
        if self.status != 200:
            return httpx.Response(self.status, text=self.error_body)
        return httpx.Response(
            200,
            headers={"Content-Type": "application/json; charset=UTF-8"},
            content=self._body(),
        )


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        "GEMINI_API_KEY": "test-gemini-key",
        "GEMINI_MODEL": "gemini-pro",
        "HOST": "127.0.0.1",
        "PORT": "8080",
        "LOG_LEVEL": "DEBUG",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def settings(mock_env_vars) -> Settings:
    """Create Settings instance with mocked environment."""
    return Settings(_env_file=None)


@pytest.fixture
def gemini_stub() -> GeminiStub:
    return GeminiStub()


@pytest.fixture
def make_relay_client(gemini_stub):
    """Factory for an in-process test client wired to ``gemini_stub``."""

    @asynccontextmanager
    async def _make(settings: Settings):
        gemini_client = GeminiClient(settings, transport=httpx.MockTransport(gemini_stub))
        app = create_app(settings, gemini_client)
        async with TestClient(TestServer(app)) as client:
            yield client

    return _make
