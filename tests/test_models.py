"""Tests for relay and Gemini data models."""

import pytest
from pydantic import ValidationError

from gemini_relay.gemini.models import (
    GenerateContentChunk,
    GenerateContentRequest,
    PromptRequest,
)


class TestPromptRequest:
    def test_accepts_prompt(self):
        assert PromptRequest.model_validate_json(b'{"prompt": "Hi"}').prompt == "Hi"

    def test_ignores_extra_fields(self):
        body = PromptRequest.model_validate_json(b'{"prompt": "Hi", "stream": true}')
        assert body.prompt == "Hi"

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"not json",
            b"{}",
            b'{"prompt": ""}',
            b'{"prompt": null}',
            b'{"prompt": 42}',
            b'["prompt"]',
        ],
    )
    def test_rejects_missing_or_invalid_prompt(self, raw):
        with pytest.raises(ValidationError):
            PromptRequest.model_validate_json(raw)


def test_generate_request_from_prompt():
    payload = GenerateContentRequest.from_prompt("Tell me a joke").model_dump(exclude_none=True)
    assert payload == {
        "contents": [{"role": "user", "parts": [{"text": "Tell me a joke"}]}],
    }


class TestFirstText:
    def test_returns_first_part_of_first_candidate(self):
        chunk = GenerateContentChunk.model_validate({
            "candidates": [
                {"content": {"parts": [{"text": "one"}, {"text": "two"}]}},
                {"content": {"parts": [{"text": "other"}]}},
            ]
        })
        assert chunk.first_text == "one"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"candidates": []},
            {"candidates": [{"finishReason": "SAFETY"}]},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
            {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
            {"usageMetadata": {"totalTokenCount": 7}},
        ],
    )
    def test_none_when_path_is_missing_or_empty(self, payload):
        assert GenerateContentChunk.model_validate(payload).first_text is None
