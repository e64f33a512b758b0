"""Gemini streaming API client module."""

from gemini_relay.gemini.client import GeminiClient
from gemini_relay.gemini.models import GenerateContentChunk, GenerateContentRequest, PromptRequest

__all__ = ["GeminiClient", "GenerateContentChunk", "GenerateContentRequest", "PromptRequest"]
