"""Prompt relay module."""

from gemini_relay.relay.handler import PromptRelayHandler
from gemini_relay.relay.stream import JSONArrayStreamParser, iter_fragments

__all__ = ["PromptRelayHandler", "JSONArrayStreamParser", "iter_fragments"]
