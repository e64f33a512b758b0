"""Streaming prompt relay for the Gemini generative-language API."""

__version__ = "0.1.0"
