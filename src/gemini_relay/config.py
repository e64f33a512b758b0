"""Application configuration using Pydantic settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini upstream (empty key = every relay request answers 500, the server still starts)
    gemini_api_key: str = Field(
        "", alias="GEMINI_API_KEY",
        description="API key for the Gemini generative-language API, sent as the `key` query parameter.",
    )
    gemini_api_base: str = Field(
        "https://generativelanguage.googleapis.com/v1beta", alias="GEMINI_API_BASE",
        description="Base URL of the Gemini API, without a trailing slash.",
    )
    gemini_model: str = Field(
        "gemini-pro", alias="GEMINI_MODEL",
        description="Model name used in the streamGenerateContent URL.",
    )
    gemini_timeout: float = Field(
        60.0, alias="GEMINI_TIMEOUT",
        description="HTTP timeout in seconds for connecting to Gemini and for each streamed read.",
    )

    # Stream transformation
    stream_parser: Literal["incremental", "per_chunk"] = Field(
        "incremental", alias="STREAM_PARSER",
        description=(
            "incremental = carry JSON parser state across upstream chunks. "
            "per_chunk = drop partial objects at every chunk boundary (legacy behaviour)."
        ),
    )

    # Server
    max_request_bytes: int = Field(
        33_554_432, alias="MAX_REQUEST_BYTES",
        description="Largest accepted request body in bytes (aiohttp client_max_size). Default: 32 MB.",
    )
    host: str = Field(
        "0.0.0.0", alias="HOST",
        description="Host address to bind the aiohttp server to.",
    )
    port: int = Field(
        8080, alias="PORT",
        description="Port number for the aiohttp server.",
    )

    # Logging
    log_level: str = Field(
        "INFO", alias="LOG_LEVEL",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL.",
    )
    log_file: str = Field(
        "", alias="LOG_FILE",
        description="Path to log file for file-based logging with rotation. Empty = console only.",
    )
    log_file_max_bytes: int = Field(
        10_485_760, alias="LOG_FILE_MAX_BYTES",
        description="Max size in bytes per log file before rotation. Default: 10 MB.",
    )
    log_file_backup_count: int = Field(
        5, alias="LOG_FILE_BACKUP_COUNT",
        description="Number of rotated backup log files to keep.",
    )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
