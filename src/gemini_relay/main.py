"""Application entrypoint - aiohttp server relaying prompts to Gemini."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog
from aiohttp import web
from aiohttp.web import Application, Request, Response, run_app

from gemini_relay.config import Settings, get_settings
from gemini_relay.gemini.client import GeminiClient
from gemini_relay.relay.handler import PromptRelayHandler


# httpx logs every request URL at INFO, and the Gemini key travels in the query string
QUIET_LOGGERS = ("httpx", "httpcore")

GEMINI_CLIENT = web.AppKey("gemini_client", GeminiClient)


def _attach_handler(handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.root.addHandler(handler)


def configure_logging(
    log_level: str = "INFO",
    log_file: str = "",
    log_file_max_bytes: int = 10_485_760,
    log_file_backup_count: int = 5,
) -> None:
    """Route structlog through stdlib logging to the console and, optionally, a rotating file.

    Console output is rendered for humans; when ``log_file`` is set every
    record is rendered as a JSON line instead so the file stays parseable.
    The HTTP client loggers in ``QUIET_LOGGERS`` are held at WARNING
    whatever ``log_level`` is.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.root.setLevel(level)
    logging.root.handlers.clear()
    _attach_handler(logging.StreamHandler(), level)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _attach_handler(
            RotatingFileHandler(
                filename=log_file,
                maxBytes=log_file_max_bytes,
                backupCount=log_file_backup_count,
                encoding="utf-8",
            ),
            level,
        )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer = structlog.processors.JSONRenderer() if log_file else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


async def health(request: Request) -> Response:
    """Health check endpoint - never calls Gemini."""
    return web.json_response({"status": "healthy"})


def create_app(
    settings: Settings | None = None,
    gemini_client: GeminiClient | None = None,
) -> Application:
    """Create and configure the aiohttp application."""
    settings = settings or get_settings()
    gemini_client = gemini_client or GeminiClient(settings)

    if not settings.gemini_api_key:
        logger.warning("gemini_api_key_missing", reason="GEMINI_API_KEY not set")

    async def close_gemini_client(app: Application) -> None:
        await gemini_client.close()

    app = Application(client_max_size=settings.max_request_bytes)
    app[GEMINI_CLIENT] = gemini_client
    app.on_cleanup.append(close_gemini_client)

    app.router.add_get("/health", health)
    # Every method reaches the handler so it can answer 405 itself
    app.router.add_route("*", "/", PromptRelayHandler(settings, gemini_client).handle)

    logger.info(
        "relay_app_created",
        model=settings.gemini_model,
        stream_parser=settings.stream_parser,
    )
    return app


def main() -> None:
    """Run the relay server."""
    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        log_file_max_bytes=settings.log_file_max_bytes,
        log_file_backup_count=settings.log_file_backup_count,
    )

    logger.info(
        "starting_relay_server",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )

    app = create_app(settings)
    run_app(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
