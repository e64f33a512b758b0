"""Error taxonomy for the prompt relay.

Every pre-stream failure maps to one of these and is rendered as a
``{"error": message}`` JSON body. ``StreamTransportError`` is the exception:
it happens after the plain-text headers are sent and is never rendered.
"""

from aiohttp import web


class RelayError(Exception):
    """Base class for failures with a fixed client-visible status and message."""

    status: int = 500
    message: str = "An internal server error occurred"

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        if message is not None:
            self.message = message
        if status is not None:
            self.status = status
        super().__init__(self.message)

    def to_response(self) -> web.Response:
        return web.json_response({"error": self.message}, status=self.status)


class MethodNotAllowed(RelayError):
    status = 405
    message = "Method Not Allowed"


class InvalidRequest(RelayError):
    status = 400
    message = "Prompt is required"


class PayloadTooLarge(RelayError):
    status = 413
    message = "Request body too large"


class Misconfigured(RelayError):
    status = 500
    message = "API key not configured"


class UpstreamError(RelayError):
    """Gemini answered with a non-success status. The status is passed through."""

    message = "Failed to fetch from Gemini API"

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__(status=status)
        self.body = body


class StreamTransportError(RelayError):
    """Reading the upstream body failed after the outbound stream had started."""


class InternalError(RelayError):
    pass
