"""Turn Gemini's chunked JSON array body into plain-text fragments."""

from __future__ import annotations

import codecs
from collections.abc import AsyncIterable, AsyncIterator, Iterable

import structlog
from pydantic import ValidationError

from gemini_relay.gemini.models import GenerateContentChunk

logger = structlog.get_logger()


class JSONArrayStreamParser:
    """Splits a streamed JSON array into the raw text of its top-level objects.

    Tracks brace/bracket depth and string/escape state inside an object, so
    braces within string values never end it. Between objects everything up
    to the next ``{`` is skipped, which covers the array framing (``[``,
    ``,``, ``]``, whitespace). Array elements are expected to be objects.

    With ``carry_partial=True`` the state survives between ``feed`` calls and
    an object split over any number of chunks is still recovered. With
    ``carry_partial=False`` whatever is unfinished at the end of a chunk is
    dropped, so only objects that start and end inside one chunk come out.
    """

    def __init__(self, carry_partial: bool = True) -> None:
        self._carry_partial = carry_partial
        self.reset()

    def reset(self) -> None:
        self._pending: list[str] = []
        self._depth = 0
        self._in_string = False
        self._escaped = False

    @property
    def has_partial(self) -> bool:
        return self._depth > 0

    def feed(self, text: str) -> list[str]:
        """Consume the next piece of text and return every object it completes."""
        completed: list[str] = []
        start: int | None = 0 if self._depth else None

        for i, ch in enumerate(text):
            if self._depth == 0:
                if ch == "{":
                    self._depth = 1
                    start = i
                continue

            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif ch == "\\":
                    self._escaped = True
                elif ch == '"':
                    self._in_string = False
                continue

            if ch == '"':
                self._in_string = True
            elif ch in "{[":
                self._depth += 1
            elif ch in "}]":
                self._depth -= 1
                if self._depth == 0:
                    self._pending.append(text[start:i + 1])
                    completed.append("".join(self._pending))
                    self._pending = []
                    start = None

        if self._depth and self._carry_partial:
            self._pending.append(text[start:])
        elif not self._carry_partial:
            if self._depth:
                logger.debug("stream_partial_object_dropped", depth=self._depth)
            self.reset()

        return completed


def extract_text(raw_object: str) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` from one object, if any."""
    try:
        chunk = GenerateContentChunk.model_validate_json(raw_object)
    except ValidationError:
        logger.debug("stream_object_skipped", length=len(raw_object))
        return None
    return chunk.first_text


def _texts(raw_objects: Iterable[str]) -> Iterable[str]:
    for raw in raw_objects:
        text = extract_text(raw)
        if text:
            yield text


async def iter_fragments(
    chunks: AsyncIterable[bytes],
    parser: JSONArrayStreamParser,
) -> AsyncIterator[str]:
    """Yield text fragments in arrival order as upstream chunks come in.

    Bytes are decoded incrementally, so a UTF-8 sequence split across two
    chunks is decoded once both halves have arrived.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    async for chunk in chunks:
        for text in _texts(parser.feed(decoder.decode(chunk))):
            yield text

    for text in _texts(parser.feed(decoder.decode(b"", final=True))):
        yield text
