"""Frame parser — turn the raw answer byte stream into typed frames.

The response body is a sequence of newline-delimited records::

    event: <event-name>
    data: {"type": "text", "message": "Hel"}

Chunks may split records (and multi-byte characters) at any position.
Incomplete lines stay buffered until a later chunk completes them, so the
decoded frames do not depend on where the transport cut the stream.

Each ``data:`` record is a JSON object ``{"type": ..., "message": ...}``
whose ``message`` is decoded again according to ``type``. Records that
fail to decode are dropped and parsing continues with the next line.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from answer_client.exceptions import FrameDecodeError
from answer_client.state import ClientSearchParams, SearchResults
from answer_client.streaming.events import Frame, FrameType

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterable, Iterator

logger = logging.getLogger(__name__)

_EVENT_PREFIX = "event:"
_DATA_PREFIX = "data:"

_related_queries_adapter = TypeAdapter(list[str])


def _load_message(message: Any) -> Any:
    """JSON-decode a message payload that arrived as a string."""
    if isinstance(message, str):
        return json.loads(message)
    return message


def decode_payload(frame_type: FrameType, message: Any) -> Any:
    """Decode the inner ``message`` of a record according to its type.

    Raises:
        FrameDecodeError: The payload does not match the expected shape.
    """
    if frame_type is FrameType.TEXT:
        if not isinstance(message, str):
            raise FrameDecodeError("text payload is not a string", frame_type=frame_type)
        return message

    try:
        raw = _load_message(message)
        if frame_type is FrameType.SOURCES:
            return SearchResults.model_validate(raw)
        if frame_type is FrameType.QUERY_TRANSLATED:
            return ClientSearchParams.model_validate(raw)
        return _related_queries_adapter.validate_python(raw)
    except (json.JSONDecodeError, ValidationError) as e:
        raise FrameDecodeError(
            f"Invalid {frame_type} payload: {e}", frame_type=frame_type
        ) from e


def decode_record(data: str, *, event: str = "") -> Frame | None:
    """Decode the JSON body of a ``data:`` line into a Frame.

    Returns None for record types the session does not act on.

    Raises:
        FrameDecodeError: The record or its payload is malformed.
    """
    try:
        record = json.loads(data)
    except json.JSONDecodeError as e:
        raise FrameDecodeError(f"Record is not valid JSON: {e}") from e

    if not isinstance(record, dict):
        raise FrameDecodeError("Record is not a JSON object")
    record_type = record.get("type")
    if not isinstance(record_type, str) or "message" not in record:
        raise FrameDecodeError("Record lacks 'type' or 'message'")

    try:
        frame_type = FrameType(record_type)
    except ValueError:
        logger.debug("Ignoring record of unknown type '%s'", record_type)
        return None

    payload = decode_payload(frame_type, record["message"])
    return Frame(type=frame_type, payload=payload, event=event)


class FrameParser:
    """Incremental, single-pass parser over one response body.

    Usage::

        parser = FrameParser()
        async for chunk in response.aiter_bytes():
            for frame in parser.feed(chunk):
                handle(frame)
        for frame in parser.finish():
            handle(frame)
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._event = ""

    @property
    def pending(self) -> str:
        """Text received after the last line delimiter."""
        return self._buffer

    def _append(self, chunk: bytes | str) -> None:
        if isinstance(chunk, bytes | bytearray):
            self._buffer += self._decoder.decode(chunk)
        else:
            self._buffer += chunk

    def iter_lines(self, chunk: bytes | str) -> Iterator[str]:
        """Append a chunk and yield every line it completes.

        Lines not yet consumed when the caller stops iterating stay buffered.
        """
        self._append(chunk)
        while True:
            end = self._buffer.find("\n")
            if end < 0:
                return
            line = self._buffer[:end]
            self._buffer = self._buffer[end + 1 :]
            yield line.rstrip("\r")

    def parse_line(self, line: str) -> Frame | None:
        """Interpret one complete line; only ``data:`` lines produce frames."""
        line = line.strip()
        if line.startswith(_EVENT_PREFIX):
            self._event = line[len(_EVENT_PREFIX) :].strip()
            return None
        if not line.startswith(_DATA_PREFIX):
            return None

        data = line[len(_DATA_PREFIX) :].strip()
        event, self._event = self._event, ""
        try:
            return decode_record(data, event=event)
        except FrameDecodeError as e:
            logger.warning("Dropping undecodable record: %s (data: %s)", e, data[:200])
            return None

    def feed(self, chunk: bytes | str) -> list[Frame]:
        """Append a chunk and return the frames it completes."""
        frames = []
        for line in self.iter_lines(chunk):
            frame = self.parse_line(line)
            if frame is not None:
                frames.append(frame)
        return frames

    def finish(self) -> list[Frame]:
        """Flush the trailing unterminated line once the stream has closed."""
        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        if not remainder.strip():
            return []
        frame = self.parse_line(remainder.rstrip("\r"))
        return [frame] if frame is not None else []


async def aiter_frames(chunks: AsyncIterable[bytes | str]) -> AsyncGenerator[Frame, None]:
    """Lazily decode frames from an async chunk source.

    Finite: ends when the source is exhausted. Not restartable.
    """
    parser = FrameParser()
    async for chunk in chunks:
        for frame in parser.feed(chunk):
            yield frame
    for frame in parser.finish():
        yield frame


__all__ = ["FrameParser", "aiter_frames", "decode_payload", "decode_record"]
