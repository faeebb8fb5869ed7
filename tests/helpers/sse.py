"""Helpers for building fake answer streams.

Provides record builders in the wire format of the answer endpoint and
an httpx.MockTransport factory that serves a body in fixed chunks,
preserving the chunk boundaries the test chose.
"""

import asyncio
import json
from collections.abc import Callable, Sequence
from typing import Any
from urllib.parse import parse_qs

import httpx


def sse_record(frame_type: str, message: Any, event: str = "message") -> str:
    """One wire record. Non-string messages are JSON-encoded first."""
    if not isinstance(message, str):
        message = json.dumps(message)
    data = json.dumps({"type": frame_type, "message": message})
    return f"event: {event}\ndata: {data}\n"


def text_record(text: str) -> str:
    return sse_record("text", text)


SOURCES_PAYLOAD = {
    "count": 2,
    "elapsed": {"raw": 12, "formatted": "12ms"},
    "hits": [
        {"id": "doc-1", "score": 0.92, "document": {"title": "Installing"}},
        {"id": "doc-2", "score": 0.61, "document": {"title": "Deploying"}},
    ],
}

TRANSLATED_QUERY_PAYLOAD = {"term": "install cli", "mode": "fulltext", "limit": 5}

RELATED_PAYLOAD = ["How do I upgrade?", "Which versions are supported?"]


class RecordedRequests(list):
    """Requests seen by a fake transport."""

    def form(self, index: int = -1) -> dict[str, str]:
        """Decoded form fields of a recorded request."""
        body = self[index].content.decode()
        return {k: v[0] for k, v in parse_qs(body, keep_blank_values=True).items()}


def streaming_transport(
    chunks: Sequence[bytes | str],
    *,
    status_code: int = 200,
    requests: RecordedRequests | None = None,
    before_chunk: Callable[[int], Any] | None = None,
) -> httpx.MockTransport:
    """MockTransport answering every request with ``chunks`` as the body.

    Args:
        chunks: Body pieces, sent one per transport read.
        status_code: Response status.
        requests: Optional list collecting the requests received.
        before_chunk: Optional hook called with the chunk index before it
            is delivered (may be a coroutine function).
    """

    async def body():
        for index, chunk in enumerate(chunks):
            if before_chunk is not None:
                result = before_chunk(index)
                if asyncio.iscoroutine(result):
                    await result
            yield chunk.encode() if isinstance(chunk, str) else chunk

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, content=body())

    return httpx.MockTransport(handler)


def failing_transport(exc: Exception) -> httpx.MockTransport:
    """MockTransport raising ``exc`` for every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return httpx.MockTransport(handler)
