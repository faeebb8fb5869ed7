"""Frame types decoded from the answer stream.

A Frame is one typed unit of the server-sent record stream consumed by
the answer session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class FrameType(StrEnum):
    """Record types the session acts on. Anything else is ignored."""

    TEXT = "text"
    SOURCES = "sources"
    QUERY_TRANSLATED = "query-translated"
    RELATED_QUERIES = "related-queries"


@dataclass(frozen=True)
class Frame:
    """A decoded server record.

    Attributes:
        type: Record type (see FrameType).
        payload: Decoded payload: ``str`` for text, ``SearchResults`` for
            sources, ``ClientSearchParams`` for query-translated and
            ``list[str]`` for related-queries.
        event: Name from the ``event:`` line of the same record, if any.
    """

    type: FrameType
    payload: Any
    event: str = ""
