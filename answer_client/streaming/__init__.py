"""Streaming module — the pieces an answer session is built from.

Provides the incremental frame parser, the identifier-keyed interaction
store and the synchronous event dispatcher.
"""

from answer_client.streaming.dispatcher import EventDispatcher, Observer, Subscription
from answer_client.streaming.events import Frame, FrameType
from answer_client.streaming.parser import FrameParser, aiter_frames, decode_record
from answer_client.streaming.store import InteractionStore

__all__ = [
    "EventDispatcher",
    "Frame",
    "FrameParser",
    "FrameType",
    "InteractionStore",
    "Observer",
    "Subscription",
    "aiter_frames",
    "decode_record",
]
