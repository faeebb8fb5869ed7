"""Streaming client for a conversational answer-generation service.

Sends a question with the conversation history and rebuilds the answer,
its source documents, the translated query and related-question
suggestions from the server-sent record stream.
"""

from answer_client.exceptions import (
    AnswerClientError,
    AnswerTransportError,
    ConfigurationError,
    FrameDecodeError,
    SessionBusyError,
)
from answer_client.session import AnswerSession, CancellationToken
from answer_client.state import (
    AskParams,
    Interaction,
    InteractionStatus,
    Message,
    Related,
    RelatedFormat,
    Role,
    SessionEvent,
    StructuredUserContext,
    TextUserContext,
)

__version__ = "0.1.0"

__all__ = [
    "AnswerClientError",
    "AnswerSession",
    "AnswerTransportError",
    "AskParams",
    "CancellationToken",
    "ConfigurationError",
    "FrameDecodeError",
    "Interaction",
    "InteractionStatus",
    "Message",
    "Related",
    "RelatedFormat",
    "Role",
    "SessionBusyError",
    "SessionEvent",
    "StructuredUserContext",
    "TextUserContext",
    "__version__",
]
