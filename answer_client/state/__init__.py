"""State definitions for answer sessions.

Provides Pydantic models for the conversation history, the per-question
interaction records and the structured payloads streamed by the service.
"""

from .enums import InferenceType, InteractionStatus, RelatedFormat, Role, SessionEvent
from .models import (
    AskParams,
    ClientSearchParams,
    Interaction,
    Message,
    Related,
    SearchHit,
    SearchResults,
    StructuredUserContext,
    TextUserContext,
    UserContext,
)

__all__ = [
    "AskParams",
    "ClientSearchParams",
    "InferenceType",
    "Interaction",
    "InteractionStatus",
    "Message",
    "Related",
    "RelatedFormat",
    "Role",
    "SearchHit",
    "SearchResults",
    "SessionEvent",
    "StructuredUserContext",
    "TextUserContext",
    "UserContext",
]
