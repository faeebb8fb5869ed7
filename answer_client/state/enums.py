"""Enums for answer session state."""

from enum import StrEnum


class Role(StrEnum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class InferenceType(StrEnum):
    """Inference mode requested from the answer service."""

    DOCUMENTATION = "documentation"


class RelatedFormat(StrEnum):
    """Shape of the related suggestions the service should return."""

    QUESTION = "question"
    QUERY = "query"


class InteractionStatus(StrEnum):
    """Lifecycle of a single question/answer exchange."""

    CREATED = "created"
    STREAMING = "streaming"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            InteractionStatus.COMPLETED,
            InteractionStatus.ABORTED,
            InteractionStatus.FAILED,
        )


class SessionEvent(StrEnum):
    """Notification channels exposed by an answer session."""

    MESSAGE_CHANGE = "message_change"
    MESSAGE_LOADING = "message_loading"
    ANSWER_ABORTED = "answer_aborted"
    SOURCE_CHANGE = "source_change"
    QUERY_TRANSLATED = "query_translated"
    RELATED_QUERIES = "related_queries"
    NEW_INTERACTION_STARTED = "new_interaction_started"
    STATE_CHANGE = "state_change"
