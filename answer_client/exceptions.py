"""Answer client exception hierarchy.

Base exceptions for every layer of the client, with correlation ID support.

Usage:
    from answer_client.exceptions import AnswerTransportError, ConfigurationError

    try:
        answer = await session.ask(AskParams(query="How do I install it?"))
    except AnswerTransportError as e:
        logger.error("Answer failed (status=%s, id=%s)", e.status_code, e.correlation_id)
"""

import uuid


class AnswerClientError(Exception):
    """Base exception for all answer client errors.

    Carries a correlation_id for tracing errors across layers.
    """

    def __init__(self, message: str, *, correlation_id: str | None = None):
        self.correlation_id = correlation_id or str(uuid.uuid4())
        super().__init__(message)


class ConfigurationError(AnswerClientError):
    """Invalid client configuration (malformed endpoint or base URL).

    Raised when the session is built, before any network activity.
    """

    def __init__(self, message: str, *, setting: str | None = None, **kwargs):
        self.setting = setting
        super().__init__(message, **kwargs)


class AnswerTransportError(AnswerClientError):
    """Errors from the answer endpoint transport.

    Raised on non-200 responses, unreadable bodies and connection or
    timeout failures.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        correlation_id: str | None = None,
    ):
        self.status_code = status_code
        self.url = url
        super().__init__(message, correlation_id=correlation_id)


class FrameDecodeError(AnswerClientError):
    """A single streamed record could not be decoded.

    Recovered inside the frame parser: the record is dropped.
    """

    def __init__(self, message: str, *, frame_type: str | None = None, **kwargs):
        self.frame_type = frame_type
        super().__init__(message, **kwargs)


class SessionBusyError(AnswerClientError):
    """An answer was requested while another is still streaming."""

    def __init__(self, message: str, *, interaction_id: str | None = None, **kwargs):
        self.interaction_id = interaction_id
        super().__init__(message, **kwargs)


__all__ = [
    "AnswerClientError",
    "AnswerTransportError",
    "ConfigurationError",
    "FrameDecodeError",
    "SessionBusyError",
]
