"""Answer session — one conversation with the answer-generation service.

Each ``ask`` creates an Interaction, POSTs the question with the message
history, and consumes the streamed response frame by frame: sources,
translated query, related queries and answer text are written to the
InteractionStore and announced through the EventDispatcher as they arrive.

Lifecycle of an interaction::

    created -> streaming -> completed | aborted | failed

Whatever the terminal state, ``loading`` ends False and observers get a
final ``state_change``. Cancellation (``abort()`` or a per-call
CancellationToken) ends the interaction as aborted without raising;
transport failures are raised to the caller after the state is final.

Usage::

    async with AnswerSession(search_endpoint="https://cloud.orama.run/v1/indexes/docs") as session:
        session.on(SessionEvent.SOURCE_CHANGE, show_sources)
        answer = await session.ask(AskParams(query="How do I deploy?"))
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx

from answer_client.exceptions import (
    AnswerTransportError,
    ConfigurationError,
    SessionBusyError,
)
from answer_client.ids import generate_id
from answer_client.request import build_answer_form
from answer_client.settings import get_settings
from answer_client.state import (
    AskParams,
    InferenceType,
    InteractionStatus,
    Message,
    Role,
    SessionEvent,
)
from answer_client.streaming.dispatcher import EventDispatcher
from answer_client.streaming.events import Frame, FrameType
from answer_client.streaming.parser import FrameParser
from answer_client.streaming.store import InteractionStore

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator, Mapping, Sequence

    from answer_client.ids import IdGenerator
    from answer_client.settings import Settings
    from answer_client.state import Interaction, UserContext
    from answer_client.streaming.dispatcher import Observer, Subscription

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}


class CancellationToken:
    """Cooperative cancellation signal for one answer.

    The streaming loop checks it before every decoded line; a read
    already in flight completes before the signal is observed.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class _AnswerCancelled(Exception):
    """Internal signal: the token was observed cancelled mid-stream."""


def _validate_url(url: str, setting: str) -> str:
    """Reject anything that is not an absolute http(s) URL."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigurationError(f"Malformed URL for {setting}: {url!r}", setting=setting) from e
    if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.host:
        msg = f"Invalid URL for {setting}: {url!r}. Only {sorted(_ALLOWED_SCHEMES)} URLs allowed."
        raise ConfigurationError(msg, setting=setting)
    return url


class AnswerSession:
    """Coordinates one conversation: shared identity, history and interactions."""

    def __init__(
        self,
        search_endpoint: str | None = None,
        api_key: str | None = None,
        *,
        initial_messages: Sequence[Message] | None = None,
        inference_type: InferenceType | None = None,
        user_context: UserContext | None = None,
        observers: Mapping[SessionEvent, Observer] | None = None,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        id_factory: IdGenerator = generate_id,
        user_id: str | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            search_endpoint: Search endpoint the service answers from
                (defaults to settings.search_endpoint).
            api_key: API key (defaults to settings.answer_api_key).
            initial_messages: History to seed the conversation with.
            inference_type: Inference mode (defaults to settings).
            user_context: Default user context for asks that carry none.
            observers: Initial slot observers, keyed by event.
            settings: Explicit settings (defaults to get_settings()).
            http_client: Shared client to use instead of an owned one.
            id_factory: Generator for conversation/interaction/user ids.
            user_id: Pre-resolved user identity.

        Raises:
            ConfigurationError: The answer base URL or search endpoint is malformed.
        """
        self._settings = settings or get_settings()

        base_url = self._settings.answer_base_url.rstrip("/")
        self._answer_url = _validate_url(f"{base_url}/v1/answer", "answer_base_url")
        self.search_endpoint = _validate_url(
            search_endpoint if search_endpoint is not None else self._settings.search_endpoint,
            "search_endpoint",
        )
        self._api_key = (
            api_key if api_key is not None else self._settings.answer_api_key.get_secret_value()
        )
        self.inference_type = inference_type or InferenceType(self._settings.inference_type)
        self.user_context = user_context

        self.conversation_id = id_factory()
        self.user_id = user_id or self._settings.user_id or id_factory()

        self._messages: list[Message] = [m.model_copy() for m in initial_messages or []]
        self._store = InteractionStore(id_factory)
        self._dispatcher = EventDispatcher(observers)
        self._active: dict[str, CancellationToken] = {}
        self._last_params: AskParams | None = None

        self._http_client = http_client
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on(self, event: SessionEvent | str, callback: Observer) -> AnswerSession:
        """Register the observer for an event, replacing the previous one.

        Returns the session so registrations can be chained.
        """
        self._dispatcher.on(event, callback)
        return self

    def subscribe(self, event: SessionEvent | str, callback: Observer) -> Subscription:
        """Add an additional observer; unsubscribe through the returned handle."""
        return self._dispatcher.subscribe(event, callback)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def messages(self) -> list[Message]:
        return [m.model_copy() for m in self._messages]

    @property
    def state(self) -> list[Interaction]:
        return self._store.snapshot()

    @property
    def is_busy(self) -> bool:
        return bool(self._active)

    # ------------------------------------------------------------------
    # HTTP client
    # ------------------------------------------------------------------

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared httpx.AsyncClient."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    self._settings.request_timeout,
                    connect=self._settings.connect_timeout,
                ),
            )
        return self._http_client

    async def close(self) -> None:
        """Abort in-flight answers and release the owned HTTP client."""
        self.abort()
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> AnswerSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def abort(self) -> bool:
        """Cancel every in-flight answer.

        Returns:
            True if at least one answer was signalled.
        """
        tokens = list(self._active.values())
        for token in tokens:
            token.cancel()
        return bool(tokens)

    async def ask(
        self,
        params: AskParams | str,
        *,
        cancel_token: CancellationToken | None = None,
        reject_if_busy: bool = False,
    ) -> str:
        """Ask a question and return the complete answer text.

        An aborted answer returns the text received before cancellation.

        Raises:
            AnswerTransportError: Non-200 response or transport failure.
            SessionBusyError: ``reject_if_busy`` and an answer is in flight.
        """
        response = ""
        async for content in self.ask_stream(
            params, cancel_token=cancel_token, reject_if_busy=reject_if_busy
        ):
            response = content
        return response

    async def ask_stream(
        self,
        params: AskParams | str,
        *,
        cancel_token: CancellationToken | None = None,
        reject_if_busy: bool = False,
    ) -> AsyncGenerator[str, None]:
        """Ask a question, yielding the growing answer after every text frame.

        Closing the generator early counts as cancellation.
        """
        params = self._prepare_params(params)

        if self._active:
            if reject_if_busy:
                raise SessionBusyError(
                    "An answer is already streaming",
                    interaction_id=next(iter(self._active)),
                )
            if self._settings.concurrency_policy == "cancel_previous":
                logger.info("Cancelling %d in-flight answer(s) for a new ask", len(self._active))
                self.abort()

        token = cancel_token or CancellationToken()
        interaction_id = self._store.create(params.query)
        self._active[interaction_id] = token
        logger.info("Interaction %s started (conversation %s)", interaction_id, self.conversation_id)

        self._dispatcher.emit(SessionEvent.NEW_INTERACTION_STARTED, interaction_id)
        self._emit_state()

        loading_announced = False
        try:
            if token.cancelled:
                raise _AnswerCancelled

            self._append_message(Message(role=Role.USER, content=params.query))
            self._last_params = params
            self._store.set_status(interaction_id, InteractionStatus.STREAMING)
            form = build_answer_form(
                params=params,
                messages=self._messages,
                inference_type=self.inference_type,
                conversation_id=self.conversation_id,
                user_id=self.user_id,
                search_endpoint=self.search_endpoint,
                interaction_id=interaction_id,
            )

            async with self._open_stream(form) as response:
                self._dispatcher.emit(SessionEvent.MESSAGE_LOADING, True)
                loading_announced = True
                assistant = self._append_message(Message(role=Role.ASSISTANT))

                async for frame in self._read_frames(response, token):
                    content = self._apply_frame(interaction_id, assistant, frame)
                    if content is not None:
                        yield content

        except _AnswerCancelled:
            self._finish(interaction_id, InteractionStatus.ABORTED, loading_announced)
        except (GeneratorExit, asyncio.CancelledError):
            self._finish(interaction_id, InteractionStatus.ABORTED, loading_announced)
            raise
        except Exception as e:
            self._finish(interaction_id, InteractionStatus.FAILED, loading_announced, error=str(e))
            if isinstance(e, httpx.HTTPError):
                raise AnswerTransportError(f"Answer stream failed: {e}") from e
            raise
        else:
            self._finish(interaction_id, InteractionStatus.COMPLETED, loading_announced)

    async def regenerate_last(
        self,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        """Drop the last answer and ask its question again.

        Raises:
            SessionBusyError: An answer is still streaming.
            ValueError: Nothing has been asked yet.
        """
        if self._active:
            raise SessionBusyError("Cannot regenerate while an answer is streaming")
        if self._last_params is None:
            raise ValueError("No previous question to regenerate")

        # Remove the previous exchange; ask() appends the question again
        if self._messages and self._messages[-1].role == Role.ASSISTANT:
            self._messages.pop()
        if self._messages and self._messages[-1].role == Role.USER:
            self._messages.pop()
        self._dispatcher.emit(SessionEvent.MESSAGE_CHANGE, self.messages)

        return await self.ask(self._last_params, cancel_token=cancel_token)

    def clear_session(self) -> None:
        """Forget the message history and every interaction.

        Raises:
            SessionBusyError: An answer is still streaming.
        """
        if self._active:
            raise SessionBusyError("Cannot clear the session while an answer is streaming")
        self._messages.clear()
        self._store.clear()
        self._last_params = None
        self._dispatcher.emit(SessionEvent.MESSAGE_CHANGE, self.messages)
        self._emit_state()

    # ------------------------------------------------------------------
    # Streaming internals
    # ------------------------------------------------------------------

    def _prepare_params(self, params: AskParams | str) -> AskParams:
        if isinstance(params, str):
            params = AskParams(query=params)
        if params.user_data is None and self.user_context is not None:
            params = params.model_copy(update={"user_data": self.user_context})
        return params

    @asynccontextmanager
    async def _open_stream(self, form: dict[str, str]) -> AsyncIterator[httpx.Response]:
        """POST the question and yield the 200 streaming response.

        Raises:
            AnswerTransportError: On non-200 status, timeout or connection failure.
        """
        client = self._get_http_client()
        try:
            async with client.stream(
                "POST",
                self._answer_url,
                params={"api-key": self._api_key},
                data=form,
                headers={"Accept": "text/event-stream"},
            ) as response:
                if response.status_code != 200:
                    raise AnswerTransportError(
                        f"Answer endpoint returned HTTP {response.status_code}",
                        status_code=response.status_code,
                        url=self._answer_url,
                    )
                yield response
        except httpx.TimeoutException as e:
            raise AnswerTransportError(
                f"Answer stream timed out: {e}", url=self._answer_url
            ) from e
        except httpx.HTTPError as e:
            raise AnswerTransportError(
                f"Answer transport failed: {type(e).__name__}: {e}", url=self._answer_url
            ) from e

    async def _read_frames(
        self,
        response: httpx.Response,
        token: CancellationToken,
    ) -> AsyncGenerator[Frame, None]:
        """Decode frames from the body, checking the token before every line."""
        parser = FrameParser()
        async for chunk in response.aiter_bytes():
            if token.cancelled:
                raise _AnswerCancelled
            for line in parser.iter_lines(chunk):
                if token.cancelled:
                    raise _AnswerCancelled
                frame = parser.parse_line(line)
                if frame is not None:
                    yield frame

        if token.cancelled:
            raise _AnswerCancelled
        for frame in parser.finish():
            yield frame

    def _apply_frame(self, interaction_id: str, assistant: Message, frame: Frame) -> str | None:
        """Write one frame to the store and notify observers.

        Returns the grown answer for text frames, None otherwise.
        """
        if interaction_id not in self._store:
            logger.warning("Frame for unknown interaction %s dropped", interaction_id)
            return None

        if frame.type is FrameType.TEXT:
            assistant.content += frame.payload
            self._store.append_response(interaction_id, frame.payload)
            self._dispatcher.emit(SessionEvent.MESSAGE_CHANGE, self.messages)
            self._emit_state()
            return assistant.content

        # sources, translated query and related queries are set at most once
        current = self._store.get(interaction_id)
        if frame.type is FrameType.SOURCES:
            if current.sources is not None:
                logger.debug("Duplicate sources frame ignored for %s", interaction_id)
                return None
            self._store.set_sources(interaction_id, frame.payload)
            self._dispatcher.emit(SessionEvent.SOURCE_CHANGE, frame.payload)
        elif frame.type is FrameType.QUERY_TRANSLATED:
            if current.translated_query is not None:
                logger.debug("Duplicate translated query ignored for %s", interaction_id)
                return None
            self._store.set_translated_query(interaction_id, frame.payload)
            self._dispatcher.emit(SessionEvent.QUERY_TRANSLATED, frame.payload)
        elif frame.type is FrameType.RELATED_QUERIES:
            if current.related_queries is not None:
                logger.debug("Duplicate related queries ignored for %s", interaction_id)
                return None
            self._store.set_related_queries(interaction_id, frame.payload)
            self._dispatcher.emit(SessionEvent.RELATED_QUERIES, list(frame.payload))
        self._emit_state()
        return None

    def _finish(
        self,
        interaction_id: str,
        status: InteractionStatus,
        loading_announced: bool,
        error: str | None = None,
    ) -> None:
        """Move an interaction to its terminal state and notify observers."""
        self._active.pop(interaction_id, None)
        self._store.set_loading(interaction_id, False)
        self._store.set_status(interaction_id, status, error=error)

        if status is InteractionStatus.ABORTED:
            self._store.set_aborted(interaction_id, True)
            logger.info("Interaction %s aborted", interaction_id)
            self._dispatcher.emit(SessionEvent.ANSWER_ABORTED, True)
        elif status is InteractionStatus.FAILED:
            logger.warning("Interaction %s failed: %s", interaction_id, error)
        else:
            logger.info("Interaction %s completed", interaction_id)

        if loading_announced:
            self._dispatcher.emit(SessionEvent.MESSAGE_LOADING, False)
        self._emit_state()

    def _append_message(self, message: Message) -> Message:
        self._messages.append(message)
        self._dispatcher.emit(SessionEvent.MESSAGE_CHANGE, self.messages)
        return message

    def _emit_state(self) -> None:
        self._dispatcher.emit(SessionEvent.STATE_CHANGE, self._store.snapshot())

    def describe(self) -> dict[str, Any]:
        """Summary of the session for logging and CLI output."""
        return {
            "conversation_id": self.conversation_id,
            "user_id": self.user_id,
            "messages": len(self._messages),
            "interactions": len(self._store),
            "busy": self.is_busy,
        }


__all__ = ["AnswerSession", "CancellationToken"]
