"""Shared fixtures for streaming module tests."""

import pytest

from answer_client.state import SessionEvent


class EventRecorder:
    """Collects (event, payload) pairs in emission order."""

    def __init__(self) -> None:
        self.events: list[tuple[SessionEvent, object]] = []

    def attach(self, target) -> "EventRecorder":
        """Subscribe to every event of a session or dispatcher."""
        for event in SessionEvent:
            target.subscribe(event, lambda payload, event=event: self.events.append((event, payload)))
        return self

    def names(self) -> list[SessionEvent]:
        return [event for event, _ in self.events]

    def payloads(self, event: SessionEvent) -> list[object]:
        return [payload for name, payload in self.events if name == event]


@pytest.fixture()
def recorder() -> EventRecorder:
    return EventRecorder()


async def async_iter(items):
    """Convert a list to an async iterator."""
    for item in items:
        yield item
