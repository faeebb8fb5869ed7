"""Identifier generation for conversations, interactions and users."""

from __future__ import annotations

from typing import Protocol
from uuid import uuid4


class IdGenerator(Protocol):
    """Callable returning a new unique identifier."""

    def __call__(self) -> str: ...


def generate_id() -> str:
    """Default generator: a random uuid4 as a string."""
    return str(uuid4())


__all__ = ["IdGenerator", "generate_id"]
