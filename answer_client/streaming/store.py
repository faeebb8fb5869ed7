"""Interaction store — the authoritative per-question state of a session.

Interactions are appended in ask order and then mutated in place through
the methods below, always addressed by ``interaction_id``. Lookups never
rely on a position captured earlier: the sequence can grow while an
answer is suspended on network I/O.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from answer_client.ids import generate_id
from answer_client.state import (
    ClientSearchParams,
    Interaction,
    InteractionStatus,
    SearchResults,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from answer_client.ids import IdGenerator

logger = logging.getLogger(__name__)


class InteractionStore:
    """Ordered, identifier-keyed collection of Interaction records."""

    def __init__(self, id_factory: IdGenerator = generate_id) -> None:
        self._id_factory = id_factory
        self._by_id: dict[str, Interaction] = {}
        self._order: list[str] = []

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Interaction]:
        return iter(self.snapshot())

    def __contains__(self, interaction_id: object) -> bool:
        return interaction_id in self._by_id

    def create(self, query: str, interaction_id: str | None = None) -> str:
        """Append a new loading interaction and return its identifier."""
        interaction_id = interaction_id or self._id_factory()
        if interaction_id in self._by_id:
            msg = f"Interaction {interaction_id} already exists"
            raise ValueError(msg)
        self._by_id[interaction_id] = Interaction(interaction_id=interaction_id, query=query)
        self._order.append(interaction_id)
        return interaction_id

    def get(self, interaction_id: str) -> Interaction | None:
        """Return a copy of one interaction, or None if unknown."""
        interaction = self._by_id.get(interaction_id)
        return interaction.model_copy(deep=True) if interaction else None

    def last(self) -> Interaction | None:
        if not self._order:
            return None
        return self.get(self._order[-1])

    def _resolve(self, interaction_id: str) -> Interaction | None:
        interaction = self._by_id.get(interaction_id)
        if interaction is None:
            logger.warning("Ignoring update for unknown interaction %s", interaction_id)
        return interaction

    def update(self, interaction_id: str, **changes: Any) -> bool:
        """Assign fields of one interaction.

        Returns False (and changes nothing) when the identifier is unknown.
        """
        interaction = self._resolve(interaction_id)
        if interaction is None:
            return False
        for name, value in changes.items():
            if name not in Interaction.model_fields or name in ("interaction_id", "query"):
                msg = f"Field '{name}' cannot be updated"
                raise AttributeError(msg)
            setattr(interaction, name, value)
        return True

    def set_sources(self, interaction_id: str, sources: SearchResults) -> bool:
        return self.update(interaction_id, sources=sources)

    def set_translated_query(self, interaction_id: str, query: ClientSearchParams) -> bool:
        return self.update(interaction_id, translated_query=query)

    def set_related_queries(self, interaction_id: str, queries: list[str]) -> bool:
        return self.update(interaction_id, related_queries=list(queries))

    def append_response(self, interaction_id: str, text: str) -> str | None:
        """Grow the response text; returns the new full response."""
        interaction = self._resolve(interaction_id)
        if interaction is None:
            return None
        interaction.response += text
        return interaction.response

    def set_loading(self, interaction_id: str, loading: bool) -> bool:
        return self.update(interaction_id, loading=loading)

    def set_aborted(self, interaction_id: str, aborted: bool = True) -> bool:
        return self.update(interaction_id, aborted=aborted)

    def set_status(
        self,
        interaction_id: str,
        status: InteractionStatus,
        error: str | None = None,
    ) -> bool:
        changes: dict[str, Any] = {"status": status}
        if error is not None:
            changes["error"] = error
        return self.update(interaction_id, **changes)

    def snapshot(self) -> list[Interaction]:
        """Detached copies of every interaction, in creation order."""
        return [self._by_id[i].model_copy(deep=True) for i in self._order]

    def clear(self) -> None:
        self._by_id.clear()
        self._order.clear()


__all__ = ["InteractionStore"]
