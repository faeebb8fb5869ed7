"""Request encoder — build the form body of an answer request.

The answer endpoint takes a URL-encoded POST whose structured fields
(message history, ask parameters) are JSON strings.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from answer_client.state import AskParams, InferenceType, Message


def encode_json(value: Any) -> str:
    """Compact JSON, UTF-8 preserved."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def build_answer_form(
    *,
    params: AskParams,
    messages: Sequence[Message],
    inference_type: InferenceType,
    conversation_id: str,
    user_id: str,
    search_endpoint: str,
    interaction_id: str,
) -> dict[str, str]:
    """Build the form fields for ``POST /v1/answer``.

    ``userData`` and ``related`` are only present when the ask parameters
    carry them.
    """
    form = {
        "type": str(inference_type),
        "messages": encode_json([m.model_dump(mode="json") for m in messages]),
        "query": params.query,
        "conversationId": conversation_id,
        "userId": user_id,
        "endpoint": search_endpoint,
        "searchParams": encode_json(params.to_search_params()),
        "interactionId": interaction_id,
    }
    if params.user_data is not None:
        form["userData"] = encode_json(params.user_data.to_wire())
    if params.related is not None:
        form["related"] = encode_json(
            params.related.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
    return form


__all__ = ["build_answer_form", "encode_json"]
