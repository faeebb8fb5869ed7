"""Tests for the answer session state models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from answer_client.state import (
    AskParams,
    Interaction,
    InteractionStatus,
    Related,
    RelatedFormat,
    SearchResults,
    StructuredUserContext,
    TextUserContext,
    UserContext,
)


class TestUserContext:
    """UserContext is a tagged union of text and structured data."""

    def test_text_variant(self):
        context = TypeAdapter(UserContext).validate_python({"kind": "text", "text": "beginner"})
        assert isinstance(context, TextUserContext)
        assert context.to_wire() == "beginner"

    def test_structured_variant(self):
        context = TypeAdapter(UserContext).validate_python(
            {"kind": "structured", "data": {"lang": "it"}}
        )
        assert isinstance(context, StructuredUserContext)
        assert context.to_wire() == {"lang": "it"}

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(UserContext).validate_python({"kind": "binary", "data": "x"})


class TestRelated:
    def test_defaults(self):
        related = Related()
        assert related.how_many == 3
        assert related.format is RelatedFormat.QUESTION

    def test_accepts_wire_alias(self):
        related = Related.model_validate({"howMany": 5, "format": "query"})
        assert related.how_many == 5
        assert related.format is RelatedFormat.QUERY

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            Related(how_many=-1)


class TestAskParams:
    def test_empty_query_passed_through(self):
        assert AskParams(query="").to_search_params() == {"query": ""}

    def test_search_params_minimal(self):
        assert AskParams(query="q").to_search_params() == {"query": "q"}

    def test_search_params_full(self):
        params = AskParams(
            query="q",
            user_data=TextUserContext(text="ops engineer"),
            related=Related(how_many=1),
        )
        assert params.to_search_params() == {
            "query": "q",
            "userData": "ops engineer",
            "related": {"howMany": 1, "format": "question"},
        }


class TestPayloadModels:
    def test_search_results_keep_unknown_fields(self):
        results = SearchResults.model_validate(
            {"count": 1, "hits": [{"id": "a", "score": 1, "document": {}}], "facets": {}}
        )
        assert results.hits[0].id == "a"
        assert results.model_extra == {"facets": {}}

    def test_interaction_defaults(self):
        interaction = Interaction(interaction_id="i", query="q")
        assert interaction.loading is True
        assert interaction.aborted is False
        assert interaction.status is InteractionStatus.CREATED
        assert interaction.status.is_terminal is False

    @pytest.mark.parametrize(
        ("status", "terminal"),
        [
            (InteractionStatus.CREATED, False),
            (InteractionStatus.STREAMING, False),
            (InteractionStatus.COMPLETED, True),
            (InteractionStatus.ABORTED, True),
            (InteractionStatus.FAILED, True),
        ],
    )
    def test_terminal_statuses(self, status, terminal):
        assert status.is_terminal is terminal
