"""Conversation, interaction and payload models."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .enums import InteractionStatus, RelatedFormat, Role


class Message(BaseModel):
    """One entry of the conversation history."""

    role: Role
    content: str = ""


class SearchHit(BaseModel):
    """A single document returned by the backing search endpoint."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    score: float = 0.0
    document: dict[str, Any] = Field(default_factory=dict)


class SearchResults(BaseModel):
    """Source documents the answer was grounded on."""

    model_config = ConfigDict(extra="allow")

    count: int = 0
    hits: list[SearchHit] = Field(default_factory=list)
    elapsed: Any = None


class ClientSearchParams(BaseModel):
    """Search query as rewritten by the answer service."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    term: str = ""
    mode: str | None = None
    where: dict[str, Any] | None = None
    limit: int | None = None
    offset: int | None = None


class Related(BaseModel):
    """How many related suggestions to request, and in which format."""

    model_config = ConfigDict(populate_by_name=True)

    how_many: int | None = Field(default=3, alias="howMany", ge=0)
    format: RelatedFormat | None = RelatedFormat.QUESTION


class TextUserContext(BaseModel):
    """Free-form text describing the user."""

    kind: Literal["text"] = "text"
    text: str

    def to_wire(self) -> str:
        return self.text


class StructuredUserContext(BaseModel):
    """Structured (JSON object) description of the user."""

    kind: Literal["structured"] = "structured"
    data: dict[str, Any] = Field(default_factory=dict)

    def to_wire(self) -> dict[str, Any]:
        return self.data


UserContext = Annotated[
    TextUserContext | StructuredUserContext,
    Field(discriminator="kind"),
]


class AskParams(BaseModel):
    """Arguments of a single ask call."""

    query: str
    user_data: UserContext | None = None
    related: Related | None = None

    def to_search_params(self) -> dict[str, Any]:
        """Wire representation sent as the searchParams form field.

        Unset optional fields are omitted.
        """
        params: dict[str, Any] = {"query": self.query}
        if self.user_data is not None:
            params["userData"] = self.user_data.to_wire()
        if self.related is not None:
            params["related"] = self.related.model_dump(
                mode="json", by_alias=True, exclude_none=True
            )
        return params


class Interaction(BaseModel):
    """Full lifecycle record of one question/answer exchange.

    ``loading`` is true from creation until the stream terminates;
    ``aborted`` is set only when termination came from cancellation.
    """

    interaction_id: str
    query: str
    response: str = ""
    related_queries: list[str] | None = None
    sources: SearchResults | None = None
    translated_query: ClientSearchParams | None = None
    loading: bool = True
    aborted: bool = False
    status: InteractionStatus = InteractionStatus.CREATED
    error: str | None = None
