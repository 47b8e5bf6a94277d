"""Pydantic schemas for AI endpoints."""

from uuid import UUID

from pydantic import Field, model_validator

from quotewise.core.schemas import CamelModel
from quotewise.modules.prompts.schemas import ChatTurn, ComposedMessage, MessageRole


class ConversationRequest(CamelModel):
    """A single message, or a whole conversation ending with the user's turn.

    Exactly one of ``message`` and ``messages`` must be sent.
    """

    message: str | None = Field(None, min_length=1)
    messages: list[ChatTurn] | None = Field(None, min_length=1)
    client_id: UUID | None = None

    @model_validator(mode="after")
    def check_conversation(self) -> "ConversationRequest":
        if (self.message is None) == (self.messages is None):
            raise ValueError("Send either message or messages")
        if self.messages is not None and self.messages[-1].role != MessageRole.USER:
            raise ValueError("Last message must be from user")
        return self

    @property
    def user_message(self) -> str:
        if self.messages is not None:
            return self.messages[-1].content
        return self.message or ""

    @property
    def history(self) -> list[ChatTurn]:
        return self.messages[:-1] if self.messages else []


class ComposeRequest(ConversationRequest):
    pass


class ComposeResponse(CamelModel):
    messages: list[ComposedMessage]


class ChatRequest(ConversationRequest):
    pass


class ChatResponse(CamelModel):
    reply: str
    layers: list[str] = Field(default_factory=list, description="Prompt layers that were sent")


class ExtractLineItemsRequest(CamelModel):
    messages: list[ChatTurn] = Field(..., min_length=1)


class LineItem(CamelModel):
    """A priced line of a quote. Money is in minor currency units."""

    description: str
    quantity: float
    unit_price: int
    total: int


class LineItemsResponse(CamelModel):
    items: list[LineItem]


class GenerateQuoteRequest(CamelModel):
    description: str = Field(..., min_length=1)
    client_id: UUID | None = None


class QuoteDraft(CamelModel):
    """A quote proposed by the assistant. Nothing is stored."""

    title: str
    description: str
    amount: int = Field(..., description="Total in minor currency units")
    line_items: list[LineItem]


class GenerateQuoteResponse(CamelModel):
    quote: QuoteDraft
