"""Pydantic schemas for system prompts and composed prompt layers."""

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from quotewise.core.constants import MAX_NAME_LENGTH
from quotewise.core.schemas import CamelModel
from quotewise.modules.prompts.models import PromptType


def infer_prompt_type(name: str) -> PromptType:
    """Guess a prompt type from its name.

    Only used for payloads that predate the explicit ``promptType`` field.
    Names mentioning "core" are core prompts, names mentioning "industry"
    are industry prompts, anything else is a client prompt.
    """
    lowered = name.lower()
    if "core" in lowered:
        return PromptType.CORE
    if "industry" in lowered:
        return PromptType.INDUSTRY
    return PromptType.CLIENT


class PromptCreate(CamelModel):
    """Create a system prompt.

    ``industry_id`` must be given for industry prompts and only for them.
    """

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    content: str = Field(..., min_length=1)
    prompt_type: PromptType | None = None
    industry_id: UUID | None = None
    company_id: UUID | None = None
    is_active: bool = False

    @model_validator(mode="after")
    def check_scope(self) -> "PromptCreate":
        if self.prompt_type is None:
            self.prompt_type = infer_prompt_type(self.name)
        if self.prompt_type == PromptType.INDUSTRY and self.industry_id is None:
            raise ValueError("industryId is required for industry prompts")
        if self.prompt_type != PromptType.INDUSTRY and self.industry_id is not None:
            raise ValueError("industryId is only allowed on industry prompts")
        return self


class PromptUpdate(CamelModel):
    """Partial update of a system prompt. Scope rules are checked by the service.

    Omitted fields are left alone. Only the scope references may be sent as
    null, to clear them.
    """

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    content: str | None = Field(None, min_length=1)
    prompt_type: PromptType | None = None
    industry_id: UUID | None = None
    company_id: UUID | None = None
    is_active: bool | None = None

    @field_validator("name", "content", "prompt_type", "is_active", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("May not be null")
        return value


class PromptResponse(CamelModel):
    id: UUID
    name: str
    content: str
    prompt_type: PromptType
    industry_id: UUID | None = None
    company_id: UUID | None = None
    is_active: bool
    created_by: UUID | None = None
    created_at: datetime
    updated_at: datetime


class MessageRole(StrEnum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class PromptLayer(StrEnum):
    """Where a composed message came from: a prompt layer or the conversation."""

    CORE = "core"
    INDUSTRY = "industry"
    CLIENT = "client"
    EXAMPLES = "examples"
    TASK = "task"
    HISTORY = "history"
    USER = "user"


class ComposedMessage(CamelModel):
    """A role-tagged message ready for a chat completion call."""

    role: MessageRole
    content: str
    layer: PromptLayer


class ChatTurn(CamelModel):
    """One earlier message of a conversation, as sent by the client."""

    role: MessageRole
    content: str = Field(..., min_length=1)

    @field_validator("role")
    @classmethod
    def no_system_turns(cls, value: MessageRole) -> MessageRole:
        if value == MessageRole.SYSTEM:
            raise ValueError("Only user and assistant messages may be sent")
        return value
