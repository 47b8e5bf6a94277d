"""Pydantic schemas for training examples."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from quotewise.core.constants import MAX_CATEGORY_LENGTH
from quotewise.core.schemas import CamelModel


class TrainingExampleCreate(CamelModel):
    prompt: str = Field(..., min_length=1)
    response: str = Field(..., min_length=1)
    category: str | None = Field(None, max_length=MAX_CATEGORY_LENGTH)
    tags: list[str] = Field(default_factory=list)
    quality: int | None = Field(None, ge=1, le=5, description="Rating from 1 to 5")


class TrainingExampleResponse(TrainingExampleCreate):
    id: UUID
    company_id: UUID
    user_id: UUID | None = None
    created_at: datetime
