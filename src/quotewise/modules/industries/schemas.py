"""Pydantic schemas for industries."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from quotewise.core.constants import MAX_NAME_LENGTH
from quotewise.core.schemas import CamelModel


class IndustryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = None
    icon: str | None = Field(None, max_length=100)
    is_active: bool = True


class IndustryUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = None
    icon: str | None = Field(None, max_length=100)
    is_active: bool | None = None


class IndustryResponse(CamelModel):
    id: UUID
    name: str
    description: str | None = None
    icon: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
