"""Pydantic schemas for companies."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from quotewise.core.constants import MAX_NAME_LENGTH, MAX_URL_LENGTH
from quotewise.core.schemas import CamelModel


class CompanyUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    logo: str | None = Field(None, max_length=MAX_URL_LENGTH)
    industry_id: UUID | None = None


class CompanyResponse(CamelModel):
    id: UUID
    name: str
    logo: str | None = None
    industry_id: UUID | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
