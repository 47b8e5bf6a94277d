"""Pydantic schemas for clients."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from quotewise.core.constants import MAX_NAME_LENGTH, MAX_PHONE_LENGTH
from quotewise.core.schemas import CamelModel


class ClientBase(CamelModel):
    company_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    contact_first_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    contact_last_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=MAX_PHONE_LENGTH)
    address: str | None = None
    notes: str | None = None


class ClientCreate(ClientBase):
    pass


class ClientUpdate(CamelModel):
    company_name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    contact_first_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    contact_last_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=MAX_PHONE_LENGTH)
    address: str | None = None
    notes: str | None = None


class ClientResponse(ClientBase):
    # Stored values are not re-validated as email addresses on the way out
    email: str | None = None

    id: UUID
    company_id: UUID
    user_id: UUID
    created_at: datetime
    updated_at: datetime
