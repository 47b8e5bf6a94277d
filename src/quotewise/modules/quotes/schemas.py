"""Pydantic schemas for quotes."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from quotewise.core.constants import MAX_NAME_LENGTH, MAX_QUOTE_NUMBER_LENGTH, MAX_URL_LENGTH
from quotewise.core.schemas import CamelModel
from quotewise.modules.quotes.models import QuoteStatus


class QuoteCreate(CamelModel):
    """Create a quote.

    ``client_name`` may be omitted when ``client_id`` is given; it then
    defaults to the client's company name.
    """

    quote_number: str = Field(..., min_length=1, max_length=MAX_QUOTE_NUMBER_LENGTH)
    client_id: UUID | None = None
    client_name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = None
    amount: int = Field(0, ge=0, description="Total in minor currency units")
    date: datetime | None = None
    status: QuoteStatus = QuoteStatus.DRAFT


class QuoteUpdate(CamelModel):
    quote_number: str | None = Field(None, min_length=1, max_length=MAX_QUOTE_NUMBER_LENGTH)
    client_id: UUID | None = None
    client_name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = None
    amount: int | None = Field(None, ge=0)
    date: datetime | None = None
    status: QuoteStatus | None = None
    xero_quote_id: str | None = Field(None, max_length=100)
    xero_quote_number: str | None = Field(None, max_length=100)
    xero_quote_url: str | None = Field(None, max_length=MAX_URL_LENGTH)


class QuoteResponse(CamelModel):
    id: UUID
    quote_number: str
    client_id: UUID | None = None
    client_name: str
    description: str | None = None
    amount: int
    date: datetime
    status: QuoteStatus
    user_id: UUID
    company_id: UUID
    xero_quote_id: str | None = None
    xero_quote_number: str | None = None
    xero_quote_url: str | None = None
    created_at: datetime
    updated_at: datetime
