"""Quote API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from quotewise.core.auth.dependencies import CompanyId, CurrentUser
from quotewise.modules.quotes.models import QuoteStatus
from quotewise.modules.quotes.schemas import QuoteCreate, QuoteResponse, QuoteUpdate
from quotewise.modules.quotes.services import QuoteSvc


router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.get("", response_model=list[QuoteResponse], summary="List quotes")
async def list_quotes(
    company_id: CompanyId,
    service: QuoteSvc,
    status_filter: QuoteStatus | None = Query(None, alias="status"),
) -> list[QuoteResponse]:
    quotes = await service.list_quotes(company_id, status_filter)
    return [QuoteResponse.model_validate(q) for q in quotes]


@router.post(
    "",
    response_model=QuoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a quote",
)
async def create_quote(
    data: QuoteCreate,
    current_user: CurrentUser,
    company_id: CompanyId,
    service: QuoteSvc,
) -> QuoteResponse:
    quote = await service.create_quote(data, company_id=company_id, user_id=current_user.id)
    return QuoteResponse.model_validate(quote)


@router.get("/{quote_id}", response_model=QuoteResponse, summary="Get a quote")
async def get_quote(
    quote_id: UUID,
    company_id: CompanyId,
    service: QuoteSvc,
) -> QuoteResponse:
    return QuoteResponse.model_validate(await service.get_quote(quote_id, company_id))


@router.put(
    "/{quote_id}",
    response_model=QuoteResponse,
    summary="Update a quote",
    description="Partial update; also used for user-driven status changes.",
)
async def update_quote(
    quote_id: UUID,
    data: QuoteUpdate,
    company_id: CompanyId,
    service: QuoteSvc,
) -> QuoteResponse:
    return QuoteResponse.model_validate(await service.update_quote(quote_id, data, company_id))


@router.delete(
    "/{quote_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a quote",
)
async def delete_quote(
    quote_id: UUID,
    company_id: CompanyId,
    service: QuoteSvc,
) -> None:
    await service.delete_quote(quote_id, company_id)
