"""Quote service."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from quotewise.api.dependencies import DBSession
from quotewise.core.errors import ConflictError, NotFoundError, ValidationError
from quotewise.core.utils.time import utcnow
from quotewise.modules.clients.repos import ClientRepository
from quotewise.modules.quotes.models import Quote, QuoteStatus
from quotewise.modules.quotes.repos import QuoteRepository
from quotewise.modules.quotes.schemas import QuoteCreate, QuoteUpdate


logger = structlog.get_logger()


class QuoteService:
    """Company-scoped quote management.

    Status changes are whatever the user sets; there is no automatic
    transition engine.
    """

    def __init__(self, db: DBSession) -> None:
        self.repo = QuoteRepository(db)
        self.client_repo = ClientRepository(db)

    async def list_quotes(
        self,
        company_id: UUID,
        status: QuoteStatus | None = None,
    ) -> list[Quote]:
        return await self.repo.list_by_company(company_id, status.value if status else None)

    async def get_quote(self, quote_id: UUID, company_id: UUID) -> Quote:
        """Get a quote of the given company.

        Raises:
            NotFoundError: If no such quote exists in the company
        """
        quote = await self.repo.get_by_id(quote_id, company_id)
        if not quote:
            raise NotFoundError("Quote not found", resource="quote", resource_id=str(quote_id))
        return quote

    async def create_quote(
        self,
        data: QuoteCreate,
        company_id: UUID,
        user_id: UUID,
    ) -> Quote:
        """Create a quote for the company.

        Raises:
            ConflictError: If the quote number is taken
            ValidationError: If the client is unknown or no client name can be derived
        """
        await self._ensure_number_free(data.quote_number)

        client_name = data.client_name
        if data.client_id is not None:
            client = await self._company_client(data.client_id, company_id)
            client_name = client_name or client.company_name
        if not client_name:
            raise ValidationError.for_field(
                "clientName", "Field required", message="A client name or client is required"
            )

        quote = await self.repo.create(
            Quote(
                quote_number=data.quote_number,
                client_id=data.client_id,
                client_name=client_name,
                description=data.description,
                amount=data.amount,
                date=data.date or utcnow(),
                status=data.status.value,
                user_id=user_id,
                company_id=company_id,
            )
        )
        logger.info("quote_created", quote_id=str(quote.id), company_id=str(company_id))
        return quote

    async def update_quote(
        self,
        quote_id: UUID,
        data: QuoteUpdate,
        company_id: UUID,
    ) -> Quote:
        quote = await self.get_quote(quote_id, company_id)
        changes = data.model_dump(exclude_unset=True)

        new_number = changes.get("quote_number")
        if new_number and new_number != quote.quote_number:
            await self._ensure_number_free(new_number)
        if changes.get("client_id") is not None:
            await self._company_client(changes["client_id"], company_id)
        if changes.get("status") is not None:
            changes["status"] = QuoteStatus(changes["status"]).value
            if changes["status"] != quote.status:
                logger.info(
                    "quote_status_changed",
                    quote_id=str(quote.id),
                    old=quote.status,
                    new=changes["status"],
                )

        for field, value in changes.items():
            setattr(quote, field, value)
        return await self.repo.update(quote)

    async def delete_quote(self, quote_id: UUID, company_id: UUID) -> None:
        quote = await self.get_quote(quote_id, company_id)
        await self.repo.delete(quote)

    async def _ensure_number_free(self, quote_number: str) -> None:
        if await self.repo.get_by_number(quote_number):
            raise ConflictError(
                f"Quote number '{quote_number}' already exists",
                error_code="quote_number_taken",
            )

    async def _company_client(self, client_id: UUID, company_id: UUID):
        client = await self.client_repo.get_by_id(client_id, company_id)
        if not client:
            raise ValidationError.for_field(
                "clientId", "Client does not exist", message="Unknown client"
            )
        return client


QuoteSvc = Annotated[QuoteService, Depends(QuoteService)]
