"""Quote repository. Every query is scoped to a company."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from quotewise.api.dependencies import DBSession
from quotewise.modules.quotes.models import Quote


class QuoteRepository:
    """Repository for Quote database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, quote: Quote) -> Quote:
        self.session.add(quote)
        await self.session.flush()
        await self.session.refresh(quote)
        return quote

    async def get_by_id(self, quote_id: UUID, company_id: UUID) -> Quote | None:
        stmt = select(Quote).where(Quote.id == quote_id, Quote.company_id == company_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_number(self, quote_number: str) -> Quote | None:
        stmt = select(Quote).where(Quote.quote_number == quote_number)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_company(
        self,
        company_id: UUID,
        status: str | None = None,
    ) -> list[Quote]:
        """List a company's quotes, newest first.

        Args:
            company_id: The owning company
            status: Optional status filter

        Returns:
            Quotes ordered by date descending
        """
        stmt = select(Quote).where(Quote.company_id == company_id)
        if status:
            stmt = stmt.where(Quote.status == status)
        stmt = stmt.order_by(Quote.date.desc(), Quote.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def recent_for_client(
        self,
        client_id: UUID,
        company_id: UUID,
        limit: int,
    ) -> list[Quote]:
        """Get the most recent quotes of a client, newest first."""
        stmt = (
            select(Quote)
            .where(Quote.client_id == client_id, Quote.company_id == company_id)
            .order_by(Quote.date.desc(), Quote.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, quote: Quote) -> Quote:
        await self.session.flush()
        await self.session.refresh(quote)
        return quote

    async def delete(self, quote: Quote) -> None:
        await self.session.delete(quote)
        await self.session.flush()


QuoteRepo = Annotated[QuoteRepository, Depends(QuoteRepository)]
