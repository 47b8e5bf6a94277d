"""Industry repository."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from quotewise.api.dependencies import DBSession
from quotewise.modules.industries.models import Industry


class IndustryRepository:
    """Repository for Industry database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, industry: Industry) -> Industry:
        self.session.add(industry)
        await self.session.flush()
        await self.session.refresh(industry)
        return industry

    async def get_by_id(self, industry_id: UUID) -> Industry | None:
        return await self.session.get(Industry, industry_id)

    async def get_by_name(self, name: str) -> Industry | None:
        stmt = select(Industry).where(func.lower(Industry.name) == name.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, active_only: bool = False) -> list[Industry]:
        """List industries alphabetically.

        Args:
            active_only: Skip disabled industries

        Returns:
            Industries ordered by name
        """
        stmt = select(Industry).order_by(Industry.name)
        if active_only:
            stmt = stmt.where(Industry.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, industry: Industry) -> Industry:
        await self.session.flush()
        await self.session.refresh(industry)
        return industry

    async def delete(self, industry: Industry) -> None:
        await self.session.delete(industry)
        await self.session.flush()


IndustryRepo = Annotated[IndustryRepository, Depends(IndustryRepository)]
