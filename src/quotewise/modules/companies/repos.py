"""Company repository."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from quotewise.api.dependencies import DBSession
from quotewise.modules.companies.models import Company


class CompanyRepository:
    """Repository for Company database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, company: Company) -> Company:
        self.session.add(company)
        await self.session.flush()
        await self.session.refresh(company)
        return company

    async def get_by_id(self, company_id: UUID) -> Company | None:
        return await self.session.get(Company, company_id)

    async def list_all(self) -> list[Company]:
        result = await self.session.execute(select(Company).order_by(Company.name))
        return list(result.scalars().all())

    async def update(self, company: Company) -> Company:
        await self.session.flush()
        await self.session.refresh(company)
        return company


CompanyRepo = Annotated[CompanyRepository, Depends(CompanyRepository)]
