"""Company service."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from quotewise.api.dependencies import DBSession
from quotewise.core.errors import NotFoundError, ValidationError
from quotewise.modules.companies.models import Company
from quotewise.modules.companies.repos import CompanyRepository
from quotewise.modules.companies.schemas import CompanyUpdate
from quotewise.modules.industries.repos import IndustryRepository


logger = structlog.get_logger()


class CompanyService:
    """Read and update the caller's company."""

    def __init__(self, db: DBSession) -> None:
        self.repo = CompanyRepository(db)
        self.industry_repo = IndustryRepository(db)

    async def get_company(self, company_id: UUID) -> Company:
        company = await self.repo.get_by_id(company_id)
        if not company:
            raise NotFoundError(
                "Company not found",
                resource="company",
                resource_id=str(company_id),
            )
        return company

    async def list_companies(self) -> list[Company]:
        return await self.repo.list_all()

    async def update_company(self, company_id: UUID, data: CompanyUpdate) -> Company:
        """Apply a partial update to a company.

        Raises:
            NotFoundError: If the company does not exist
            ValidationError: If the referenced industry does not exist
        """
        company = await self.get_company(company_id)
        changes = data.model_dump(exclude_unset=True)

        industry_id = changes.get("industry_id")
        if industry_id is not None and not await self.industry_repo.get_by_id(industry_id):
            raise ValidationError.for_field(
                "industryId", "Industry does not exist", message="Unknown industry"
            )

        for field, value in changes.items():
            setattr(company, field, value)

        company = await self.repo.update(company)
        logger.info("company_updated", company_id=str(company.id), fields=sorted(changes))
        return company


CompanySvc = Annotated[CompanyService, Depends(CompanyService)]
