"""Industry administration service."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import func, select

from quotewise.api.dependencies import DBSession
from quotewise.core.errors import BadRequestError, ConflictError, NotFoundError
from quotewise.modules.industries.models import Industry
from quotewise.modules.industries.repos import IndustryRepository
from quotewise.modules.industries.schemas import IndustryCreate, IndustryUpdate
from quotewise.modules.prompts.models import SystemPrompt


logger = structlog.get_logger()


class IndustryService:
    """Admin operations on industries."""

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.repo = IndustryRepository(db)

    async def list_industries(self, active_only: bool = False) -> list[Industry]:
        return await self.repo.list_all(active_only=active_only)

    async def get_industry(self, industry_id: UUID) -> Industry:
        """Get an industry or raise NotFoundError."""
        industry = await self.repo.get_by_id(industry_id)
        if not industry:
            raise NotFoundError(
                "Industry not found",
                resource="industry",
                resource_id=str(industry_id),
            )
        return industry

    async def create_industry(self, data: IndustryCreate) -> Industry:
        """Create an industry.

        Raises:
            ConflictError: If an industry with the same name exists
        """
        if await self.repo.get_by_name(data.name):
            raise ConflictError(
                f"Industry '{data.name}' already exists",
                error_code="industry_exists",
            )
        industry = await self.repo.create(Industry(**data.model_dump()))
        logger.info("industry_created", industry_id=str(industry.id), name=industry.name)
        return industry

    async def update_industry(self, industry_id: UUID, data: IndustryUpdate) -> Industry:
        industry = await self.get_industry(industry_id)
        changes = data.model_dump(exclude_unset=True)
        new_name = changes.get("name")
        if new_name and new_name.lower() != industry.name.lower():
            if await self.repo.get_by_name(new_name):
                raise ConflictError(
                    f"Industry '{new_name}' already exists",
                    error_code="industry_exists",
                )
        for field, value in changes.items():
            setattr(industry, field, value)
        return await self.repo.update(industry)

    async def delete_industry(self, industry_id: UUID) -> None:
        """Delete an industry that no system prompt refers to.

        Raises:
            BadRequestError: If industry prompts still reference it
        """
        industry = await self.get_industry(industry_id)
        stmt = (
            select(func.count())
            .select_from(SystemPrompt)
            .where(SystemPrompt.industry_id == industry_id)
        )
        prompt_count = (await self.db.execute(stmt)).scalar_one()
        if prompt_count:
            raise BadRequestError(
                "Industry is still used by system prompts",
                error_code="industry_in_use",
                details={"prompt_count": prompt_count},
            )
        await self.repo.delete(industry)
        logger.info("industry_deleted", industry_id=str(industry_id))


IndustrySvc = Annotated[IndustryService, Depends(IndustryService)]
