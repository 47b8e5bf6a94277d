"""Training example repository. Every query is scoped to a company."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from quotewise.api.dependencies import DBSession
from quotewise.modules.training.models import TrainingExample


class TrainingExampleRepository:
    """Repository for TrainingExample database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, example: TrainingExample) -> TrainingExample:
        self.session.add(example)
        await self.session.flush()
        await self.session.refresh(example)
        return example

    async def get_by_id(self, example_id: UUID, company_id: UUID) -> TrainingExample | None:
        stmt = select(TrainingExample).where(
            TrainingExample.id == example_id,
            TrainingExample.company_id == company_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_company(
        self,
        company_id: UUID,
        category: str | None = None,
    ) -> list[TrainingExample]:
        stmt = select(TrainingExample).where(TrainingExample.company_id == company_id)
        if category is not None:
            stmt = stmt.where(TrainingExample.category == category)
        stmt = stmt.order_by(TrainingExample.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def best_for_company(self, company_id: UUID, limit: int) -> list[TrainingExample]:
        """Highest rated examples first, newest first within a rating.

        Args:
            company_id: The owning company
            limit: Maximum number of examples to return
        """
        stmt = (
            select(TrainingExample)
            .where(TrainingExample.company_id == company_id)
            .order_by(
                TrainingExample.quality.desc().nulls_last(),
                TrainingExample.created_at.desc(),
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, example: TrainingExample) -> None:
        await self.session.delete(example)
        await self.session.flush()


TrainingExampleRepo = Annotated[TrainingExampleRepository, Depends(TrainingExampleRepository)]
