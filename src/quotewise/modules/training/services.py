"""Training example service."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from quotewise.api.dependencies import DBSession
from quotewise.core.errors import NotFoundError
from quotewise.modules.training.models import TrainingExample
from quotewise.modules.training.repos import TrainingExampleRepository
from quotewise.modules.training.schemas import TrainingExampleCreate


logger = structlog.get_logger()


class TrainingExampleService:
    """Company-scoped management of training examples."""

    def __init__(self, db: DBSession) -> None:
        self.repo = TrainingExampleRepository(db)

    async def list_examples(
        self,
        company_id: UUID,
        category: str | None = None,
    ) -> list[TrainingExample]:
        return await self.repo.list_by_company(company_id, category=category)

    async def create_example(
        self,
        data: TrainingExampleCreate,
        company_id: UUID,
        user_id: UUID,
    ) -> TrainingExample:
        example = await self.repo.create(
            TrainingExample(**data.model_dump(), company_id=company_id, user_id=user_id)
        )
        logger.info(
            "training_example_created",
            example_id=str(example.id),
            company_id=str(company_id),
            category=example.category,
        )
        return example

    async def delete_example(self, example_id: UUID, company_id: UUID) -> None:
        """Delete an example of the given company.

        Raises:
            NotFoundError: If no such example exists in the company
        """
        example = await self.repo.get_by_id(example_id, company_id)
        if not example:
            raise NotFoundError(
                "Training example not found",
                resource="training_example",
                resource_id=str(example_id),
            )
        await self.repo.delete(example)
        logger.info("training_example_deleted", example_id=str(example_id))


TrainingExampleSvc = Annotated[TrainingExampleService, Depends(TrainingExampleService)]
