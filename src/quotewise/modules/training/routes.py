"""Training example API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from quotewise.core.auth.dependencies import CompanyId, CurrentUser
from quotewise.modules.training.schemas import TrainingExampleCreate, TrainingExampleResponse
from quotewise.modules.training.services import TrainingExampleSvc


router = APIRouter(prefix="/training", tags=["training"])


@router.get(
    "",
    response_model=list[TrainingExampleResponse],
    summary="List training examples",
    description="Examples of the caller's company, newest first.",
)
async def list_examples(
    company_id: CompanyId,
    service: TrainingExampleSvc,
    category: str | None = Query(None, description="Only examples in this category"),
) -> list[TrainingExampleResponse]:
    examples = await service.list_examples(company_id, category=category)
    return [TrainingExampleResponse.model_validate(e) for e in examples]


@router.post(
    "",
    response_model=TrainingExampleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a training example",
)
async def create_example(
    data: TrainingExampleCreate,
    current_user: CurrentUser,
    company_id: CompanyId,
    service: TrainingExampleSvc,
) -> TrainingExampleResponse:
    example = await service.create_example(data, company_id=company_id, user_id=current_user.id)
    return TrainingExampleResponse.model_validate(example)


@router.delete(
    "/{example_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a training example",
)
async def delete_example(
    example_id: UUID,
    company_id: CompanyId,
    service: TrainingExampleSvc,
) -> None:
    await service.delete_example(example_id, company_id)
