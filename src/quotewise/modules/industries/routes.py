"""Industry API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from quotewise.core.auth.dependencies import AdminUser, CurrentUser
from quotewise.modules.industries.schemas import (
    IndustryCreate,
    IndustryResponse,
    IndustryUpdate,
)
from quotewise.modules.industries.services import IndustrySvc


router = APIRouter(tags=["industries"])


@router.get(
    "/industries",
    response_model=list[IndustryResponse],
    summary="List active industries",
)
async def list_active_industries(
    _user: CurrentUser,
    service: IndustrySvc,
) -> list[IndustryResponse]:
    industries = await service.list_industries(active_only=True)
    return [IndustryResponse.model_validate(i) for i in industries]


@router.get(
    "/admin/industries",
    response_model=list[IndustryResponse],
    summary="List all industries",
)
async def list_industries(
    _admin: AdminUser,
    service: IndustrySvc,
) -> list[IndustryResponse]:
    industries = await service.list_industries()
    return [IndustryResponse.model_validate(i) for i in industries]


@router.post(
    "/admin/industries",
    response_model=IndustryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an industry",
)
async def create_industry(
    data: IndustryCreate,
    _admin: AdminUser,
    service: IndustrySvc,
) -> IndustryResponse:
    return IndustryResponse.model_validate(await service.create_industry(data))


@router.get(
    "/admin/industries/{industry_id}",
    response_model=IndustryResponse,
    summary="Get an industry",
)
async def get_industry(
    industry_id: UUID,
    _admin: AdminUser,
    service: IndustrySvc,
) -> IndustryResponse:
    return IndustryResponse.model_validate(await service.get_industry(industry_id))


@router.put(
    "/admin/industries/{industry_id}",
    response_model=IndustryResponse,
    summary="Update an industry",
)
async def update_industry(
    industry_id: UUID,
    data: IndustryUpdate,
    _admin: AdminUser,
    service: IndustrySvc,
) -> IndustryResponse:
    return IndustryResponse.model_validate(await service.update_industry(industry_id, data))


@router.delete(
    "/admin/industries/{industry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an industry",
    description="Refused while system prompts still reference the industry.",
)
async def delete_industry(
    industry_id: UUID,
    _admin: AdminUser,
    service: IndustrySvc,
) -> None:
    await service.delete_industry(industry_id)
