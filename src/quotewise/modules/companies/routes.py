"""Company API routes."""

from fastapi import APIRouter

from quotewise.core.auth.dependencies import AdminUser, CompanyId, OwnerUser
from quotewise.core.errors import BadRequestError
from quotewise.modules.companies.schemas import CompanyResponse, CompanyUpdate
from quotewise.modules.companies.services import CompanySvc


router = APIRouter(tags=["companies"])


@router.get(
    "/company",
    response_model=CompanyResponse,
    summary="Get the caller's company",
)
async def get_company(company_id: CompanyId, service: CompanySvc) -> CompanyResponse:
    return CompanyResponse.model_validate(await service.get_company(company_id))


@router.put(
    "/company",
    response_model=CompanyResponse,
    summary="Update the caller's company",
    description="Owners (and admins belonging to the company) may rename the company, "
    "change its logo or pick its industry.",
)
async def update_company(
    data: CompanyUpdate,
    owner: OwnerUser,
    service: CompanySvc,
) -> CompanyResponse:
    if owner.company_id is None:
        raise BadRequestError("User is not associated with a company", error_code="no_company")
    return CompanyResponse.model_validate(await service.update_company(owner.company_id, data))


@router.get(
    "/admin/companies",
    response_model=list[CompanyResponse],
    summary="List all companies",
)
async def list_companies(_admin: AdminUser, service: CompanySvc) -> list[CompanyResponse]:
    return [CompanyResponse.model_validate(c) for c in await service.list_companies()]
