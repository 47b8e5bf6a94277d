"""System prompt API routes.

Static paths are declared before ``/{prompt_id}`` so they are matched first.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from quotewise.core.auth.dependencies import AdminUser, CompanyId, CurrentUser
from quotewise.modules.prompts.models import PromptType
from quotewise.modules.prompts.schemas import PromptCreate, PromptResponse, PromptUpdate
from quotewise.modules.prompts.services import SystemPromptSvc


router = APIRouter(prefix="/system-prompts", tags=["system-prompts"])


@router.get(
    "",
    response_model=list[PromptResponse],
    summary="List system prompts",
    description="Admins see all prompts; other users see their company's prompts.",
)
async def list_prompts(
    current_user: CurrentUser,
    service: SystemPromptSvc,
    prompt_type: PromptType | None = Query(None, alias="type"),
) -> list[PromptResponse]:
    prompts = await service.list_prompts(current_user, prompt_type)
    return [PromptResponse.model_validate(p) for p in prompts]


@router.get(
    "/active",
    response_model=PromptResponse,
    summary="Get the active prompt of the caller's company",
)
async def get_active_prompt(company_id: CompanyId, service: SystemPromptSvc) -> PromptResponse:
    return PromptResponse.model_validate(await service.get_active(company_id))


@router.get("/core", response_model=PromptResponse, summary="Get the core prompt")
async def get_core_prompt(_admin: AdminUser, service: SystemPromptSvc) -> PromptResponse:
    return PromptResponse.model_validate(await service.get_core())


@router.get(
    "/industry/{industry_id}",
    response_model=PromptResponse,
    summary="Get the active prompt of an industry",
)
async def get_industry_prompt(
    industry_id: UUID,
    _admin: AdminUser,
    service: SystemPromptSvc,
) -> PromptResponse:
    return PromptResponse.model_validate(await service.get_industry_prompt(industry_id))


@router.get(
    "/client/{company_id}",
    response_model=PromptResponse,
    summary="Get the active client prompt of a company",
)
async def get_client_prompt(
    company_id: UUID,
    _admin: AdminUser,
    service: SystemPromptSvc,
) -> PromptResponse:
    return PromptResponse.model_validate(await service.get_client_prompt(company_id))


@router.get(
    "/type/{prompt_type}",
    response_model=list[PromptResponse],
    summary="List prompts of one type",
)
async def list_prompts_by_type(
    prompt_type: PromptType,
    _admin: AdminUser,
    service: SystemPromptSvc,
) -> list[PromptResponse]:
    return [PromptResponse.model_validate(p) for p in await service.list_by_type(prompt_type)]


@router.post(
    "",
    response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a system prompt",
    description="Only one core prompt may exist; a second one is rejected with 409.",
)
async def create_prompt(
    data: PromptCreate,
    admin: AdminUser,
    service: SystemPromptSvc,
) -> PromptResponse:
    return PromptResponse.model_validate(await service.create_prompt(data, created_by=admin.id))


@router.get("/{prompt_id}", response_model=PromptResponse, summary="Get a system prompt")
async def get_prompt(
    prompt_id: UUID,
    current_user: CurrentUser,
    service: SystemPromptSvc,
) -> PromptResponse:
    return PromptResponse.model_validate(await service.get_prompt(prompt_id, current_user))


@router.put("/{prompt_id}", response_model=PromptResponse, summary="Update a system prompt")
async def update_prompt(
    prompt_id: UUID,
    data: PromptUpdate,
    _admin: AdminUser,
    service: SystemPromptSvc,
) -> PromptResponse:
    return PromptResponse.model_validate(await service.update_prompt(prompt_id, data))


@router.delete(
    "/{prompt_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a system prompt",
)
async def delete_prompt(
    prompt_id: UUID,
    _admin: AdminUser,
    service: SystemPromptSvc,
) -> None:
    await service.delete_prompt(prompt_id)


@router.post(
    "/{prompt_id}/activate",
    response_model=PromptResponse,
    summary="Activate a system prompt",
    description="Deactivates the other prompts of the same scope.",
)
async def activate_prompt(
    prompt_id: UUID,
    _admin: AdminUser,
    service: SystemPromptSvc,
) -> PromptResponse:
    return PromptResponse.model_validate(await service.activate_prompt(prompt_id))
