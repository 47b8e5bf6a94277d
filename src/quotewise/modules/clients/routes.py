"""Client API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from quotewise.core.auth.dependencies import CompanyId, CurrentUser
from quotewise.modules.clients.schemas import ClientCreate, ClientResponse, ClientUpdate
from quotewise.modules.clients.services import ClientSvc


router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=list[ClientResponse], summary="List clients")
async def list_clients(company_id: CompanyId, service: ClientSvc) -> list[ClientResponse]:
    return [ClientResponse.model_validate(c) for c in await service.list_clients(company_id)]


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client",
)
async def create_client(
    data: ClientCreate,
    current_user: CurrentUser,
    company_id: CompanyId,
    service: ClientSvc,
) -> ClientResponse:
    client = await service.create_client(data, company_id=company_id, user_id=current_user.id)
    return ClientResponse.model_validate(client)


@router.get("/{client_id}", response_model=ClientResponse, summary="Get a client")
async def get_client(
    client_id: UUID,
    company_id: CompanyId,
    service: ClientSvc,
) -> ClientResponse:
    return ClientResponse.model_validate(await service.get_client(client_id, company_id))


@router.put("/{client_id}", response_model=ClientResponse, summary="Update a client")
async def update_client(
    client_id: UUID,
    data: ClientUpdate,
    company_id: CompanyId,
    service: ClientSvc,
) -> ClientResponse:
    client = await service.update_client(client_id, data, company_id)
    return ClientResponse.model_validate(client)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a client",
)
async def delete_client(
    client_id: UUID,
    company_id: CompanyId,
    service: ClientSvc,
) -> None:
    await service.delete_client(client_id, company_id)
