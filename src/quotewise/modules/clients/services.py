"""Client service."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from quotewise.api.dependencies import DBSession
from quotewise.core.errors import NotFoundError
from quotewise.modules.clients.models import Client
from quotewise.modules.clients.repos import ClientRepository
from quotewise.modules.clients.schemas import ClientCreate, ClientUpdate


logger = structlog.get_logger()


class ClientService:
    """Company-scoped client management."""

    def __init__(self, db: DBSession) -> None:
        self.repo = ClientRepository(db)

    async def list_clients(self, company_id: UUID) -> list[Client]:
        return await self.repo.list_by_company(company_id)

    async def get_client(self, client_id: UUID, company_id: UUID) -> Client:
        """Get a client of the given company.

        Raises:
            NotFoundError: If no such client exists in the company
        """
        client = await self.repo.get_by_id(client_id, company_id)
        if not client:
            raise NotFoundError(
                "Client not found",
                resource="client",
                resource_id=str(client_id),
            )
        return client

    async def create_client(
        self,
        data: ClientCreate,
        company_id: UUID,
        user_id: UUID,
    ) -> Client:
        client = await self.repo.create(
            Client(**data.model_dump(), company_id=company_id, user_id=user_id)
        )
        logger.info("client_created", client_id=str(client.id), company_id=str(company_id))
        return client

    async def update_client(
        self,
        client_id: UUID,
        data: ClientUpdate,
        company_id: UUID,
    ) -> Client:
        client = await self.get_client(client_id, company_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(client, field, value)
        return await self.repo.update(client)

    async def delete_client(self, client_id: UUID, company_id: UUID) -> None:
        client = await self.get_client(client_id, company_id)
        await self.repo.delete(client)
        logger.info("client_deleted", client_id=str(client_id), company_id=str(company_id))


ClientSvc = Annotated[ClientService, Depends(ClientService)]
