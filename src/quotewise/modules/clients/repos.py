"""Client repository. Every query is scoped to a company."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from quotewise.api.dependencies import DBSession
from quotewise.modules.clients.models import Client


class ClientRepository:
    """Repository for Client database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, client: Client) -> Client:
        self.session.add(client)
        await self.session.flush()
        await self.session.refresh(client)
        return client

    async def get_by_id(self, client_id: UUID, company_id: UUID) -> Client | None:
        """Get a client by ID within a company.

        Args:
            client_id: The client's UUID
            company_id: The owning company; clients of other companies are invisible

        Returns:
            Client if found in that company, None otherwise
        """
        stmt = select(Client).where(Client.id == client_id, Client.company_id == company_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_company(self, company_id: UUID) -> list[Client]:
        stmt = (
            select(Client)
            .where(Client.company_id == company_id)
            .order_by(Client.company_name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, client: Client) -> Client:
        await self.session.flush()
        await self.session.refresh(client)
        return client

    async def delete(self, client: Client) -> None:
        await self.session.delete(client)
        await self.session.flush()


ClientRepo = Annotated[ClientRepository, Depends(ClientRepository)]
