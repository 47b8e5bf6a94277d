"""System prompt repository."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select, update

from quotewise.api.dependencies import DBSession
from quotewise.modules.prompts.models import PromptType, SystemPrompt


class SystemPromptRepository:
    """Repository for SystemPrompt database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, prompt: SystemPrompt) -> SystemPrompt:
        self.session.add(prompt)
        await self.session.flush()
        await self.session.refresh(prompt)
        return prompt

    async def get_by_id(self, prompt_id: UUID) -> SystemPrompt | None:
        return await self.session.get(SystemPrompt, prompt_id)

    async def list_all(self, prompt_type: PromptType | None = None) -> list[SystemPrompt]:
        stmt = select(SystemPrompt).order_by(SystemPrompt.prompt_type, SystemPrompt.name)
        if prompt_type:
            stmt = stmt.where(SystemPrompt.prompt_type == prompt_type.value)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_company(self, company_id: UUID) -> list[SystemPrompt]:
        stmt = (
            select(SystemPrompt)
            .where(SystemPrompt.company_id == company_id)
            .order_by(SystemPrompt.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_core(self, active_only: bool = True) -> SystemPrompt | None:
        """Get the core prompt.

        Args:
            active_only: Ignore the core prompt while it is deactivated

        Returns:
            The single core prompt, or None
        """
        stmt = select(SystemPrompt).where(SystemPrompt.prompt_type == PromptType.CORE.value)
        if active_only:
            stmt = stmt.where(SystemPrompt.is_active.is_(True))
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def get_active_industry(self, industry_id: UUID) -> SystemPrompt | None:
        stmt = (
            select(SystemPrompt)
            .where(
                SystemPrompt.prompt_type == PromptType.INDUSTRY.value,
                SystemPrompt.industry_id == industry_id,
                SystemPrompt.is_active.is_(True),
            )
            .order_by(SystemPrompt.updated_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_client(self, company_id: UUID) -> SystemPrompt | None:
        stmt = (
            select(SystemPrompt)
            .where(
                SystemPrompt.prompt_type == PromptType.CLIENT.value,
                SystemPrompt.company_id == company_id,
                SystemPrompt.is_active.is_(True),
            )
            .order_by(SystemPrompt.updated_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def deactivate_siblings(self, prompt: SystemPrompt) -> int:
        """Deactivate every other active prompt in the same scope.

        The scope of a core prompt is global, of an industry prompt its
        industry and of a client prompt its company.

        Args:
            prompt: The prompt that stays active

        Returns:
            Number of prompts deactivated
        """
        stmt = update(SystemPrompt).where(
            SystemPrompt.id != prompt.id,
            SystemPrompt.prompt_type == prompt.prompt_type,
            SystemPrompt.is_active.is_(True),
        )
        if prompt.prompt_type == PromptType.INDUSTRY.value:
            stmt = stmt.where(SystemPrompt.industry_id == prompt.industry_id)
        elif prompt.prompt_type == PromptType.CLIENT.value:
            if prompt.company_id is None:
                stmt = stmt.where(SystemPrompt.company_id.is_(None))
            else:
                stmt = stmt.where(SystemPrompt.company_id == prompt.company_id)
        result = await self.session.execute(
            stmt.values(is_active=False).execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def update(self, prompt: SystemPrompt) -> SystemPrompt:
        await self.session.flush()
        await self.session.refresh(prompt)
        return prompt

    async def delete(self, prompt: SystemPrompt) -> None:
        await self.session.delete(prompt)
        await self.session.flush()


SystemPromptRepo = Annotated[SystemPromptRepository, Depends(SystemPromptRepository)]
