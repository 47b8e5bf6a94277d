"""System prompt administration service."""

from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from quotewise.api.dependencies import DBSession
from quotewise.core.errors import ConflictError, NotFoundError, ValidationError
from quotewise.modules.companies.repos import CompanyRepository
from quotewise.modules.industries.repos import IndustryRepository
from quotewise.modules.prompts.models import SINGLE_CORE_INDEX, PromptType, SystemPrompt
from quotewise.modules.prompts.repos import SystemPromptRepository
from quotewise.modules.prompts.schemas import PromptCreate, PromptUpdate


logger = structlog.get_logger()


class SystemPromptService:
    """Manages the core / industry / client prompt hierarchy.

    Enforces that at most one core prompt exists, that industry prompts
    point at an existing industry, and that at most one prompt is active
    per scope.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.repo = SystemPromptRepository(db)
        self.industry_repo = IndustryRepository(db)
        self.company_repo = CompanyRepository(db)

    async def list_prompts(
        self,
        user: Any,
        prompt_type: PromptType | None = None,
    ) -> list[SystemPrompt]:
        """List prompts visible to the user.

        Admins see every prompt, optionally filtered by type. Everybody
        else sees the prompts of their own company.
        """
        if user.is_admin:
            return await self.repo.list_all(prompt_type)
        if user.company_id is None:
            return []
        prompts = await self.repo.list_by_company(user.company_id)
        if prompt_type:
            prompts = [p for p in prompts if p.prompt_type == prompt_type.value]
        return prompts

    async def get_prompt(self, prompt_id: UUID, user: Any | None = None) -> SystemPrompt:
        """Get a prompt by ID.

        Args:
            prompt_id: The prompt's UUID
            user: When given and not an admin, only prompts of the user's
                company are visible

        Raises:
            NotFoundError: If the prompt does not exist or is not visible
        """
        prompt = await self.repo.get_by_id(prompt_id)
        visible = prompt is not None and (
            user is None or user.is_admin or prompt.company_id == user.company_id
        )
        if not visible:
            raise NotFoundError(
                "System prompt not found",
                resource="system_prompt",
                resource_id=str(prompt_id),
            )
        return prompt

    async def get_active(self, company_id: UUID) -> SystemPrompt:
        prompt = await self.repo.get_active_client(company_id)
        if not prompt:
            raise NotFoundError("No active system prompt", resource="system_prompt")
        return prompt

    async def get_core(self) -> SystemPrompt:
        prompt = await self.repo.get_core()
        if not prompt:
            raise NotFoundError("Core system prompt not found", resource="system_prompt")
        return prompt

    async def get_industry_prompt(self, industry_id: UUID) -> SystemPrompt:
        prompt = await self.repo.get_active_industry(industry_id)
        if not prompt:
            raise NotFoundError(
                "Industry system prompt not found",
                resource="system_prompt",
                details={"industry_id": str(industry_id)},
            )
        return prompt

    async def get_client_prompt(self, company_id: UUID) -> SystemPrompt:
        prompt = await self.repo.get_active_client(company_id)
        if not prompt:
            raise NotFoundError(
                "Client system prompt not found",
                resource="system_prompt",
                details={"company_id": str(company_id)},
            )
        return prompt

    async def list_by_type(self, prompt_type: PromptType) -> list[SystemPrompt]:
        return await self.repo.list_all(prompt_type)

    async def create_prompt(self, data: PromptCreate, created_by: UUID) -> SystemPrompt:
        """Create a prompt.

        Raises:
            ConflictError: If a second core prompt would be created
            ValidationError: If the referenced industry or company does not exist
        """
        prompt_type = PromptType(data.prompt_type)
        if prompt_type == PromptType.CORE:
            await self._ensure_no_core()
        await self._check_references(prompt_type, data.industry_id, data.company_id)

        try:
            prompt = await self.repo.create(
                SystemPrompt(
                    name=data.name,
                    content=data.content,
                    prompt_type=prompt_type.value,
                    industry_id=data.industry_id,
                    company_id=data.company_id,
                    is_active=data.is_active,
                    created_by=created_by,
                )
            )
        except IntegrityError as exc:
            if is_core_conflict(exc, prompt_type):
                raise self._conflict(exc) from exc
            raise

        if prompt.is_active:
            await self.repo.deactivate_siblings(prompt)
        logger.info(
            "system_prompt_created",
            prompt_id=str(prompt.id),
            prompt_type=prompt.prompt_type,
        )
        return prompt

    async def update_prompt(self, prompt_id: UUID, data: PromptUpdate) -> SystemPrompt:
        """Apply a partial update.

        The industry rule is checked against the resulting prompt, so a
        type change must carry a matching ``industryId``.

        Raises:
            NotFoundError: If the prompt does not exist
            ConflictError: If the change would create a second core prompt
            ValidationError: If the resulting scope is invalid
        """
        prompt = await self.get_prompt(prompt_id)
        changes = data.model_dump(exclude_unset=True)

        new_type = PromptType(changes.get("prompt_type") or prompt.prompt_type)
        industry_id = changes.get("industry_id", prompt.industry_id)
        company_id = changes.get("company_id", prompt.company_id)
        if new_type == PromptType.CORE and prompt.prompt_type != PromptType.CORE.value:
            await self._ensure_no_core()
        type_changed = "prompt_type" in changes
        if new_type != PromptType.INDUSTRY and type_changed and "industry_id" not in changes:
            industry_id = None
        await self._check_references(new_type, industry_id, company_id)

        for field, value in changes.items():
            setattr(prompt, field, value)
        prompt.prompt_type = new_type.value
        prompt.industry_id = industry_id

        try:
            prompt = await self.repo.update(prompt)
        except IntegrityError as exc:
            if is_core_conflict(exc, new_type):
                raise self._conflict(exc) from exc
            raise

        if changes.get("is_active"):
            await self.repo.deactivate_siblings(prompt)
        logger.info("system_prompt_updated", prompt_id=str(prompt.id), fields=sorted(changes))
        return prompt

    async def delete_prompt(self, prompt_id: UUID) -> None:
        prompt = await self.get_prompt(prompt_id)
        await self.repo.delete(prompt)
        logger.info("system_prompt_deleted", prompt_id=str(prompt_id))

    async def activate_prompt(self, prompt_id: UUID) -> SystemPrompt:
        """Activate a prompt and deactivate the others in its scope."""
        prompt = await self.get_prompt(prompt_id)
        prompt.is_active = True
        prompt = await self.repo.update(prompt)
        deactivated = await self.repo.deactivate_siblings(prompt)
        await self.db.refresh(prompt)
        logger.info(
            "system_prompt_activated",
            prompt_id=str(prompt.id),
            prompt_type=prompt.prompt_type,
            deactivated=deactivated,
        )
        return prompt

    async def _ensure_no_core(self) -> None:
        if await self.repo.get_core(active_only=False):
            raise ConflictError(
                "A core system prompt already exists. Update the existing prompt instead.",
                error_code="core_prompt_exists",
            )

    async def _check_references(
        self,
        prompt_type: PromptType,
        industry_id: UUID | None,
        company_id: UUID | None,
    ) -> None:
        if prompt_type == PromptType.INDUSTRY:
            if industry_id is None:
                raise ValidationError.for_field(
                    "industryId", "Field required", message="Industry prompts require an industry"
                )
            if not await self.industry_repo.get_by_id(industry_id):
                raise ValidationError.for_field(
                    "industryId", "Industry does not exist", message="Unknown industry"
                )
        elif industry_id is not None:
            raise ValidationError.for_field(
                "industryId",
                "Not allowed for this prompt type",
                message="Only industry prompts may reference an industry",
            )
        if company_id is not None and not await self.company_repo.get_by_id(company_id):
            raise ValidationError.for_field(
                "companyId", "Company does not exist", message="Unknown company"
            )

    @staticmethod
    def _conflict(exc: IntegrityError) -> ConflictError:
        logger.warning("system_prompt_integrity_error", error=str(exc.orig))
        return ConflictError(
            "A core system prompt already exists. Update the existing prompt instead.",
            error_code="core_prompt_exists",
        )


def is_core_conflict(exc: IntegrityError, prompt_type: PromptType) -> bool:
    """Whether a failed write lost the race for the single core prompt.

    PostgreSQL names the violated index; SQLite only names the column.
    """
    if prompt_type != PromptType.CORE:
        return False
    message = str(exc.orig)
    return SINGLE_CORE_INDEX in message or "system_prompts.prompt_type" in message


SystemPromptSvc = Annotated[SystemPromptService, Depends(SystemPromptService)]
