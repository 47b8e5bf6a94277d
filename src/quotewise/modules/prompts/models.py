"""System prompt database model."""

from enum import StrEnum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from quotewise.core.constants import MAX_NAME_LENGTH
from quotewise.core.database.base import Base, TimestampMixin, UUIDMixin


SINGLE_CORE_INDEX = "uq_system_prompts_single_core"


class PromptType(StrEnum):
    """Layer of the prompt hierarchy a system prompt belongs to."""

    CORE = "core"
    INDUSTRY = "industry"
    CLIENT = "client"


class SystemPrompt(Base, UUIDMixin, TimestampMixin):
    """A system prompt in the core / industry / client hierarchy.

    Invariants:
        - ``industry_id`` is set if and only if the type is ``industry``.
        - At most one ``core`` prompt exists. The service checks this
          before writing and the partial unique index backs it up.

    Attributes:
        name: Admin-facing label
        content: Prompt text sent to the completion provider
        prompt_type: One of core, industry, client
        industry_id: Owning industry for industry prompts
        company_id: Owning company for client prompts
        is_active: Whether composition may pick this prompt
        created_by: Admin that created the prompt
    """

    __tablename__ = "system_prompts"
    __table_args__ = (
        Index(
            SINGLE_CORE_INDEX,
            "prompt_type",
            unique=True,
            postgresql_where=text("prompt_type = 'core'"),
            sqlite_where=text("prompt_type = 'core'"),
        ),
        Index("ix_system_prompts_type_active", "prompt_type", "is_active"),
    )

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    prompt_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    industry_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("industries.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    company_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    created_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<SystemPrompt(id={self.id}, name={self.name}, "
            f"prompt_type={self.prompt_type}, is_active={self.is_active})>"
        )
