"""Company database model."""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from quotewise.core.constants import MAX_NAME_LENGTH, MAX_URL_LENGTH
from quotewise.core.database.base import Base, TimestampMixin, UUIDMixin


class Company(Base, UUIDMixin, TimestampMixin):
    """A tenant.

    Users, clients, quotes and client-layer prompts are scoped to a
    company through their ``company_id`` column.

    Attributes:
        name: Company display name
        logo: Optional logo URL
        industry_id: The industry the company operates in
        is_active: Whether the company is enabled
    """

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    logo: Mapped[str | None] = mapped_column(
        String(MAX_URL_LENGTH),
        nullable=True,
    )
    industry_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("industries.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name={self.name})>"
