"""Industry database model."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quotewise.core.constants import MAX_NAME_LENGTH
from quotewise.core.database.base import Base, TimestampMixin, UUIDMixin


class Industry(Base, UUIDMixin, TimestampMixin):
    """A line of business that companies belong to.

    Industries group companies and own the industry-layer system prompts.
    """

    __tablename__ = "industries"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        unique=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Industry(id={self.id}, name={self.name})>"
