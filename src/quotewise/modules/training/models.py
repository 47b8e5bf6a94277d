"""Training example database model."""

from uuid import UUID

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quotewise.core.constants import MAX_CATEGORY_LENGTH
from quotewise.core.database.base import Base, CompanyMixin, TimestampMixin, UUIDMixin


class TrainingExample(Base, UUIDMixin, TimestampMixin, CompanyMixin):
    """A request and the answer the company wants for it.

    The best rated examples of a company are shown to the assistant in
    front of every conversation.

    Attributes:
        prompt: What the user asked
        response: The answer to imitate
        category: Free-form grouping, e.g. "decking"
        tags: Free-form labels
        quality: Rating from 1 to 5; unrated examples rank last
        user_id: Author, kept as NULL when the user is deleted
    """

    __tablename__ = "training_data"
    __table_args__ = (
        CheckConstraint(
            "quality IS NULL OR quality BETWEEN 1 AND 5",
            name="ck_training_data_quality",
        ),
    )

    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(
        String(MAX_CATEGORY_LENGTH),
        nullable=True,
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    quality: Mapped[int | None] = mapped_column(Integer, nullable=True)
    user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<TrainingExample(id={self.id}, category={self.category})>"
