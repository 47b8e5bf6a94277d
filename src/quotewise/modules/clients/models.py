"""Client database model."""

from uuid import UUID

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quotewise.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MAX_PHONE_LENGTH
from quotewise.core.database.base import Base, CompanyMixin, TimestampMixin, UUIDMixin


class Client(Base, UUIDMixin, TimestampMixin, CompanyMixin):
    """A customer of a company, the recipient of quotes."""

    __tablename__ = "clients"

    company_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    contact_first_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    contact_last_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    email: Mapped[str | None] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=True,
    )
    phone: Mapped[str | None] = mapped_column(
        String(MAX_PHONE_LENGTH),
        nullable=True,
    )
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    @property
    def contact_name(self) -> str | None:
        parts = [p for p in (self.contact_first_name, self.contact_last_name) if p]
        return " ".join(parts) or None

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, company_name={self.company_name})>"
