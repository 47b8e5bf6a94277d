"""Quote database model."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quotewise.core.constants import MAX_NAME_LENGTH, MAX_QUOTE_NUMBER_LENGTH, MAX_URL_LENGTH
from quotewise.core.database.base import Base, CompanyMixin, TimestampMixin, UUIDMixin


class QuoteStatus(StrEnum):
    """Quote lifecycle states. Transitions are user driven."""

    DRAFT = "draft"
    PENDING = "pending"
    SENT = "sent"
    APPROVED = "approved"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    INVOICED = "invoiced"


class Quote(Base, UUIDMixin, TimestampMixin, CompanyMixin):
    """A price quote issued by a company to a client.

    Attributes:
        quote_number: Human-facing unique quote number
        client_id: The client the quote is for, if linked
        client_name: Client name as printed on the quote
        description: Free-text scope of work
        amount: Total in minor currency units (cents)
        date: Quote date
        status: Current QuoteStatus value
        user_id: Author of the quote
        xero_quote_id: Linked Xero quote, once exported
    """

    __tablename__ = "quotes"
    __table_args__ = (
        Index("ix_quotes_company_date", "company_id", "date"),
    )

    quote_number: Mapped[str] = mapped_column(
        String(MAX_QUOTE_NUMBER_LENGTH),
        nullable=False,
        unique=True,
    )
    client_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    client_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=QuoteStatus.DRAFT.value,
        nullable=False,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Xero export linkage
    xero_quote_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    xero_quote_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    xero_quote_url: Mapped[str | None] = mapped_column(String(MAX_URL_LENGTH), nullable=True)

    def __repr__(self) -> str:
        return f"<Quote(id={self.id}, quote_number={self.quote_number}, status={self.status})>"
