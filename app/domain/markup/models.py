from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Identity, Text, Numeric, Boolean, BigInteger, TIMESTAMP, CheckConstraint, UniqueConstraint, \
    Index, Enum, func, text
from app.core.database import Base
from app.core.db_utils import enum_values
from app.domain.resolution.records import MarkupType
from app.domain.resolution.scope import ScopeLevel
from datetime import datetime
from decimal import Decimal


class MarkupRule(Base):
    __tablename__ = "markup_rules"

    id: Mapped[int] = mapped_column(Identity(always=True), primary_key=True)
    sport_type: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    tournament_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_id: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    ticket_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    level: Mapped[ScopeLevel] = mapped_column(
        Enum(ScopeLevel, name="scope_level", values_callable=enum_values),
        nullable=False
    )
    markup_type: Mapped[MarkupType] = mapped_column(
        Enum(MarkupType, name="markup_type", values_callable=enum_values),
        nullable=False,
        default=MarkupType.FIXED
    )
    markup_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    sport_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    tournament_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    ticket_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    first_applied_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index(
            "uq_markup_rules_active_scope",
            "sport_type", "tournament_id", "team_id", "event_id", "ticket_id",
            unique=True,
            postgresql_nulls_not_distinct=True,
            postgresql_where=text("is_active"),
        ),
        Index("ix_markup_rules_level_active", "level", "is_active"),
        CheckConstraint("markup_amount >= 0", name="chk_markup_rules_amount"),
        CheckConstraint(
            "markup_type <> 'percentage' OR markup_amount <= 100",
            name="chk_markup_rules_percentage_range"
        ),
    )


class LegacyTicketMarkup(Base):
    __tablename__ = "ticket_markups"

    id: Mapped[int] = mapped_column(Identity(always=True), primary_key=True)
    event_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    ticket_id: Mapped[str] = mapped_column(Text, nullable=False)
    markup_price_usd: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    markup_type: Mapped[MarkupType | None] = mapped_column(
        Enum(MarkupType, name="markup_type", values_callable=enum_values),
        nullable=True
    )
    markup_percentage: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    base_price_usd: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    final_price_usd: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("event_id", "ticket_id", name="uq_ticket_markups_event_ticket"),
        CheckConstraint("markup_price_usd >= 0", name="chk_ticket_markups_amount"),
    )
