from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Identity, Text, Numeric, Boolean, Integer, BigInteger, ForeignKey, TIMESTAMP, CheckConstraint, \
    UniqueConstraint, Index, Enum, func
from app.core.database import Base
from app.core.db_utils import enum_values
from app.domain.resolution.scope import ScopeLevel
from datetime import datetime
from decimal import Decimal


class HospitalityService(Base):
    __tablename__ = "hospitalities"

    id: Mapped[int] = mapped_column(Identity(always=True), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_usd: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        CheckConstraint("price_usd IS NULL OR price_usd >= 0", name="chk_hospitalities_price"),
    )


class HospitalityAssignment(Base):
    __tablename__ = "hospitality_assignments"

    id: Mapped[int] = mapped_column(Identity(always=True), primary_key=True)
    hospitality_id: Mapped[int] = mapped_column(
        ForeignKey("hospitalities.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    sport_type: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    tournament_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_id: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    ticket_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    level: Mapped[ScopeLevel] = mapped_column(
        Enum(ScopeLevel, name="scope_level", values_callable=enum_values),
        nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sport_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    tournament_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    ticket_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index(
            "uq_hospitality_assignments_scope",
            "hospitality_id", "sport_type", "tournament_id", "team_id", "event_id", "ticket_id",
            unique=True,
            postgresql_nulls_not_distinct=True,
        ),
    )


class LegacyTicketHospitality(Base):
    __tablename__ = "ticket_hospitalities"

    id: Mapped[int] = mapped_column(Identity(always=True), primary_key=True)
    event_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    ticket_id: Mapped[str] = mapped_column(Text, nullable=False)
    hospitality_id: Mapped[int] = mapped_column(
        ForeignKey("hospitalities.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    custom_price_usd: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("event_id", "ticket_id", "hospitality_id", name="uq_ticket_hospitalities_triple"),
    )
