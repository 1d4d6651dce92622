"""create markup, hospitality and legacy per-ticket tables

Revision ID: 3b8f0c2d9e71
Revises:
Create Date: 2026-02-14 10:12:31.208114
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3b8f0c2d9e71"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCOPE_COLUMNS = ("sport_type", "tournament_id", "team_id", "event_id", "ticket_id")
NAME_COLUMNS = ("sport_name", "tournament_name", "team_name", "event_name", "ticket_name")

scope_level = postgresql.ENUM("sport", "tournament", "team", "event", "ticket", name="scope_level", create_type=False)
markup_type = postgresql.ENUM("fixed", "percentage", name="markup_type", create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    scope_level.create(op.get_bind(), checkfirst=True)
    markup_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "hospitalities",
        sa.Column("id", sa.Integer(), sa.Identity(always=True), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price_usd", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("price_usd IS NULL OR price_usd >= 0", name="chk_hospitalities_price"),
    )

    op.create_table(
        "markup_rules",
        sa.Column("id", sa.Integer(), sa.Identity(always=True), primary_key=True),
        *[sa.Column(name, sa.Text(), nullable=True) for name in SCOPE_COLUMNS],
        sa.Column("level", scope_level, nullable=False),
        sa.Column("markup_type", markup_type, nullable=False, server_default="fixed"),
        sa.Column("markup_amount", sa.Numeric(10, 2), nullable=False),
        *[sa.Column(name, sa.Text(), nullable=True) for name in NAME_COLUMNS],
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.BigInteger(), nullable=True),
        sa.Column("updated_by", sa.BigInteger(), nullable=True),
        sa.Column("first_applied_at", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("markup_amount >= 0", name="chk_markup_rules_amount"),
        sa.CheckConstraint(
            "markup_type <> 'percentage' OR markup_amount <= 100",
            name="chk_markup_rules_percentage_range"
        ),
    )
    op.create_index(
        "uq_markup_rules_active_scope",
        "markup_rules",
        list(SCOPE_COLUMNS),
        unique=True,
        postgresql_nulls_not_distinct=True,
        postgresql_where=sa.text("is_active"),
    )
    op.create_index("ix_markup_rules_sport_type", "markup_rules", ["sport_type"])
    op.create_index("ix_markup_rules_event_id", "markup_rules", ["event_id"])
    op.create_index("ix_markup_rules_level_active", "markup_rules", ["level", "is_active"])

    op.create_table(
        "hospitality_assignments",
        sa.Column("id", sa.Integer(), sa.Identity(always=True), primary_key=True),
        sa.Column(
            "hospitality_id",
            sa.Integer(),
            sa.ForeignKey("hospitalities.id", ondelete="CASCADE"),
            nullable=False
        ),
        *[sa.Column(name, sa.Text(), nullable=True) for name in SCOPE_COLUMNS],
        sa.Column("level", scope_level, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *[sa.Column(name, sa.Text(), nullable=True) for name in NAME_COLUMNS],
        sa.Column("created_by", sa.BigInteger(), nullable=True),
        sa.Column("updated_by", sa.BigInteger(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "uq_hospitality_assignments_scope",
        "hospitality_assignments",
        ["hospitality_id", *SCOPE_COLUMNS],
        unique=True,
        postgresql_nulls_not_distinct=True,
    )
    op.create_index("ix_hospitality_assignments_hospitality_id", "hospitality_assignments", ["hospitality_id"])
    op.create_index("ix_hospitality_assignments_sport_type", "hospitality_assignments", ["sport_type"])
    op.create_index("ix_hospitality_assignments_event_id", "hospitality_assignments", ["event_id"])

    op.create_table(
        "ticket_markups",
        sa.Column("id", sa.Integer(), sa.Identity(always=True), primary_key=True),
        sa.Column("event_id", sa.Text(), nullable=False),
        sa.Column("ticket_id", sa.Text(), nullable=False),
        sa.Column("markup_price_usd", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("markup_type", markup_type, nullable=True),
        sa.Column("markup_percentage", sa.Numeric(10, 2), nullable=True),
        sa.Column("base_price_usd", sa.Numeric(10, 2), nullable=True),
        sa.Column("final_price_usd", sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("event_id", "ticket_id", name="uq_ticket_markups_event_ticket"),
        sa.CheckConstraint("markup_price_usd >= 0", name="chk_ticket_markups_amount"),
    )
    op.create_index("ix_ticket_markups_event_id", "ticket_markups", ["event_id"])

    op.create_table(
        "ticket_hospitalities",
        sa.Column("id", sa.Integer(), sa.Identity(always=True), primary_key=True),
        sa.Column("event_id", sa.Text(), nullable=False),
        sa.Column("ticket_id", sa.Text(), nullable=False),
        sa.Column(
            "hospitality_id",
            sa.Integer(),
            sa.ForeignKey("hospitalities.id", ondelete="CASCADE"),
            nullable=False
        ),
        sa.Column("custom_price_usd", sa.Numeric(10, 2), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("event_id", "ticket_id", "hospitality_id", name="uq_ticket_hospitalities_triple"),
    )
    op.create_index("ix_ticket_hospitalities_event_id", "ticket_hospitalities", ["event_id"])
    op.create_index("ix_ticket_hospitalities_hospitality_id", "ticket_hospitalities", ["hospitality_id"])

    # legacy rows become ticket-level assignments; the bridge skips them once migrated
    op.execute(
        """
        INSERT INTO hospitality_assignments (hospitality_id, event_id, ticket_id, level, created_at, updated_at)
        SELECT th.hospitality_id, th.event_id, th.ticket_id, 'ticket', th.created_at, th.created_at
        FROM ticket_hospitalities th
        JOIN hospitalities h ON h.id = th.hospitality_id
        ON CONFLICT DO NOTHING
        """
    )


def downgrade() -> None:
    op.drop_table("ticket_hospitalities")
    op.drop_table("ticket_markups")
    op.drop_table("hospitality_assignments")
    op.drop_table("markup_rules")
    op.drop_table("hospitalities")
    markup_type.drop(op.get_bind(), checkfirst=True)
    scope_level.drop(op.get_bind(), checkfirst=True)
