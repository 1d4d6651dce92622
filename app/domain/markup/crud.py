from datetime import datetime
from typing import Iterable
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db_utils import scope_equals, rule_filter_clause
from app.core.pagination import paginate
from app.domain.resolution.scope import Scope, ScopeLevel
from app.domain.resolution.store import RuleFilter
from .models import MarkupRule, LegacyTicketMarkup


async def get_markup_rule_by_id(db: AsyncSession, rule_id: int) -> MarkupRule | None:
    stmt = select(MarkupRule).where(MarkupRule.id == rule_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def find_active_markup_rule_by_scope(
        db: AsyncSession,
        scope: Scope,
        *,
        exclude_id: int | None = None
) -> MarkupRule | None:
    stmt = select(MarkupRule).where(MarkupRule.is_active.is_(True), *scope_equals(MarkupRule, scope))
    if exclude_id is not None:
        stmt = stmt.where(MarkupRule.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.scalars().first()


async def list_markup_rules(
        db: AsyncSession,
        page: int,
        page_size: int,
        *,
        level: ScopeLevel | None = None,
        sport_type: str | None = None,
        tournament_id: str | None = None,
        team_id: str | None = None,
        event_id: str | None = None,
        is_active: bool | None = None,
) -> tuple[list[MarkupRule], int]:
    where = []

    if level is not None:
        where.append(MarkupRule.level == level)
    if sport_type is not None:
        where.append(MarkupRule.sport_type == sport_type)
    if tournament_id is not None:
        where.append(MarkupRule.tournament_id == tournament_id)
    if team_id is not None:
        where.append(MarkupRule.team_id == team_id)
    if event_id is not None:
        where.append(MarkupRule.event_id == event_id)
    if is_active is not None:
        where.append(MarkupRule.is_active.is_(is_active))

    return await paginate(
        db,
        select(MarkupRule),
        page=page,
        page_size=page_size,
        where=where,
        order_by=[MarkupRule.sport_type, MarkupRule.level, MarkupRule.id]
    )


async def list_markup_rules_by_sport(db: AsyncSession, sport_type: str) -> list[MarkupRule]:
    stmt = (select(MarkupRule)
            .where(MarkupRule.sport_type == sport_type)
            .order_by(MarkupRule.level, MarkupRule.tournament_id, MarkupRule.team_id, MarkupRule.event_id,
                      MarkupRule.ticket_id))
    result = await db.execute(stmt)
    return result.scalars().all()


async def fetch_markup_rules(db: AsyncSession, rule_filter: RuleFilter) -> list[MarkupRule]:
    # inactive rows still shadow the legacy row they were migrated from
    stmt = select(MarkupRule).where(rule_filter_clause(MarkupRule, rule_filter))
    result = await db.execute(stmt)
    return result.scalars().all()


async def create_markup_rule(db: AsyncSession, data: dict) -> MarkupRule:
    rule = MarkupRule(**data)
    db.add(rule)
    return rule


async def update_markup_rule(rule: MarkupRule, data: dict) -> MarkupRule:
    for k, v in data.items():
        setattr(rule, k, v)
    return rule


async def delete_markup_rule(db: AsyncSession, rule: MarkupRule) -> None:
    await db.delete(rule)


async def mark_first_applied(db: AsyncSession, rule_id: int, applied_at: datetime) -> bool:
    stmt = (update(MarkupRule)
            .where(MarkupRule.id == rule_id, MarkupRule.first_applied_at.is_(None))
            .values(first_applied_at=applied_at))
    result = await db.execute(stmt)
    return result.rowcount > 0


async def fetch_legacy_markups(db: AsyncSession, event_ids: Iterable[str]) -> list[LegacyTicketMarkup]:
    stmt = select(LegacyTicketMarkup).where(LegacyTicketMarkup.event_id.in_(list(event_ids)))
    result = await db.execute(stmt)
    return result.scalars().all()


async def list_legacy_markups_for_event(db: AsyncSession, event_id: str) -> list[LegacyTicketMarkup]:
    stmt = (select(LegacyTicketMarkup)
            .where(LegacyTicketMarkup.event_id == event_id)
            .order_by(LegacyTicketMarkup.ticket_id))
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_legacy_markup(db: AsyncSession, event_id: str, ticket_id: str) -> LegacyTicketMarkup | None:
    stmt = select(LegacyTicketMarkup).where(
        LegacyTicketMarkup.event_id == event_id,
        LegacyTicketMarkup.ticket_id == ticket_id
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def upsert_legacy_markups(db: AsyncSession, event_id: str, rows: list[dict]) -> None:
    stmt = insert(LegacyTicketMarkup).values([{"event_id": event_id, **row} for row in rows])
    stmt = stmt.on_conflict_do_update(
        constraint="uq_ticket_markups_event_ticket",
        set_={
            "markup_type": stmt.excluded.markup_type,
            "markup_price_usd": stmt.excluded.markup_price_usd,
            "markup_percentage": stmt.excluded.markup_percentage,
            "base_price_usd": stmt.excluded.base_price_usd,
            "final_price_usd": stmt.excluded.final_price_usd,
            "updated_at": stmt.excluded.updated_at,
        }
    )
    await db.execute(stmt)


async def delete_legacy_markup(db: AsyncSession, row: LegacyTicketMarkup) -> None:
    await db.delete(row)
