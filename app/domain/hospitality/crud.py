from typing import Iterable
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db_utils import scope_equals, rule_filter_clause
from app.core.pagination import paginate
from app.domain.resolution.scope import Scope, ScopeLevel
from app.domain.resolution.store import RuleFilter
from .models import HospitalityService, HospitalityAssignment, LegacyTicketHospitality


async def get_hospitality_by_id(db: AsyncSession, hospitality_id: int) -> HospitalityService | None:
    stmt = select(HospitalityService).where(HospitalityService.id == hospitality_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_hospitalities_by_ids(db: AsyncSession, ids: Iterable[int]) -> list[HospitalityService]:
    stmt = select(HospitalityService).where(HospitalityService.id.in_(list(ids)))
    result = await db.execute(stmt)
    return result.scalars().all()


async def list_hospitalities(
        db: AsyncSession,
        page: int,
        page_size: int,
        *,
        is_active: bool | None = None,
        name: str | None = None
) -> tuple[list[HospitalityService], int]:
    where = []
    if is_active is not None:
        where.append(HospitalityService.is_active.is_(is_active))
    if name:
        where.append(HospitalityService.name.ilike(f"%{name}%"))

    return await paginate(
        db,
        select(HospitalityService),
        page=page,
        page_size=page_size,
        where=where,
        order_by=[HospitalityService.sort_order, HospitalityService.name, HospitalityService.id]
    )


async def list_active_hospitalities(db: AsyncSession) -> list[HospitalityService]:
    stmt = (select(HospitalityService)
            .where(HospitalityService.is_active.is_(True))
            .order_by(HospitalityService.sort_order, HospitalityService.name, HospitalityService.id))
    result = await db.execute(stmt)
    return result.scalars().all()


async def create_hospitality(db: AsyncSession, data: dict) -> HospitalityService:
    hospitality = HospitalityService(**data)
    db.add(hospitality)
    return hospitality


async def update_hospitality(hospitality: HospitalityService, data: dict) -> HospitalityService:
    for k, v in data.items():
        setattr(hospitality, k, v)
    return hospitality


async def delete_hospitality(db: AsyncSession, hospitality: HospitalityService) -> None:
    await db.delete(hospitality)


async def count_hospitalities(db: AsyncSession) -> dict[bool, int]:
    stmt = select(HospitalityService.is_active, func.count()).group_by(HospitalityService.is_active)
    result = await db.execute(stmt)
    return {bool(is_active): int(total) for is_active, total in result.all()}


async def get_assignment_by_id(db: AsyncSession, assignment_id: int) -> HospitalityAssignment | None:
    stmt = select(HospitalityAssignment).where(HospitalityAssignment.id == assignment_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def find_assignment_by_scope(
        db: AsyncSession,
        hospitality_id: int,
        scope: Scope
) -> HospitalityAssignment | None:
    stmt = select(HospitalityAssignment).where(
        HospitalityAssignment.hospitality_id == hospitality_id,
        *scope_equals(HospitalityAssignment, scope)
    )
    result = await db.execute(stmt.limit(1))
    return result.scalars().first()


async def list_assignments_at_scope(db: AsyncSession, scope: Scope) -> list[HospitalityAssignment]:
    stmt = (select(HospitalityAssignment)
            .where(*scope_equals(HospitalityAssignment, scope))
            .order_by(HospitalityAssignment.hospitality_id))
    result = await db.execute(stmt)
    return result.scalars().all()


async def list_assignments(
        db: AsyncSession,
        page: int,
        page_size: int,
        *,
        hospitality_id: int | None = None,
        level: ScopeLevel | None = None,
        sport_type: str | None = None,
        tournament_id: str | None = None,
        team_id: str | None = None,
        event_id: str | None = None,
        is_active: bool | None = None,
) -> tuple[list[HospitalityAssignment], int]:
    where = []

    if hospitality_id is not None:
        where.append(HospitalityAssignment.hospitality_id == hospitality_id)
    if level is not None:
        where.append(HospitalityAssignment.level == level)
    if sport_type is not None:
        where.append(HospitalityAssignment.sport_type == sport_type)
    if tournament_id is not None:
        where.append(HospitalityAssignment.tournament_id == tournament_id)
    if team_id is not None:
        where.append(HospitalityAssignment.team_id == team_id)
    if event_id is not None:
        where.append(HospitalityAssignment.event_id == event_id)
    if is_active is not None:
        where.append(HospitalityAssignment.is_active.is_(is_active))

    return await paginate(
        db,
        select(HospitalityAssignment),
        page=page,
        page_size=page_size,
        where=where,
        order_by=[HospitalityAssignment.sport_type, HospitalityAssignment.level, HospitalityAssignment.id]
    )


async def fetch_assignments(db: AsyncSession, rule_filter: RuleFilter) -> list[HospitalityAssignment]:
    # inactive rows are kept: they suppress broader assignments
    stmt = select(HospitalityAssignment).where(rule_filter_clause(HospitalityAssignment, rule_filter))
    result = await db.execute(stmt)
    return result.scalars().all()


async def create_assignment(db: AsyncSession, data: dict) -> HospitalityAssignment:
    assignment = HospitalityAssignment(**data)
    db.add(assignment)
    return assignment


async def delete_assignment(db: AsyncSession, assignment: HospitalityAssignment) -> None:
    await db.delete(assignment)


async def delete_assignments_at_scope(
        db: AsyncSession,
        scope: Scope,
        *,
        keep_hospitality_ids: Iterable[int] = ()
) -> int:
    stmt = delete(HospitalityAssignment).where(*scope_equals(HospitalityAssignment, scope))
    keep = list(keep_hospitality_ids)
    if keep:
        stmt = stmt.where(HospitalityAssignment.hospitality_id.not_in(keep))
    result = await db.execute(stmt)
    return result.rowcount


async def count_assignments_by_level(db: AsyncSession) -> dict[ScopeLevel, int]:
    stmt = select(HospitalityAssignment.level, func.count()).group_by(HospitalityAssignment.level)
    result = await db.execute(stmt)
    return {level: int(total) for level, total in result.all()}


async def count_legacy_hospitalities(db: AsyncSession) -> int:
    total = await db.scalar(select(func.count()).select_from(LegacyTicketHospitality))
    return int(total or 0)


async def fetch_legacy_hospitalities(db: AsyncSession, event_ids: Iterable[str]) -> list[LegacyTicketHospitality]:
    stmt = select(LegacyTicketHospitality).where(LegacyTicketHospitality.event_id.in_(list(event_ids)))
    result = await db.execute(stmt)
    return result.scalars().all()


async def list_legacy_hospitalities_for_event(db: AsyncSession, event_id: str) -> list[LegacyTicketHospitality]:
    stmt = (select(LegacyTicketHospitality)
            .where(LegacyTicketHospitality.event_id == event_id)
            .order_by(LegacyTicketHospitality.ticket_id, LegacyTicketHospitality.hospitality_id))
    result = await db.execute(stmt)
    return result.scalars().all()


async def replace_legacy_hospitalities(
        db: AsyncSession,
        event_id: str,
        ticket_id: str,
        hospitality_ids: Iterable[int]
) -> None:
    await db.execute(delete(LegacyTicketHospitality).where(
        LegacyTicketHospitality.event_id == event_id,
        LegacyTicketHospitality.ticket_id == ticket_id
    ))
    db.add_all([
        LegacyTicketHospitality(event_id=event_id, ticket_id=ticket_id, hospitality_id=hid)
        for hid in hospitality_ids
    ])
