from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auditing import AuditSpan
from app.core.pagination import PageDTO
from app.domain.exceptions import NotFound, InvalidInput, DuplicateScopeError
from app.domain.hospitality import crud
from app.domain.hospitality.models import HospitalityAssignment
from app.domain.hospitality.schemas import AssignmentCreateDTO, AssignmentBatchCreateDTO, AssignmentReplaceDTO, \
    AssignmentReadDTO, AssignmentsQueryDTO, AssignmentBatchResultDTO, AssignmentResolveRequestDTO, \
    AssignmentResolveReadDTO, ResolvedHospitalityDTO
from app.domain.resolution.resolver import resolve_hospitality
from app.domain.resolution.schemas import ScopeQueryDTO, DisplayNamesDTO
from app.domain.resolution.scope import Scope, ScopeLevel, validate_write_scope
from app.domain.resolution.store import RuleFilter
from app.services.hospitality_service import get_hospitality
from app.services.rule_store import SqlRuleStore


def _duplicate(hospitality_id: int, scope: Scope, existing_id: int | None = None) -> DuplicateScopeError:
    ctx = {"field": "scope", "hospitality_id": hospitality_id, **scope.as_dict()}
    if existing_id is not None:
        ctx["existing_id"] = existing_id
    return DuplicateScopeError("This hospitality is already assigned at this scope", ctx=ctx)


def _display_names(schema: DisplayNamesDTO) -> dict:
    return schema.model_dump(include=set(DisplayNamesDTO.model_fields))


async def _require_hospitalities(db: AsyncSession, ids: set[int]) -> None:
    found = {h.id for h in await crud.get_hospitalities_by_ids(db, ids)} if ids else set()
    missing = sorted(ids - found)
    if missing:
        raise NotFound("Hospitality not found", ctx={"hospitality_ids": missing})


def _new_assignment_data(
        hospitality_id: int,
        scope: Scope,
        level: ScopeLevel,
        names: dict,
        admin_id: int,
        is_active: bool = True
) -> dict:
    return {
        "hospitality_id": hospitality_id,
        **scope.as_dict(),
        **names,
        "level": level,
        "is_active": is_active,
        "created_by": admin_id,
        "updated_by": admin_id,
    }


async def get_assignment(db: AsyncSession, assignment_id: int) -> HospitalityAssignment:
    assignment = await crud.get_assignment_by_id(db, assignment_id)
    if not assignment:
        raise NotFound("Hospitality assignment not found", ctx={"assignment_id": assignment_id})
    return assignment


async def list_assignments(db: AsyncSession, query: AssignmentsQueryDTO) -> PageDTO[AssignmentReadDTO]:
    assignments, total = await crud.list_assignments(
        db,
        page=query.page,
        page_size=query.page_size,
        hospitality_id=query.hospitality_id,
        level=query.level,
        sport_type=query.sport_type,
        tournament_id=query.tournament_id,
        team_id=query.team_id,
        event_id=query.event_id,
        is_active=query.is_active
    )
    items = [AssignmentReadDTO.model_validate(a) for a in assignments]
    return PageDTO(items=items, total=total, page=query.page, page_size=query.page_size)


async def list_assignments_at_scope(db: AsyncSession, query: ScopeQueryDTO) -> list[HospitalityAssignment]:
    scope = query.to_scope()
    validate_write_scope(scope, query.level)
    return await crud.list_assignments_at_scope(db, scope)


async def create_assignment(
        db: AsyncSession,
        schema: AssignmentCreateDTO,
        admin_id: int
) -> HospitalityAssignment:
    scope = schema.to_scope()
    async with AuditSpan(
        scope="HOSPITALITY",
        action="ASSIGNMENT_CREATE",
        object_type="hospitality_assignment",
        sport_type=scope.sport_type,
        event_id=scope.event_id,
        ticket_id=scope.ticket_id,
        meta={"hospitality_id": schema.hospitality_id, "is_active": schema.is_active}
    ) as span:
        level = validate_write_scope(scope, schema.level)
        await get_hospitality(db, schema.hospitality_id)

        existing = await crud.find_assignment_by_scope(db, schema.hospitality_id, scope)
        if existing:
            raise _duplicate(schema.hospitality_id, scope, existing.id)

        data = _new_assignment_data(
            schema.hospitality_id, scope, level, _display_names(schema), admin_id, schema.is_active
        )
        assignment = await crud.create_assignment(db, data)
        try:
            await db.flush()
        except IntegrityError as e:
            raise _duplicate(schema.hospitality_id, scope) from e

        span.object_id = assignment.id
        return assignment


async def create_assignments_batch(
        db: AsyncSession,
        schema: AssignmentBatchCreateDTO,
        admin_id: int
) -> AssignmentBatchResultDTO:
    scope = schema.to_scope()
    async with AuditSpan(
        scope="HOSPITALITY",
        action="ASSIGNMENT_BATCH_CREATE",
        object_type="hospitality_assignment",
        sport_type=scope.sport_type,
        event_id=scope.event_id,
        ticket_id=scope.ticket_id,
        meta={"hospitality_ids": sorted(set(schema.hospitality_ids))}
    ) as span:
        level = validate_write_scope(scope, schema.level)
        wanted = set(schema.hospitality_ids)
        await _require_hospitalities(db, wanted)

        names = _display_names(schema)
        created, skipped = [], []
        for hospitality_id in sorted(wanted):
            if await crud.find_assignment_by_scope(db, hospitality_id, scope):
                skipped.append(hospitality_id)
                continue
            created.append(await crud.create_assignment(
                db, _new_assignment_data(hospitality_id, scope, level, names, admin_id)
            ))

        try:
            await db.flush()
        except IntegrityError as e:
            raise DuplicateScopeError(
                "Assignments at this scope were changed concurrently",
                ctx={"field": "scope", **scope.as_dict()}
            ) from e

        span.meta["created"] = len(created)
        span.meta["skipped"] = skipped
        return AssignmentBatchResultDTO(
            created=[AssignmentReadDTO.model_validate(a) for a in created],
            skipped_hospitality_ids=skipped
        )


async def replace_assignments_at_scope(
        db: AsyncSession,
        schema: AssignmentReplaceDTO,
        admin_id: int
) -> list[HospitalityAssignment]:
    scope = schema.to_scope()
    async with AuditSpan(
        scope="HOSPITALITY",
        action="ASSIGNMENT_REPLACE",
        object_type="hospitality_assignment",
        sport_type=scope.sport_type,
        event_id=scope.event_id,
        ticket_id=scope.ticket_id,
        meta={
            "hospitality_ids": sorted(set(schema.hospitality_ids)),
            "suppressed_ids": sorted(set(schema.suppressed_ids))
        }
    ) as span:
        level = validate_write_scope(scope, schema.level)
        active_ids = set(schema.hospitality_ids)
        suppressed_ids = set(schema.suppressed_ids)
        overlap = sorted(active_ids & suppressed_ids)
        if overlap:
            raise InvalidInput(
                "A hospitality cannot be both assigned and suppressed at one scope",
                ctx={"field": "suppressed_ids", "hospitality_ids": overlap}
            )
        await _require_hospitalities(db, active_ids | suppressed_ids)

        removed = await crud.delete_assignments_at_scope(
            db, scope, keep_hospitality_ids=active_ids | suppressed_ids
        )
        span.meta["removed"] = removed

        current = {a.hospitality_id: a for a in await crud.list_assignments_at_scope(db, scope)}
        names = _display_names(schema)
        toggled = []
        for hospitality_id in sorted(active_ids | suppressed_ids):
            is_active = hospitality_id in active_ids
            assignment = current.get(hospitality_id)
            if assignment is None:
                current[hospitality_id] = await crud.create_assignment(
                    db, _new_assignment_data(hospitality_id, scope, level, names, admin_id, is_active)
                )
            elif assignment.is_active != is_active:
                assignment.is_active = is_active
                assignment.updated_by = admin_id
                toggled.append(assignment)

        try:
            await db.flush()
        except IntegrityError as e:
            raise DuplicateScopeError(
                "Assignments at this scope were changed concurrently",
                ctx={"field": "scope", **scope.as_dict()}
            ) from e

        for assignment in toggled:
            await db.refresh(assignment)
        return [current[hid] for hid in sorted(current)]


async def delete_assignments_at_scope(db: AsyncSession, query: ScopeQueryDTO) -> int:
    scope = query.to_scope()
    async with AuditSpan(
        scope="HOSPITALITY",
        action="ASSIGNMENT_SCOPE_DELETE",
        object_type="hospitality_assignment",
        sport_type=scope.sport_type,
        event_id=scope.event_id,
        ticket_id=scope.ticket_id
    ) as span:
        validate_write_scope(scope, query.level)
        removed = await crud.delete_assignments_at_scope(db, scope)
        span.meta["removed"] = removed
        return removed


async def delete_assignment(db: AsyncSession, assignment_id: int) -> None:
    async with AuditSpan(
        scope="HOSPITALITY",
        action="ASSIGNMENT_DELETE",
        object_type="hospitality_assignment",
        object_id=assignment_id
    ) as span:
        assignment = await get_assignment(db, assignment_id)
        span.sport_type, span.event_id = assignment.sport_type, assignment.event_id
        span.ticket_id = assignment.ticket_id
        span.meta["hospitality_id"] = assignment.hospitality_id
        await crud.delete_assignment(db, assignment)
        await db.flush()


async def resolve_for_path(db: AsyncSession, schema: AssignmentResolveRequestDTO) -> AssignmentResolveReadDTO:
    path = schema.to_path()
    store = SqlRuleStore(db)
    assignments = await store.fetch_hospitality_assignments(
        RuleFilter(sport_type=path.sport_type, tournament_id=path.tournament_id, event_id=path.event_id)
    )
    services = await store.fetch_hospitality_services({a.hospitality_id for a in assignments})
    resolution = resolve_hospitality(path, assignments, services)

    return AssignmentResolveReadDTO(
        ticket_id=path.ticket_id,
        options=[ResolvedHospitalityDTO.model_validate(option) for option in resolution.options],
        ambiguous=bool(resolution.anomalies)
    )
