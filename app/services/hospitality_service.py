from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auditing import AuditSpan
from app.core.pagination import PageDTO
from app.domain.exceptions import NotFound, Conflict
from app.domain.hospitality import crud
from app.domain.hospitality.models import HospitalityService
from app.domain.hospitality.schemas import HospitalityCreateDTO, HospitalityUpdateDTO, HospitalityReadDTO, \
    HospitalitiesQueryDTO, HospitalityStatsDTO
from app.domain.resolution.scope import LEVELS


async def get_hospitality(db: AsyncSession, hospitality_id: int) -> HospitalityService:
    hospitality = await crud.get_hospitality_by_id(db, hospitality_id)
    if not hospitality:
        raise NotFound("Hospitality not found", ctx={"hospitality_id": hospitality_id})
    return hospitality


async def list_hospitalities(db: AsyncSession, query: HospitalitiesQueryDTO) -> PageDTO[HospitalityReadDTO]:
    hospitalities, total = await crud.list_hospitalities(
        db,
        page=query.page,
        page_size=query.page_size,
        is_active=query.is_active,
        name=query.name
    )
    items = [HospitalityReadDTO.model_validate(h) for h in hospitalities]
    return PageDTO(items=items, total=total, page=query.page, page_size=query.page_size)


async def list_active_hospitalities(db: AsyncSession) -> list[HospitalityService]:
    return await crud.list_active_hospitalities(db)


async def create_hospitality(db: AsyncSession, schema: HospitalityCreateDTO) -> HospitalityService:
    async with AuditSpan(
        scope="HOSPITALITY",
        action="CREATE",
        object_type="hospitality",
        meta={"name": schema.name}
    ) as span:
        hospitality = await crud.create_hospitality(db, schema.model_dump())
        await db.flush()
        span.object_id = hospitality.id
        return hospitality


async def update_hospitality(
        db: AsyncSession,
        hospitality_id: int,
        schema: HospitalityUpdateDTO
) -> HospitalityService:
    async with AuditSpan(
        scope="HOSPITALITY",
        action="UPDATE",
        object_type="hospitality",
        object_id=hospitality_id
    ) as span:
        hospitality = await get_hospitality(db, hospitality_id)
        data = schema.model_dump(exclude_none=True)
        span.meta["fields"] = sorted(data.keys())
        await crud.update_hospitality(hospitality, data)
        await db.flush()
        await db.refresh(hospitality)
        return hospitality


async def delete_hospitality(db: AsyncSession, hospitality_id: int) -> None:
    async with AuditSpan(
        scope="HOSPITALITY",
        action="DELETE",
        object_type="hospitality",
        object_id=hospitality_id
    ):
        hospitality = await get_hospitality(db, hospitality_id)
        await crud.delete_hospitality(db, hospitality)
        try:
            await db.flush()
        except IntegrityError as e:
            raise Conflict(
                "Hospitality is referenced by existing bookings; deactivate it instead",
                ctx={"hospitality_id": hospitality_id}
            ) from e


async def get_hospitality_stats(db: AsyncSession) -> HospitalityStatsDTO:
    by_status = await crud.count_hospitalities(db)
    by_level = await crud.count_assignments_by_level(db)
    legacy = await crud.count_legacy_hospitalities(db)

    active = by_status.get(True, 0)
    inactive = by_status.get(False, 0)
    return HospitalityStatsDTO(
        total=active + inactive,
        active=active,
        inactive=inactive,
        assignments=sum(by_level.values()),
        assignments_by_level={level: by_level.get(level, 0) for level in LEVELS},
        legacy_assignments=legacy
    )
