from fastapi import APIRouter, status, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated
from app.core.database import get_db
from app.core.dependencies.auth import require_pricing_admin
from app.core.pagination import PageDTO
from app.domain.hospitality.schemas import HospitalityCreateDTO, HospitalityUpdateDTO, HospitalityReadDTO, \
    HospitalitiesQueryDTO, HospitalityStatsDTO
from app.services import hospitality_service


router = APIRouter(prefix="/admin/hospitalities", tags=["hospitalities"])
db_dependency = Annotated[AsyncSession, Depends(get_db)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=HospitalityReadDTO,
    dependencies=[Depends(require_pricing_admin)]
)
async def create_hospitality(schema: HospitalityCreateDTO, db: db_dependency, response: Response):
    hospitality = await hospitality_service.create_hospitality(db, schema)
    response.headers["Location"] = f"{router.prefix}/{hospitality.id}"
    return hospitality


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=PageDTO[HospitalityReadDTO],
    dependencies=[Depends(require_pricing_admin)]
)
async def list_hospitalities(db: db_dependency, query: Annotated[HospitalitiesQueryDTO, Depends()]):
    return await hospitality_service.list_hospitalities(db, query)


@router.get(
    "/stats",
    status_code=status.HTTP_200_OK,
    response_model=HospitalityStatsDTO,
    dependencies=[Depends(require_pricing_admin)]
)
async def get_hospitality_stats(db: db_dependency):
    return await hospitality_service.get_hospitality_stats(db)


@router.get(
    "/{hospitality_id}",
    status_code=status.HTTP_200_OK,
    response_model=HospitalityReadDTO,
    dependencies=[Depends(require_pricing_admin)]
)
async def get_hospitality(hospitality_id: int, db: db_dependency):
    return await hospitality_service.get_hospitality(db, hospitality_id)


@router.patch(
    "/{hospitality_id}",
    status_code=status.HTTP_200_OK,
    response_model=HospitalityReadDTO,
    dependencies=[Depends(require_pricing_admin)]
)
async def update_hospitality(hospitality_id: int, schema: HospitalityUpdateDTO, db: db_dependency):
    return await hospitality_service.update_hospitality(db, hospitality_id, schema)


@router.delete(
    "/{hospitality_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_pricing_admin)]
)
async def delete_hospitality(hospitality_id: int, db: db_dependency):
    await hospitality_service.delete_hospitality(db, hospitality_id)
