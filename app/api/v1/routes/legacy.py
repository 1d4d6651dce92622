from fastapi import APIRouter, status, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated
from app.core.database import get_db
from app.core.dependencies.auth import require_pricing_admin
from app.domain.hospitality.schemas import LegacyTicketHospitalityReplaceDTO, LegacyTicketHospitalityReadDTO
from app.domain.markup.schemas import LegacyTicketMarkupBatchDTO, LegacyTicketMarkupReadDTO
from app.services import legacy_service


router = APIRouter(prefix="/admin", tags=["legacy"], dependencies=[Depends(require_pricing_admin)])
db_dependency = Annotated[AsyncSession, Depends(get_db)]


@router.put(
    "/ticket-markups/events/{event_id}",
    status_code=status.HTTP_200_OK,
    response_model=list[LegacyTicketMarkupReadDTO]
)
async def upsert_ticket_markups(event_id: str, schema: LegacyTicketMarkupBatchDTO, db: db_dependency):
    return await legacy_service.upsert_ticket_markups(db, event_id, schema)


@router.get(
    "/ticket-markups/events/{event_id}",
    status_code=status.HTTP_200_OK,
    response_model=list[LegacyTicketMarkupReadDTO]
)
async def list_ticket_markups(event_id: str, db: db_dependency):
    return await legacy_service.list_ticket_markups(db, event_id)


@router.delete(
    "/ticket-markups/events/{event_id}/tickets/{ticket_id}",
    status_code=status.HTTP_204_NO_CONTENT
)
async def delete_ticket_markup(event_id: str, ticket_id: str, db: db_dependency):
    await legacy_service.delete_ticket_markup(db, event_id, ticket_id)


@router.put(
    "/ticket-hospitalities/events/{event_id}/tickets/{ticket_id}",
    status_code=status.HTTP_200_OK,
    response_model=list[LegacyTicketHospitalityReadDTO]
)
async def replace_ticket_hospitalities(
        event_id: str,
        ticket_id: str,
        schema: LegacyTicketHospitalityReplaceDTO,
        db: db_dependency
):
    return await legacy_service.replace_ticket_hospitalities(db, event_id, ticket_id, schema)


@router.get(
    "/ticket-hospitalities/events/{event_id}",
    status_code=status.HTTP_200_OK,
    response_model=list[LegacyTicketHospitalityReadDTO]
)
async def list_ticket_hospitalities(event_id: str, db: db_dependency):
    return await legacy_service.list_ticket_hospitalities(db, event_id)
