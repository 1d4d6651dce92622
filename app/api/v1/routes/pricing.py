from fastapi import APIRouter, status, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated
from app.core.config import get_settings
from app.core.database import get_db
from app.domain.hospitality.schemas import HospitalityReadDTO
from app.domain.pricing.schemas import EventPricingRequestDTO, EventPricingReadDTO, QuoteRequestDTO, QuoteReadDTO
from app.services import pricing_service, hospitality_service


router = APIRouter(tags=["pricing"])
db_dependency = Annotated[AsyncSession, Depends(get_db)]


def _cacheable(response: Response) -> None:
    response.headers["Cache-Control"] = f"public, max-age={get_settings().pricing_cache_max_age}"


@router.post(
    "/events/{event_id}/pricing",
    status_code=status.HTTP_200_OK,
    response_model=EventPricingReadDTO
)
async def price_event_tickets(
        event_id: str,
        schema: EventPricingRequestDTO,
        db: db_dependency,
        response: Response
):
    priced = await pricing_service.price_event_tickets(db, event_id, schema)
    _cacheable(response)
    return priced


@router.post(
    "/pricing/quote",
    status_code=status.HTTP_200_OK,
    response_model=QuoteReadDTO
)
async def quote_ticket(schema: QuoteRequestDTO, db: db_dependency, response: Response):
    quote = await pricing_service.quote_ticket(db, schema)
    response.headers["Cache-Control"] = "no-store"
    return quote


@router.get(
    "/hospitalities",
    status_code=status.HTTP_200_OK,
    response_model=list[HospitalityReadDTO]
)
async def list_active_hospitalities(db: db_dependency, response: Response):
    hospitalities = await hospitality_service.list_active_hospitalities(db)
    _cacheable(response)
    return hospitalities
