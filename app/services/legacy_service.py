"""Admin maintenance of the flat per-ticket tables still written by older tooling."""
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auditing import AuditSpan
from app.core.utils.text_utils import strip_identifier
from app.domain.exceptions import NotFound, InvalidInput
from app.domain.hospitality import crud as hospitality_crud
from app.domain.hospitality.models import LegacyTicketHospitality
from app.domain.hospitality.schemas import LegacyTicketHospitalityReplaceDTO
from app.domain.markup import crud as markup_crud
from app.domain.markup.models import LegacyTicketMarkup
from app.domain.markup.schemas import LegacyTicketMarkupBatchDTO
from app.services.hospitality_service import get_hospitality


def _identifier(value: str, field: str) -> str:
    cleaned = strip_identifier(value)
    if not cleaned:
        raise InvalidInput(f"{field} must not be blank", ctx={"field": field})
    return cleaned


async def upsert_ticket_markups(
        db: AsyncSession,
        event_id: str,
        schema: LegacyTicketMarkupBatchDTO
) -> list[LegacyTicketMarkup]:
    event_id = _identifier(event_id, "event_id")
    async with AuditSpan(
        scope="PRICING",
        action="LEGACY_MARKUP_UPSERT",
        object_type="ticket_markup",
        event_id=event_id,
        meta={"tickets": len(schema.markups)}
    ):
        rows = {}
        for item in schema.markups:
            row = item.model_dump()
            row["ticket_id"] = _identifier(item.ticket_id, "ticket_id")
            # last entry wins when the same ticket is sent twice
            rows[row["ticket_id"]] = row

        await markup_crud.upsert_legacy_markups(db, event_id, list(rows.values()))
        return await markup_crud.list_legacy_markups_for_event(db, event_id)


async def list_ticket_markups(db: AsyncSession, event_id: str) -> list[LegacyTicketMarkup]:
    return await markup_crud.list_legacy_markups_for_event(db, _identifier(event_id, "event_id"))


async def delete_ticket_markup(db: AsyncSession, event_id: str, ticket_id: str) -> None:
    event_id = _identifier(event_id, "event_id")
    ticket_id = _identifier(ticket_id, "ticket_id")
    async with AuditSpan(
        scope="PRICING",
        action="LEGACY_MARKUP_DELETE",
        object_type="ticket_markup",
        event_id=event_id,
        ticket_id=ticket_id
    ) as span:
        row = await markup_crud.get_legacy_markup(db, event_id, ticket_id)
        if not row:
            raise NotFound("Ticket markup not found", ctx={"event_id": event_id, "ticket_id": ticket_id})
        span.object_id = row.id
        await markup_crud.delete_legacy_markup(db, row)
        await db.flush()


async def replace_ticket_hospitalities(
        db: AsyncSession,
        event_id: str,
        ticket_id: str,
        schema: LegacyTicketHospitalityReplaceDTO
) -> list[LegacyTicketHospitality]:
    event_id = _identifier(event_id, "event_id")
    ticket_id = _identifier(ticket_id, "ticket_id")
    hospitality_ids = sorted(set(schema.hospitality_ids))
    async with AuditSpan(
        scope="HOSPITALITY",
        action="LEGACY_ASSIGNMENT_REPLACE",
        object_type="ticket_hospitality",
        event_id=event_id,
        ticket_id=ticket_id,
        meta={"hospitality_ids": hospitality_ids}
    ):
        for hospitality_id in hospitality_ids:
            await get_hospitality(db, hospitality_id)

        await hospitality_crud.replace_legacy_hospitalities(db, event_id, ticket_id, hospitality_ids)
        await db.flush()
        rows = await hospitality_crud.list_legacy_hospitalities_for_event(db, event_id)
        return [row for row in rows if row.ticket_id == ticket_id]


async def list_ticket_hospitalities(db: AsyncSession, event_id: str) -> list[LegacyTicketHospitality]:
    return await hospitality_crud.list_legacy_hospitalities_for_event(db, _identifier(event_id, "event_id"))
