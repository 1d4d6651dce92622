"""Storefront-facing pricing: resolve every ticket of a listing against one rule snapshot."""
import logging
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auditing import AuditSpan
from app.domain.exceptions import AppError, InvalidInput
from app.domain.hospitality.schemas import HospitalityOptionDTO
from app.domain.markup import crud as markup_crud
from app.domain.pricing.schemas import EventPricingRequestDTO, EventPricingReadDTO, PricedTicketDTO, \
    TicketPriceInputDTO, QuoteRequestDTO, QuoteReadDTO
from app.domain.resolution.composer import compose_price, hospitality_subtotal, quantize_money
from app.domain.resolution.records import AssignmentRecord, MarkupRecord, RuleSource, ServiceRecord
from app.domain.resolution.resolver import resolve_markup, resolve_hospitality
from app.domain.resolution.scope import ScopePath
from app.domain.resolution.store import RuleFilter, RuleStore
from app.services.markup_rule_service import applied_markup_dto
from app.services.rule_store import SqlRuleStore


logger = logging.getLogger("app.pricing")


def _price_ticket(
        event_id: str,
        schema: EventPricingRequestDTO,
        ticket: TicketPriceInputDTO,
        markups: list[MarkupRecord],
        assignments: list[AssignmentRecord],
        services: dict[int, ServiceRecord]
) -> PricedTicketDTO:
    priced = PricedTicketDTO(
        ticket_id=ticket.ticket_id,
        event_id=event_id,
        base_price=ticket.base_price,
        final_price=ticket.base_price,
        currency=ticket.currency,
    )
    try:
        path = ScopePath(
            sport_type=schema.sport_type,
            ticket_id=ticket.ticket_id,
            tournament_id=schema.tournament_id,
            team_id=schema.team_id,
            event_id=event_id,
        )
    except AppError:
        logger.exception("Unpriceable ticket event=%s ticket=%s; using base price", event_id, ticket.ticket_id)
        return priced

    # markup and hospitality degrade independently
    try:
        markup = resolve_markup(path, markups)
        composed = compose_price(ticket.base_price, ticket.currency, markup.rule)
    except (AppError, ArithmeticError):
        logger.exception(
            "Markup failed for event=%s ticket=%s; falling back to base price", event_id, ticket.ticket_id
        )
    else:
        priced.base_price = composed.base_price
        priced.final_price = composed.final_price
        priced.currency = composed.currency
        priced.markup_applied = applied_markup_dto(markup.rule)

    try:
        hospitality = resolve_hospitality(path, assignments, services)
    except (AppError, ArithmeticError):
        logger.exception("Hospitality failed for event=%s ticket=%s", event_id, ticket.ticket_id)
    else:
        priced.hospitality_options = [HospitalityOptionDTO.model_validate(option) for option in hospitality.options]

    return priced


async def _snapshot(
        store: RuleStore,
        rule_filter: RuleFilter
) -> tuple[list[MarkupRecord], list[AssignmentRecord], dict[int, ServiceRecord]]:
    markups = await store.fetch_markup_rules(rule_filter)
    assignments = await store.fetch_hospitality_assignments(rule_filter)
    services = await store.fetch_hospitality_services({a.hospitality_id for a in assignments})
    return markups, assignments, services


async def price_event_tickets(
        db: AsyncSession,
        event_id: str,
        schema: EventPricingRequestDTO,
        store: RuleStore | None = None
) -> EventPricingReadDTO:
    event_id = event_id.strip()
    store = store or SqlRuleStore(db)
    rule_filter = RuleFilter(sport_type=schema.sport_type, tournament_id=schema.tournament_id, event_id=event_id)
    markups, assignments, services = await _snapshot(store, rule_filter)

    tickets = [
        _price_ticket(event_id, schema, ticket, markups, assignments, services)
        for ticket in schema.tickets
    ]
    logger.debug(
        "Priced %s tickets for event=%s with %s markup rules and %s assignments",
        len(tickets), event_id, len(markups), len(assignments)
    )
    return EventPricingReadDTO(event_id=event_id, tickets=tickets)


async def quote_ticket(db: AsyncSession, schema: QuoteRequestDTO, store: RuleStore | None = None) -> QuoteReadDTO:
    path = schema.to_path()
    store = store or SqlRuleStore(db)
    rule_filter = RuleFilter(sport_type=path.sport_type, tournament_id=path.tournament_id, event_id=path.event_id)
    markups, assignments, services = await _snapshot(store, rule_filter)

    markup = resolve_markup(path, markups)
    composed = compose_price(schema.base_price, schema.currency, markup.rule)
    available = resolve_hospitality(path, assignments, services).by_id

    requested = list(dict.fromkeys(schema.hospitality_ids))
    unavailable = [hid for hid in requested if hid not in available]
    if unavailable:
        raise InvalidInput(
            "Hospitality not available for this ticket",
            ctx={"field": "hospitality_ids", "hospitality_ids": unavailable, "ticket_id": path.ticket_id}
        )
    selected = [available[hid] for hid in requested]

    tickets_subtotal = quantize_money(composed.final_price * schema.quantity, schema.currency)
    hospitality_total = hospitality_subtotal(selected, schema.quantity)
    # hospitality is priced in USD only; other currencies are not converted here
    total = tickets_subtotal + hospitality_total if schema.currency == "USD" else None

    if schema.finalize:
        await _finalize(db, path, markup.rule)

    return QuoteReadDTO(
        ticket_id=path.ticket_id,
        currency=schema.currency,
        quantity=schema.quantity,
        base_price=composed.base_price,
        unit_price=composed.final_price,
        markup_applied=applied_markup_dto(markup.rule),
        tickets_subtotal=tickets_subtotal,
        hospitality=[HospitalityOptionDTO.model_validate(option) for option in selected],
        hospitality_subtotal_usd=hospitality_total,
        total=total,
    )


async def _finalize(db: AsyncSession, path: ScopePath, rule: MarkupRecord | None) -> None:
    if rule is None or rule.source is not RuleSource.HIERARCHICAL or rule.rule_id is None:
        return

    async with AuditSpan(
        scope="PRICING",
        action="MARKUP_RULE_APPLIED",
        object_type="markup_rule",
        object_id=rule.rule_id,
        sport_type=path.sport_type,
        event_id=path.event_id,
        ticket_id=path.ticket_id
    ) as span:
        stamped = await markup_crud.mark_first_applied(db, rule.rule_id, datetime.now(timezone.utc))
        span.meta["first_application"] = stamped
