from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auditing import AuditSpan
from app.core.pagination import PageDTO
from app.domain.exceptions import NotFound, Conflict, InvalidInput, DuplicateScopeError
from app.domain.markup import crud
from app.domain.markup.models import MarkupRule
from app.domain.markup.schemas import MarkupRuleCreateDTO, MarkupRuleUpdateDTO, MarkupRuleReadDTO, \
    MarkupRulesQueryDTO, MarkupResolveRequestDTO, MarkupResolveReadDTO, AppliedMarkupDTO
from app.domain.resolution.composer import compose_price
from app.domain.resolution.records import MarkupRecord, MarkupType
from app.domain.resolution.resolver import resolve_markup
from app.domain.resolution.scope import Scope, validate_write_scope
from app.domain.resolution.store import RuleFilter
from app.services.rule_store import SqlRuleStore


def _duplicate(scope: Scope, existing_id: int | None = None) -> DuplicateScopeError:
    ctx = {"field": "scope", **scope.as_dict()}
    if existing_id is not None:
        ctx["existing_id"] = existing_id
    return DuplicateScopeError("An active markup rule already exists for this scope", ctx=ctx)


def applied_markup_dto(rule: MarkupRecord | None) -> AppliedMarkupDTO | None:
    if rule is None:
        return None
    return AppliedMarkupDTO(
        type=rule.markup_type,
        amount=rule.markup_amount,
        level=rule.level,
        source=rule.source,
        rule_id=rule.rule_id
    )


async def get_markup_rule(db: AsyncSession, rule_id: int) -> MarkupRule:
    rule = await crud.get_markup_rule_by_id(db, rule_id)
    if not rule:
        raise NotFound("Markup rule not found", ctx={"rule_id": rule_id})
    return rule


async def list_markup_rules(db: AsyncSession, query: MarkupRulesQueryDTO) -> PageDTO[MarkupRuleReadDTO]:
    rules, total = await crud.list_markup_rules(
        db,
        page=query.page,
        page_size=query.page_size,
        level=query.level,
        sport_type=query.sport_type,
        tournament_id=query.tournament_id,
        team_id=query.team_id,
        event_id=query.event_id,
        is_active=query.is_active
    )
    items = [MarkupRuleReadDTO.model_validate(rule) for rule in rules]
    return PageDTO(items=items, total=total, page=query.page, page_size=query.page_size)


async def list_markup_rules_for_sport(db: AsyncSession, sport_type: str) -> list[MarkupRule]:
    return await crud.list_markup_rules_by_sport(db, sport_type.strip())


async def create_markup_rule(db: AsyncSession, schema: MarkupRuleCreateDTO, admin_id: int) -> MarkupRule:
    scope = schema.to_scope()
    async with AuditSpan(
        scope="PRICING",
        action="MARKUP_RULE_CREATE",
        object_type="markup_rule",
        sport_type=scope.sport_type,
        event_id=scope.event_id,
        ticket_id=scope.ticket_id,
        meta={"markup_type": schema.markup_type, "markup_amount": str(schema.markup_amount)}
    ) as span:
        level = validate_write_scope(scope, schema.level)
        span.meta["level"] = level.value

        if schema.is_active:
            existing = await crud.find_active_markup_rule_by_scope(db, scope)
            if existing:
                raise _duplicate(scope, existing.id)

        data = schema.model_dump(exclude={"level"})
        data.update(level=level, created_by=admin_id, updated_by=admin_id)

        rule = await crud.create_markup_rule(db, data)
        try:
            await db.flush()
        except IntegrityError as e:
            raise _duplicate(scope) from e

        span.object_id = rule.id
        return rule


async def update_markup_rule(
        db: AsyncSession,
        rule_id: int,
        schema: MarkupRuleUpdateDTO,
        admin_id: int
) -> MarkupRule:
    async with AuditSpan(
        scope="PRICING",
        action="MARKUP_RULE_UPDATE",
        object_type="markup_rule",
        object_id=rule_id
    ) as span:
        rule = await get_markup_rule(db, rule_id)
        span.sport_type, span.event_id, span.ticket_id = rule.sport_type, rule.event_id, rule.ticket_id

        data = schema.model_dump(exclude_none=True)
        span.meta["fields"] = sorted(data.keys())
        if not data:
            return rule

        markup_type = data.get("markup_type", rule.markup_type)
        amount = data.get("markup_amount", rule.markup_amount)
        if markup_type == MarkupType.PERCENTAGE and amount > 100:
            raise InvalidInput(
                "Percentage markup must be between 0 and 100",
                ctx={"field": "markup_amount", "markup_amount": amount}
            )

        scope = Scope.from_object(rule)
        if data.get("is_active") and not rule.is_active:
            existing = await crud.find_active_markup_rule_by_scope(db, scope, exclude_id=rule.id)
            if existing:
                raise _duplicate(scope, existing.id)

        data["updated_by"] = admin_id
        await crud.update_markup_rule(rule, data)
        try:
            await db.flush()
        except IntegrityError as e:
            raise _duplicate(scope) from e

        # the UPDATE expires updated_at
        await db.refresh(rule)
        return rule


async def delete_markup_rule(db: AsyncSession, rule_id: int) -> None:
    async with AuditSpan(
        scope="PRICING",
        action="MARKUP_RULE_DELETE",
        object_type="markup_rule",
        object_id=rule_id
    ) as span:
        rule = await get_markup_rule(db, rule_id)
        span.sport_type, span.event_id, span.ticket_id = rule.sport_type, rule.event_id, rule.ticket_id

        if rule.first_applied_at is not None:
            raise Conflict(
                "Markup rule was already applied to a booking; deactivate it instead",
                ctx={"rule_id": rule_id, "first_applied_at": rule.first_applied_at.isoformat()}
            )

        await crud.delete_markup_rule(db, rule)
        await db.flush()


async def resolve_markup_for_path(db: AsyncSession, schema: MarkupResolveRequestDTO) -> MarkupResolveReadDTO:
    path = schema.to_path()
    currency = schema.currency.upper()
    store = SqlRuleStore(db)
    candidates = await store.fetch_markup_rules(
        RuleFilter(sport_type=path.sport_type, tournament_id=path.tournament_id, event_id=path.event_id)
    )
    resolution = resolve_markup(path, candidates)

    result = MarkupResolveReadDTO(
        ticket_id=path.ticket_id,
        markup_applied=applied_markup_dto(resolution.rule),
        currency=currency,
        ambiguous=bool(resolution.anomalies)
    )
    if schema.base_price is not None:
        composed = compose_price(schema.base_price, currency, resolution.rule)
        result.base_price = composed.base_price
        result.final_price = composed.final_price
    return result
