import logging
from typing import Any, Callable, Iterable, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession
from app.domain.exceptions import InvalidScopeError
from app.domain.hospitality import crud as hospitality_crud
from app.domain.markup import crud as markup_crud
from app.domain.resolution.legacy import (project_legacy_markup, project_legacy_hospitality, merge_markups,
                                          merge_assignments)
from app.domain.resolution.records import MarkupRecord, AssignmentRecord, ServiceRecord
from app.domain.resolution.scope import Scope
from app.domain.resolution.store import RuleFilter


logger = logging.getLogger("app.pricing")

T = TypeVar("T")


def markup_record(row: Any) -> MarkupRecord:
    return MarkupRecord(
        scope=Scope.from_object(row),
        level=row.level,
        markup_type=row.markup_type,
        markup_amount=row.markup_amount,
        is_active=row.is_active,
        rule_id=row.id,
        updated_at=row.updated_at,
    )


def assignment_record(row: Any) -> AssignmentRecord:
    return AssignmentRecord(
        scope=Scope.from_object(row),
        level=row.level,
        hospitality_id=row.hospitality_id,
        is_active=row.is_active,
        assignment_id=row.id,
        updated_at=row.updated_at,
    )


def service_record(row: Any) -> ServiceRecord:
    return ServiceRecord(
        id=row.id,
        name=row.name,
        description=row.description,
        price_usd=row.price_usd,
        is_active=row.is_active,
        sort_order=row.sort_order,
    )


def _project(rows: Iterable[Any], projector: Callable[[Any], T], table: str) -> list[T]:
    records = []
    for row in rows:
        try:
            records.append(projector(row))
        except InvalidScopeError as e:
            # a malformed row must not take the whole listing down
            logger.warning("Skipping %s id=%s: %s", table, getattr(row, "id", None), e, extra={"ctx": e.ctx})
    return records


class SqlRuleStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def fetch_markup_rules(self, rule_filter: RuleFilter) -> list[MarkupRecord]:
        rows = await markup_crud.fetch_markup_rules(self.db, rule_filter)
        hierarchical = _project(rows, markup_record, "markup_rules")

        legacy: list[MarkupRecord] = []
        if rule_filter.event_id is not None:
            legacy_rows = await markup_crud.fetch_legacy_markups(self.db, [rule_filter.event_id])
            legacy = _project(legacy_rows, project_legacy_markup, "ticket_markups")

        return merge_markups(hierarchical, legacy)

    async def fetch_hospitality_assignments(self, rule_filter: RuleFilter) -> list[AssignmentRecord]:
        rows = await hospitality_crud.fetch_assignments(self.db, rule_filter)
        hierarchical = _project(rows, assignment_record, "hospitality_assignments")

        legacy: list[AssignmentRecord] = []
        if rule_filter.event_id is not None:
            legacy_rows = await hospitality_crud.fetch_legacy_hospitalities(self.db, [rule_filter.event_id])
            legacy = _project(legacy_rows, project_legacy_hospitality, "ticket_hospitalities")

        return merge_assignments(hierarchical, legacy)

    async def fetch_hospitality_services(self, ids: Iterable[int]) -> dict[int, ServiceRecord]:
        ids = set(ids)
        if not ids:
            return {}
        rows = await hospitality_crud.get_hospitalities_by_ids(self.db, ids)
        return {row.id: service_record(row) for row in rows}
