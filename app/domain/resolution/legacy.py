"""Read-only projection of the flat ``ticket_markups`` / ``ticket_hospitalities`` tables.

Legacy rows only know ``(event_id, ticket_id)``, so each becomes a ticket-level record with
every broader scope field left empty. Nothing here writes back to the legacy tables.
"""
import logging
from decimal import Decimal
from typing import Any, Iterable
from app.domain.resolution.records import AssignmentRecord, MarkupRecord, MarkupType, RuleSource
from app.domain.resolution.scope import Scope, ScopeLevel


logger = logging.getLogger("app.pricing")


def legacy_scope(event_id: str, ticket_id: str) -> Scope:
    return Scope(event_id=event_id, ticket_id=ticket_id)


def project_legacy_markup(row: Any) -> MarkupRecord:
    # rows written before markup_type existed carry NULL and were always fixed amounts
    markup_type = MarkupType(getattr(row, "markup_type", None) or MarkupType.FIXED)
    amount = row.markup_price_usd

    if markup_type is MarkupType.PERCENTAGE:
        if row.markup_percentage is None:
            logger.warning(
                "Legacy markup id=%s is percentage without a percentage value; using its USD amount",
                getattr(row, "id", None)
            )
            markup_type = MarkupType.FIXED
        else:
            amount = row.markup_percentage

    return MarkupRecord(
        scope=legacy_scope(row.event_id, row.ticket_id),
        level=ScopeLevel.TICKET,
        markup_type=markup_type,
        markup_amount=Decimal(str(amount)),
        source=RuleSource.LEGACY,
        rule_id=getattr(row, "id", None),
        updated_at=getattr(row, "updated_at", None),
    )


def project_legacy_hospitality(row: Any) -> AssignmentRecord:
    return AssignmentRecord(
        scope=legacy_scope(row.event_id, row.ticket_id),
        level=ScopeLevel.TICKET,
        hospitality_id=int(row.hospitality_id),
        source=RuleSource.LEGACY,
        assignment_id=getattr(row, "id", None),
        updated_at=getattr(row, "created_at", None),
    )


def _merge(hierarchical: Iterable, legacy: Iterable) -> list:
    merged = list(hierarchical)
    known = {r.dedup_key for r in merged}
    for record in legacy:
        if record.dedup_key in known:
            continue
        known.add(record.dedup_key)
        merged.append(record)
    return merged


def merge_markups(hierarchical: Iterable[MarkupRecord], legacy: Iterable[MarkupRecord]) -> list[MarkupRecord]:
    """Hierarchical rules plus the legacy rows that were never migrated into them."""
    return _merge(hierarchical, legacy)


def merge_assignments(
        hierarchical: Iterable[AssignmentRecord],
        legacy: Iterable[AssignmentRecord]
) -> list[AssignmentRecord]:
    return _merge(hierarchical, legacy)
