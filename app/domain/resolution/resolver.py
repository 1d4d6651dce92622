"""Most-specific-wins resolution for markup rules and hospitality assignments.

Markup is a single-winner concern: one rule prices the ticket. Hospitality is
multi-winner: every service keeps its own most specific assignment, and an
inactive winner hides the service for that ticket.

Within the most specific matched level hierarchical records beat legacy ones.
Anything still tied after that is a data-integrity problem: the newest record
wins and an :class:`AmbiguousWinnerAnomaly` is logged and returned.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping, Sequence, TypeVar
from app.domain.resolution.matcher import match_rules
from app.domain.resolution.records import AssignmentRecord, MarkupRecord, RuleSource, ServiceRecord
from app.domain.resolution.scope import ScopeLevel, ScopePath


logger = logging.getLogger("app.pricing")

R = TypeVar("R", MarkupRecord, AssignmentRecord)


@dataclass(frozen=True)
class AmbiguousWinnerAnomaly:
    concern: str
    ticket_id: str
    level: ScopeLevel
    chosen_id: int | None
    contenders: tuple[tuple[str, int | None], ...]
    hospitality_id: int | None = None

    def as_log_extra(self) -> dict:
        return {
            "concern": self.concern,
            "ticket_id": self.ticket_id,
            "level": self.level.value,
            "chosen_id": self.chosen_id,
            "contenders": [f"{source}:{rid}" for source, rid in self.contenders],
            "hospitality_id": self.hospitality_id,
        }


@dataclass(frozen=True)
class MarkupResolution:
    rule: MarkupRecord | None
    anomalies: tuple[AmbiguousWinnerAnomaly, ...] = ()


@dataclass(frozen=True)
class ResolvedHospitality:
    hospitality_id: int
    name: str
    description: str | None
    price: Decimal | None
    level: ScopeLevel
    source: RuleSource
    sort_order: int = 0


@dataclass(frozen=True)
class HospitalityResolution:
    options: tuple[ResolvedHospitality, ...] = ()
    anomalies: tuple[AmbiguousWinnerAnomaly, ...] = field(default=())

    @property
    def by_id(self) -> dict[int, ResolvedHospitality]:
        return {o.hospitality_id: o for o in self.options}


def _recency(record: MarkupRecord | AssignmentRecord) -> tuple:
    ts = record.updated_at.timestamp() if record.updated_at else float("-inf")
    return ts, record.rule_id or 0


def _most_specific(records: Sequence[R]) -> list[R]:
    top = max(r.level.rank for r in records)
    return [r for r in records if r.level.rank == top]


def _pick_winner(
        path: ScopePath,
        concern: str,
        group: Sequence[R],
        hospitality_id: int | None = None
) -> tuple[R, AmbiguousWinnerAnomaly | None]:
    hierarchical = [r for r in group if r.source is RuleSource.HIERARCHICAL]
    pool = hierarchical or list(group)
    if len(pool) == 1:
        return pool[0], None

    winner = max(pool, key=_recency)
    anomaly = AmbiguousWinnerAnomaly(
        concern=concern,
        ticket_id=path.ticket_id,
        level=winner.level,
        chosen_id=winner.rule_id,
        contenders=tuple((r.source.value, r.rule_id) for r in group),
        hospitality_id=hospitality_id,
    )
    logger.warning(
        "Ambiguous %s winner for ticket=%s at level=%s; picked id=%s out of %s",
        concern, path.ticket_id, winner.level.value, winner.rule_id, len(group),
        extra={"anomaly": anomaly.as_log_extra()}
    )
    return winner, anomaly


def resolve_markup(path: ScopePath, candidates: Iterable[MarkupRecord]) -> MarkupResolution:
    matched = match_rules(path, (c for c in candidates if c.is_active))
    if not matched:
        return MarkupResolution(rule=None)

    winner, anomaly = _pick_winner(path, "markup", _most_specific(matched))
    return MarkupResolution(rule=winner, anomalies=(anomaly,) if anomaly else ())


def resolve_hospitality(
        path: ScopePath,
        assignments: Iterable[AssignmentRecord],
        services: Mapping[int, ServiceRecord]
) -> HospitalityResolution:
    by_service: dict[int, list[AssignmentRecord]] = defaultdict(list)
    for match in match_rules(path, assignments):
        by_service[match.hospitality_id].append(match)

    options: list[ResolvedHospitality] = []
    anomalies: list[AmbiguousWinnerAnomaly] = []
    for hospitality_id, group in by_service.items():
        winner, anomaly = _pick_winner(path, "hospitality", _most_specific(group), hospitality_id)
        if anomaly:
            anomalies.append(anomaly)
        if not winner.is_active:
            continue

        service = services.get(hospitality_id)
        if service is None or not service.is_active:
            logger.debug("Hospitality %s assigned to ticket=%s is unavailable", hospitality_id, path.ticket_id)
            continue

        options.append(ResolvedHospitality(
            hospitality_id=service.id,
            name=service.name,
            description=service.description,
            price=service.price_usd,
            level=winner.level,
            source=winner.source,
            sort_order=service.sort_order,
        ))

    options.sort(key=lambda o: (o.sort_order, o.name, o.hospitality_id))
    return HospitalityResolution(options=tuple(options), anomalies=tuple(anomalies))
