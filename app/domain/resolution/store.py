from dataclasses import dataclass
from typing import Iterable, Protocol
from app.domain.exceptions import DuplicateScopeError
from app.domain.resolution.legacy import merge_assignments, merge_markups
from app.domain.resolution.records import AssignmentRecord, MarkupRecord, RuleSource, ServiceRecord
from app.domain.resolution.scope import Scope


@dataclass(frozen=True)
class RuleFilter:
    """Coarse pre-fetch filter; exact matching happens in the matcher."""

    sport_type: str | None = None
    tournament_id: str | None = None
    event_id: str | None = None

    def admits(self, scope: Scope) -> bool:
        if self.sport_type is None and self.tournament_id is None and self.event_id is None:
            return True
        return (
            (self.sport_type is not None and scope.sport_type == self.sport_type)
            or (self.tournament_id is not None and scope.tournament_id == self.tournament_id)
            or (self.event_id is not None and scope.event_id == self.event_id)
        )


class RuleStore(Protocol):
    async def fetch_markup_rules(self, rule_filter: RuleFilter) -> list[MarkupRecord]: ...

    async def fetch_hospitality_assignments(self, rule_filter: RuleFilter) -> list[AssignmentRecord]: ...

    async def fetch_hospitality_services(self, ids: Iterable[int]) -> dict[int, ServiceRecord]: ...


class InMemoryRuleStore:
    """Snapshot store; enforces the same write-time uniqueness as the database indexes."""

    def __init__(self) -> None:
        self._markups: list[MarkupRecord] = []
        self._assignments: list[AssignmentRecord] = []
        self._services: dict[int, ServiceRecord] = {}

    def add_markup(self, record: MarkupRecord) -> MarkupRecord:
        if record.is_active and any(
            r.is_active and r.source is record.source and r.dedup_key == record.dedup_key
            for r in self._markups
        ):
            raise DuplicateScopeError(
                "An active markup rule already exists for this scope",
                ctx={"source": record.source, **record.scope.as_dict()}
            )
        self._markups.append(record)
        return record

    def add_assignment(self, record: AssignmentRecord) -> AssignmentRecord:
        if any(r.source is record.source and r.dedup_key == record.dedup_key for r in self._assignments):
            raise DuplicateScopeError(
                "This hospitality is already assigned at this scope",
                ctx={"hospitality_id": record.hospitality_id, **record.scope.as_dict()}
            )
        self._assignments.append(record)
        return record

    def add_service(self, service: ServiceRecord) -> ServiceRecord:
        self._services[service.id] = service
        return service

    def _split(self, records, rule_filter: RuleFilter) -> tuple[list, list]:
        admitted = [r for r in records if rule_filter.admits(r.scope)]
        return (
            [r for r in admitted if r.source is RuleSource.HIERARCHICAL],
            [r for r in admitted if r.source is RuleSource.LEGACY],
        )

    async def fetch_markup_rules(self, rule_filter: RuleFilter) -> list[MarkupRecord]:
        return merge_markups(*self._split(self._markups, rule_filter))

    async def fetch_hospitality_assignments(self, rule_filter: RuleFilter) -> list[AssignmentRecord]:
        return merge_assignments(*self._split(self._assignments, rule_filter))

    async def fetch_hospitality_services(self, ids: Iterable[int]) -> dict[int, ServiceRecord]:
        return {i: self._services[i] for i in set(ids) if i in self._services}
