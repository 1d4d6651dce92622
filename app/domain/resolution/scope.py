"""Scope hierarchy shared by markup rules and hospitality assignments.

A scope is the five-field tuple ``(sport_type, tournament_id, team_id, event_id, ticket_id)``.
Rules declare a scope where only the fields at or above their level are populated; tickets
being priced carry a fully populated :class:`ScopePath` (minus the parts their sport lacks).
"""
import enum
from dataclasses import dataclass, fields
from typing import Any, Mapping
from app.domain.exceptions import InvalidScopeError


class ScopeLevel(str, enum.Enum):
    SPORT = "sport"
    TOURNAMENT = "tournament"
    TEAM = "team"
    EVENT = "event"
    TICKET = "ticket"

    @property
    def rank(self) -> int:
        return LEVELS.index(self)

    @property
    def field(self) -> str:
        return LEVEL_FIELDS[self]


# least specific first
LEVELS: tuple[ScopeLevel, ...] = tuple(ScopeLevel)

LEVEL_FIELDS: dict[ScopeLevel, str] = {
    ScopeLevel.SPORT: "sport_type",
    ScopeLevel.TOURNAMENT: "tournament_id",
    ScopeLevel.TEAM: "team_id",
    ScopeLevel.EVENT: "event_id",
    ScopeLevel.TICKET: "ticket_id",
}

SCOPE_FIELDS: tuple[str, ...] = tuple(LEVEL_FIELDS[level] for level in LEVELS)


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class Scope:
    sport_type: str | None = None
    tournament_id: str | None = None
    team_id: str | None = None
    event_id: str | None = None
    ticket_id: str | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            object.__setattr__(self, f.name, _clean(getattr(self, f.name)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Scope":
        return cls(**{name: data.get(name) for name in SCOPE_FIELDS})

    @classmethod
    def from_object(cls, obj: Any) -> "Scope":
        return cls(**{name: getattr(obj, name, None) for name in SCOPE_FIELDS})

    def value_at(self, level: ScopeLevel) -> str | None:
        return getattr(self, level.field)

    @property
    def key(self) -> tuple[str | None, ...]:
        return tuple(getattr(self, name) for name in SCOPE_FIELDS)

    @property
    def most_specific_level(self) -> ScopeLevel | None:
        for level in reversed(LEVELS):
            if self.value_at(level) is not None:
                return level
        return None

    def as_dict(self) -> dict[str, str | None]:
        return dict(zip(SCOPE_FIELDS, self.key))


def derive_level(scope: Scope) -> ScopeLevel:
    level = scope.most_specific_level
    if level is None:
        raise InvalidScopeError(
            "At least one scope identifier must be provided",
            ctx={"fields": list(SCOPE_FIELDS)}
        )
    return level


def check_level(scope: Scope, declared: ScopeLevel | str) -> ScopeLevel:
    try:
        declared = ScopeLevel(declared)
    except ValueError:
        raise InvalidScopeError("Unknown scope level", ctx={"level": declared})

    actual = derive_level(scope)
    if actual is not declared:
        raise InvalidScopeError(
            f"Scope fields describe a {actual.value}-level scope, not {declared.value}",
            ctx={"field": "level", "declared": declared, "derived": actual}
        )
    return declared


@dataclass(frozen=True)
class ScopePath:
    """Concrete identity of one ticket being priced."""

    sport_type: str
    ticket_id: str
    tournament_id: str | None = None
    team_id: str | None = None
    event_id: str | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            object.__setattr__(self, f.name, _clean(getattr(self, f.name)))
        if self.sport_type is None:
            raise InvalidScopeError("Scope path requires sport_type", ctx={"field": "sport_type"})
        if self.ticket_id is None:
            raise InvalidScopeError("Scope path requires ticket_id", ctx={"field": "ticket_id"})

    def value_at(self, level: ScopeLevel) -> str | None:
        return getattr(self, level.field)


def validate_write_scope(scope: Scope, declared: ScopeLevel | str | None = None) -> ScopeLevel:
    """Level for a rule about to be stored. Every stored hierarchical rule names its sport."""
    if scope.sport_type is None:
        raise InvalidScopeError("sport_type is required", ctx={"field": "sport_type"})
    if declared is None:
        return derive_level(scope)
    return check_level(scope, declared)
