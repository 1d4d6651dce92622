import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from app.domain.resolution.scope import Scope, ScopeLevel, check_level


class MarkupType(str, enum.Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class RuleSource(str, enum.Enum):
    HIERARCHICAL = "hierarchical"
    LEGACY = "legacy"


@dataclass(frozen=True)
class MarkupRecord:
    scope: Scope
    level: ScopeLevel
    markup_type: MarkupType
    markup_amount: Decimal
    is_active: bool = True
    source: RuleSource = RuleSource.HIERARCHICAL
    rule_id: int | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", check_level(self.scope, self.level))
        object.__setattr__(self, "markup_type", MarkupType(self.markup_type))
        object.__setattr__(self, "markup_amount", Decimal(str(self.markup_amount)))

    @property
    def dedup_key(self) -> tuple:
        return self.scope.key


@dataclass(frozen=True)
class AssignmentRecord:
    scope: Scope
    level: ScopeLevel
    hospitality_id: int
    is_active: bool = True
    source: RuleSource = RuleSource.HIERARCHICAL
    assignment_id: int | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", check_level(self.scope, self.level))

    @property
    def rule_id(self) -> int | None:
        return self.assignment_id

    @property
    def dedup_key(self) -> tuple:
        return (self.hospitality_id, *self.scope.key)


@dataclass(frozen=True)
class ServiceRecord:
    id: int
    name: str
    description: str | None = None
    price_usd: Decimal | None = None
    is_active: bool = True
    sort_order: int = 0
