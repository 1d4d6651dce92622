import enum
from sqlalchemy import or_, true
from app.domain.resolution.scope import Scope
from app.domain.resolution.store import RuleFilter


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum members by value so the column holds ``'ticket'``, not ``'TICKET'``."""
    return [member.value for member in enum_cls]


def scope_equals(model, scope: Scope) -> list:
    # NULL must compare equal to NULL here, plain == would never match an unset level
    return [getattr(model, name).is_not_distinct_from(value) for name, value in scope.as_dict().items()]


def rule_filter_clause(model, rule_filter: RuleFilter):
    conditions = []
    if rule_filter.sport_type is not None:
        conditions.append(model.sport_type == rule_filter.sport_type)
    if rule_filter.tournament_id is not None:
        conditions.append(model.tournament_id == rule_filter.tournament_id)
    if rule_filter.event_id is not None:
        conditions.append(model.event_id == rule_filter.event_id)
    return or_(*conditions) if conditions else true()
