from typing import Iterable, Protocol, TypeVar
from app.domain.resolution.scope import LEVELS, Scope, ScopeLevel, ScopePath


class Scoped(Protocol):
    scope: Scope
    level: ScopeLevel


R = TypeVar("R", bound=Scoped)


def scope_matches(path: ScopePath, scope: Scope, level: ScopeLevel) -> bool:
    """A null rule field means "any"; a populated one must equal the path's value.

    Team-scoped rules never match a path without a team, since ``None`` never equals a team id.
    """
    for current in LEVELS[:level.rank + 1]:
        expected = scope.value_at(current)
        if expected is not None and expected != path.value_at(current):
            return False
    return True


def match_rules(path: ScopePath, candidates: Iterable[R]) -> list[R]:
    return [c for c in candidates if scope_matches(path, c.scope, c.level)]
