from app.domain.resolution.matcher import match_rules, scope_matches
from app.domain.resolution.scope import Scope, ScopeLevel, ScopePath
from tests.helper import markup


PATH = ScopePath(sport_type="soccer", tournament_id="epl", team_id="arsenal", event_id="e1", ticket_id="x1")


def test_null_fields_match_anything():
    assert scope_matches(PATH, Scope(sport_type="soccer"), ScopeLevel.SPORT)
    assert scope_matches(PATH, Scope(sport_type="soccer", event_id="e1"), ScopeLevel.EVENT)


def test_populated_field_must_equal_path():
    assert not scope_matches(PATH, Scope(sport_type="tennis"), ScopeLevel.SPORT)
    assert not scope_matches(PATH, Scope(sport_type="soccer", tournament_id="laliga"), ScopeLevel.TOURNAMENT)
    assert not scope_matches(PATH, Scope(sport_type="soccer", ticket_id="x2"), ScopeLevel.TICKET)


def test_team_rule_never_matches_path_without_team():
    path = ScopePath(sport_type="motorsport", tournament_id="f1", event_id="monza", ticket_id="x1")

    assert not scope_matches(path, Scope(sport_type="motorsport", team_id="ferrari"), ScopeLevel.TEAM)


def test_match_rules_returns_only_ancestors():
    rules = [
        markup(sport_type="soccer", rule_id=1),
        markup(sport_type="tennis", rule_id=2),
        markup(sport_type="soccer", tournament_id="epl", rule_id=3),
        markup(sport_type="soccer", event_id="e2", rule_id=4),
        markup(sport_type="soccer", event_id="e1", ticket_id="x1", rule_id=5),
    ]

    matched = match_rules(PATH, rules)

    assert {r.rule_id for r in matched} == {1, 3, 5}


def test_match_rules_no_candidates_is_empty():
    assert match_rules(PATH, []) == []
