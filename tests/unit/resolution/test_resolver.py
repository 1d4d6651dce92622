import logging
from decimal import Decimal
from app.domain.resolution.records import MarkupType, RuleSource
from app.domain.resolution.resolver import resolve_markup, resolve_hospitality
from app.domain.resolution.scope import ScopeLevel, ScopePath
from tests.helper import markup, assignment, service, ts


SOCCER = ScopePath(sport_type="soccer", tournament_id="epl", team_id="arsenal", event_id="e1", ticket_id="x1")
F1 = ScopePath(sport_type="motorsport", tournament_id="f1", event_id="monza", ticket_id="grandstand")


def test_no_candidates_means_no_markup():
    resolution = resolve_markup(SOCCER, [])

    assert resolution.rule is None
    assert resolution.anomalies == ()


def test_most_specific_level_wins():
    rules = [
        markup("5.00", sport_type="soccer", rule_id=1),
        markup("7.00", sport_type="soccer", tournament_id="epl", rule_id=2),
        markup("15", MarkupType.PERCENTAGE, sport_type="soccer", tournament_id="epl", event_id="e1", rule_id=3),
    ]

    resolution = resolve_markup(SOCCER, rules)

    assert resolution.rule.rule_id == 3
    assert resolution.rule.level is ScopeLevel.EVENT


def test_ticket_rule_beats_event_rule():
    rules = [
        markup("5.00", sport_type="soccer", event_id="e1", rule_id=1),
        markup("9.00", sport_type="soccer", event_id="e1", ticket_id="x1", rule_id=2),
    ]

    assert resolve_markup(SOCCER, rules).rule.rule_id == 2


def test_inactive_rules_never_participate():
    rules = [
        markup("5.00", sport_type="soccer", rule_id=1),
        markup("9.00", sport_type="soccer", event_id="e1", rule_id=2, is_active=False),
    ]

    assert resolve_markup(SOCCER, rules).rule.rule_id == 1


def test_hierarchical_beats_legacy_at_same_level(caplog):
    legacy = markup("3.00", event_id="e1", ticket_id="x1", rule_id=50, source=RuleSource.LEGACY, updated_at=ts(20))
    hierarchical = markup("8.00", sport_type="soccer", event_id="e1", ticket_id="x1", rule_id=7, updated_at=ts(1))

    with caplog.at_level(logging.WARNING, logger="app.pricing"):
        resolution = resolve_markup(SOCCER, [legacy, hierarchical])

    assert resolution.rule.rule_id == 7
    assert resolution.rule.source is RuleSource.HIERARCHICAL
    assert resolution.anomalies == ()
    assert caplog.records == []


def test_legacy_applies_when_no_hierarchical_rule():
    legacy = markup("3.00", event_id="e1", ticket_id="x1", rule_id=50, source=RuleSource.LEGACY)

    resolution = resolve_markup(SOCCER, [legacy, markup("1.00", sport_type="soccer", rule_id=1)])

    assert resolution.rule.source is RuleSource.LEGACY
    assert resolution.rule.markup_amount == Decimal("3.00")


def test_tie_picks_newest_and_reports_anomaly(caplog):
    older = markup("5.00", sport_type="soccer", event_id="e1", rule_id=1, updated_at=ts(1))
    newer = markup("6.00", sport_type="soccer", event_id="e1", rule_id=2, updated_at=ts(2))

    with caplog.at_level(logging.WARNING, logger="app.pricing"):
        resolution = resolve_markup(SOCCER, [newer, older])

    assert resolution.rule.rule_id == 2
    assert len(resolution.anomalies) == 1
    anomaly = resolution.anomalies[0]
    assert anomaly.concern == "markup"
    assert anomaly.chosen_id == 2
    assert anomaly.level is ScopeLevel.EVENT
    assert set(anomaly.contenders) == {("hierarchical", 1), ("hierarchical", 2)}
    assert any(r.levelno == logging.WARNING and "Ambiguous markup" in r.getMessage() for r in caplog.records)


def test_tie_without_timestamps_falls_back_to_highest_id():
    first = markup("5.00", sport_type="soccer", event_id="e1", rule_id=4)
    second = markup("6.00", sport_type="soccer", event_id="e1", rule_id=9)

    resolution = resolve_markup(SOCCER, [second, first])

    assert resolution.rule.rule_id == 9
    assert resolution.anomalies[0].chosen_id == 9


def test_resolution_is_independent_of_candidate_order():
    rules = [
        markup("5.00", sport_type="soccer", rule_id=1),
        markup("7.00", sport_type="soccer", tournament_id="epl", rule_id=2),
        markup("9.00", sport_type="soccer", team_id="arsenal", rule_id=3),
    ]

    assert resolve_markup(SOCCER, rules).rule.rule_id == 3
    assert resolve_markup(SOCCER, list(reversed(rules))).rule.rule_id == 3


def test_non_team_sport_ignores_team_rules():
    rules = [
        markup("5.00", sport_type="motorsport", rule_id=1),
        markup("50.00", sport_type="motorsport", team_id="ferrari", rule_id=2),
    ]

    resolution = resolve_markup(F1, rules)

    assert resolution.rule.rule_id == 1


def test_hospitality_override_suppresses_broader_assignment():
    assignments = [
        assignment(3, sport_type="soccer", assignment_id=1),
        assignment(3, sport_type="soccer", event_id="e1", assignment_id=2, is_active=False),
    ]
    services = {3: service(3, "VIP Lounge")}

    resolution = resolve_hospitality(SOCCER, assignments, services)

    assert resolution.options == ()


def test_hospitality_suppression_only_affects_its_scope():
    assignments = [
        assignment(3, sport_type="soccer", assignment_id=1),
        assignment(3, sport_type="soccer", event_id="e2", assignment_id=2, is_active=False),
    ]
    services = {3: service(3, "VIP Lounge")}

    resolution = resolve_hospitality(SOCCER, assignments, services)

    assert [o.hospitality_id for o in resolution.options] == [3]
    assert resolution.options[0].level is ScopeLevel.SPORT


def test_hospitality_services_resolve_independently():
    assignments = [
        assignment(1, sport_type="soccer", assignment_id=1),
        assignment(2, sport_type="soccer", tournament_id="epl", assignment_id=2),
        assignment(2, sport_type="soccer", event_id="e1", ticket_id="x1", assignment_id=3, is_active=False),
        assignment(4, sport_type="soccer", event_id="e1", assignment_id=4),
    ]
    services = {
        1: service(1, "Parking", "20.00", sort_order=2),
        2: service(2, "Dinner", "80.00"),
        4: service(4, "Champagne", None, sort_order=1),
    }

    resolution = resolve_hospitality(SOCCER, assignments, services)

    assert [o.hospitality_id for o in resolution.options] == [4, 1]
    assert resolution.by_id[4].price is None
    assert resolution.by_id[1].price == Decimal("20.00")


def test_hospitality_drops_inactive_or_missing_services():
    assignments = [
        assignment(1, sport_type="soccer", assignment_id=1),
        assignment(2, sport_type="soccer", assignment_id=2),
    ]
    services = {1: service(1, "Parking", is_active=False)}

    assert resolve_hospitality(SOCCER, assignments, services).options == ()


def test_hospitality_ordered_by_sort_order_then_name():
    assignments = [assignment(i, sport_type="soccer", assignment_id=i) for i in (1, 2, 3)]
    services = {
        1: service(1, "Zeppelin Bar", sort_order=0),
        2: service(2, "Art Gallery", sort_order=0),
        3: service(3, "Box", sort_order=-1),
    }

    resolution = resolve_hospitality(SOCCER, assignments, services)

    assert [o.name for o in resolution.options] == ["Box", "Art Gallery", "Zeppelin Bar"]


def test_hospitality_hierarchical_beats_legacy_row():
    assignments = [
        assignment(5, event_id="e1", ticket_id="x1", assignment_id=90, source=RuleSource.LEGACY, is_active=True),
        assignment(5, sport_type="soccer", event_id="e1", ticket_id="x1", assignment_id=10, is_active=False),
    ]

    resolution = resolve_hospitality(SOCCER, assignments, {5: service(5, "Suite")})

    assert resolution.options == ()
    assert resolution.anomalies == ()


def test_hospitality_tie_reports_anomaly_with_service_id():
    assignments = [
        assignment(5, sport_type="soccer", event_id="e1", assignment_id=1, updated_at=ts(1)),
        assignment(5, sport_type="soccer", tournament_id="epl", event_id="e1", assignment_id=2, updated_at=ts(2)),
    ]

    resolution = resolve_hospitality(SOCCER, assignments, {5: service(5, "Suite")})

    assert [o.hospitality_id for o in resolution.options] == [5]
    assert resolution.anomalies[0].hospitality_id == 5
    assert resolution.anomalies[0].chosen_id == 2
