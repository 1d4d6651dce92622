import logging
from decimal import Decimal
from types import SimpleNamespace
from app.domain.resolution.legacy import project_legacy_markup, project_legacy_hospitality, merge_markups, \
    merge_assignments
from app.domain.resolution.records import MarkupType, RuleSource
from app.domain.resolution.scope import ScopeLevel
from tests.helper import markup, assignment, ts


def _markup_row(**overrides):
    row = dict(
        id=11,
        event_id="e1",
        ticket_id="x1",
        markup_price_usd=Decimal("12.00"),
        markup_type="fixed",
        markup_percentage=None,
        updated_at=ts(4),
    )
    row.update(overrides)
    return SimpleNamespace(**row)


def test_legacy_markup_becomes_ticket_level_record():
    record = project_legacy_markup(_markup_row())

    assert record.level is ScopeLevel.TICKET
    assert record.source is RuleSource.LEGACY
    assert record.scope.as_dict() == {
        "sport_type": None, "tournament_id": None, "team_id": None, "event_id": "e1", "ticket_id": "x1"
    }
    assert record.markup_type is MarkupType.FIXED
    assert record.markup_amount == Decimal("12.00")
    assert record.rule_id == 11
    assert record.updated_at == ts(4)


def test_legacy_markup_without_type_is_fixed():
    record = project_legacy_markup(_markup_row(markup_type=None))

    assert record.markup_type is MarkupType.FIXED


def test_legacy_percentage_uses_percentage_column():
    record = project_legacy_markup(_markup_row(markup_type="percentage", markup_percentage=Decimal("7.5")))

    assert record.markup_type is MarkupType.PERCENTAGE
    assert record.markup_amount == Decimal("7.5")


def test_legacy_percentage_without_value_falls_back_to_fixed(caplog):
    with caplog.at_level(logging.WARNING, logger="app.pricing"):
        record = project_legacy_markup(_markup_row(markup_type="percentage", markup_percentage=None))

    assert record.markup_type is MarkupType.FIXED
    assert record.markup_amount == Decimal("12.00")
    assert "id=11" in caplog.records[0].getMessage()


def test_legacy_hospitality_projection():
    row = SimpleNamespace(id=5, event_id="e1", ticket_id="x1", hospitality_id="3", created_at=ts(2))

    record = project_legacy_hospitality(row)

    assert record.hospitality_id == 3
    assert record.level is ScopeLevel.TICKET
    assert record.source is RuleSource.LEGACY
    assert record.updated_at == ts(2)


def test_merge_drops_legacy_rows_already_migrated():
    migrated = markup("12.00", event_id="e1", ticket_id="x1", rule_id=1)
    legacy_same = markup("12.00", event_id="e1", ticket_id="x1", rule_id=70, source=RuleSource.LEGACY)
    legacy_other = markup("4.00", event_id="e1", ticket_id="x2", rule_id=71, source=RuleSource.LEGACY)

    merged = merge_markups([migrated], [legacy_same, legacy_other])

    assert [(r.source, r.rule_id) for r in merged] == [
        (RuleSource.HIERARCHICAL, 1), (RuleSource.LEGACY, 71)
    ]


def test_merge_keeps_migrated_inactive_row_as_shadow():
    migrated = markup("12.00", event_id="e1", ticket_id="x1", rule_id=1, is_active=False)
    legacy_same = markup("12.00", event_id="e1", ticket_id="x1", rule_id=70, source=RuleSource.LEGACY)

    assert merge_markups([migrated], [legacy_same]) == [migrated]


def test_merge_assignments_dedups_per_service():
    hierarchical = [assignment(3, event_id="e1", ticket_id="x1", assignment_id=1)]
    legacy = [
        assignment(3, event_id="e1", ticket_id="x1", assignment_id=8, source=RuleSource.LEGACY),
        assignment(4, event_id="e1", ticket_id="x1", assignment_id=9, source=RuleSource.LEGACY),
    ]

    merged = merge_assignments(hierarchical, legacy)

    assert [r.hospitality_id for r in merged] == [3, 4]
    assert merged[1].source is RuleSource.LEGACY
