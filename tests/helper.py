from datetime import datetime, timezone
from decimal import Decimal
from app.domain.resolution.records import AssignmentRecord, MarkupRecord, MarkupType, RuleSource, ServiceRecord
from app.domain.resolution.scope import Scope, derive_level


def db_with_scalars_first(mocker, value):
    res = mocker.Mock()
    res.scalars.return_value.first.return_value = value
    db = mocker.Mock()
    db.execute = mocker.AsyncMock(return_value=res)
    return db, res


def db_with_scalar(mocker, value):
    db = mocker.Mock()
    db.scalar = mocker.AsyncMock(return_value=value)
    return db


def db_for_writes(mocker):
    db = mocker.Mock()
    db.flush = mocker.AsyncMock()
    db.execute = mocker.AsyncMock()
    db.refresh = mocker.AsyncMock()
    return db


def expiring_row(refreshed_at: datetime, **fields):
    """Row whose updated_at is unreadable until refresh() reloads it, like an ORM row after an UPDATE."""

    class _Row:
        @property
        def updated_at(self):
            if "_updated_at" not in self.__dict__:
                raise AttributeError("updated_at expired")
            return self.__dict__["_updated_at"]

    row = _Row()
    row.__dict__.update(fields)

    async def refresh(obj):
        obj.__dict__["_updated_at"] = refreshed_at

    return row, refresh


def ts(day: int, hour: int = 12) -> datetime:
    return datetime(2026, 3, day, hour, tzinfo=timezone.utc)


def markup(
        amount: str = "10.00",
        markup_type: MarkupType = MarkupType.FIXED,
        *,
        rule_id: int | None = None,
        source: RuleSource = RuleSource.HIERARCHICAL,
        is_active: bool = True,
        updated_at: datetime | None = None,
        **scope
) -> MarkupRecord:
    s = Scope(**scope)
    return MarkupRecord(
        scope=s,
        level=derive_level(s),
        markup_type=markup_type,
        markup_amount=Decimal(amount),
        is_active=is_active,
        source=source,
        rule_id=rule_id,
        updated_at=updated_at,
    )


def assignment(
        hospitality_id: int,
        *,
        assignment_id: int | None = None,
        source: RuleSource = RuleSource.HIERARCHICAL,
        is_active: bool = True,
        updated_at: datetime | None = None,
        **scope
) -> AssignmentRecord:
    s = Scope(**scope)
    return AssignmentRecord(
        scope=s,
        level=derive_level(s),
        hospitality_id=hospitality_id,
        is_active=is_active,
        source=source,
        assignment_id=assignment_id,
        updated_at=updated_at,
    )


def service(service_id: int, name: str, price: str | None = "50.00", *, sort_order: int = 0,
            is_active: bool = True) -> ServiceRecord:
    return ServiceRecord(
        id=service_id,
        name=name,
        price_usd=Decimal(price) if price is not None else None,
        is_active=is_active,
        sort_order=sort_order,
    )
