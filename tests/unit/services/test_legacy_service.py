import pytest
from decimal import Decimal
from app.domain.exceptions import NotFound, InvalidInput
from app.domain.hospitality.schemas import LegacyTicketHospitalityReplaceDTO
from app.domain.markup.schemas import LegacyTicketMarkupBatchDTO
from app.services import legacy_service
from tests.helper import db_for_writes


@pytest.mark.asyncio
async def test_upsert_ticket_markups_last_entry_wins(mocker):
    upsert_spy = mocker.patch(
        "app.services.legacy_service.markup_crud.upsert_legacy_markups",
        new=mocker.AsyncMock()
    )
    rows = [mocker.Mock()]
    mocker.patch(
        "app.services.legacy_service.markup_crud.list_legacy_markups_for_event",
        new=mocker.AsyncMock(return_value=rows)
    )
    schema = LegacyTicketMarkupBatchDTO(markups=[
        {"ticket_id": "x1", "markup_price_usd": "1.00"},
        {"ticket_id": "x2", "markup_type": "percentage", "markup_percentage": "5"},
        {"ticket_id": "x1", "markup_price_usd": "3.00"},
    ])
    db = mocker.Mock()

    result = await legacy_service.upsert_ticket_markups(db, " e1 ", schema)

    assert result is rows
    _, event_id, payload = upsert_spy.await_args.args
    assert event_id == "e1"
    assert [(r["ticket_id"], r["markup_price_usd"]) for r in payload] == [
        ("x1", Decimal("3.00")), ("x2", Decimal("0"))
    ]


@pytest.mark.asyncio
async def test_blank_event_id_rejected(mocker):
    with pytest.raises(InvalidInput) as e:
        await legacy_service.list_ticket_markups(mocker.Mock(), "   ")

    assert e.value.ctx == {"field": "event_id"}


@pytest.mark.asyncio
async def test_delete_ticket_markup_not_found(mocker):
    mocker.patch(
        "app.services.legacy_service.markup_crud.get_legacy_markup",
        new=mocker.AsyncMock(return_value=None)
    )

    with pytest.raises(NotFound) as e:
        await legacy_service.delete_ticket_markup(db_for_writes(mocker), "e1", "x9")

    assert e.value.ctx == {"event_id": "e1", "ticket_id": "x9"}


@pytest.mark.asyncio
async def test_replace_ticket_hospitalities_validates_each_service(mocker):
    mocker.patch(
        "app.services.legacy_service.get_hospitality",
        new=mocker.AsyncMock(side_effect=[mocker.Mock(), NotFound("Hospitality not found")])
    )
    replace_spy = mocker.patch(
        "app.services.legacy_service.hospitality_crud.replace_legacy_hospitalities",
        new=mocker.AsyncMock()
    )

    with pytest.raises(NotFound):
        await legacy_service.replace_ticket_hospitalities(
            db_for_writes(mocker), "e1", "x1", LegacyTicketHospitalityReplaceDTO(hospitality_ids=[4, 2])
        )

    replace_spy.assert_not_awaited()


@pytest.mark.asyncio
async def test_replace_ticket_hospitalities_returns_ticket_rows(mocker):
    mocker.patch("app.services.legacy_service.get_hospitality", new=mocker.AsyncMock())
    replace_spy = mocker.patch(
        "app.services.legacy_service.hospitality_crud.replace_legacy_hospitalities",
        new=mocker.AsyncMock()
    )
    rows = [mocker.Mock(ticket_id="x1"), mocker.Mock(ticket_id="x2")]
    mocker.patch(
        "app.services.legacy_service.hospitality_crud.list_legacy_hospitalities_for_event",
        new=mocker.AsyncMock(return_value=rows)
    )
    db = db_for_writes(mocker)

    result = await legacy_service.replace_ticket_hospitalities(
        db, "e1", "x1", LegacyTicketHospitalityReplaceDTO(hospitality_ids=[4, 2, 4])
    )

    replace_spy.assert_awaited_once_with(db, "e1", "x1", [2, 4])
    assert result == [rows[0]]
