import pytest
from types import SimpleNamespace
from app.domain.exceptions import NotFound, InvalidInput, DuplicateScopeError
from app.domain.hospitality.schemas import AssignmentCreateDTO, AssignmentBatchCreateDTO, AssignmentReplaceDTO, \
    AssignmentResolveRequestDTO, AssignmentReadDTO
from app.domain.resolution.scope import ScopeLevel
from app.services import hospitality_assignment_service
from tests.helper import db_for_writes, expiring_row, assignment, service, ts


CRUD = "app.services.hospitality_assignment_service.crud"


def _row(assignment_id, hospitality_id, is_active=True, **scope):
    fields = {"sport_type": None, "tournament_id": None, "team_id": None, "event_id": None, "ticket_id": None}
    fields.update(scope)
    return SimpleNamespace(
        id=assignment_id,
        hospitality_id=hospitality_id,
        level=ScopeLevel.SPORT,
        is_active=is_active,
        sport_name=None,
        tournament_name=None,
        team_name=None,
        event_name=None,
        ticket_name=None,
        created_by=1,
        updated_by=1,
        created_at=ts(1),
        updated_at=ts(1),
        **fields
    )


def _hospitalities(mocker, *ids):
    return mocker.patch(
        f"{CRUD}.get_hospitalities_by_ids",
        new=mocker.AsyncMock(return_value=[SimpleNamespace(id=i) for i in ids])
    )


@pytest.mark.asyncio
async def test_create_assignment_rejects_duplicate(mocker):
    mocker.patch(
        "app.services.hospitality_assignment_service.get_hospitality",
        new=mocker.AsyncMock(return_value=mocker.Mock(id=3))
    )
    mocker.patch(f"{CRUD}.find_assignment_by_scope", new=mocker.AsyncMock(return_value=mocker.Mock(id=40)))
    create_spy = mocker.patch(f"{CRUD}.create_assignment", new=mocker.AsyncMock())
    schema = AssignmentCreateDTO(hospitality_id=3, sport_type="soccer", event_id="e1")

    with pytest.raises(DuplicateScopeError) as e:
        await hospitality_assignment_service.create_assignment(db_for_writes(mocker), schema, admin_id=1)

    assert e.value.ctx["existing_id"] == 40
    assert e.value.ctx["hospitality_id"] == 3
    create_spy.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_assignment_stores_level_and_names(mocker, auditspan_stub):
    mocker.patch(
        "app.services.hospitality_assignment_service.get_hospitality",
        new=mocker.AsyncMock(return_value=mocker.Mock(id=3))
    )
    mocker.patch(f"{CRUD}.find_assignment_by_scope", new=mocker.AsyncMock(return_value=None))
    create_spy = mocker.patch(f"{CRUD}.create_assignment", new=mocker.AsyncMock(return_value=mocker.Mock(id=41)))
    schema = AssignmentCreateDTO(
        hospitality_id=3, sport_type="soccer", team_id="arsenal", team_name="  Arsenal ", is_active=False
    )

    await hospitality_assignment_service.create_assignment(db_for_writes(mocker), schema, admin_id=9)

    data = create_spy.await_args.args[1]
    assert data["level"] is ScopeLevel.TEAM
    assert data["team_name"] == "Arsenal"
    assert data["is_active"] is False
    assert data["created_by"] == 9
    assert auditspan_stub[0].object_id == 41


@pytest.mark.asyncio
async def test_batch_create_requires_known_hospitalities(mocker):
    _hospitalities(mocker, 1)
    schema = AssignmentBatchCreateDTO(sport_type="soccer", hospitality_ids=[1, 2, 5])

    with pytest.raises(NotFound) as e:
        await hospitality_assignment_service.create_assignments_batch(db_for_writes(mocker), schema, admin_id=1)

    assert e.value.ctx == {"hospitality_ids": "[2, 5]"}


@pytest.mark.asyncio
async def test_batch_create_skips_existing(mocker):
    _hospitalities(mocker, 1, 2)

    async def find(db, hospitality_id, scope):
        return mocker.Mock(id=7) if hospitality_id == 1 else None

    mocker.patch(f"{CRUD}.find_assignment_by_scope", new=find)
    create_spy = mocker.patch(
        f"{CRUD}.create_assignment",
        new=mocker.AsyncMock(return_value=_row(50, 2, sport_type="soccer"))
    )
    schema = AssignmentBatchCreateDTO(sport_type="soccer", hospitality_ids=[2, 1, 2])

    result = await hospitality_assignment_service.create_assignments_batch(db_for_writes(mocker), schema, admin_id=1)

    assert result.skipped_hospitality_ids == [1]
    assert [a.id for a in result.created] == [50]
    create_spy.assert_awaited_once()


@pytest.mark.asyncio
async def test_replace_rejects_overlapping_ids(mocker):
    delete_spy = mocker.patch(f"{CRUD}.delete_assignments_at_scope", new=mocker.AsyncMock())
    schema = AssignmentReplaceDTO(sport_type="soccer", hospitality_ids=[1, 2], suppressed_ids=[2])

    with pytest.raises(InvalidInput) as e:
        await hospitality_assignment_service.replace_assignments_at_scope(db_for_writes(mocker), schema, admin_id=1)

    assert e.value.ctx["field"] == "suppressed_ids"
    delete_spy.assert_not_awaited()


@pytest.mark.asyncio
async def test_replace_toggles_existing_and_creates_missing(mocker, auditspan_stub):
    _hospitalities(mocker, 1, 2, 3)
    delete_spy = mocker.patch(f"{CRUD}.delete_assignments_at_scope", new=mocker.AsyncMock(return_value=2))
    existing = _row(10, 1, is_active=True, sport_type="soccer", event_id="e1")
    mocker.patch(f"{CRUD}.list_assignments_at_scope", new=mocker.AsyncMock(return_value=[existing]))
    created = [_row(11, 2, sport_type="soccer", event_id="e1"), _row(12, 3, False, sport_type="soccer", event_id="e1")]
    create_spy = mocker.patch(f"{CRUD}.create_assignment", new=mocker.AsyncMock(side_effect=created))
    db = db_for_writes(mocker)
    schema = AssignmentReplaceDTO(sport_type="soccer", event_id="e1", hospitality_ids=[2], suppressed_ids=[1, 3])

    result = await hospitality_assignment_service.replace_assignments_at_scope(db, schema, admin_id=4)

    assert delete_spy.await_args.kwargs == {"keep_hospitality_ids": {1, 2, 3}}
    assert existing.is_active is False
    assert existing.updated_by == 4
    assert [c.args[1]["is_active"] for c in create_spy.await_args_list] == [True, False]
    assert [a.id for a in result] == [10, 11, 12]
    assert auditspan_stub[0].meta["removed"] == 2
    db.flush.assert_awaited_once()
    db.refresh.assert_awaited_once_with(existing)


@pytest.mark.asyncio
async def test_replace_returns_serializable_toggled_rows(mocker):
    _hospitalities(mocker, 1)
    mocker.patch(f"{CRUD}.delete_assignments_at_scope", new=mocker.AsyncMock(return_value=0))
    existing, refresh = expiring_row(
        ts(2),
        id=10, hospitality_id=1, sport_type="soccer", tournament_id=None, team_id=None, event_id="e1",
        ticket_id=None, level=ScopeLevel.EVENT, is_active=True, sport_name=None, tournament_name=None,
        team_name=None, event_name=None, ticket_name=None, created_by=1, updated_by=1, created_at=ts(1)
    )
    mocker.patch(f"{CRUD}.list_assignments_at_scope", new=mocker.AsyncMock(return_value=[existing]))
    create_spy = mocker.patch(f"{CRUD}.create_assignment", new=mocker.AsyncMock())
    db = db_for_writes(mocker)
    db.refresh = mocker.AsyncMock(side_effect=refresh)
    schema = AssignmentReplaceDTO(sport_type="soccer", event_id="e1", suppressed_ids=[1])

    result = await hospitality_assignment_service.replace_assignments_at_scope(db, schema, admin_id=4)

    create_spy.assert_not_awaited()
    dto = AssignmentReadDTO.model_validate(result[0])
    assert dto.is_active is False
    assert dto.updated_by == 4
    assert dto.updated_at == ts(2)


@pytest.mark.asyncio
async def test_delete_assignment_not_found(mocker):
    mocker.patch(f"{CRUD}.get_assignment_by_id", new=mocker.AsyncMock(return_value=None))

    with pytest.raises(NotFound):
        await hospitality_assignment_service.delete_assignment(db_for_writes(mocker), 5)


@pytest.mark.asyncio
async def test_resolve_for_path_returns_sorted_options(mocker):
    store = mocker.Mock()
    store.fetch_hospitality_assignments = mocker.AsyncMock(return_value=[
        assignment(1, sport_type="soccer", assignment_id=1),
        assignment(2, sport_type="soccer", assignment_id=2),
        assignment(2, sport_type="soccer", event_id="e1", ticket_id="x1", assignment_id=3, is_active=False),
    ])
    store.fetch_hospitality_services = mocker.AsyncMock(return_value={
        1: service(1, "Parking"), 2: service(2, "Dinner")
    })
    mocker.patch("app.services.hospitality_assignment_service.SqlRuleStore", return_value=store)
    schema = AssignmentResolveRequestDTO(sport_type="soccer", event_id="e1", ticket_id="x1")

    result = await hospitality_assignment_service.resolve_for_path(mocker.Mock(), schema)

    assert [o.hospitality_id for o in result.options] == [1]
    assert result.options[0].level is ScopeLevel.SPORT
    assert store.fetch_hospitality_services.await_args.args[0] == {1, 2}
