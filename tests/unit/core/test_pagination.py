import pytest
from sqlalchemy import select
from app.core.pagination import PageDTO, clamp_page, paginate
from app.domain.markup.models import MarkupRule


@pytest.mark.parametrize(
    "total, page_size, expected_pages",
    [
        (0, 10, 1),
        (10, 10, 1),
        (1, 10, 1),
        (0, 0, 1),
        (11, 10, 2),
        (20, 10, 2),
        (5, 2, 3),
        (100, -5, 1)
    ]
)
def test_pages_calculation(total, page_size, expected_pages):
    dto = PageDTO(items=[], total=total, page=1, page_size=page_size)
    assert dto.pages == expected_pages


@pytest.mark.parametrize(
    "total, page_size, page, expected_has_next",
    [
        (0, 10, 1, False),
        (10, 10, 1, False),
        (11, 10, 1, True),
        (11, 10, 2, False),
        (21, 10, 1, True),
        (21, 10, 3, False),
        (21, 0, 1, False),
        (21, 10, 5, False),
    ]
)
def test_has_next(total, page_size, page, expected_has_next):
    dto = PageDTO(items=[], total=total, page=page, page_size=page_size)
    assert dto.has_next == expected_has_next


@pytest.mark.parametrize(
    "page, page_size, expected",
    [
        (1, 20, (1, 20)),
        (0, 20, (1, 20)),
        (-3, 0, (1, 1)),
        (2, 500, (2, 200)),
        ("3", "15", (3, 15)),
    ]
)
def test_clamp_page(page, page_size, expected):
    assert clamp_page(page, page_size) == expected


@pytest.mark.asyncio
async def test_paginate_returns_items_and_total(mocker):
    db = mocker.Mock()
    db.scalar = mocker.AsyncMock(return_value=42)
    scalars_result = mocker.Mock()
    scalars_result.all.return_value = ["a", "b"]
    db.scalars = mocker.AsyncMock(return_value=scalars_result)

    items, total = await paginate(db, select(MarkupRule), page=2, page_size=2, where=[MarkupRule.is_active.is_(True)])

    assert items == ["a", "b"]
    assert total == 42
    stmt = db.scalars.await_args.args[0]
    assert stmt._limit_clause.value == 2
    assert stmt._offset_clause.value == 2


@pytest.mark.asyncio
async def test_paginate_empty_total_skips_page_query(mocker):
    db = mocker.Mock()
    db.scalar = mocker.AsyncMock(return_value=None)
    db.scalars = mocker.AsyncMock()

    items, total = await paginate(db, select(MarkupRule))

    assert items == []
    assert total == 0
    db.scalars.assert_not_awaited()
