from typing import Any, Generic, TypeVar
from pydantic import BaseModel, computed_field
from sqlalchemy import Select, select, func
from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")

MAX_PAGE_SIZE = 200


class PageDTO(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int

    @computed_field
    @property
    def pages(self) -> int:
        if self.page_size <= 0:
            return 1
        return max(1, -(-self.total // self.page_size))

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page < self.pages


def clamp_page(page: int, page_size: int) -> tuple[int, int]:
    return max(1, int(page)), max(1, min(MAX_PAGE_SIZE, int(page_size)))


async def paginate(
        db: AsyncSession,
        stmt: Select,
        *,
        page: int = 1,
        page_size: int = 50,
        where: list[Any] | None = None,
        order_by: list[Any] | None = None,
) -> tuple[list, int]:
    """Rows of one page plus the unpaged total. Admin listings filter and order through here."""
    page, page_size = clamp_page(page, page_size)
    if where:
        stmt = stmt.where(*where)

    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    if not total:
        return [], 0

    if order_by:
        stmt = stmt.order_by(*order_by)
    rows = await db.scalars(stmt.limit(page_size).offset((page - 1) * page_size))
    return list(rows.all()), int(total)
