from fastapi import APIRouter, status, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated
from app.core.database import get_db
from app.core.dependencies.auth import require_pricing_admin
from app.core.pagination import PageDTO
from app.domain.auth.schemas import AdminPrincipal
from app.domain.markup.schemas import MarkupRuleCreateDTO, MarkupRuleUpdateDTO, MarkupRuleReadDTO, \
    MarkupRulesQueryDTO, MarkupResolveRequestDTO, MarkupResolveReadDTO
from app.services import markup_rule_service


router = APIRouter(prefix="/admin/markup-rules", tags=["markup-rules"])
db_dependency = Annotated[AsyncSession, Depends(get_db)]
admin_dependency = Annotated[AdminPrincipal, Depends(require_pricing_admin)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MarkupRuleReadDTO
)
async def create_markup_rule(
        schema: MarkupRuleCreateDTO,
        db: db_dependency,
        admin: admin_dependency,
        response: Response
):
    rule = await markup_rule_service.create_markup_rule(db, schema, admin.id)
    response.headers["Location"] = f"{router.prefix}/{rule.id}"
    return rule


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=PageDTO[MarkupRuleReadDTO],
    dependencies=[Depends(require_pricing_admin)]
)
async def list_markup_rules(db: db_dependency, query: Annotated[MarkupRulesQueryDTO, Depends()]):
    return await markup_rule_service.list_markup_rules(db, query)


@router.get(
    "/sport/{sport_type}",
    status_code=status.HTTP_200_OK,
    response_model=list[MarkupRuleReadDTO],
    dependencies=[Depends(require_pricing_admin)]
)
async def list_markup_rules_for_sport(sport_type: str, db: db_dependency):
    return await markup_rule_service.list_markup_rules_for_sport(db, sport_type)


@router.post(
    "/resolve",
    status_code=status.HTTP_200_OK,
    response_model=MarkupResolveReadDTO,
    dependencies=[Depends(require_pricing_admin)]
)
async def resolve_markup(schema: MarkupResolveRequestDTO, db: db_dependency):
    return await markup_rule_service.resolve_markup_for_path(db, schema)


@router.get(
    "/{rule_id}",
    status_code=status.HTTP_200_OK,
    response_model=MarkupRuleReadDTO,
    dependencies=[Depends(require_pricing_admin)]
)
async def get_markup_rule(rule_id: int, db: db_dependency):
    return await markup_rule_service.get_markup_rule(db, rule_id)


@router.patch(
    "/{rule_id}",
    status_code=status.HTTP_200_OK,
    response_model=MarkupRuleReadDTO
)
async def update_markup_rule(rule_id: int, schema: MarkupRuleUpdateDTO, db: db_dependency, admin: admin_dependency):
    return await markup_rule_service.update_markup_rule(db, rule_id, schema, admin.id)


@router.delete(
    "/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_pricing_admin)]
)
async def delete_markup_rule(rule_id: int, db: db_dependency):
    await markup_rule_service.delete_markup_rule(db, rule_id)
