from fastapi import APIRouter, status, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated
from app.core.database import get_db
from app.core.dependencies.auth import require_pricing_admin
from app.core.pagination import PageDTO
from app.domain.auth.schemas import AdminPrincipal
from app.domain.hospitality.schemas import AssignmentCreateDTO, AssignmentBatchCreateDTO, AssignmentReplaceDTO, \
    AssignmentReadDTO, AssignmentsQueryDTO, AssignmentBatchResultDTO, AssignmentResolveRequestDTO, \
    AssignmentResolveReadDTO
from app.domain.resolution.schemas import ScopeQueryDTO
from app.services import hospitality_assignment_service


router = APIRouter(prefix="/admin/hospitality-assignments", tags=["hospitality-assignments"])
db_dependency = Annotated[AsyncSession, Depends(get_db)]
admin_dependency = Annotated[AdminPrincipal, Depends(require_pricing_admin)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=AssignmentReadDTO
)
async def create_assignment(
        schema: AssignmentCreateDTO,
        db: db_dependency,
        admin: admin_dependency,
        response: Response
):
    assignment = await hospitality_assignment_service.create_assignment(db, schema, admin.id)
    response.headers["Location"] = f"{router.prefix}/{assignment.id}"
    return assignment


@router.post(
    "/batch",
    status_code=status.HTTP_201_CREATED,
    response_model=AssignmentBatchResultDTO
)
async def create_assignments_batch(schema: AssignmentBatchCreateDTO, db: db_dependency, admin: admin_dependency):
    return await hospitality_assignment_service.create_assignments_batch(db, schema, admin.id)


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=PageDTO[AssignmentReadDTO],
    dependencies=[Depends(require_pricing_admin)]
)
async def list_assignments(db: db_dependency, query: Annotated[AssignmentsQueryDTO, Depends()]):
    return await hospitality_assignment_service.list_assignments(db, query)


@router.get(
    "/scope",
    status_code=status.HTTP_200_OK,
    response_model=list[AssignmentReadDTO],
    dependencies=[Depends(require_pricing_admin)]
)
async def list_assignments_at_scope(db: db_dependency, query: Annotated[ScopeQueryDTO, Depends()]):
    return await hospitality_assignment_service.list_assignments_at_scope(db, query)


@router.put(
    "/scope",
    status_code=status.HTTP_200_OK,
    response_model=list[AssignmentReadDTO]
)
async def replace_assignments_at_scope(schema: AssignmentReplaceDTO, db: db_dependency, admin: admin_dependency):
    return await hospitality_assignment_service.replace_assignments_at_scope(db, schema, admin.id)


@router.delete(
    "/scope",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_pricing_admin)]
)
async def delete_assignments_at_scope(db: db_dependency, query: Annotated[ScopeQueryDTO, Depends()]):
    await hospitality_assignment_service.delete_assignments_at_scope(db, query)


@router.post(
    "/resolve",
    status_code=status.HTTP_200_OK,
    response_model=AssignmentResolveReadDTO,
    dependencies=[Depends(require_pricing_admin)]
)
async def resolve_assignments(schema: AssignmentResolveRequestDTO, db: db_dependency):
    return await hospitality_assignment_service.resolve_for_path(db, schema)


@router.get(
    "/{assignment_id}",
    status_code=status.HTTP_200_OK,
    response_model=AssignmentReadDTO,
    dependencies=[Depends(require_pricing_admin)]
)
async def get_assignment(assignment_id: int, db: db_dependency):
    return await hospitality_assignment_service.get_assignment(db, assignment_id)


@router.delete(
    "/{assignment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_pricing_admin)]
)
async def delete_assignment(assignment_id: int, db: db_dependency):
    await hospitality_assignment_service.delete_assignment(db, assignment_id)
