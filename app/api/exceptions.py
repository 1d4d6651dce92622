import logging
from typing import NamedTuple
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from app.domain.exceptions import AppError, NotFound, Conflict, Unprocessable, Unauthorized, InvalidInput, Forbidden, \
    ConfigurationError, InvalidScopeError, DuplicateScopeError
from app.core.ctx import REQUEST_ID_CTX

MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger("app.errors")


class Problem(NamedTuple):
    status: int
    title: str
    code: str


# looked up along the exception's MRO, so subclasses fall back to their parent's entry
_PROBLEMS: dict[type[AppError], Problem] = {
    InvalidScopeError: Problem(status.HTTP_400_BAD_REQUEST, "Invalid Scope", "invalid_scope"),
    DuplicateScopeError: Problem(status.HTTP_409_CONFLICT, "Duplicate Scope", "duplicate_scope"),
    NotFound: Problem(status.HTTP_404_NOT_FOUND, "Not Found", "not_found"),
    Unauthorized: Problem(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "unauthorized"),
    Forbidden: Problem(status.HTTP_403_FORBIDDEN, "Forbidden", "forbidden"),
    Conflict: Problem(status.HTTP_409_CONFLICT, "Conflict", "conflict"),
    InvalidInput: Problem(status.HTTP_400_BAD_REQUEST, "Bad Request", "invalid_input"),
    Unprocessable: Problem(status.HTTP_422_UNPROCESSABLE_ENTITY, "Unprocessable Entity", "unprocessable"),
    ConfigurationError: Problem(status.HTTP_500_INTERNAL_SERVER_ERROR, "Service Misconfigured", "configuration"),
    AppError: Problem(status.HTTP_400_BAD_REQUEST, "Application Error", "application_error"),
}


def problem_for(exc: AppError) -> Problem:
    for cls in type(exc).mro():
        if cls in _PROBLEMS:
            return _PROBLEMS[cls]
    return _PROBLEMS[AppError]


def _www_authenticate(detail: str | None) -> str:
    attributes = ['realm="api"', 'error="invalid_token"']
    if detail:
        attributes.append(f'error_description="{detail}"')
    return "Bearer " + ", ".join(attributes)


def problem_response(request: Request, exc: AppError) -> JSONResponse:
    problem = problem_for(exc)
    detail = str(exc) or None
    body = {
        "type": problem.code,
        "status": problem.status,
        "title": problem.title,
        "detail": detail,
        "instance": str(request.url),
    }
    req_id = REQUEST_ID_CTX.get()
    if req_id:
        body["trace_id"] = req_id
    if exc.ctx:
        body["context"] = exc.ctx

    headers = {"WWW-Authenticate": _www_authenticate(detail)} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=problem.status, content=body, media_type=MEDIA_TYPE, headers=headers)


def register_error_handler(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError):
        response = problem_response(request, exc)
        if response.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc, extra={"ctx": exc.ctx})
        return response
