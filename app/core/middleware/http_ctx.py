import time
import uuid
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.ctx import REQUEST_ID_CTX, ROUTE_CTX, CLIENT_IP_CTX, REDIS_CTX


logger = logging.getLogger("app.http")


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class HttpContextMiddleware(BaseHTTPMiddleware):
    """Binds request id, route, client ip and redis to context vars for the audit trail."""

    def __init__(self, app, request_id_header: str = "X-Request-ID"):
        super().__init__(app)
        self.request_id_header = request_id_header

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(self.request_id_header) or uuid.uuid4().hex
        bound = {
            REQUEST_ID_CTX: rid,
            ROUTE_CTX: f"{request.method} {request.url.path}",
            CLIENT_IP_CTX: client_ip(request),
        }
        redis_client = getattr(request.app.state, "redis", None)
        if redis_client is not None:
            bound[REDIS_CTX] = redis_client

        tokens = [(var, var.set(value)) for var, value in bound.items()]
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers.setdefault(self.request_id_header, rid)
            logger.debug(
                "%s %s -> %s in %.1fms rid=%s",
                request.method, request.url.path, response.status_code,
                (time.perf_counter() - started) * 1000, rid
            )
            return response
        finally:
            for var, token in reversed(tokens):
                var.reset(token)
