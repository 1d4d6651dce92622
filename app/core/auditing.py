"""Audit trail for admin writes and finalized quotes.

Every mutation runs inside an :class:`AuditSpan`; on exit one event is pushed to a Redis
stream and ``app.workers.audit_worker`` copies it into ``audit.audit_logs``. Emission is
best effort: a missing or failing Redis never fails the request being audited.
"""
import json
import time
import logging
from dataclasses import dataclass, field, asdict
from datetime import timezone, datetime
from typing import Any
from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError
from app.core.config import get_settings
from app.core.ctx import get_redis, get_request_id, get_route, get_admin_id, get_admin_roles, get_client_ip
from app.domain.exceptions import AppError


logger = logging.getLogger("app.audit")

SUCCESS = "SUCCESS"
FAIL = "FAIL"


@dataclass
class AuditEvent:
    scope: str
    action: str
    status: str = SUCCESS
    object_type: str | None = None
    object_id: int | None = None
    sport_type: str | None = None
    event_id: str | None = None
    ticket_id: str | None = None
    reason: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "request_id": get_request_id(),
            "actor_admin_id": get_admin_id(),
            "actor_roles": list(get_admin_roles()),
            "actor_ip": get_client_ip(),
            "route": get_route(),
            **asdict(self),
        }


async def audit_emit(event: AuditEvent) -> str | None:
    r = get_redis()
    if not r:
        return None

    try:
        return await r.xadd(get_settings().audit_stream, {"json": json.dumps(event.to_payload(), default=str)})
    except RedisError:
        logger.warning("Audit emit failed scope=%s action=%s", event.scope, event.action, exc_info=True)
        return None


def reason_for(exception: BaseException | None) -> str | None:
    if exception is None:
        return None
    if isinstance(exception, IntegrityError):
        return "Integrity error"
    if isinstance(exception, AppError):
        return f"{type(exception).__name__}: {exception}"
    return type(exception).__name__


class AuditSpan:
    """Async context manager; attributes may be filled in while the span is open."""

    def __init__(self, *, scope: str, action: str, object_type: str | None = None, object_id: int | None = None,
                 sport_type: str | None = None, event_id: str | None = None, ticket_id: str | None = None,
                 meta: dict[str, Any] | None = None):
        self.scope = scope
        self.action = action
        self.object_type = object_type
        self.object_id = object_id
        self.sport_type = sport_type
        self.event_id = event_id
        self.ticket_id = ticket_id
        self.meta = dict(meta or {})
        self._started = 0.0

    async def __aenter__(self):
        self._started = time.perf_counter()
        now = datetime.now(timezone.utc)
        self.meta.setdefault("occurred_at", now.isoformat(timespec="milliseconds").replace("+00:00", "Z"))
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.meta["duration_ms"] = int((time.perf_counter() - self._started) * 1000)
        await audit_emit(AuditEvent(
            scope=self.scope,
            action=self.action,
            status=FAIL if exc else SUCCESS,
            object_type=self.object_type,
            object_id=self.object_id,
            sport_type=self.sport_type,
            event_id=self.event_id,
            ticket_id=self.ticket_id,
            reason=reason_for(exc),
            meta=self.meta,
        ))
        return False
