import os
import json
import asyncio
import signal
import socket
import logging
import redis.asyncio as redis
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy import text, bindparam, Text
from sqlalchemy.dialects.postgresql import JSONB, INET, ARRAY
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import get_settings, Settings
from app.core.logging_config import configure_logging
from app.core.redis import create_redis


logger = logging.getLogger("audit.worker")

INSERT_AUDIT = text("""
    INSERT INTO audit.audit_logs
    (request_id, scope, action, actor_admin_id, actor_roles, actor_ip, route,
     object_type, object_id, sport_type, event_id, ticket_id, status, reason, meta)
    VALUES
    (:request_id, :scope, :action, :actor_admin_id, :actor_roles, :actor_ip, :route,
     :object_type, :object_id, :sport_type, :event_id, :ticket_id, :status, :reason, :meta)
""").bindparams(
    bindparam("actor_roles", type_=ARRAY(Text())),
    bindparam("actor_ip", type_=INET),
    bindparam("meta", type_=JSONB),
)

RETRY_EVERY_S = 30
RETRY_MIN_IDLE_MS = 60000


class InvalidAuditPayload(ValueError):
    pass


def parse_payload(raw_json: str | None) -> dict:
    try:
        payload = json.loads(raw_json) if raw_json else {}
    except json.JSONDecodeError as e:
        raise InvalidAuditPayload(f"payload is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise InvalidAuditPayload("payload is not a JSON object")
    if not payload.get("scope") or not payload.get("action"):
        raise InvalidAuditPayload("missing required fields: scope/action")
    return payload


def params_from_payload(payload: dict) -> dict:
    status = (payload.get("status") or "SUCCESS").upper()
    return {
        "request_id": payload.get("request_id"),
        "scope": payload["scope"],
        "action": payload["action"],
        "actor_admin_id": payload.get("actor_admin_id"),
        "actor_roles": list(payload.get("actor_roles") or []),
        "actor_ip": payload.get("actor_ip"),
        "route": payload.get("route"),
        "object_type": payload.get("object_type"),
        "object_id": payload.get("object_id"),
        "sport_type": payload.get("sport_type"),
        "event_id": payload.get("event_id"),
        "ticket_id": payload.get("ticket_id"),
        "status": "SUCCESS" if status == "SUCCESS" else "FAIL",
        "reason": payload.get("reason"),
        "meta": dict(payload.get("meta") or {}),
    }


async def _ensure_group(r: redis.Redis, settings: Settings) -> None:
    try:
        await r.xgroup_create(
            name=settings.audit_stream,
            groupname=settings.audit_group,
            id="$",
            mkstream=True,
        )
        logger.info("XGROUP created stream=%s group=%s", settings.audit_stream, settings.audit_group)
    except redis.ResponseError as e:
        if "BUSYGROUP" in str(e):
            logger.info("XGROUP already exists stream=%s group=%s", settings.audit_stream, settings.audit_group)
        else:
            raise


async def process_entries(
        r: redis.Redis,
        db: AsyncSession,
        settings: Settings,
        entries: list[tuple[str, dict]]
) -> int:
    """Insert and ack each entry. Rows that hit a DB error stay pending for the next claim."""
    stored = 0
    for msg_id, fields in entries:
        try:
            params = params_from_payload(parse_payload(fields.get("json")))
        except InvalidAuditPayload as e:
            logger.warning("Invalid payload; dropping id=%s err=%s", msg_id, e)
            await r.xack(settings.audit_stream, settings.audit_group, msg_id)
            continue

        try:
            async with db.begin_nested():
                await db.execute(INSERT_AUDIT, params)
        except SQLAlchemyError:
            logger.exception("DB insert failed; keeping id=%s in PEL", msg_id)
            continue

        await r.xack(settings.audit_stream, settings.audit_group, msg_id)
        stored += 1
    return stored


async def _store_batch(r: redis.Redis, session: async_sessionmaker, settings: Settings, entries: list) -> None:
    async with session() as db:
        async with db.begin():
            stored = await process_entries(r, db, settings, entries)
    logger.debug("Stored %d of %d audit entries", stored, len(entries))


async def _reclaim_pending(r: redis.Redis, session: async_sessionmaker, settings: Settings, consumer: str) -> None:
    _, msgs, _ = await r.xautoclaim(
        name=settings.audit_stream,
        groupname=settings.audit_group,
        consumername=consumer,
        min_idle_time=RETRY_MIN_IDLE_MS,
        start_id="0",
        count=100,
    )
    if msgs:
        logger.info("XAUTOCLAIM: retrying %d pending messages", len(msgs))
        await _store_batch(r, session, settings, msgs)


async def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    r = await create_redis(settings)
    if r is None:
        logger.error("REDIS_URL is not set; audit worker has nothing to consume")
        return
    await _ensure_group(r, settings)

    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    session = async_sessionmaker(bind=engine, expire_on_commit=False)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass

    consumer = f"{socket.gethostname()}-{os.getpid()}"
    logger.info(
        "Audit worker started | stream=%s group=%s consumer=%s batch=%d block_ms=%d",
        settings.audit_stream, settings.audit_group, consumer, settings.audit_batch, settings.audit_block_ms,
    )

    last_retry = loop.time()
    try:
        while not stop.is_set():
            resp = await r.xreadgroup(
                groupname=settings.audit_group,
                consumername=consumer,
                streams={settings.audit_stream: ">"},
                count=settings.audit_batch,
                block=settings.audit_block_ms,
            )
            if resp:
                await _store_batch(r, session, settings, resp[0][1])

            if loop.time() - last_retry > RETRY_EVERY_S:
                last_retry = loop.time()
                try:
                    await _reclaim_pending(r, session, settings, consumer)
                except (redis.RedisError, SQLAlchemyError):
                    logger.exception("XAUTOCLAIM failed")
    finally:
        logger.info("Shutting down audit worker...")
        await r.aclose()
        await engine.dispose()
        logger.info("Audit worker stopped.")


if __name__ == "__main__":
    asyncio.run(run())
