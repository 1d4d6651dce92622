import logging
from fastapi import FastAPI
from app.api.exceptions import register_error_handler
from app.api.v1.routes import markup_rules, hospitalities, hospitality_assignments, legacy, pricing
from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.core.middleware.http_ctx import HttpContextMiddleware
from app.core.redis import create_redis


logger = logging.getLogger("app")


async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    r = await create_redis(settings)
    if r is None:
        logger.warning("REDIS_URL not set; audit events will not be emitted")
    app.state.redis = r
    try:
        yield
    finally:
        if r is not None:
            await r.aclose()


app = FastAPI(lifespan=lifespan)
app.add_middleware(HttpContextMiddleware, request_id_header="X-Request-ID")
register_error_handler(app)
app.include_router(pricing.router)
app.include_router(markup_rules.router)
app.include_router(hospitalities.router)
app.include_router(hospitality_assignments.router)
app.include_router(legacy.router)
