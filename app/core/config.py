import os
from dataclasses import dataclass
from functools import lru_cache
from app.domain.exceptions import ConfigurationError


def get_secret(secret_name: str) -> str | None:
    secret_path = f'/run/secrets/{secret_name}'
    try:
        with open(secret_path, 'r', encoding='utf-8') as secret_file:
            return secret_file.read().strip()
    except IOError:
        return os.getenv(secret_name)


@dataclass(frozen=True)
class Settings:
    database_url: str
    redis_url: str | None
    secret_key: str | None
    algorithm: str = "HS256"
    jwt_issuer: str = "pricing-admin"
    jwt_audience: str = "pricing-api"
    audit_stream: str = "audit:events"
    audit_group: str = "audit-g1"
    audit_batch: int = 200
    audit_block_ms: int = 5000
    pricing_cache_max_age: int = 300
    log_level: str = "INFO"


def load_settings() -> Settings:
    db_password = get_secret('db_password')
    postgres_db = os.getenv("POSTGRES_DB")
    postgres_user = os.getenv("POSTGRES_USER")
    db_host = os.getenv("DB_HOST", "localhost")
    db_port = os.getenv("DB_PORT", "5432")

    if not (postgres_user and db_password and postgres_db):
        raise ConfigurationError(
            "Can't build DATABASE_URL",
            ctx={"missing": [name for name, value in (
                ("POSTGRES_USER", postgres_user),
                ("db_password", db_password),
                ("POSTGRES_DB", postgres_db),
            ) if not value]}
        )

    return Settings(
        database_url=f"postgresql+asyncpg://{postgres_user}:{db_password}@{db_host}:{db_port}/{postgres_db}",
        redis_url=os.getenv("REDIS_URL"),
        secret_key=get_secret('secret_key'),
        jwt_issuer=os.getenv("JWT_ISSUER", "pricing-admin"),
        jwt_audience=os.getenv("JWT_AUDIENCE", "pricing-api"),
        audit_stream=os.getenv("AUDIT_STREAM", "audit:events"),
        audit_group=os.getenv("AUDIT_GROUP", "audit-g1"),
        audit_batch=int(os.getenv("AUDIT_BATCH", "200")),
        audit_block_ms=int(os.getenv("AUDIT_BLOCK_MS", "5000")),
        pricing_cache_max_age=int(os.getenv("PRICING_CACHE_MAX_AGE", "300")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
