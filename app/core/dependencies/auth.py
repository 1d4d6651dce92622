from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from typing import Annotated
from jose import JWTError, jwt
from pydantic import ValidationError
from app.core.config import get_settings
from app.domain.auth.schemas import TokenPayload, AdminPrincipal
from app.domain.exceptions import Unauthorized, Forbidden
from app.core.ctx import ADMIN_ROLES_CTX, ADMIN_ID_CTX


oauth2_bearer = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_token_payload(token: Annotated[str, Depends(oauth2_bearer)]) -> TokenPayload:
    settings = get_settings()
    try:
        raw_payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"verify_aud": True, "leeway": 5}
        )
    except JWTError:
        raise Unauthorized("Invalid authentication credentials", ctx={"reason": "invalid_token"})

    if raw_payload.get("typ") != "access":
        raise Unauthorized("Invalid token type", ctx={"reason": "invalid_type"})
    try:
        return TokenPayload.model_validate(raw_payload)
    except ValidationError:
        raise Unauthorized("Invalid authentication credentials", ctx={"reason": "invalid_token"})


def get_current_admin_with_roles(*allowed_roles: str):
    allowed = set(allowed_roles)

    async def _inner(payload: Annotated[TokenPayload, Depends(get_token_payload)]) -> AdminPrincipal:
        try:
            admin_id = int(payload.sub)
        except ValueError:
            raise Unauthorized("Invalid subject", ctx={"sub": payload.sub})

        roles = frozenset(payload.roles)
        ADMIN_ROLES_CTX.set(tuple(sorted(roles)))
        ADMIN_ID_CTX.set(admin_id)

        if allowed and roles.isdisjoint(allowed):
            raise Forbidden("Permission denied", ctx={"required": list(allowed_roles), "admin_roles": sorted(roles)})
        return AdminPrincipal(id=admin_id, roles=roles)
    return _inner


require_pricing_admin = get_current_admin_with_roles("SUPER_ADMIN", "ADMIN", "PRICING_MANAGER")
