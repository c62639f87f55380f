"""
Tenant context resolution from bearer credentials.

Tokens are issued by the auth subsystem; this module only verifies them and
turns the claims into a TenantContext. The tenant id in that context is the
only one the rest of the request ever uses.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.exceptions import ForbiddenError, TenantIdRequiredError, UnauthorizedError
from domain.enums import ActorRole
from domain.tenant_context import TenantContext

logger = logging.getLogger("mealsub.security")

bearer_scheme = HTTPBearer(auto_error=False)

ROLE_CLAIM = "role"
TENANT_CLAIM = "tenantId"


def _invalid(reason: str) -> UnauthorizedError:
    logger.info(f"credential_rejected reason={reason}")
    return UnauthorizedError("Invalid session token", code="INVALID_TOKEN")


def resolve_tenant_context(token: str) -> TenantContext:
    """
    Verify a bearer token and build the caller's TenantContext.

    Raises:
        UnauthorizedError: TOKEN_EXPIRED, or INVALID_TOKEN for a bad signature,
            malformed claims, unknown role, or a staff/customer token
            without a tenant.
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise UnauthorizedError(
            "Session expired, please sign in again", code="TOKEN_EXPIRED"
        )
    except JWTError as e:
        raise _invalid(f"decode_failed:{e}")

    try:
        actor_id = uuid.UUID(str(claims["sub"]))
        role = ActorRole(claims[ROLE_CLAIM])
    except (KeyError, ValueError):
        raise _invalid("bad_claims")

    raw_tenant = claims.get(TENANT_CLAIM)
    tenant_id: Optional[uuid.UUID] = None
    if role == ActorRole.PLATFORM:
        # Platform actors never carry a tenant, whatever the token says
        tenant_id = None
    else:
        if not raw_tenant:
            raise _invalid("missing_tenant")
        try:
            tenant_id = uuid.UUID(str(raw_tenant))
        except ValueError:
            raise _invalid("bad_tenant")

    return TenantContext(actor_id=actor_id, role=role, tenant_id=tenant_id)


def issue_credential(
    actor_id: uuid.UUID,
    role: ActorRole,
    tenant_id: Optional[uuid.UUID] = None,
    expires_in: timedelta = timedelta(days=7),
) -> str:
    """Sign a token in the auth subsystem's format (local development and tests)."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(actor_id),
        ROLE_CLAIM: ActorRole(role).value,
        TENANT_CLAIM: str(tenant_id) if tenant_id else None,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def get_tenant_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TenantContext:
    """FastAPI dependency: the authenticated caller's context"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required", code="NO_TOKEN")
    return resolve_tenant_context(credentials.credentials)


def require_role(*roles: ActorRole):
    """
    Dependency factory for tenant-scoped routes restricted to ``roles``.

    Platform actors are refused with TENANT_ID_REQUIRED before the role
    check: a tenant route never borrows a tenant id from the request.
    """
    allowed = {ActorRole(r) for r in roles}

    def dependency(ctx: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        if ctx.is_platform:
            raise TenantIdRequiredError()
        if ctx.role not in allowed:
            raise ForbiddenError(details={"allowedRoles": sorted(r.value for r in allowed)})
        return ctx

    return dependency


require_customer = require_role(ActorRole.CUSTOMER)
require_staff = require_role(ActorRole.STAFF)
require_member = require_role(ActorRole.STAFF, ActorRole.CUSTOMER)
