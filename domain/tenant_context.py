"""Tenant context value object for the current request."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from app.exceptions import TenantIdRequiredError
from domain.enums import ActorRole


@dataclass(frozen=True)
class TenantContext:
    """Immutable identity of the caller, resolved once per request.

    ``tenant_id`` is None only for platform-level actors. Everything that
    reads or writes tenant data takes its tenant id from here and nowhere
    else.
    """

    actor_id: uuid.UUID
    role: ActorRole
    tenant_id: Optional[uuid.UUID] = None

    @property
    def is_platform(self) -> bool:
        return self.role == ActorRole.PLATFORM

    @property
    def is_staff(self) -> bool:
        return self.role == ActorRole.STAFF

    @property
    def is_customer(self) -> bool:
        return self.role == ActorRole.CUSTOMER

    def require_tenant(self) -> uuid.UUID:
        """Return the tenant id or fail for platform-level actors."""
        if self.tenant_id is None:
            raise TenantIdRequiredError()
        return self.tenant_id
