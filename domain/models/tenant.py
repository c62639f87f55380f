"""
Tenant (restaurant) and actor models.
"""

from sqlalchemy import (
    Column,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.database import Base
from domain.models.types import utcnow, enum_column_type
from domain.enums import ActorRole


class Tenant(Base):
    """Restaurant account; the unit of data isolation"""

    __tablename__ = "tenant"

    tenant_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    slug = Column(Text, unique=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    actors = relationship("Actor", back_populates="tenant")


class Actor(Base):
    """Platform operator, restaurant staff member, or subscriber"""

    __tablename__ = "actor"
    __table_args__ = (
        CheckConstraint(
            "role = 'platform' OR tenant_id IS NOT NULL",
            name="ck_actor_tenant_required",
        ),
    )

    actor_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        Uuid, ForeignKey("tenant.tenant_id", ondelete="CASCADE"), nullable=True, index=True
    )
    role = Column(enum_column_type(ActorRole, "actor_role"), nullable=False)
    login_key = Column(Text, unique=True, nullable=False)
    display_name = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    tenant = relationship("Tenant", back_populates="actors")

    def __init__(self, **kwargs):
        role = ActorRole(kwargs.get("role", ActorRole.CUSTOMER))
        has_tenant = kwargs.get("tenant_id") is not None or kwargs.get("tenant") is not None
        if role != ActorRole.PLATFORM and not has_tenant:
            raise ValueError("tenant_id is required for staff and customer actors")
        kwargs["role"] = role
        super().__init__(**kwargs)
