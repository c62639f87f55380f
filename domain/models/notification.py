"""
In-app notification model (pull based, no push delivery).
"""

from sqlalchemy import (
    Column,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    Index,
    Uuid,
)
import uuid

from domain.models.database import Base
from domain.models.types import utcnow, enum_column_type
from domain.enums import NotificationKind


class Notification(Base):
    """Customer notification; at most one per (order, kind)"""

    __tablename__ = "notification"
    __table_args__ = (
        UniqueConstraint("order_id", "kind", name="uq_notification_order_kind"),
        Index("ix_notification_customer_read", "customer_id", "is_read", "created_at"),
    )

    notification_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        Uuid, ForeignKey("tenant.tenant_id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id = Column(
        Uuid, ForeignKey("actor.actor_id", ondelete="CASCADE"), nullable=False
    )
    order_id = Column(
        Uuid, ForeignKey("customer_order.order_id", ondelete="CASCADE"), nullable=False
    )
    kind = Column(
        enum_column_type(NotificationKind, "notification_kind"),
        nullable=False,
        default=NotificationKind.ORDER_READY,
    )
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
