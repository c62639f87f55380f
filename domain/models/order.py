"""
Order and order-number sequence models.
"""

from sqlalchemy import (
    Column,
    Text,
    Integer,
    Numeric,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    UniqueConstraint,
    Index,
    Uuid,
)
import uuid

from domain.models.database import Base
from domain.models.types import utcnow, enum_column_type
from domain.enums import OrderStatus


def format_order_code(order_number: int) -> str:
    """Human facing order code, e.g. ``ORD0007#``"""
    return f"ORD{order_number:04d}#"


class Order(Base):
    """A customer's daily order.

    ``selections`` holds one ``{proteinItemId, carbItemId, protein, carb}``
    entry per plan slot, where ``protein``/``carb`` are nutrition snapshots
    taken at creation time.
    """

    __tablename__ = "customer_order"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "customer_id", "order_date", name="uq_order_customer_day"
        ),
        UniqueConstraint("tenant_id", "order_number", name="uq_order_tenant_number"),
        Index("ix_order_tenant_date_status", "tenant_id", "order_date", "status"),
    )

    order_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        Uuid, ForeignKey("tenant.tenant_id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id = Column(
        Uuid, ForeignKey("actor.actor_id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_number = Column(Integer, nullable=False)
    order_date = Column(Date, nullable=False)
    status = Column(
        enum_column_type(OrderStatus, "order_status"),
        nullable=False,
        default=OrderStatus.RECEIVED,
    )
    selections = Column(JSON, nullable=False)
    snack = Column(JSON, nullable=True)
    target_protein_grams = Column(Numeric(6, 2))
    target_carbs_grams = Column(Numeric(6, 2))
    total_calories = Column(Integer, nullable=False, default=0)
    total_protein_grams = Column(Numeric(8, 2), nullable=False, default=0)
    total_carbs_grams = Column(Numeric(8, 2), nullable=False, default=0)
    client_totals = Column(JSON, nullable=True)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @property
    def order_code(self) -> str:
        return format_order_code(self.order_number)


class OrderSequence(Base):
    """Last allocated order number per tenant"""

    __tablename__ = "order_sequence"

    tenant_id = Column(
        Uuid, ForeignKey("tenant.tenant_id", ondelete="CASCADE"), primary_key=True
    )
    last_value = Column(Integer, nullable=False, default=0)
