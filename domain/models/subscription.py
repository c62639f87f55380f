"""
Customer subscription model. The ordering core only reads it.
"""

from datetime import date

from sqlalchemy import (
    Column,
    Boolean,
    Integer,
    Numeric,
    Date,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
    Uuid,
)
from sqlalchemy.orm import validates
import uuid

from domain.models.database import Base
from domain.models.types import utcnow, enum_column_type
from domain.enums import SubscriptionStatus


class Subscription(Base):
    """Plan shape and daily macro targets for one customer"""

    __tablename__ = "subscription"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_subscription_period"),
        CheckConstraint(
            "meals_per_day BETWEEN 1 AND 5", name="ck_subscription_meals_per_day"
        ),
        Index("ix_subscription_tenant_customer", "tenant_id", "customer_id"),
    )

    subscription_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        Uuid, ForeignKey("tenant.tenant_id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id = Column(
        Uuid, ForeignKey("actor.actor_id", ondelete="CASCADE"), nullable=False
    )
    meals_per_day = Column(Integer, nullable=False)
    includes_snack = Column(Boolean, nullable=False, default=False)
    daily_protein_grams = Column(Numeric(6, 2), nullable=False)
    daily_carbs_grams = Column(Numeric(6, 2), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(
        enum_column_type(SubscriptionStatus, "subscription_status"),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow)

    @validates("end_date")
    def _validate_end_date(self, key, value):
        if self.start_date is not None and value is not None and value < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return value

    @validates("meals_per_day")
    def _validate_meals_per_day(self, key, value):
        if not 1 <= int(value) <= 5:
            raise ValueError("meals_per_day must be between 1 and 5")
        return value

    @property
    def is_active(self) -> bool:
        return SubscriptionStatus(self.status) == SubscriptionStatus.ACTIVE

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def remaining_days(self, today: date) -> int:
        return max(0, (self.end_date - today).days)

    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1
