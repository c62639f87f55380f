"""
Menu catalog model. The ordering core only reads it.
"""

from sqlalchemy import (
    Column,
    Text,
    Boolean,
    Integer,
    Numeric,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
    Uuid,
)
import uuid

from domain.models.database import Base
from domain.models.types import utcnow, enum_column_type
from domain.enums import MealCategory, Availability


class MenuItem(Base):
    """A meal published by a restaurant"""

    __tablename__ = "menu_item"
    __table_args__ = (
        CheckConstraint("calories >= 0", name="ck_menu_item_calories"),
        CheckConstraint("protein_grams >= 0", name="ck_menu_item_protein"),
        CheckConstraint("carbs_grams >= 0", name="ck_menu_item_carbs"),
        Index("ix_menu_item_tenant_category_active", "tenant_id", "category", "is_active"),
    )

    menu_item_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        Uuid, ForeignKey("tenant.tenant_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    description = Column(Text)
    category = Column(enum_column_type(MealCategory, "meal_category"), nullable=False)
    availability = Column(
        enum_column_type(Availability, "meal_availability"),
        nullable=False,
        default=Availability.DAILY,
    )
    calories = Column(Integer, nullable=False, default=0)
    protein_grams = Column(Numeric(6, 2), nullable=False, default=0)
    carbs_grams = Column(Numeric(6, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def nutrition_snapshot(self) -> dict:
        """Nutrition facts frozen onto an order at creation time"""
        return {
            "mealId": str(self.menu_item_id),
            "name": self.name,
            "calories": int(self.calories),
            "proteinGrams": float(self.protein_grams),
            "carbsGrams": float(self.carbs_grams),
        }
