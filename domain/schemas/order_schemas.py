"""
Wire schemas for ordering. JSON bodies use camelCase; Python code uses
snake_case field names (populate_by_name lets either form in).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.enums import (
    Availability,
    MealCategory,
    NotificationKind,
    OrderStatus,
    SubscriptionStatus,
)


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# =============================================================================
# ORDER SUBMISSION
# =============================================================================


class OrderSelectionIn(WireModel):
    """One protein + carb pairing"""

    protein_meal_id: UUID
    carb_meal_id: UUID


class NutritionTotals(WireModel):
    calories: float = Field(0, ge=0)
    protein_grams: float = Field(0, ge=0)
    carbs_grams: float = Field(0, ge=0)


class MacroTargets(WireModel):
    protein_grams: Optional[float] = None
    carbs_grams: Optional[float] = None


class OrderCreate(WireModel):
    """Order submission body.

    ``totals`` is the client's own computation; it is stored for display
    only and never used for decisions.
    """

    order_date: Optional[date] = Field(
        None, description="Day the order is for; defaults to today (UTC)"
    )
    selections: List[OrderSelectionIn] = Field(default_factory=list)
    snack_meal_ids: List[UUID] = Field(default_factory=list)
    totals: Optional[NutritionTotals] = None
    notes: Optional[str] = Field(None, max_length=500)


class OrderCreatedResponse(WireModel):
    order_id: UUID
    order_number: int
    order_code: str
    status: OrderStatus
    created_at: datetime


# =============================================================================
# ORDER READS
# =============================================================================


class OrderResponse(WireModel):
    order_id: UUID
    order_number: int
    order_code: str
    order_date: date
    customer_id: UUID
    status: OrderStatus
    selections: List[Dict[str, Any]]
    snack: Optional[Dict[str, Any]] = None
    macro_targets: MacroTargets
    totals: NutritionTotals
    client_totals: Optional[NutritionTotals] = None
    notes: str = ""
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            order_id=order.order_id,
            order_number=order.order_number,
            order_code=order.order_code,
            order_date=order.order_date,
            customer_id=order.customer_id,
            status=order.status,
            selections=order.selections,
            snack=order.snack,
            macro_targets=MacroTargets(
                protein_grams=_as_float(order.target_protein_grams),
                carbs_grams=_as_float(order.target_carbs_grams),
            ),
            totals=NutritionTotals(
                calories=order.total_calories,
                protein_grams=float(order.total_protein_grams),
                carbs_grams=float(order.total_carbs_grams),
            ),
            client_totals=order.client_totals,
            notes=order.notes or "",
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


# =============================================================================
# STATUS AND NOTIFICATIONS
# =============================================================================


class OrderStatusUpdate(WireModel):
    status: OrderStatus


class OrderStatusResponse(WireModel):
    order_id: UUID
    status: OrderStatus
    updated_at: Optional[datetime] = None


class NotifyResponse(WireModel):
    notification_id: UUID
    sent: bool
    already_notified: bool


class NotificationResponse(WireModel):
    notification_id: UUID
    order_id: UUID
    kind: NotificationKind
    message: str
    is_read: bool
    created_at: datetime


class NotificationReadUpdate(WireModel):
    is_read: bool = True


# =============================================================================
# CATALOG (read only)
# =============================================================================


class MealResponse(WireModel):
    id: UUID
    name: str
    description: Optional[str] = None
    category: MealCategory
    availability: Availability
    calories: int
    protein_grams: float
    carbs_grams: float
    is_active: bool

    @classmethod
    def from_item(cls, item) -> "MealResponse":
        return cls(
            id=item.menu_item_id,
            name=item.name,
            description=item.description,
            category=item.category,
            availability=item.availability,
            calories=item.calories,
            protein_grams=float(item.protein_grams),
            carbs_grams=float(item.carbs_grams),
            is_active=item.is_active,
        )


class SubscriptionResponse(WireModel):
    subscription_id: UUID
    meals_per_day: int
    includes_snack: bool
    daily_protein_grams: float
    daily_carbs_grams: float
    start_date: date
    end_date: date
    status: SubscriptionStatus
    remaining_days: int
    total_days: int

    @classmethod
    def from_subscription(cls, sub, today: date) -> "SubscriptionResponse":
        return cls(
            subscription_id=sub.subscription_id,
            meals_per_day=sub.meals_per_day,
            includes_snack=sub.includes_snack,
            daily_protein_grams=float(sub.daily_protein_grams),
            daily_carbs_grams=float(sub.daily_carbs_grams),
            start_date=sub.start_date,
            end_date=sub.end_date,
            status=sub.status,
            remaining_days=sub.remaining_days(today),
            total_days=sub.total_days(),
        )
