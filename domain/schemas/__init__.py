"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.order_schemas import (
    WireModel,
    OrderSelectionIn,
    NutritionTotals,
    MacroTargets,
    OrderCreate,
    OrderCreatedResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderStatusResponse,
    NotifyResponse,
    NotificationResponse,
    NotificationReadUpdate,
    MealResponse,
    SubscriptionResponse,
)

__all__ = [
    "WireModel",
    # Order submission
    "OrderSelectionIn",
    "NutritionTotals",
    "MacroTargets",
    "OrderCreate",
    "OrderCreatedResponse",
    # Order reads
    "OrderResponse",
    # Status and notifications
    "OrderStatusUpdate",
    "OrderStatusResponse",
    "NotifyResponse",
    "NotificationResponse",
    "NotificationReadUpdate",
    # Catalog
    "MealResponse",
    "SubscriptionResponse",
]
