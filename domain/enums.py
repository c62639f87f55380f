"""
Domain enums for MealSub application.
Contains all enumeration types used across the domain models.
"""

import enum


class ActorRole(str, enum.Enum):
    """Who is acting: platform operator, restaurant staff, or subscriber"""

    PLATFORM = "platform"
    STAFF = "staff"
    CUSTOMER = "customer"


class MealCategory(str, enum.Enum):
    """Menu item categories used for order pairing"""

    PROTEIN = "protein"
    CARB = "carb"
    SNACK = "snack"


class Availability(str, enum.Enum):
    """How often a menu item is scheduled"""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"


class OrderStatus(str, enum.Enum):
    """Order lifecycle, declared in workflow order"""

    RECEIVED = "received"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"


class NotificationKind(str, enum.Enum):
    ORDER_READY = "order_ready"
