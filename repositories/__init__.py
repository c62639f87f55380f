"""
Repositories package - Data access layer.
"""

from repositories.base import TenantScopedRepository
from repositories.catalog_repository import MenuItemRepository, SubscriptionRepository
from repositories.order_repository import OrderRepository
from repositories.notification_repository import NotificationRepository

__all__ = [
    "TenantScopedRepository",
    "MenuItemRepository",
    "SubscriptionRepository",
    "OrderRepository",
    "NotificationRepository",
]
