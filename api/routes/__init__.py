"""API routes package"""

from . import health, meals, notifications, orders, subscriptions

__all__ = ["health", "meals", "notifications", "orders", "subscriptions"]
