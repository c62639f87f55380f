"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    build_engine,
    init_database,
    get_db_session,
)
from domain.models.tenant import Tenant, Actor
from domain.models.menu import MenuItem
from domain.models.subscription import Subscription
from domain.models.order import Order, OrderSequence, format_order_code
from domain.models.notification import Notification

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "build_engine",
    "init_database",
    "get_db_session",
    # Tenancy
    "Tenant",
    "Actor",
    # Catalog and plans
    "MenuItem",
    "Subscription",
    # Orders
    "Order",
    "OrderSequence",
    "format_order_code",
    "Notification",
]
