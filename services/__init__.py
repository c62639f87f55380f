"""Services package - Business logic layer"""

from services.order_service import OrderService
from services.notification_service import NotificationService, NotifyResult
from services.catalog_service import CatalogService

__all__ = [
    "OrderService",
    "NotificationService",
    "NotifyResult",
    "CatalogService",
]
