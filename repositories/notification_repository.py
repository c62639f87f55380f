"""
Notification Repository - Data access layer for customer notifications
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import TenantScopedRepository
from domain.models import Notification
from domain.enums import NotificationKind
from domain.tenant_context import TenantContext


class NotificationRepository(TenantScopedRepository[Notification]):
    """Repository for notification data access"""

    not_found_message = "Notification not found"

    def __init__(self, db: Session):
        super().__init__(db, Notification)

    def get_for_order(
        self, ctx: TenantContext, order_id: UUID, kind: NotificationKind
    ) -> Optional[Notification]:
        return self.find_one(ctx, order_id=order_id, kind=NotificationKind(kind))

    def list_for_customer(
        self, ctx: TenantContext, customer_id: UUID, limit: int
    ) -> List[Notification]:
        """Unread first, then newest first"""
        return self.find(
            ctx,
            order_by=[Notification.is_read.asc(), Notification.created_at.desc()],
            limit=limit,
            customer_id=customer_id,
        )
