"""
Ready-notification dedup and customer notification inbox.
"""

import logging
from dataclasses import dataclass
from typing import List
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ForbiddenError, OrderNotReadyError
from domain.enums import NotificationKind, OrderStatus
from domain.models import Notification
from domain.order_status import is_notify_eligible
from domain.tenant_context import TenantContext
from repositories import NotificationRepository, OrderRepository

logger = logging.getLogger("mealsub.notifications")


@dataclass
class NotifyResult:
    notification: Notification
    already_notified: bool


class NotificationService:
    def __init__(self, db: Session):
        self.orders = OrderRepository(db)
        self.notifications = NotificationRepository(db)

    def notify_ready(self, ctx: TenantContext, order_id: UUID) -> NotifyResult:
        """
        Create the "order ready" notification for an order, at most once.

        Returns the existing notification with ``already_notified=True`` on
        repeat calls. The (order_id, kind) unique constraint decides races.

        Raises:
            NotFoundError: order not in the caller's tenant
            OrderNotReadyError: order has not reached ``ready``
        """
        if not ctx.is_staff:
            raise ForbiddenError("Only restaurant staff can send notifications")

        order = self.orders.get_or_404(ctx, order_id=order_id)
        status = OrderStatus(order.status)
        if not is_notify_eligible(status):
            raise OrderNotReadyError(details={"status": status.value})

        kind = NotificationKind.ORDER_READY
        existing = self.notifications.get_for_order(ctx, order_id, kind)
        if existing is not None:
            logger.info(f"notify_skipped order_id={order_id} reason=already_notified")
            return NotifyResult(existing, True)

        try:
            notification = self.notifications.create(
                ctx,
                customer_id=order.customer_id,
                order_id=order.order_id,
                kind=kind,
                message=f"Your order {order.order_code} is ready for pickup!",
                is_read=False,
            )
            self.notifications.commit()
        except IntegrityError:
            self.notifications.rollback()
            existing = self.notifications.get_for_order(ctx, order_id, kind)
            if existing is None:
                raise
            logger.info(f"notify_skipped order_id={order_id} reason=concurrent_insert")
            return NotifyResult(existing, True)

        logger.info(
            f"notify_sent tenant_id={ctx.tenant_id} order_id={order_id} "
            f"notification_id={notification.notification_id} customer_id={order.customer_id}"
        )
        return NotifyResult(notification, False)

    def list_for_customer(self, ctx: TenantContext) -> List[Notification]:
        """The caller's notifications, unread first then newest, capped"""
        return self.notifications.list_for_customer(
            ctx, ctx.actor_id, limit=settings.notification_page_size
        )

    def set_read(self, ctx: TenantContext, notification_id: UUID, is_read: bool = True) -> Notification:
        notification = self.notifications.update(
            ctx,
            {"is_read": is_read},
            notification_id=notification_id,
            customer_id=ctx.actor_id,
        )
        self.notifications.commit()
        return notification
