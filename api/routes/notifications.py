"""Customer notification inbox routes"""

from typing import List
from uuid import UUID
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_notification_service
from api.responses import TENANT_ERROR_RESPONSES, ErrorResponse
from api.security import require_customer
from domain.schemas.order_schemas import NotificationReadUpdate, NotificationResponse
from domain.tenant_context import TenantContext
from services import NotificationService

router = APIRouter(
    prefix="/notifications", tags=["Notifications"], responses=TENANT_ERROR_RESPONSES
)
logger = logging.getLogger("mealsub.api.notifications")


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    ctx: TenantContext = Depends(require_customer),
    service: NotificationService = Depends(get_notification_service),
):
    """Caller's notifications, unread first then newest"""
    return service.list_for_customer(ctx)


@router.patch(
    "/{notification_id}",
    response_model=NotificationResponse,
    responses={404: {"model": ErrorResponse, "description": "Notification not found"}},
)
def mark_notification(
    notification_id: UUID,
    update: NotificationReadUpdate,
    ctx: TenantContext = Depends(require_customer),
    service: NotificationService = Depends(get_notification_service),
):
    return service.set_read(ctx, notification_id, is_read=update.is_read)
