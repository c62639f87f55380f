"""Order submission, order reads and kitchen status routes"""

from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_notification_service, get_order_service
from api.responses import TENANT_ERROR_RESPONSES, ErrorResponse
from api.security import require_customer, require_member, require_staff
from domain.enums import OrderStatus
from domain.schemas.order_schemas import (
    NotifyResponse,
    OrderCreate,
    OrderCreatedResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderStatusUpdate,
)
from domain.tenant_context import TenantContext
from services import NotificationService, OrderService

router = APIRouter(prefix="/orders", tags=["Orders"], responses=TENANT_ERROR_RESPONSES)
logger = logging.getLogger("mealsub.api.orders")


@router.post(
    "",
    response_model=OrderCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Selections do not fit the plan"},
        409: {"model": ErrorResponse, "description": "Order already placed for this date"},
    },
)
def submit_order(
    submission: OrderCreate,
    ctx: TenantContext = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    """
    Submit the customer's completed selection draft.

    Every check (subscription, plan size, snack rules, meal references,
    one order per day) runs before anything is written.

    Returns:
        OrderCreatedResponse with the allocated order number and code

    Raises:
        400: VALIDATION_ERROR with details.reason PLAN_MISMATCH,
             SNACK_NOT_ALLOWED or INVALID_MEAL_REFERENCE
        403: NO_ACTIVE_SUBSCRIPTION
        409: ORDER_ALREADY_EXISTS
    """
    order = service.submit_order(ctx, submission)
    return OrderCreatedResponse(
        order_id=order.order_id,
        order_number=order.order_number,
        order_code=order.order_code,
        status=order.status,
        created_at=order.created_at,
    )


@router.get("/current", response_model=Optional[OrderResponse])
def get_current_order(
    ctx: TenantContext = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    """Today's order for the caller, or null when none was placed"""
    order = service.get_current_order(ctx)
    return OrderResponse.from_order(order) if order else None


@router.get("/history", response_model=List[OrderResponse])
def get_order_history(
    ctx: TenantContext = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    """All of the caller's orders, newest first"""
    return [OrderResponse.from_order(o) for o in service.get_order_history(ctx)]


@router.get("/my", response_model=List[OrderResponse])
def get_my_orders(
    ctx: TenantContext = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    """The caller's most recent orders"""
    return [OrderResponse.from_order(o) for o in service.get_my_orders(ctx)]


@router.get("/today", response_model=List[OrderResponse])
def get_today_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    q: Optional[str] = Query(None, max_length=100, description="Customer name or order code"),
    ctx: TenantContext = Depends(require_staff),
    service: OrderService = Depends(get_order_service),
):
    """Kitchen view of today's orders for the staff member's restaurant"""
    orders = service.get_today_orders(ctx, status=status_filter, q=q)
    return [OrderResponse.from_order(o) for o in orders]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse, "description": "Order not found"}},
)
def get_order(
    order_id: UUID,
    ctx: TenantContext = Depends(require_member),
    service: OrderService = Depends(get_order_service),
):
    """
    Fetch one order. Customers only see their own orders; staff see any
    order in their restaurant.
    """
    return OrderResponse.from_order(service.get_order(ctx, order_id))


@router.patch(
    "/{order_id}/status",
    response_model=OrderStatusResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Order not found"},
        409: {"model": ErrorResponse, "description": "Status would move backwards"},
    },
)
def update_order_status(
    order_id: UUID,
    update: OrderStatusUpdate,
    ctx: TenantContext = Depends(require_staff),
    service: OrderService = Depends(get_order_service),
):
    """
    Move an order forward in the kitchen workflow.

    Re-sending the current status succeeds without changes.

    Raises:
        404: order not in the caller's restaurant
        409: INVALID_STATUS_TRANSITION
    """
    order = service.update_status(ctx, order_id, update.status)
    return OrderStatusResponse(
        order_id=order.order_id, status=order.status, updated_at=order.updated_at
    )


@router.post(
    "/{order_id}/notify",
    response_model=NotifyResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Order not found"},
        409: {"model": ErrorResponse, "description": "Order is not ready yet"},
    },
)
def notify_order_ready(
    order_id: UUID,
    ctx: TenantContext = Depends(require_staff),
    service: NotificationService = Depends(get_notification_service),
):
    """
    Tell the customer their order is ready. Safe to call repeatedly: only
    the first call creates a notification.
    """
    result = service.notify_ready(ctx, order_id)
    return NotifyResponse(
        notification_id=result.notification.notification_id,
        sent=not result.already_notified,
        already_notified=result.already_notified,
    )
