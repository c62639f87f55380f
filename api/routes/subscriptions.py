"""Customer subscription routes"""

import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_catalog_service
from api.responses import TENANT_ERROR_RESPONSES, ErrorResponse
from api.security import require_customer
from domain.schemas.order_schemas import SubscriptionResponse
from domain.tenant_context import TenantContext
from services import CatalogService
from services.order_service import utc_today

router = APIRouter(
    prefix="/subscriptions", tags=["Subscriptions"], responses=TENANT_ERROR_RESPONSES
)
logger = logging.getLogger("mealsub.api.subscriptions")


@router.get(
    "/me",
    response_model=SubscriptionResponse,
    responses={404: {"model": ErrorResponse, "description": "No subscription"}},
)
def get_my_subscription(
    ctx: TenantContext = Depends(require_customer),
    service: CatalogService = Depends(get_catalog_service),
):
    """The caller's plan: meals per day, snack flag, macro targets and period"""
    subscription = service.get_my_subscription(ctx)
    return SubscriptionResponse.from_subscription(subscription, utc_today())
