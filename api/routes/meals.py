"""Menu catalog routes (read only)"""

from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_catalog_service
from api.responses import TENANT_ERROR_RESPONSES
from api.security import require_member
from domain.enums import MealCategory
from domain.schemas.order_schemas import MealResponse
from domain.tenant_context import TenantContext
from services import CatalogService

router = APIRouter(prefix="/meals", tags=["Catalog"], responses=TENANT_ERROR_RESPONSES)
logger = logging.getLogger("mealsub.api.meals")


@router.get("", response_model=List[MealResponse])
def list_meals(
    category: Optional[MealCategory] = Query(None, description="protein, carb or snack"),
    ctx: TenantContext = Depends(require_member),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    List the restaurant's meals, newest first.

    Customers see active meals only, which is what the selection draft
    offers for each step.
    """
    return [MealResponse.from_item(item) for item in service.list_meals(ctx, category)]
