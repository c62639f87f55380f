"""
Read-only access to the menu catalog and subscriptions for the ordering UI.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from domain.enums import MealCategory
from domain.models import MenuItem, Subscription
from domain.tenant_context import TenantContext
from repositories import MenuItemRepository, SubscriptionRepository

logger = logging.getLogger("mealsub.catalog")


class CatalogService:
    def __init__(self, db: Session):
        self.meals = MenuItemRepository(db)
        self.subscriptions = SubscriptionRepository(db)

    def list_meals(self, ctx: TenantContext, category: Optional[MealCategory] = None) -> List[MenuItem]:
        """Customers only ever see active meals; staff see the whole menu"""
        return self.meals.list_meals(ctx, category=category, active_only=ctx.is_customer)

    def get_my_subscription(self, ctx: TenantContext) -> Subscription:
        subscription = self.subscriptions.get_for_customer(ctx, ctx.actor_id)
        if subscription is None:
            raise NotFoundError("Subscription not found")
        return subscription
