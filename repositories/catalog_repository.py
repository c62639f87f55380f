"""
Catalog Repository - read access to menu items and subscriptions
"""

from typing import Iterable, List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import TenantScopedRepository
from domain.models import MenuItem, Subscription
from domain.enums import MealCategory
from domain.tenant_context import TenantContext


class MenuItemRepository(TenantScopedRepository[MenuItem]):
    """Repository for menu item data access"""

    not_found_message = "Meal not found"

    def __init__(self, db: Session):
        super().__init__(db, MenuItem)

    def list_meals(
        self,
        ctx: TenantContext,
        category: Optional[MealCategory] = None,
        active_only: bool = False,
    ) -> List[MenuItem]:
        """List meals in the caller's tenant, newest first"""
        filters = {}
        if category is not None:
            filters["category"] = MealCategory(category)
        if active_only:
            filters["is_active"] = True
        return self.find(ctx, order_by=[MenuItem.created_at.desc()], **filters)

    def get_many(self, ctx: TenantContext, item_ids: Iterable[UUID]) -> dict:
        """Fetch several meals in one query; ids from other tenants are simply absent"""
        ids = list(set(item_ids))
        if not ids:
            return {}
        stmt = self._query(ctx, {}).where(MenuItem.menu_item_id.in_(ids))
        return {item.menu_item_id: item for item in self.db.scalars(stmt).all()}


class SubscriptionRepository(TenantScopedRepository[Subscription]):
    """Repository for subscription data access"""

    not_found_message = "Subscription not found"

    def __init__(self, db: Session):
        super().__init__(db, Subscription)

    def get_for_customer(self, ctx: TenantContext, customer_id: UUID) -> Optional[Subscription]:
        """Latest subscription for a customer in the caller's tenant"""
        rows = self.find(
            ctx,
            order_by=[Subscription.created_at.desc()],
            limit=1,
            customer_id=customer_id,
        )
        return rows[0] if rows else None
