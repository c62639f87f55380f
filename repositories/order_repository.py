"""
Order Repository - Data access layer for order operations
"""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID
from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from repositories.base import TenantScopedRepository
from domain.models import Order, OrderSequence, Actor, format_order_code
from domain.enums import OrderStatus
from domain.tenant_context import TenantContext

logger = logging.getLogger("mealsub.repositories.orders")


class OrderRepository(TenantScopedRepository[Order]):
    """Repository for order data access"""

    not_found_message = "Order not found"

    def __init__(self, db: Session):
        super().__init__(db, Order)

    def get_for_customer_day(
        self, ctx: TenantContext, customer_id: UUID, order_date: date
    ) -> Optional[Order]:
        return self.find_one(ctx, customer_id=customer_id, order_date=order_date)

    def get_owned(self, ctx: TenantContext, order_id: UUID) -> Order:
        """
        Fetch an order the caller may see.

        Customers get one compound ``{tenant_id, order_id, customer_id}``
        lookup; staff get ``{tenant_id, order_id}``.
        """
        if ctx.is_customer:
            return self.get_or_404(ctx, order_id=order_id, customer_id=ctx.actor_id)
        return self.get_or_404(ctx, order_id=order_id)

    def list_for_customer(
        self, ctx: TenantContext, customer_id: UUID, limit: Optional[int] = None
    ) -> List[Order]:
        return self.find(
            ctx,
            order_by=[Order.order_date.desc(), Order.created_at.desc()],
            limit=limit,
            customer_id=customer_id,
        )

    def search_day(
        self,
        ctx: TenantContext,
        order_date: date,
        status: Optional[OrderStatus] = None,
        q: Optional[str] = None,
    ) -> List[Order]:
        """Orders for one day in the caller's tenant, optionally filtered by
        status and by a case-insensitive substring of the customer name or
        the order code (``ORD0012#``)."""
        filters = {"order_date": order_date}
        if status is not None:
            filters["status"] = OrderStatus(status)
        stmt = self._query(ctx, filters)
        stmt = stmt.join(Actor, Actor.actor_id == Order.customer_id)
        stmt = stmt.add_columns(Actor.display_name).order_by(Order.created_at.desc())
        rows = self.db.execute(stmt).all()

        term = (q or "").strip().lower()
        if not term:
            return [order for order, _ in rows]
        return [
            order
            for order, display_name in rows
            if term in (display_name or "").lower()
            or term in format_order_code(order.order_number).lower()
        ]

    def allocate_order_number(self, ctx: TenantContext) -> int:
        """
        Reserve the next order number for the caller's tenant.

        One atomic UPDATE ... RETURNING on the tenant's sequence row. The row
        is seeded on first use inside a savepoint; if another transaction
        seeded it first, the insert conflicts and the UPDATE runs again.
        Runs inside the caller's transaction, so a rolled back order leaves a
        gap rather than a duplicate.
        """
        tenant_id = ctx.require_tenant()
        value = self._increment_sequence(tenant_id)
        if value is not None:
            return value
        try:
            with self.db.begin_nested():
                self.db.execute(insert(OrderSequence).values(tenant_id=tenant_id, last_value=1))
        except IntegrityError:
            logger.info(f"order_sequence_seed_conflict tenant_id={tenant_id}")
            return self._increment_sequence(tenant_id)
        return 1

    def _increment_sequence(self, tenant_id: UUID) -> Optional[int]:
        stmt = (
            update(OrderSequence)
            .where(OrderSequence.tenant_id == tenant_id)
            .values(last_value=OrderSequence.last_value + 1)
            .returning(OrderSequence.last_value)
        )
        return self.db.execute(stmt).scalar_one_or_none()
