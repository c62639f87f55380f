"""
Order acceptance pipeline and order status transitions.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    ForbiddenError,
    InvalidMealReferenceError,
    InvalidStatusTransitionError,
    NoActiveSubscriptionError,
    OrderAlreadyExistsError,
    OrderDateInPastError,
    PlanMismatchError,
    SnackNotAllowedError,
)
from domain.enums import MealCategory, OrderStatus, SubscriptionStatus
from domain.models import MenuItem, Order, Subscription
from domain.order_status import can_transition, allowed_targets
from domain.schemas.order_schemas import OrderCreate
from domain.tenant_context import TenantContext
from repositories import MenuItemRepository, OrderRepository, SubscriptionRepository

logger = logging.getLogger("mealsub.orders")

MAX_SNACKS = 1


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class OrderService:
    """
    Order pipeline:
    - resolves the customer's subscription inside the caller's tenant
    - checks the submission against the plan (slot count, snack rules)
    - checks every referenced meal against the tenant's catalog
    - recomputes nutrition totals from the catalog
    - refuses a second order for the same customer and day
    - snapshots macro targets, allocates an order number, persists

    Every check runs before the first write, so a rejected submission
    leaves nothing behind.
    """

    def __init__(self, db: Session):
        self.orders = OrderRepository(db)
        self.meals = MenuItemRepository(db)
        self.subscriptions = SubscriptionRepository(db)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_order(
        self, ctx: TenantContext, submission: OrderCreate, today: Optional[date] = None
    ) -> Order:
        if not ctx.is_customer:
            raise ForbiddenError("Only customers can place orders")
        ctx.require_tenant()

        today = today or utc_today()
        order_date = submission.order_date or today
        if order_date < today:
            raise OrderDateInPastError(
                details={"orderDate": order_date.isoformat(), "today": today.isoformat()}
            )

        subscription = self._resolve_subscription(ctx, order_date)
        self._check_plan(subscription, submission)
        self._check_snack(subscription, submission)
        meals = self._resolve_meals(ctx, submission)
        totals = self.compute_totals(submission, meals)
        self._compare_client_totals(ctx, submission, totals)

        existing = self.orders.get_for_customer_day(ctx, ctx.actor_id, order_date)
        if existing is not None:
            logger.info(
                f"order_rejected reason=duplicate tenant_id={ctx.tenant_id} "
                f"customer_id={ctx.actor_id} order_date={order_date}"
            )
            raise self._already_exists(existing)

        payload = self._build_payload(ctx, submission, subscription, meals, totals, order_date)
        try:
            payload["order_number"] = self.orders.allocate_order_number(ctx)
            order = self.orders.create(ctx, **payload)
            self.orders.commit()
        except IntegrityError as exc:
            # The unique (tenant, customer, day) constraint is the real guard;
            # a concurrent submission that slipped past the read lands here.
            self.orders.rollback()
            existing = self.orders.get_for_customer_day(ctx, ctx.actor_id, order_date)
            if existing is not None:
                logger.warning(
                    f"order_conflict_on_insert tenant_id={ctx.tenant_id} "
                    f"customer_id={ctx.actor_id} order_date={order_date}"
                )
                raise self._already_exists(existing) from exc
            raise

        logger.info(
            f"order_created tenant_id={ctx.tenant_id} order_id={order.order_id} "
            f"order_code={order.order_code} customer_id={ctx.actor_id} "
            f"order_date={order_date} slots={len(order.selections)} "
            f"snack={'yes' if order.snack else 'no'}"
        )
        return order

    def _resolve_subscription(self, ctx: TenantContext, order_date: date) -> Subscription:
        subscription = self.subscriptions.get_for_customer(ctx, ctx.actor_id)
        if subscription is None:
            raise NoActiveSubscriptionError()
        if not subscription.is_active:
            raise NoActiveSubscriptionError(
                "Subscription is paused",
                details={"status": SubscriptionStatus(subscription.status).value},
            )
        if not subscription.covers(order_date):
            raise NoActiveSubscriptionError(
                "Subscription does not cover the order date",
                details={
                    "orderDate": order_date.isoformat(),
                    "startDate": subscription.start_date.isoformat(),
                    "endDate": subscription.end_date.isoformat(),
                },
            )
        return subscription

    @staticmethod
    def _check_plan(subscription: Subscription, submission: OrderCreate) -> None:
        expected = subscription.meals_per_day
        received = len(submission.selections)
        if received != expected:
            raise PlanMismatchError(details={"expected": expected, "received": received})

    @staticmethod
    def _check_snack(subscription: Subscription, submission: OrderCreate) -> None:
        count = len(submission.snack_meal_ids)
        if count > MAX_SNACKS:
            raise SnackNotAllowedError(
                f"At most {MAX_SNACKS} snack may be selected",
                details={"received": count, "max": MAX_SNACKS},
            )
        if count and not subscription.includes_snack:
            raise SnackNotAllowedError(
                "Subscription plan does not include a snack",
                details={"received": count, "max": 0},
            )

    def _resolve_meals(self, ctx: TenantContext, submission: OrderCreate) -> Dict[UUID, MenuItem]:
        """Load every referenced meal and verify tenant, category and availability.

        Meals from other tenants are indistinguishable from missing ones.
        """
        expected: List[tuple] = []
        for slot, pair in enumerate(submission.selections):
            expected.append((pair.protein_meal_id, MealCategory.PROTEIN, slot))
            expected.append((pair.carb_meal_id, MealCategory.CARB, slot))
        for meal_id in submission.snack_meal_ids:
            expected.append((meal_id, MealCategory.SNACK, None))

        meals = self.meals.get_many(ctx, [meal_id for meal_id, _, _ in expected])

        invalid = []
        for meal_id, category, slot in expected:
            item = meals.get(meal_id)
            if item is None:
                problem = "not_found"
            elif MealCategory(item.category) != category:
                problem = "wrong_category"
            elif not item.is_active:
                problem = "inactive"
            else:
                continue
            invalid.append(
                {
                    "mealId": str(meal_id),
                    "expectedCategory": category.value,
                    "slot": slot,
                    "problem": problem,
                }
            )

        if invalid:
            raise InvalidMealReferenceError(details={"invalidMeals": invalid})
        return meals

    @staticmethod
    def compute_totals(submission: OrderCreate, meals: Dict[UUID, MenuItem]) -> dict:
        """Authoritative nutrition totals from catalog data"""
        ids = []
        for pair in submission.selections:
            ids.extend([pair.protein_meal_id, pair.carb_meal_id])
        ids.extend(submission.snack_meal_ids)

        calories = 0
        protein = Decimal("0")
        carbs = Decimal("0")
        for meal_id in ids:
            item = meals[meal_id]
            calories += int(item.calories)
            protein += Decimal(str(item.protein_grams))
            carbs += Decimal(str(item.carbs_grams))
        return {"calories": calories, "protein_grams": protein, "carbs_grams": carbs}

    @staticmethod
    def _compare_client_totals(ctx: TenantContext, submission: OrderCreate, totals: dict) -> None:
        client = submission.totals
        if client is None:
            return
        if (
            round(client.calories) != totals["calories"]
            or abs(Decimal(str(client.protein_grams)) - totals["protein_grams"]) > Decimal("0.5")
            or abs(Decimal(str(client.carbs_grams)) - totals["carbs_grams"]) > Decimal("0.5")
        ):
            logger.warning(
                f"client_totals_mismatch tenant_id={ctx.tenant_id} customer_id={ctx.actor_id} "
                f"client={client.model_dump()} server={totals}"
            )

    @staticmethod
    def _build_payload(
        ctx: TenantContext,
        submission: OrderCreate,
        subscription: Subscription,
        meals: Dict[UUID, MenuItem],
        totals: dict,
        order_date: date,
    ) -> dict:
        selections = [
            {
                "proteinItemId": str(pair.protein_meal_id),
                "carbItemId": str(pair.carb_meal_id),
                "protein": meals[pair.protein_meal_id].nutrition_snapshot(),
                "carb": meals[pair.carb_meal_id].nutrition_snapshot(),
            }
            for pair in submission.selections
        ]
        snack = None
        if submission.snack_meal_ids:
            snack = meals[submission.snack_meal_ids[0]].nutrition_snapshot()

        return {
            "customer_id": ctx.actor_id,
            "order_date": order_date,
            "status": OrderStatus.RECEIVED,
            "selections": selections,
            "snack": snack,
            "target_protein_grams": subscription.daily_protein_grams,
            "target_carbs_grams": subscription.daily_carbs_grams,
            "total_calories": totals["calories"],
            "total_protein_grams": totals["protein_grams"],
            "total_carbs_grams": totals["carbs_grams"],
            "client_totals": (
                submission.totals.model_dump(by_alias=True) if submission.totals else None
            ),
            "notes": submission.notes or "",
        }

    @staticmethod
    def _already_exists(existing: Order) -> OrderAlreadyExistsError:
        return OrderAlreadyExistsError(
            details={
                "orderId": str(existing.order_id),
                "orderDate": existing.order_date.isoformat(),
            }
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_order(self, ctx: TenantContext, order_id: UUID) -> Order:
        return self.orders.get_owned(ctx, order_id)

    def get_current_order(self, ctx: TenantContext, today: Optional[date] = None) -> Optional[Order]:
        """The customer's order for today, or None"""
        return self.orders.get_for_customer_day(ctx, ctx.actor_id, today or utc_today())

    def get_order_history(self, ctx: TenantContext) -> List[Order]:
        return self.orders.list_for_customer(ctx, ctx.actor_id)

    def get_my_orders(self, ctx: TenantContext) -> List[Order]:
        return self.orders.list_for_customer(
            ctx, ctx.actor_id, limit=settings.recent_orders_limit
        )

    def get_today_orders(
        self,
        ctx: TenantContext,
        status: Optional[OrderStatus] = None,
        q: Optional[str] = None,
        today: Optional[date] = None,
    ) -> List[Order]:
        return self.orders.search_day(ctx, today or utc_today(), status=status, q=q)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def update_status(self, ctx: TenantContext, order_id: UUID, new_status: OrderStatus) -> Order:
        """
        Move an order forward in its lifecycle.

        Re-applying the current status is a no-op. Moving backwards raises
        InvalidStatusTransitionError.
        """
        if not ctx.is_staff:
            raise ForbiddenError("Only restaurant staff can change order status")

        new_status = OrderStatus(new_status)
        order = self.orders.get_or_404(ctx, order_id=order_id)
        current = OrderStatus(order.status)

        if current == new_status:
            return order
        if not can_transition(current, new_status):
            raise InvalidStatusTransitionError(
                details={
                    "from": current.value,
                    "to": new_status.value,
                    "allowed": [s.value for s in allowed_targets(current)],
                }
            )

        order = self.orders.update(ctx, {"status": new_status}, order_id=order_id)
        self.orders.commit()
        logger.info(
            f"order_status_changed tenant_id={ctx.tenant_id} order_id={order_id} "
            f"from={current.value} to={new_status.value} actor_id={ctx.actor_id}"
        )
        return order
