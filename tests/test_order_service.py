"""
Tests for the order acceptance pipeline.

This test suite covers OrderService.submit_order:
- Subscription resolution (missing, paused, outside period)
- Plan checks (slot count, snack rules)
- Meal reference checks (tenant, category, active flag)
- Server-side nutrition totals and macro target snapshots
- One order per customer per day, including the storage-level guard
- Per-tenant order numbering

Every rejection must leave the database untouched.
"""

import pytest
import uuid
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from test_fixtures import context_for, days_from_today, make_actor, make_subscription
from app.exceptions import (
    ForbiddenError,
    InvalidMealReferenceError,
    NoActiveSubscriptionError,
    OrderAlreadyExistsError,
    OrderDateInPastError,
    PlanMismatchError,
    ServiceValidationError,
    SnackNotAllowedError,
)
from domain.enums import ActorRole, OrderStatus, SubscriptionStatus
from domain.models import Order, OrderSequence
from domain.schemas.order_schemas import OrderCreate
from services import OrderService
from services.order_service import utc_today


def _submission(pairs, snacks=(), **extra) -> OrderCreate:
    return OrderCreate(
        selections=[
            {"protein_meal_id": p.menu_item_id, "carb_meal_id": c.menu_item_id} for p, c in pairs
        ],
        snack_meal_ids=[s.menu_item_id for s in snacks],
        **extra,
    )


def _alice_submission(w, snack=True, **extra) -> OrderCreate:
    return _submission(
        [(w.chicken, w.rice), (w.salmon, w.potato)],
        snacks=[w.yogurt] if snack else [],
        **extra,
    )


def _order_count(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(Order))


# =============================================================================
# ACCEPTED ORDERS
# =============================================================================


def test_submit_order_persists_received_order(db_session: Session, world):
    """
    Test a valid submission for a 2-meal plan with a snack.

    Verifies:
    - order is stored with status received and today's date
    - selections carry ids and nutrition snapshots per slot
    - totals are computed from catalog data
    - macro targets are copied from the subscription
    - order number 1 and code ORD0001#
    """
    service = OrderService(db_session)

    order = service.submit_order(context_for(world.alice), _alice_submission(world))

    assert order.status == OrderStatus.RECEIVED
    assert order.order_date == utc_today()
    assert order.tenant_id == world.tenant_a.tenant_id
    assert order.customer_id == world.alice.actor_id
    assert order.order_number == 1
    assert order.order_code == "ORD0001#"

    assert len(order.selections) == 2
    first = order.selections[0]
    assert first["proteinItemId"] == str(world.chicken.menu_item_id)
    assert first["carbItemId"] == str(world.rice.menu_item_id)
    assert first["protein"]["name"] == "Grilled Chicken Breast"
    assert first["carb"]["calories"] == 200
    assert order.snack["mealId"] == str(world.yogurt.menu_item_id)

    # chicken 250 + rice 200 + salmon 300 + potato 180 + yogurt 120
    assert order.total_calories == 1050
    assert Decimal(str(order.total_protein_grams)) == Decimal("91")
    assert Decimal(str(order.total_carbs_grams)) == Decimal("94")
    assert Decimal(str(order.target_protein_grams)) == Decimal("150")
    assert Decimal(str(order.target_carbs_grams)) == Decimal("200")


def test_submit_order_without_snack_on_snack_plan(db_session: Session, world):
    """The snack is optional even when the plan includes one"""
    order = OrderService(db_session).submit_order(
        context_for(world.alice), _alice_submission(world, snack=False)
    )

    assert order.snack is None
    assert order.total_calories == 930


def test_client_totals_are_informational(db_session: Session, world):
    """
    Test client-supplied totals.

    Verifies:
    - wrong client totals do not change the stored server totals
    - the client values are kept as an echo
    """
    submission = _alice_submission(
        world, totals={"calories": 1, "protein_grams": 1, "carbs_grams": 1}
    )

    order = OrderService(db_session).submit_order(context_for(world.alice), submission)

    assert order.total_calories == 1050
    assert order.client_totals == {"calories": 1.0, "proteinGrams": 1.0, "carbsGrams": 1.0}


def test_explicit_order_date_inside_period(db_session: Session, world):
    tomorrow = days_from_today(1)

    order = OrderService(db_session).submit_order(
        context_for(world.alice), _alice_submission(world, order_date=tomorrow)
    )

    assert order.order_date == tomorrow


@pytest.mark.parametrize("offset", [-1, -5])
def test_order_date_in_the_past_is_rejected(db_session: Session, world, offset):
    """Backdated orders are refused even inside the subscription period"""
    with pytest.raises(OrderDateInPastError) as exc_info:
        OrderService(db_session).submit_order(
            context_for(world.alice),
            _alice_submission(world, order_date=days_from_today(offset)),
        )

    assert exc_info.value.http_status == 400
    assert exc_info.value.details["reason"] == "ORDER_DATE_IN_PAST"
    assert exc_info.value.details["orderDate"] == days_from_today(offset).isoformat()
    assert _order_count(db_session) == 0


def test_order_numbers_increase_across_customers(db_session: Session, world):
    service = OrderService(db_session)

    first = service.submit_order(context_for(world.alice), _alice_submission(world))
    second = service.submit_order(
        context_for(world.bob), _submission([(world.salmon, world.potato)])
    )
    other_tenant = service.submit_order(
        context_for(world.carol), _submission([(world.beef_b, world.quinoa_b)])
    )

    assert second.order_number > first.order_number
    assert other_tenant.order_number == 1


# =============================================================================
# SUBSCRIPTION CHECKS
# =============================================================================


def test_no_subscription(db_session: Session, world):
    dave = make_actor(db_session, world.tenant_a, ActorRole.CUSTOMER, "Dave Green")
    db_session.commit()

    with pytest.raises(NoActiveSubscriptionError) as exc_info:
        OrderService(db_session).submit_order(context_for(dave), _alice_submission(world))
    assert exc_info.value.http_status == 403
    assert _order_count(db_session) == 0


def test_paused_subscription(db_session: Session, world):
    world.alice_plan.status = SubscriptionStatus.PAUSED
    db_session.commit()

    with pytest.raises(NoActiveSubscriptionError) as exc_info:
        OrderService(db_session).submit_order(context_for(world.alice), _alice_submission(world))
    assert exc_info.value.details == {"status": "paused"}
    assert _order_count(db_session) == 0


@pytest.mark.parametrize("offset", [-11, 21])
def test_order_day_outside_subscription_period(db_session: Session, world, offset):
    """Alice's plan runs from 10 days ago to 20 days ahead"""
    with pytest.raises(NoActiveSubscriptionError):
        OrderService(db_session).submit_order(
            context_for(world.alice),
            _alice_submission(world),
            today=days_from_today(offset),
        )
    assert _order_count(db_session) == 0


def test_latest_subscription_wins(db_session: Session, world):
    """A newer 1-meal plan replaces the older 2-meal plan"""
    make_subscription(db_session, world.tenant_a, world.alice, meals_per_day=1)
    db_session.commit()

    with pytest.raises(PlanMismatchError) as exc_info:
        OrderService(db_session).submit_order(context_for(world.alice), _alice_submission(world))
    assert exc_info.value.details["expected"] == 1


# =============================================================================
# PLAN CHECKS
# =============================================================================


@pytest.mark.parametrize("slots", [0, 1, 3])
def test_plan_mismatch(db_session: Session, world, slots):
    """
    Test selections that do not match meals_per_day.

    Verifies:
    - PlanMismatchError with expected/received in details
    - error is a VALIDATION_ERROR with reason PLAN_MISMATCH
    - nothing is written
    """
    pairs = [(world.chicken, world.rice)] * slots

    with pytest.raises(PlanMismatchError) as exc_info:
        OrderService(db_session).submit_order(context_for(world.alice), _submission(pairs))

    error = exc_info.value
    assert isinstance(error, ServiceValidationError)
    assert error.code == "VALIDATION_ERROR"
    assert error.details == {"reason": "PLAN_MISMATCH", "expected": 2, "received": slots}
    assert _order_count(db_session) == 0


def test_snack_rejected_when_plan_has_none(db_session: Session, world):
    with pytest.raises(SnackNotAllowedError) as exc_info:
        OrderService(db_session).submit_order(
            context_for(world.bob),
            _submission([(world.chicken, world.rice)], snacks=[world.yogurt]),
        )
    assert exc_info.value.details["reason"] == "SNACK_NOT_ALLOWED"
    assert _order_count(db_session) == 0


def test_more_than_one_snack_rejected(db_session: Session, world):
    submission = _submission(
        [(world.chicken, world.rice), (world.salmon, world.potato)],
        snacks=[world.yogurt, world.yogurt],
    )

    with pytest.raises(SnackNotAllowedError) as exc_info:
        OrderService(db_session).submit_order(context_for(world.alice), submission)
    assert exc_info.value.details["max"] == 1


# =============================================================================
# MEAL REFERENCE CHECKS
# =============================================================================


def test_meal_from_other_tenant_is_invalid(db_session: Session, world):
    """
    Test a protein id that belongs to restaurant B.

    Verifies:
    - InvalidMealReferenceError lists the offending id as not_found
    - nothing is written
    """
    submission = _submission([(world.beef_b, world.rice), (world.salmon, world.potato)])

    with pytest.raises(InvalidMealReferenceError) as exc_info:
        OrderService(db_session).submit_order(context_for(world.alice), submission)

    invalid = exc_info.value.details["invalidMeals"]
    assert exc_info.value.details["reason"] == "INVALID_MEAL_REFERENCE"
    assert invalid == [
        {
            "mealId": str(world.beef_b.menu_item_id),
            "expectedCategory": "protein",
            "slot": 0,
            "problem": "not_found",
        }
    ]
    assert _order_count(db_session) == 0


def test_wrong_category_and_inactive_meals_are_invalid(db_session: Session, world):
    submission = _submission([(world.rice, world.rice), (world.tofu_off, world.potato)])

    with pytest.raises(InvalidMealReferenceError) as exc_info:
        OrderService(db_session).submit_order(context_for(world.alice), submission)

    problems = {(m["slot"], m["problem"]) for m in exc_info.value.details["invalidMeals"]}
    assert problems == {(0, "wrong_category"), (1, "inactive")}


def test_unknown_snack_id_is_invalid(db_session: Session, world):
    submission = _alice_submission(world, snack=False)
    submission.snack_meal_ids = [uuid.uuid4()]

    with pytest.raises(InvalidMealReferenceError) as exc_info:
        OrderService(db_session).submit_order(context_for(world.alice), submission)
    assert exc_info.value.details["invalidMeals"][0]["expectedCategory"] == "snack"


# =============================================================================
# ONE ORDER PER DAY
# =============================================================================


def test_second_order_same_day_rejected(db_session: Session, world):
    """
    Test duplicate submissions.

    Verifies:
    - second submit for the same day raises OrderAlreadyExistsError (409)
    - details point at the existing order
    - a different day is accepted
    """
    service = OrderService(db_session)
    ctx = context_for(world.alice)
    first = service.submit_order(ctx, _alice_submission(world))

    with pytest.raises(OrderAlreadyExistsError) as exc_info:
        service.submit_order(ctx, _alice_submission(world, snack=False))
    assert exc_info.value.http_status == 409
    assert exc_info.value.details["orderId"] == str(first.order_id)

    tomorrow = service.submit_order(ctx, _alice_submission(world, order_date=days_from_today(1)))
    assert tomorrow.order_id != first.order_id
    assert _order_count(db_session) == 2


def test_insert_race_maps_to_order_already_exists(db_session: Session, world):
    """
    Test the storage-level guard.

    Simulates a concurrent request that inserted between the duplicate
    check and our insert: the read fast path sees nothing, the insert hits
    the unique constraint, and the caller still gets OrderAlreadyExists.
    """
    service = OrderService(db_session)
    ctx = context_for(world.alice)
    existing = service.submit_order(ctx, _alice_submission(world))

    real_lookup = service.orders.get_for_customer_day
    calls = {"n": 0}

    def stale_then_real(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_lookup(*args, **kwargs)

    with patch.object(service.orders, "get_for_customer_day", side_effect=stale_then_real):
        with pytest.raises(OrderAlreadyExistsError) as exc_info:
            service.submit_order(ctx, _alice_submission(world))

    assert exc_info.value.details["orderId"] == str(existing.order_id)
    assert _order_count(db_session) == 1


def test_unrelated_integrity_error_propagates(db_session: Session, world):
    service = OrderService(db_session)

    with patch.object(
        service.orders, "create", side_effect=IntegrityError("INSERT", {}, Exception("boom"))
    ):
        with pytest.raises(IntegrityError):
            service.submit_order(context_for(world.alice), _alice_submission(world))


def test_sequence_row_tracks_last_number(db_session: Session, world):
    """The per-tenant sequence row holds the last number handed out"""
    service = OrderService(db_session)
    ctx = context_for(world.alice)
    service.submit_order(ctx, _alice_submission(world))

    second = service.submit_order(
        context_for(world.bob), _submission([(world.chicken, world.potato)])
    )

    seq = db_session.get(OrderSequence, world.tenant_a.tenant_id)
    assert second.order_number == 2
    assert seq.last_value == 2


# =============================================================================
# ROLE AND READS
# =============================================================================


def test_staff_cannot_submit(db_session: Session, world):
    with pytest.raises(ForbiddenError):
        OrderService(db_session).submit_order(context_for(world.staff_a), _alice_submission(world))


def test_customer_reads(db_session: Session, world):
    """
    Test the customer read operations.

    Verifies:
    - current order is today's order
    - history is newest first and only the caller's
    - staff today view sees every customer in the tenant
    """
    service = OrderService(db_session)
    alice = context_for(world.alice)
    yesterday_date = utc_today() - timedelta(days=1)
    older = service.submit_order(alice, _alice_submission(world), today=yesterday_date)
    today = service.submit_order(alice, _alice_submission(world))
    bobs = service.submit_order(context_for(world.bob), _submission([(world.chicken, world.rice)]))

    assert service.get_current_order(alice).order_id == today.order_id
    assert [o.order_id for o in service.get_order_history(alice)] == [today.order_id, older.order_id]
    assert [o.order_id for o in service.get_my_orders(alice)] == [today.order_id, older.order_id]
    assert {o.order_id for o in service.get_today_orders(context_for(world.staff_a))} == {
        today.order_id,
        bobs.order_id,
    }
    assert service.get_today_orders(context_for(world.staff_b)) == []
