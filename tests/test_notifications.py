"""
Tests for the ready-notification dedup service.

This test suite covers NotificationService:
- notify_ready creates exactly one notification per order
- repeat calls report already_notified
- a concurrent insert caught by the unique constraint is treated as a repeat
- orders that are not ready are refused
- the customer inbox and mark-as-read with ownership checks
"""

import pytest
import uuid
from unittest.mock import patch
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from test_fixtures import context_for, count_notifications
from app.exceptions import ForbiddenError, NotFoundError, OrderNotReadyError
from domain.enums import NotificationKind, OrderStatus
from domain.schemas.order_schemas import OrderCreate
from services import NotificationService, OrderService


def _ready_order(db_session, world, status=OrderStatus.READY):
    orders = OrderService(db_session)
    submission = OrderCreate(
        selections=[
            {"protein_meal_id": world.salmon.menu_item_id, "carb_meal_id": world.potato.menu_item_id}
        ]
    )
    order = orders.submit_order(context_for(world.bob), submission)
    if status != OrderStatus.RECEIVED:
        orders.update_status(context_for(world.staff_a), order.order_id, status)
    return order


# =============================================================================
# NOTIFY READY
# =============================================================================


def test_first_notify_creates_notification(db_session: Session, world):
    """
    Test the first notify call.

    Verifies:
    - a notification is created for the order's customer
    - already_notified is False
    - message carries the order code
    """
    order = _ready_order(db_session, world)

    result = NotificationService(db_session).notify_ready(
        context_for(world.staff_a), order.order_id
    )

    assert result.already_notified is False
    notification = result.notification
    assert notification.customer_id == world.bob.actor_id
    assert notification.tenant_id == world.tenant_a.tenant_id
    assert notification.kind == NotificationKind.ORDER_READY
    assert notification.is_read is False
    assert order.order_code in notification.message


def test_repeat_notify_is_deduplicated(db_session: Session, world):
    """
    Test repeated notify calls.

    Verifies:
    - second and third calls return already_notified=True
    - they return the original notification
    - exactly one row exists for the order
    """
    order = _ready_order(db_session, world)
    service = NotificationService(db_session)
    staff = context_for(world.staff_a)

    first = service.notify_ready(staff, order.order_id)
    second = service.notify_ready(staff, order.order_id)
    third = service.notify_ready(staff, order.order_id)

    assert second.already_notified is True
    assert third.already_notified is True
    assert second.notification.notification_id == first.notification.notification_id
    assert count_notifications(db_session, order.order_id) == 1


def test_completed_order_can_be_notified(db_session: Session, world):
    order = _ready_order(db_session, world, status=OrderStatus.COMPLETED)

    result = NotificationService(db_session).notify_ready(
        context_for(world.staff_a), order.order_id
    )

    assert result.already_notified is False


@pytest.mark.parametrize("status", [OrderStatus.RECEIVED, OrderStatus.PREPARING])
def test_not_ready_order_is_refused(db_session: Session, world, status):
    order = _ready_order(db_session, world, status=status)
    service = NotificationService(db_session)
    staff = context_for(world.staff_a)

    with pytest.raises(OrderNotReadyError) as exc_info:
        service.notify_ready(staff, order.order_id)

    assert exc_info.value.http_status == 409
    assert exc_info.value.details == {"status": status.value}
    assert count_notifications(db_session, order.order_id) == 0


def test_concurrent_insert_counts_as_already_notified(db_session: Session, world):
    """
    Test the storage-level guard.

    Another request inserted the notification after our lookup: the
    unique (order_id, kind) constraint fires and we report a repeat.
    """
    order = _ready_order(db_session, world)
    service = NotificationService(db_session)
    staff = context_for(world.staff_a)
    first = service.notify_ready(staff, order.order_id)

    real_lookup = service.notifications.get_for_order
    calls = {"n": 0}

    def stale_then_real(*args, **kwargs):
        calls["n"] += 1
        return None if calls["n"] == 1 else real_lookup(*args, **kwargs)

    with patch.object(service.notifications, "get_for_order", side_effect=stale_then_real):
        result = service.notify_ready(staff, order.order_id)

    assert result.already_notified is True
    assert result.notification.notification_id == first.notification.notification_id
    assert count_notifications(db_session, order.order_id) == 1


def test_unexplained_integrity_error_propagates(db_session: Session, world):
    order = _ready_order(db_session, world)
    service = NotificationService(db_session)

    with patch.object(
        service.notifications, "create", side_effect=IntegrityError("INSERT", {}, Exception("x"))
    ):
        with pytest.raises(IntegrityError):
            service.notify_ready(context_for(world.staff_a), order.order_id)


def test_notify_scoped_to_staff_tenant(db_session: Session, world):
    order = _ready_order(db_session, world)
    service = NotificationService(db_session)

    with pytest.raises(NotFoundError):
        service.notify_ready(context_for(world.staff_b), order.order_id)
    with pytest.raises(ForbiddenError):
        service.notify_ready(context_for(world.bob), order.order_id)


# =============================================================================
# INBOX
# =============================================================================


def test_customer_inbox_and_mark_read(db_session: Session, world):
    """
    Test the customer side.

    Verifies:
    - the customer sees their notification
    - marking it read persists
    - other customers cannot see or modify it
    """
    order = _ready_order(db_session, world)
    service = NotificationService(db_session)
    sent = service.notify_ready(context_for(world.staff_a), order.order_id).notification
    bob = context_for(world.bob)

    inbox = service.list_for_customer(bob)
    assert [n.notification_id for n in inbox] == [sent.notification_id]
    assert service.list_for_customer(context_for(world.alice)) == []

    updated = service.set_read(bob, sent.notification_id)
    assert updated.is_read is True

    with pytest.raises(NotFoundError):
        service.set_read(context_for(world.alice), sent.notification_id)
    with pytest.raises(NotFoundError):
        service.set_read(context_for(world.carol), sent.notification_id)
    with pytest.raises(NotFoundError):
        service.set_read(bob, uuid.uuid4())
