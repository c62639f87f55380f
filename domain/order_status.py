"""
Order status machine.

Orders move forward only: received -> preparing -> ready -> completed.
Skipping ahead is allowed, re-applying the current status is a no-op,
and any move backwards is rejected.
"""

from domain.enums import OrderStatus

STATUS_SEQUENCE = (
    OrderStatus.RECEIVED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
)

TERMINAL_STATUS = OrderStatus.COMPLETED

_RANK = {status: idx for idx, status in enumerate(STATUS_SEQUENCE)}


def rank(status: OrderStatus) -> int:
    return _RANK[OrderStatus(status)]


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """True when ``target`` is the same as or later than ``current``."""
    return rank(target) >= rank(current)


def allowed_targets(current: OrderStatus) -> list[OrderStatus]:
    return [s for s in STATUS_SEQUENCE if can_transition(current, s)]


def is_notify_eligible(status: OrderStatus) -> bool:
    """Only orders that reached ``ready`` may trigger a ready notification."""
    return rank(status) >= rank(OrderStatus.READY)


def is_terminal(status: OrderStatus) -> bool:
    return OrderStatus(status) == TERMINAL_STATUS
