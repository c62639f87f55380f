"""
Periodic refresh of the customer's current order until it is collected.
"""

import logging
from typing import Any, Callable, Dict, Optional

import anyio
import httpx

from client.api_client import MealSubClient
from domain.enums import OrderStatus
from domain.order_status import is_terminal

logger = logging.getLogger("mealsub.client.poller")

DEFAULT_INTERVAL_SEC = 10.0

OrderCallback = Callable[[Optional[Dict[str, Any]]], None]


class OrderStatusPoller:
    """
    Re-fetch ``GET /orders/current`` every ``interval`` seconds.

    ``on_change`` is called whenever the status differs from the last one
    seen (including the first fetch). Polling ends when the order reaches
    its terminal status, after ``max_polls`` fetches, or on ``stop()``.
    Network errors are logged and retried on the next tick; API errors
    propagate.
    """

    def __init__(
        self,
        api: MealSubClient,
        interval: float = DEFAULT_INTERVAL_SEC,
        on_change: Optional[OrderCallback] = None,
        max_polls: Optional[int] = None,
    ):
        self.api = api
        self.interval = interval
        self.on_change = on_change
        self.max_polls = max_polls
        self.polls = 0
        self.last_status: Optional[str] = None
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    async def poll_once(self) -> Optional[Dict[str, Any]]:
        self.polls += 1
        order = await self.api.get_current_order()
        status = order["status"] if order else None
        if self.polls == 1 or status != self.last_status:
            logger.info(f"order_status_seen status={status} previous={self.last_status}")
            self.last_status = status
            if self.on_change is not None:
                self.on_change(order)
        return order

    async def run(self) -> Optional[Dict[str, Any]]:
        """Poll until done; returns the last order seen"""
        order: Optional[Dict[str, Any]] = None
        while not self._stopped:
            try:
                order = await self.poll_once()
            except httpx.TransportError as e:
                logger.warning(f"order_poll_failed error={e}")
            else:
                if order and is_terminal(OrderStatus(order["status"])):
                    break
            if self.max_polls is not None and self.polls >= self.max_polls:
                break
            await anyio.sleep(self.interval)
        return order
