"""
Async HTTP client for the customer-facing MealSub API.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from client.draft import DraftMeal
from domain.enums import MealCategory

logger = logging.getLogger("mealsub.client.api")

DEFAULT_TIMEOUT = 10.0


class MealSubAPIError(Exception):
    """Error envelope returned by the API"""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}


class MealSubClient:
    """
    Thin wrapper over ``httpx.AsyncClient`` that attaches the session token
    and unwraps the error envelope into MealSubAPIError.

    Usage:
        async with MealSubClient("http://localhost:8000", token) as api:
            meals = await api.list_meals(MealCategory.PROTEIN)
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "MealSubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self.client.request(method, path, **kwargs)
        if response.is_success:
            return response.json()

        try:
            error = response.json().get("error") or {}
        except ValueError:
            error = {}
        logger.warning(
            f"api_error method={method} path={path} status={response.status_code} "
            f"code={error.get('code')}"
        )
        raise MealSubAPIError(
            response.status_code,
            error.get("code", f"HTTP_{response.status_code}"),
            error.get("message", response.reason_phrase),
            error.get("details"),
        )

    # ------------------------------------------------------------------
    # Catalog and plan
    # ------------------------------------------------------------------

    async def list_meals(self, category: Optional[MealCategory] = None) -> List[DraftMeal]:
        params = {"category": MealCategory(category).value} if category else None
        items = await self._request("GET", "/meals", params=params)
        return [DraftMeal.from_wire(item) for item in items]

    async def get_subscription(self) -> Dict[str, Any]:
        return await self._request("GET", "/subscriptions/me")

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def submit_order(self, submission: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/orders", json=submission)

    async def get_current_order(self) -> Optional[Dict[str, Any]]:
        return await self._request("GET", "/orders/current")

    async def get_order_history(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/orders/history")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def list_notifications(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/notifications")

    async def mark_notification_read(self, notification_id: str) -> Dict[str, Any]:
        return await self._request(
            "PATCH", f"/notifications/{notification_id}", json={"isRead": True}
        )
