"""Client-side ordering library: selection draft, API client, loaders"""

from client.draft import (
    DraftError,
    DraftMeal,
    DraftPhase,
    DraftState,
    DraftStore,
    DraftTotals,
    Slot,
    reduce,
    to_submission,
)
from client.api_client import MealSubAPIError, MealSubClient
from client.loader import CandidateMealLoader
from client.poller import OrderStatusPoller

__all__ = [
    "DraftError",
    "DraftMeal",
    "DraftPhase",
    "DraftState",
    "DraftStore",
    "DraftTotals",
    "Slot",
    "reduce",
    "to_submission",
    "MealSubAPIError",
    "MealSubClient",
    "CandidateMealLoader",
    "OrderStatusPoller",
]
