"""
Candidate meal loading for the draft's current step.

Fetches are not cancelled when the customer moves on. Instead each fetch
remembers the step it was started for, and its result is dropped if the
draft is somewhere else by the time it arrives.
"""

import logging
from typing import Dict, List, Optional

import anyio

from client.api_client import MealSubClient
from client.draft import DraftMeal, DraftPhase, DraftState, DraftStore
from domain.enums import MealCategory

logger = logging.getLogger("mealsub.client.loader")


def categories_for_step(state: DraftState) -> List[MealCategory]:
    """Meal categories the UI offers at the draft's current step"""
    if state.phase == DraftPhase.MEAL:
        return [MealCategory.PROTEIN, MealCategory.CARB]
    if state.phase == DraftPhase.SNACK:
        return [MealCategory.SNACK]
    return []


class CandidateMealLoader:
    def __init__(self, api: MealSubClient, store: DraftStore):
        self.api = api
        self.store = store
        self.candidates: Dict[MealCategory, List[DraftMeal]] = {}
        self.discarded = 0

    async def load(self, category: MealCategory) -> Optional[List[DraftMeal]]:
        """
        Fetch active meals of ``category`` for the current step.

        Returns None (and keeps the previous candidates) when the draft
        moved to another step or slot while the request was in flight.
        """
        started_at = self.store.state.step
        meals = await self.api.list_meals(category)

        if self.store.state.step != started_at:
            self.discarded += 1
            logger.debug(
                f"stale_candidates_dropped category={MealCategory(category).value} "
                f"requested_for={started_at} now={self.store.state.step}"
            )
            return None

        self.candidates[MealCategory(category)] = meals
        return meals

    async def load_current_step(self) -> Dict[MealCategory, List[DraftMeal]]:
        """Load every category the current step needs, concurrently"""
        categories = categories_for_step(self.store.state)
        results: Dict[MealCategory, List[DraftMeal]] = {}

        async def fetch(category: MealCategory) -> None:
            meals = await self.load(category)
            if meals is not None:
                results[category] = meals

        async with anyio.create_task_group() as tg:
            for category in categories:
                tg.start_soon(fetch, category)
        return results
