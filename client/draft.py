"""
Selection draft for the customer ordering flow.

The draft walks the customer through one protein + carb pair per meal slot
(``meals_per_day`` slots, 1..5) and then an optional snack step:

    Uninitialized -> Meal(0) -> ... -> Meal(n-1) -> [Snack] -> Complete

State is an immutable ``DraftState``; every change goes through the pure
``reduce(state, action)``. ``DraftStore`` holds the current state for a UI
and notifies subscribers after each dispatch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from domain.enums import MealCategory

logger = logging.getLogger("mealsub.client.draft")

MIN_MEALS_PER_DAY = 1
MAX_MEALS_PER_DAY = 5


class DraftError(Exception):
    """Illegal draft operation (bad navigation, wrong category, bad index)"""


class DraftPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    MEAL = "meal"
    SNACK = "snack"
    COMPLETE = "complete"


@dataclass(frozen=True)
class DraftMeal:
    """The parts of a catalog meal the draft needs"""

    id: str
    name: str
    category: MealCategory
    calories: int = 0
    protein_grams: float = 0.0
    carbs_grams: float = 0.0

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "DraftMeal":
        """Build from a ``GET /meals`` item"""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            category=MealCategory(data["category"]),
            calories=int(data.get("calories", 0)),
            protein_grams=float(data.get("proteinGrams", 0)),
            carbs_grams=float(data.get("carbsGrams", 0)),
        )


@dataclass(frozen=True)
class Slot:
    protein: Optional[DraftMeal] = None
    carb: Optional[DraftMeal] = None

    @property
    def complete(self) -> bool:
        return self.protein is not None and self.carb is not None

    @property
    def filled(self) -> int:
        return int(self.protein is not None) + int(self.carb is not None)


@dataclass(frozen=True)
class DraftTotals:
    calories: int = 0
    protein_grams: float = 0.0
    carbs_grams: float = 0.0

    def to_wire(self) -> Dict[str, Any]:
        return {
            "calories": self.calories,
            "proteinGrams": round(self.protein_grams, 2),
            "carbsGrams": round(self.carbs_grams, 2),
        }


@dataclass(frozen=True)
class DraftState:
    phase: DraftPhase = DraftPhase.UNINITIALIZED
    meals_per_day: int = 0
    includes_snack: bool = False
    slots: Tuple[Slot, ...] = ()
    current_index: int = 0
    snack: Optional[DraftMeal] = None
    snack_skipped: bool = False

    @property
    def step(self) -> Tuple[DraftPhase, int]:
        """Where the customer currently is; the meal index only matters in Meal(i)"""
        index = self.current_index if self.phase == DraftPhase.MEAL else -1
        return (self.phase, index)

    @property
    def is_complete(self) -> bool:
        """Every slot has protein and carb. The snack is never required."""
        return bool(self.slots) and all(slot.complete for slot in self.slots)

    @property
    def is_last_slot(self) -> bool:
        return self.current_index == self.meals_per_day - 1

    @property
    def current_slot(self) -> Optional[Slot]:
        if self.phase != DraftPhase.MEAL:
            return None
        return self.slots[self.current_index]

    @property
    def totals(self) -> DraftTotals:
        meals: List[DraftMeal] = []
        for slot in self.slots:
            meals.extend(m for m in (slot.protein, slot.carb) if m is not None)
        if self.snack is not None:
            meals.append(self.snack)
        return DraftTotals(
            calories=sum(m.calories for m in meals),
            protein_grams=sum(m.protein_grams for m in meals),
            carbs_grams=sum(m.carbs_grams for m in meals),
        )

    @property
    def progress(self) -> float:
        """Filled protein/carb fields over the required ones; 0.0 before init"""
        if not self.meals_per_day:
            return 0.0
        filled = sum(slot.filled for slot in self.slots)
        return filled / (self.meals_per_day * 2)


# =============================================================================
# ACTIONS
# =============================================================================


@dataclass(frozen=True)
class Init:
    meals_per_day: int
    includes_snack: bool = False


@dataclass(frozen=True)
class SetProtein:
    index: int
    meal: DraftMeal


@dataclass(frozen=True)
class SetCarb:
    index: int
    meal: DraftMeal


@dataclass(frozen=True)
class SetSnack:
    meal: DraftMeal


@dataclass(frozen=True)
class SkipSnack:
    pass


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class Retreat:
    pass


@dataclass(frozen=True)
class Reset:
    pass


DraftAction = Union[Init, SetProtein, SetCarb, SetSnack, SkipSnack, Advance, Retreat, Reset]


# =============================================================================
# REDUCER
# =============================================================================


def _require_phase(state: DraftState, phase: DraftPhase, operation: str) -> None:
    if state.phase != phase:
        raise DraftError(f"{operation} is not allowed in phase {state.phase.value}")


def _require_category(meal: DraftMeal, expected: MealCategory) -> None:
    if MealCategory(meal.category) != expected:
        raise DraftError(
            f"Meal {meal.id} is a {MealCategory(meal.category).value}, expected {expected.value}"
        )


def _replace_slot(state: DraftState, index: int, slot: Slot) -> DraftState:
    if not 0 <= index < state.meals_per_day:
        raise DraftError(f"Slot {index} does not exist (plan has {state.meals_per_day})")
    slots = state.slots[:index] + (slot,) + state.slots[index + 1:]
    return replace(state, slots=slots)


def reduce(state: DraftState, action: DraftAction) -> DraftState:
    """Return the state after ``action``. Never mutates ``state``."""
    if isinstance(action, Init):
        if not MIN_MEALS_PER_DAY <= action.meals_per_day <= MAX_MEALS_PER_DAY:
            raise DraftError(
                f"meals_per_day must be between {MIN_MEALS_PER_DAY} and {MAX_MEALS_PER_DAY}"
            )
        return DraftState(
            phase=DraftPhase.MEAL,
            meals_per_day=action.meals_per_day,
            includes_snack=action.includes_snack,
            slots=tuple(Slot() for _ in range(action.meals_per_day)),
        )

    if isinstance(action, Reset):
        return DraftState()

    if isinstance(action, SetProtein):
        _require_phase(state, DraftPhase.MEAL, "set_protein")
        _require_category(action.meal, MealCategory.PROTEIN)
        # a new protein invalidates the carb paired with it
        return _replace_slot(state, action.index, Slot(protein=action.meal, carb=None))

    if isinstance(action, SetCarb):
        _require_phase(state, DraftPhase.MEAL, "set_carb")
        _require_category(action.meal, MealCategory.CARB)
        if not 0 <= action.index < state.meals_per_day:
            raise DraftError(f"Slot {action.index} does not exist (plan has {state.meals_per_day})")
        slot = state.slots[action.index]
        return _replace_slot(state, action.index, replace(slot, carb=action.meal))

    if isinstance(action, SetSnack):
        _require_phase(state, DraftPhase.SNACK, "set_snack")
        _require_category(action.meal, MealCategory.SNACK)
        return replace(state, snack=action.meal, snack_skipped=False, phase=DraftPhase.COMPLETE)

    if isinstance(action, SkipSnack):
        _require_phase(state, DraftPhase.SNACK, "skip_snack")
        return replace(state, snack=None, snack_skipped=True, phase=DraftPhase.COMPLETE)

    if isinstance(action, Advance):
        _require_phase(state, DraftPhase.MEAL, "advance")
        if not state.slots[state.current_index].complete:
            raise DraftError(f"Slot {state.current_index} needs a protein and a carb")
        if not state.is_last_slot:
            return replace(state, current_index=state.current_index + 1)
        if not state.is_complete:
            raise DraftError("Every meal slot needs a protein and a carb")
        if state.includes_snack:
            return replace(state, phase=DraftPhase.SNACK)
        return replace(state, phase=DraftPhase.COMPLETE)

    if isinstance(action, Retreat):
        if state.phase == DraftPhase.SNACK:
            return replace(state, phase=DraftPhase.MEAL, current_index=state.meals_per_day - 1)
        _require_phase(state, DraftPhase.MEAL, "retreat")
        if state.current_index == 0:
            raise DraftError("Already at the first meal")
        return replace(state, current_index=state.current_index - 1)

    raise DraftError(f"Unknown action {action!r}")


# =============================================================================
# SUBMISSION
# =============================================================================


def to_submission(
    state: DraftState, order_date: Optional[date] = None, notes: Optional[str] = None
) -> Dict[str, Any]:
    """Wire payload for ``POST /orders``. The draft must be complete."""
    if not state.is_complete:
        raise DraftError("Draft is not complete")

    payload: Dict[str, Any] = {
        "selections": [
            {"proteinMealId": slot.protein.id, "carbMealId": slot.carb.id}
            for slot in state.slots
        ],
        "snackMealIds": [state.snack.id] if state.snack is not None else [],
        "totals": state.totals.to_wire(),
    }
    if order_date is not None:
        payload["orderDate"] = order_date.isoformat()
    if notes:
        payload["notes"] = notes
    return payload


# =============================================================================
# STORE
# =============================================================================


Listener = Callable[[DraftState], None]


@dataclass
class DraftStore:
    """Holds the current draft for one ordering session"""

    state: DraftState = field(default_factory=DraftState)
    _listeners: List[Listener] = field(default_factory=list, repr=False)

    def dispatch(self, action: DraftAction) -> DraftState:
        new_state = reduce(self.state, action)
        if new_state is self.state:
            return new_state
        self.state = new_state
        logger.debug(f"draft_action action={type(action).__name__} step={new_state.step}")
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; call the returned function to unsubscribe"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def init(self, meals_per_day: int, includes_snack: bool = False) -> DraftState:
        return self.dispatch(Init(meals_per_day, includes_snack))

    def set_protein(self, index: int, meal: DraftMeal) -> DraftState:
        return self.dispatch(SetProtein(index, meal))

    def set_carb(self, index: int, meal: DraftMeal) -> DraftState:
        return self.dispatch(SetCarb(index, meal))

    def set_snack(self, meal: DraftMeal) -> DraftState:
        return self.dispatch(SetSnack(meal))

    def skip_snack(self) -> DraftState:
        return self.dispatch(SkipSnack())

    def advance(self) -> DraftState:
        return self.dispatch(Advance())

    def retreat(self) -> DraftState:
        return self.dispatch(Retreat())

    def reset(self) -> DraftState:
        return self.dispatch(Reset())

    def to_submission(self, order_date: Optional[date] = None, notes: Optional[str] = None) -> dict:
        return to_submission(self.state, order_date=order_date, notes=notes)
