"""Domain models for generated meal plans."""

from dataclasses import dataclass, field
from enum import StrEnum

from macro_planner.domain.foods import FoodRef


class PlanQuality(StrEnum):
    """How closely a plan matches its targets."""

    EXCELLENT = "excellent"
    ACCEPTABLE = "acceptable"
    POOR_FIT = "poor-fit"


@dataclass(frozen=True)
class MealSlot:
    """A daily eating occasion with its share of daily calories."""

    id: int
    name: str
    meal_type: str
    calorie_share: float


DEFAULT_MEAL_SLOTS: tuple[MealSlot, ...] = (
    MealSlot(id=1, name="Breakfast", meal_type="breakfast", calorie_share=0.25),
    MealSlot(id=2, name="Lunch", meal_type="lunch", calorie_share=0.35),
    MealSlot(id=3, name="Dinner", meal_type="dinner", calorie_share=0.30),
    MealSlot(id=4, name="Snacks", meal_type="snack", calorie_share=0.10),
)


@dataclass(frozen=True)
class MacroTotals:
    """Summed macros for a meal or a day."""

    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    calories: float = 0.0

    def add(self, other: "MacroTotals | PlannedFoodItem") -> "MacroTotals":
        """Return a new total including ``other``."""
        return MacroTotals(
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
            calories=self.calories + other.calories,
        )


@dataclass(frozen=True)
class PlannedFoodItem:
    """A catalog food scaled to a portion."""

    name: str
    protein_g: float
    carbs_g: float
    fat_g: float
    calories: float
    portion_grams: float
    category: str | None = None
    sub_category: str | None = None
    reference: FoodRef | None = None


@dataclass(frozen=True)
class PlannedMeal:
    """Foods planned for one meal slot."""

    slot: MealSlot
    items: tuple[PlannedFoodItem, ...] = ()
    totals: MacroTotals = field(default_factory=MacroTotals)


@dataclass(frozen=True)
class MealPlanResult:
    """Outcome of one meal plan generation."""

    meals: tuple[PlannedMeal, ...]
    totals: MacroTotals
    quality: PlanQuality | None
    message: str
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def meal(self, meal_id: int) -> PlannedMeal | None:
        """Return the planned meal for a slot id, if present."""
        for planned in self.meals:
            if planned.slot.id == meal_id:
                return planned
        return None
