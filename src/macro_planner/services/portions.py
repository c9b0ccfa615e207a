"""Editing planned meals: resizing, replacing, adding and removing foods."""

from dataclasses import dataclass, replace

from macro_planner.domain.foods import (
    CARB_KCAL_PER_G,
    FAT_KCAL_PER_G,
    PROTEIN_KCAL_PER_G,
    FoodRef,
)
from macro_planner.domain.plans import MealPlanResult, PlannedFoodItem, PlannedMeal
from macro_planner.domain.targets import TargetVector
from macro_planner.rounding import round_int
from macro_planner.services.evaluation import evaluate_plan_quality, quality_message
from macro_planner.services.planner import scale_food, sum_items

MIN_PORTION_GRAMS = 1


class PlanEditError(LookupError):
    """Raised when an edit targets a missing meal or item."""


def portion_from_food(food: FoodRef, grams: float) -> PlannedFoodItem:
    """Scale a catalog food to a gram weight."""
    return scale_food(food, grams / 100)


def manual_food_calories(protein_g: float, carbs_g: float, fat_g: float) -> int:
    """Calories implied by macro grams for a manually entered food."""
    return round_int(
        protein_g * PROTEIN_KCAL_PER_G
        + carbs_g * CARB_KCAL_PER_G
        + fat_g * FAT_KCAL_PER_G
    )


def manual_food(
    name: str, protein_g: float, carbs_g: float, fat_g: float, grams: float = 100
) -> PlannedFoodItem:
    """Build a planned item from macros entered for a given portion."""
    scale = grams / 100 if grams > 0 else 1
    calories = manual_food_calories(protein_g, carbs_g, fat_g)
    reference = FoodRef(
        name=name,
        protein_g=protein_g / scale,
        carbs_g=carbs_g / scale,
        fat_g=fat_g / scale,
        calories=calories / scale,
    )
    return PlannedFoodItem(
        name=name,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        calories=calories,
        portion_grams=grams,
        reference=reference,
    )


@dataclass
class PlanEditor:
    """Applies edits to a plan and refreshes its totals."""

    targets: TargetVector | None = None

    def with_targets(self, targets: TargetVector) -> "PlanEditor":
        """Return an editor that reclassifies edited plans against ``targets``."""
        return replace(self, targets=targets)

    def resize_item(
        self, plan: MealPlanResult, meal_id: int, index: int, grams: float
    ) -> MealPlanResult:
        """Rescale one item from its per-100g reference values."""
        item = _item_at(plan, meal_id, index)
        if item.reference is None:
            msg = f"item {item.name!r} has no reference values to rescale"
            raise PlanEditError(msg)
        resized = portion_from_food(item.reference, max(MIN_PORTION_GRAMS, grams))
        return self._with_items(
            plan, meal_id, _replace_at(_meal(plan, meal_id).items, index, resized)
        )

    def replace_item(
        self, plan: MealPlanResult, meal_id: int, index: int, food: FoodRef
    ) -> MealPlanResult:
        """Swap one item for another food at the same gram weight."""
        item = _item_at(plan, meal_id, index)
        replacement = portion_from_food(food, item.portion_grams)
        return self._with_items(
            plan,
            meal_id,
            _replace_at(_meal(plan, meal_id).items, index, replacement),
        )

    def add_item(
        self, plan: MealPlanResult, meal_id: int, item: PlannedFoodItem
    ) -> MealPlanResult:
        """Append an item to a meal."""
        meal = _meal(plan, meal_id)
        return self._with_items(plan, meal_id, (*meal.items, item))

    def remove_item(
        self, plan: MealPlanResult, meal_id: int, index: int
    ) -> MealPlanResult:
        """Drop one item from a meal."""
        _item_at(plan, meal_id, index)
        items = _meal(plan, meal_id).items
        return self._with_items(plan, meal_id, items[:index] + items[index + 1 :])

    def _with_items(
        self,
        plan: MealPlanResult,
        meal_id: int,
        items: tuple[PlannedFoodItem, ...],
    ) -> MealPlanResult:
        meals = tuple(
            PlannedMeal(slot=meal.slot, items=items, totals=sum_items(items))
            if meal.slot.id == meal_id
            else meal
            for meal in plan.meals
        )
        totals = sum_items(item for meal in meals for item in meal.items)
        if self.targets is None:
            return replace(plan, meals=meals, totals=totals)
        quality = evaluate_plan_quality(self.targets, totals)
        return replace(
            plan,
            meals=meals,
            totals=totals,
            quality=quality,
            message=quality_message(quality),
        )


def _meal(plan: MealPlanResult, meal_id: int) -> PlannedMeal:
    meal = plan.meal(meal_id)
    if meal is None:
        msg = f"no meal with id {meal_id}"
        raise PlanEditError(msg)
    return meal


def _item_at(plan: MealPlanResult, meal_id: int, index: int) -> PlannedFoodItem:
    meal = _meal(plan, meal_id)
    if not 0 <= index < len(meal.items):
        msg = f"meal {meal_id} has no item at index {index}"
        raise PlanEditError(msg)
    return meal.items[index]


def _replace_at(
    items: tuple[PlannedFoodItem, ...], index: int, item: PlannedFoodItem
) -> tuple[PlannedFoodItem, ...]:
    return (*items[:index], item, *items[index + 1 :])
