"""Randomized greedy meal plan generation."""

import asyncio
import logging
import math
import random
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import Protocol

from macro_planner.domain.foods import (
    CARB_KCAL_PER_G,
    FAT_KCAL_PER_G,
    PROTEIN_KCAL_PER_G,
    FoodRef,
)
from macro_planner.domain.plans import (
    DEFAULT_MEAL_SLOTS,
    MacroTotals,
    MealPlanResult,
    MealSlot,
    PlannedFoodItem,
    PlannedMeal,
)
from macro_planner.domain.targets import MacroRatios, TargetVector
from macro_planner.rounding import round_int, round_tenth
from macro_planner.services.evaluation import (
    evaluate_plan_quality,
    macro_percentages,
    quality_message,
)

MAX_ITERATIONS = 150
PROTEIN_PRIORITY_ITERATIONS = 50
TOP_CHOICES = 3
RESORT_EVERY = 3
MAX_PICKS_PER_FOOD = 2
MIN_POOL_SIZE = 2

PROTEIN_FOCUS_RATIO = 0.3
LOW_CARB_RATIO = 0.2
HIGH_FAT_RATIO = 0.4
EMPHASIS_WEIGHT = 3

CALORIE_DONE_FRACTION = 0.9
PROTEIN_DONE_FRACTION = 0.8
PROTEIN_BEHIND_FRACTION = 0.6
SMALL_REMAINDER_FRACTION = 0.2

MIN_MULTIPLIER = 0.25
SMALL_REMAINDER_MULTIPLIER = 0.5
JITTER_LOW = 0.9
JITTER_SPAN = 0.2

ALWAYS_ALLOWED_SUB_CATEGORIES = frozenset({"vegetable"})

ERROR_MESSAGE = "Error generating meal plan. Please try again."
CANCELLED_MESSAGE = "Meal plan generation cancelled."

_logger = logging.getLogger(__name__)


class FoodSource(Protocol):
    """Read access to the foods available for planning."""

    def for_meal_type(self, meal_type: str) -> list[FoodRef]:
        """Return foods tagged for a meal type, in catalog order."""


@dataclass(frozen=True)
class _SlotTargets:
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass
class MealPlanGenerator:
    """Builds daily meal plans from a food catalog."""

    catalog: FoodSource
    rng: random.Random = field(default_factory=random.Random)
    max_iterations: int = MAX_ITERATIONS
    delay_seconds: float = 0.0

    async def generate_meal_plan(
        self,
        targets: TargetVector,
        slots: Sequence[MealSlot] = DEFAULT_MEAL_SLOTS,
        cancel: asyncio.Event | None = None,
    ) -> MealPlanResult:
        """Generate a plan, returning an error result instead of raising."""
        try:
            if await self._wait_before_generation(cancel):
                _logger.info("Meal plan generation cancelled before start")
                return empty_plan(slots, CANCELLED_MESSAGE, error="cancelled")
            return self.build_plan(targets, slots)
        except Exception:
            _logger.exception("Meal plan generation failed")
            return empty_plan(slots, ERROR_MESSAGE, error="generation_failed")

    def build_plan(
        self, targets: TargetVector, slots: Sequence[MealSlot] = DEFAULT_MEAL_SLOTS
    ) -> MealPlanResult:
        """Run the selection loop for every slot and summarise the day."""
        ratios = target_ratios(targets)
        _logger.debug(
            "Target ratios: protein=%.1f%% carbs=%.1f%% fat=%.1f%%",
            ratios.protein * 100,
            ratios.carbs * 100,
            ratios.fat * 100,
        )

        meals: list[PlannedMeal] = []
        day_totals = MacroTotals()
        for slot in slots:
            planned = self._plan_slot(slot, targets, ratios)
            meals.append(planned)
            day_totals = day_totals.add(planned.totals)

        quality = evaluate_plan_quality(targets, day_totals)
        percents = macro_percentages(targets, day_totals)
        _logger.info(
            "Final plan: protein=%.1f%% carbs=%.1f%% fat=%.1f%% calories=%.1f%% "
            "quality=%s",
            percents.protein,
            percents.carbs,
            percents.fat,
            percents.calories,
            quality,
        )
        return MealPlanResult(
            meals=tuple(meals),
            totals=day_totals,
            quality=quality,
            message=quality_message(quality),
        )

    async def _wait_before_generation(self, cancel: asyncio.Event | None) -> bool:
        """Wait out the configured delay; return True if cancelled."""
        if cancel is None:
            if self.delay_seconds > 0:
                await asyncio.sleep(self.delay_seconds)
            return False
        if cancel.is_set():
            return True
        try:
            await asyncio.wait_for(cancel.wait(), timeout=self.delay_seconds)
        except TimeoutError:
            return False
        return True

    def _plan_slot(  # noqa: PLR0912, PLR0915
        self, slot: MealSlot, targets: TargetVector, ratios: MacroRatios
    ) -> PlannedMeal:
        goal = _SlotTargets(
            calories=targets.target_calories * slot.calorie_share,
            protein_g=targets.protein_g * slot.calorie_share,
            carbs_g=targets.carbs_g * slot.calorie_share,
            fat_g=targets.fat_g * slot.calorie_share,
        )
        available = self.catalog.for_meal_type(slot.meal_type)
        if not available:
            _logger.debug("No foods for %s (meal type %s)", slot.name, slot.meal_type)
            return PlannedMeal(slot=slot)

        protein_focused = ratios.protein > PROTEIN_FOCUS_RATIO
        pool = sort_by_ratio_match(available, ratios)
        protein_ranked = sorted(
            available, key=lambda food: food.protein_density, reverse=True
        )

        items: list[PlannedFoodItem] = []
        current = MacroTotals()
        used_categories: Counter[str | None] = Counter()
        used_sub_categories: set[str] = set()
        picks: Counter[str] = Counter()
        remaining_protein = goal.protein_g
        remaining_calories = goal.calories
        iterations = 0

        while (
            not _slot_satisfied(current, goal, protein_focused)
            and iterations < self.max_iterations
        ):
            iterations += 1

            if (
                protein_focused
                and current.protein_g < goal.protein_g * PROTEIN_BEHIND_FRACTION
                and iterations < PROTEIN_PRIORITY_ITERATIONS
            ):
                food = self._pick(protein_ranked)
            else:
                food = self._pick(
                    diverse_candidates(pool, used_categories, used_sub_categories)
                )
            if food is None:
                continue

            multiplier = portion_multiplier(
                food,
                remaining_protein=remaining_protein,
                remaining_calories=remaining_calories,
                slot_calories=goal.calories,
                protein_focused=protein_focused,
                jitter=self.rng.random(),
            )
            item = scale_food(food, multiplier)
            items.append(item)
            current = current.add(item)
            if food.category:
                used_categories[food.category] += 1
            if food.sub_category:
                used_sub_categories.add(food.sub_category)

            remaining_protein = max(0.0, goal.protein_g - current.protein_g)
            remaining_calories = max(0.0, goal.calories - current.calories)

            picks[food.name] += 1
            if picks[food.name] >= MAX_PICKS_PER_FOOD:
                pool = [entry for entry in pool if entry.name != food.name]

            if len(pool) < MIN_POOL_SIZE:
                break

            if iterations % RESORT_EVERY == 0:
                pool = sort_by_greatest_need(pool, current, goal)

        consolidated = consolidate_items(items)
        totals = sum_items(consolidated)
        _logger.debug(
            "%s totals: protein=%.1fg carbs=%.1fg fat=%.1fg calories=%s "
            "iterations=%s",
            slot.name,
            totals.protein_g,
            totals.carbs_g,
            totals.fat_g,
            totals.calories,
            iterations,
        )
        return PlannedMeal(slot=slot, items=tuple(consolidated), totals=totals)

    def _pick(self, candidates: Sequence[FoodRef]) -> FoodRef | None:
        """Pick one of the best few candidates at random."""
        if not candidates:
            return None
        return candidates[self.rng.randrange(min(len(candidates), TOP_CHOICES))]


def target_ratios(targets: TargetVector) -> MacroRatios:
    """Share of target calories carried by each macro target."""
    if targets.target_calories == 0:
        return MacroRatios(protein=0.0, carbs=0.0, fat=0.0)
    return MacroRatios(
        protein=targets.protein_g * PROTEIN_KCAL_PER_G / targets.target_calories,
        carbs=targets.carbs_g * CARB_KCAL_PER_G / targets.target_calories,
        fat=targets.fat_g * FAT_KCAL_PER_G / targets.target_calories,
    )


def ratio_score(food: FoodRef, ratios: MacroRatios) -> float:
    """Weighted distance between a food's calorie split and the target split."""
    protein_weight = EMPHASIS_WEIGHT if ratios.protein > PROTEIN_FOCUS_RATIO else 1
    carb_weight = EMPHASIS_WEIGHT if ratios.carbs < LOW_CARB_RATIO else 1
    fat_weight = EMPHASIS_WEIGHT if ratios.fat > HIGH_FAT_RATIO else 1
    protein, carbs, fat = food.calorie_ratios()
    return (
        protein_weight * abs(protein - ratios.protein)
        + carb_weight * abs(carbs - ratios.carbs)
        + fat_weight * abs(fat - ratios.fat)
    )


def sort_by_ratio_match(foods: Iterable[FoodRef], ratios: MacroRatios) -> list[FoodRef]:
    """Best-matching foods first; ties keep catalog order."""
    return sorted(foods, key=lambda food: ratio_score(food, ratios))


def diverse_candidates(
    pool: Sequence[FoodRef],
    used_categories: Counter[str | None],
    used_sub_categories: set[str],
) -> list[FoodRef]:
    """Narrow the pool to foods that add variety, relaxing when nothing is left."""
    candidates = list(pool)
    fresh_sub_categories = [
        food
        for food in candidates
        if not food.sub_category
        or food.sub_category in ALWAYS_ALLOWED_SUB_CATEGORIES
        or food.sub_category not in used_sub_categories
    ]
    if fresh_sub_categories:
        candidates = fresh_sub_categories

    fresh_categories = [
        food for food in candidates if used_categories[food.category] < 1
    ]
    if fresh_categories:
        candidates = fresh_categories
    return candidates


def sort_by_greatest_need(
    pool: Iterable[FoodRef], current: MacroTotals, goal: _SlotTargets
) -> list[FoodRef]:
    """Re-rank foods by density of the macro furthest behind its target."""
    protein = _fraction(current.protein_g, goal.protein_g)
    carbs = _fraction(current.carbs_g, goal.carbs_g)
    fat = _fraction(current.fat_g, goal.fat_g)
    lowest = min(protein, carbs, fat)
    if lowest == protein:
        return sorted(pool, key=lambda food: food.protein_density, reverse=True)
    if lowest == carbs:
        return sorted(pool, key=lambda food: food.carb_density, reverse=True)
    return sorted(pool, key=lambda food: food.fat_density, reverse=True)


def portion_multiplier(  # noqa: PLR0913
    food: FoodRef,
    *,
    remaining_protein: float,
    remaining_calories: float,
    slot_calories: float,
    protein_focused: bool,
    jitter: float,
) -> float:
    """Portion size, as a multiple of 100 g, for the next pick in a slot.

    The portion is cut to what is left of the protein target (protein-focused
    slots) or of the calorie budget, then scaled by 0.9 to 1.1 depending on
    ``jitter`` in ``[0, 1)``. It never drops below a quarter portion and is
    capped at half a portion once less than 20% of the slot calories remain.
    """
    multiplier = 1.0
    if protein_focused and remaining_protein < food.protein_g:
        multiplier = remaining_protein / food.protein_g
    elif remaining_calories < food.calories:
        multiplier = remaining_calories / food.calories
    multiplier *= JITTER_LOW + jitter * JITTER_SPAN
    multiplier = max(multiplier, MIN_MULTIPLIER)
    if remaining_calories < slot_calories * SMALL_REMAINDER_FRACTION:
        multiplier = min(multiplier, SMALL_REMAINDER_MULTIPLIER)
    return multiplier


def scale_food(food: FoodRef, multiplier: float) -> PlannedFoodItem:
    """Scale a per-100g food to a portion multiplier."""
    return PlannedFoodItem(
        name=food.name,
        protein_g=round_tenth(food.protein_g * multiplier),
        carbs_g=round_tenth(food.carbs_g * multiplier),
        fat_g=round_tenth(food.fat_g * multiplier),
        calories=round_int(food.calories * multiplier),
        portion_grams=round_int(multiplier * 100),
        category=food.category,
        sub_category=food.sub_category,
        reference=food,
    )


def consolidate_items(items: Iterable[PlannedFoodItem]) -> list[PlannedFoodItem]:
    """Merge repeated foods into a single item, keeping first-seen order."""
    merged: dict[str, PlannedFoodItem] = {}
    for item in items:
        existing = merged.get(item.name)
        if existing is None:
            merged[item.name] = item
            continue
        merged[item.name] = replace(
            existing,
            protein_g=existing.protein_g + item.protein_g,
            carbs_g=existing.carbs_g + item.carbs_g,
            fat_g=existing.fat_g + item.fat_g,
            calories=existing.calories + item.calories,
            portion_grams=existing.portion_grams + item.portion_grams,
        )
    return [
        replace(
            item,
            protein_g=round_tenth(item.protein_g),
            carbs_g=round_tenth(item.carbs_g),
            fat_g=round_tenth(item.fat_g),
        )
        for item in merged.values()
    ]


def sum_items(items: Iterable[PlannedFoodItem]) -> MacroTotals:
    """Total macros across planned items."""
    total = MacroTotals()
    for item in items:
        total = total.add(item)
    return total


def empty_plan(
    slots: Sequence[MealSlot], message: str, error: str | None = None
) -> MealPlanResult:
    """A plan with every meal cleared."""
    return MealPlanResult(
        meals=tuple(PlannedMeal(slot=slot) for slot in slots),
        totals=MacroTotals(),
        quality=None,
        message=message,
        error=error,
    )


def _slot_satisfied(
    current: MacroTotals, goal: _SlotTargets, protein_focused: bool
) -> bool:
    if current.calories < goal.calories * CALORIE_DONE_FRACTION:
        return False
    return not (
        protein_focused and current.protein_g < goal.protein_g * PROTEIN_DONE_FRACTION
    )


def _fraction(achieved: float, target: float) -> float:
    if target == 0:
        return math.inf
    return achieved / target
