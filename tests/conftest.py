"""Shared test fixtures."""

import random

import pytest

from macro_planner.config import Settings
from macro_planner.containers import AppContainer
from macro_planner.domain.foods import FoodRef
from macro_planner.domain.targets import TargetVector
from macro_planner.services.catalog import FoodCatalog, load_food_catalog
from macro_planner.services.planner import MealPlanGenerator
from macro_planner.services.portions import PlanEditor
from macro_planner.services.targets import TargetCalculator


def make_food(  # noqa: PLR0913
    name: str,
    protein_g: float,
    carbs_g: float,
    fat_g: float,
    calories: float,
    category: str | None = None,
    sub_category: str | None = None,
    meal_types: tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack"),
) -> FoodRef:
    return FoodRef(
        name=name,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        calories=calories,
        category=category,
        sub_category=sub_category,
        meal_types=frozenset(meal_types),
    )


def varied_catalog() -> FoodCatalog:
    """Six categories with two foods each, all suitable for breakfast."""
    foods = []
    for index, (category, protein, carbs, fat) in enumerate(
        [
            ("grain", 4, 30, 1),
            ("dairy", 10, 5, 4),
            ("fruit", 1, 22, 0.3),
            ("lean protein", 25, 0, 3),
            ("legumes", 9, 20, 0.5),
            ("nuts", 6, 6, 14),
        ]
    ):
        for variant in ("a", "b"):
            calories = protein * 4 + carbs * 4 + fat * 9
            foods.append(
                make_food(
                    f"{category} {variant}",
                    protein,
                    carbs,
                    fat,
                    round(calories),
                    category=category,
                    sub_category=f"{category}-{index}-{variant}",
                    meal_types=("breakfast",),
                )
            )
    return FoodCatalog(foods)


@pytest.fixture
def settings() -> Settings:
    return Settings(random_seed=7, generation_delay_seconds=0.0)


@pytest.fixture(scope="session")
def default_catalog() -> FoodCatalog:
    return load_food_catalog()


@pytest.fixture
def maintenance_targets() -> TargetVector:
    """Targets for a 30 year old, 70 kg, 175 cm man at moderate activity."""
    return TargetVector(target_calories=2556, protein_g=192, carbs_g=256, fat_g=85)


@pytest.fixture
def generator(default_catalog: FoodCatalog) -> MealPlanGenerator:
    return MealPlanGenerator(catalog=default_catalog, rng=random.Random(1234))


@pytest.fixture
def container(settings: Settings, default_catalog: FoodCatalog) -> AppContainer:
    return AppContainer(
        settings=settings,
        catalog=default_catalog,
        target_calculator=TargetCalculator(),
        meal_plan_generator=MealPlanGenerator(
            catalog=default_catalog, rng=random.Random(settings.random_seed)
        ),
        plan_editor=PlanEditor(),
    )
