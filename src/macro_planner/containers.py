"""Dependency container wiring for the application."""

import random
from dataclasses import dataclass

from macro_planner.config import Settings
from macro_planner.services.catalog import FoodCatalog, load_food_catalog
from macro_planner.services.planner import MealPlanGenerator
from macro_planner.services.portions import PlanEditor
from macro_planner.services.targets import TargetCalculator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog: FoodCatalog
    target_calculator: TargetCalculator
    meal_plan_generator: MealPlanGenerator
    plan_editor: PlanEditor


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    catalog = load_food_catalog(resolved_settings.food_catalog_path)
    generator = MealPlanGenerator(
        catalog=catalog,
        rng=random.Random(resolved_settings.random_seed),  # noqa: S311
        max_iterations=resolved_settings.max_iterations,
        delay_seconds=resolved_settings.generation_delay_seconds,
    )
    return AppContainer(
        settings=resolved_settings,
        catalog=catalog,
        target_calculator=TargetCalculator(),
        meal_plan_generator=generator,
        plan_editor=PlanEditor(),
    )
