"""FastAPI application factory."""

import logging

from fastapi import FastAPI, HTTPException, Request

from macro_planner.api.models import (
    AddEdit,
    FoodPayload,
    MealPlanEditRequest,
    MealPlanRequest,
    MealPlanResponse,
    PersonalInfoRequest,
    PlanEdit,
    RemoveEdit,
    ReplaceEdit,
    ResizeEdit,
    TargetsPayload,
)
from macro_planner.app_logging import configure_logging
from macro_planner.containers import AppContainer, build_container
from macro_planner.domain.foods import MEAL_TYPES, FoodRef
from macro_planner.domain.plans import MealPlanResult
from macro_planner.services.catalog import FoodCatalog
from macro_planner.services.portions import (
    PlanEditError,
    PlanEditor,
    manual_food,
    portion_from_food,
)
from macro_planner.services.targets import InvalidPersonalInfoError

MAX_SEARCH_RESULTS = 20
NOT_FOUND_STATUS = 404
UNPROCESSABLE_STATUS = 422


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Macro Planner")
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/targets")
    async def targets(payload: PersonalInfoRequest, request: Request) -> TargetsPayload:
        """Calculate daily calorie and macro targets."""
        state_container: AppContainer = request.app.state.container
        try:
            result = state_container.target_calculator.calculate_targets(
                payload.to_domain()
            )
        except InvalidPersonalInfoError as exc:
            raise HTTPException(
                status_code=UNPROCESSABLE_STATUS, detail=str(exc)
            ) from exc
        return TargetsPayload.from_domain(result)

    @app.post("/meal-plans")
    async def meal_plans(
        payload: MealPlanRequest, request: Request
    ) -> MealPlanResponse:
        """Generate a daily meal plan."""
        state_container: AppContainer = request.app.state.container
        if payload.targets is not None:
            target_vector = payload.targets.to_domain()
        else:
            try:
                target_vector = state_container.target_calculator.calculate_targets(
                    payload.personal_info.to_domain()
                )
            except InvalidPersonalInfoError as exc:
                raise HTTPException(
                    status_code=UNPROCESSABLE_STATUS, detail=str(exc)
                ) from exc

        plan = await state_container.meal_plan_generator.generate_meal_plan(
            target_vector
        )
        if not plan.succeeded:
            logger.warning("Meal plan generation returned error: %s", plan.error)
        return MealPlanResponse.from_domain(plan, target_vector)

    @app.post("/meal-plans/edits")
    async def edit_meal_plan(
        payload: MealPlanEditRequest, request: Request
    ) -> MealPlanResponse:
        """Apply one edit to a plan and return it with refreshed totals."""
        state_container: AppContainer = request.app.state.container
        target_vector = payload.plan.targets.to_domain()
        editor = state_container.plan_editor.with_targets(target_vector)
        try:
            edited = apply_edit(
                editor, state_container.catalog, payload.plan.to_domain(), payload.edit
            )
        except PlanEditError as exc:
            raise HTTPException(status_code=NOT_FOUND_STATUS, detail=str(exc)) from exc
        logger.info(
            "Applied %s edit to meal %s", payload.edit.action, payload.edit.meal_id
        )
        return MealPlanResponse.from_domain(edited, target_vector)

    @app.get("/foods")
    async def foods(
        request: Request,
        query: str = "",
        limit: int = 5,
        meal_type: str | None = None,
    ) -> dict[str, list[FoodPayload]]:
        """Search the food catalog by name."""
        if meal_type is not None and meal_type not in MEAL_TYPES:
            raise HTTPException(
                status_code=UNPROCESSABLE_STATUS,
                detail=f"unknown meal type: {meal_type}",
            )
        state_container: AppContainer = request.app.state.container
        results = state_container.catalog.search(
            query,
            limit=max(1, min(limit, MAX_SEARCH_RESULTS)),
            meal_type=meal_type,
        )
        return {"foods": [FoodPayload.from_domain(food) for food in results]}

    return app


def create_default_app() -> FastAPI:
    """App factory for ASGI servers, wired from environment settings."""
    return create_app(build_container())


def apply_edit(
    editor: PlanEditor, catalog: FoodCatalog, plan: MealPlanResult, edit: PlanEdit
) -> MealPlanResult:
    """Dispatch an edit request to the plan editor."""
    if isinstance(edit, ResizeEdit):
        return editor.resize_item(plan, edit.meal_id, edit.index, edit.grams)
    if isinstance(edit, ReplaceEdit):
        return editor.replace_item(
            plan, edit.meal_id, edit.index, _catalog_food(catalog, edit.food_name)
        )
    if isinstance(edit, AddEdit):
        if edit.manual is not None:
            item = manual_food(
                edit.manual.name,
                protein_g=edit.manual.protein,
                carbs_g=edit.manual.carbs,
                fat_g=edit.manual.fat,
                grams=edit.manual.grams,
            )
        else:
            item = portion_from_food(_catalog_food(catalog, edit.food_name), edit.grams)
        return editor.add_item(plan, edit.meal_id, item)
    if isinstance(edit, RemoveEdit):
        return editor.remove_item(plan, edit.meal_id, edit.index)
    msg = f"unsupported edit: {edit!r}"
    raise TypeError(msg)


def _catalog_food(catalog: FoodCatalog, name: str | None) -> FoodRef:
    food = catalog.get(name) if name else None
    if food is None:
        msg = f"no catalog food named {name!r}"
        raise PlanEditError(msg)
    return food
