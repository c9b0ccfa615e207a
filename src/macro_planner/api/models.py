"""Pydantic models for the HTTP API."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from macro_planner.domain.foods import FoodRef
from macro_planner.domain.plans import (
    MealPlanResult,
    MealSlot,
    PlannedFoodItem,
    PlannedMeal,
    PlanQuality,
)
from macro_planner.domain.targets import PersonalInfo, TargetVector
from macro_planner.services.evaluation import target_percentage
from macro_planner.services.planner import sum_items


class PersonalInfoRequest(BaseModel):
    """Personal attributes submitted by the client."""

    gender: Literal["male", "female"]
    age: int = Field(ge=18, le=100)
    weight: float = Field(ge=40, le=200, description="Body weight in kg")
    height: float = Field(ge=130, le=230, description="Height in cm")
    activity_level: Literal[
        "sedentary", "light", "moderate", "active", "veryActive"
    ] = Field(default="moderate", alias="activityLevel")
    goal: Literal["lose", "maintain", "gain"] = "maintain"
    diet_type: Literal["balanced", "lowCarb", "lowFat"] = Field(
        default="balanced", alias="dietType"
    )

    model_config = ConfigDict(populate_by_name=True)

    def to_domain(self) -> PersonalInfo:
        return PersonalInfo(
            gender=self.gender,
            age=self.age,
            weight_kg=self.weight,
            height_cm=self.height,
            activity_level=self.activity_level,
            goal=self.goal,
            diet_type=self.diet_type,
        )


class TargetsPayload(BaseModel):
    """Daily targets, as returned by the calculator or supplied directly."""

    target_calories: float = Field(ge=0, alias="targetCalories")
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    bmr: float | None = None
    tdee: float | None = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, targets: TargetVector) -> "TargetsPayload":
        return cls(
            target_calories=targets.target_calories,
            protein=targets.protein_g,
            carbs=targets.carbs_g,
            fat=targets.fat_g,
            bmr=targets.bmr,
            tdee=targets.tdee,
        )

    def to_domain(self) -> TargetVector:
        return TargetVector(
            target_calories=self.target_calories,
            protein_g=self.protein,
            carbs_g=self.carbs,
            fat_g=self.fat,
            bmr=self.bmr,
            tdee=self.tdee,
        )


class MealPlanRequest(BaseModel):
    """Request to generate a plan from personal info or explicit targets."""

    personal_info: PersonalInfoRequest | None = Field(
        default=None, alias="personalInfo"
    )
    targets: TargetsPayload | None = None

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _one_source(self) -> "MealPlanRequest":
        if (self.personal_info is None) == (self.targets is None):
            msg = "provide exactly one of personalInfo or targets"
            raise ValueError(msg)
        return self


class FoodPayload(BaseModel):
    """Catalog food per 100g."""

    name: str
    protein: float
    carbs: float
    fat: float
    calories: float
    category: str | None = None
    sub_category: str | None = Field(default=None, alias="subCategory")
    meal_types: list[str] = Field(default_factory=list, alias="mealTypes")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, food: FoodRef) -> "FoodPayload":
        return cls(
            name=food.name,
            protein=food.protein_g,
            carbs=food.carbs_g,
            fat=food.fat_g,
            calories=food.calories,
            category=food.category,
            sub_category=food.sub_category,
            meal_types=sorted(food.meal_types),
        )

    def to_domain(self) -> FoodRef:
        return FoodRef(
            name=self.name,
            protein_g=self.protein,
            carbs_g=self.carbs,
            fat_g=self.fat,
            calories=self.calories,
            category=self.category,
            sub_category=self.sub_category,
            meal_types=frozenset(self.meal_types),
        )


class PlannedFoodPayload(BaseModel):
    """A planned portion of a food, with the per-100g values it was scaled from."""

    name: str
    protein: float
    carbs: float
    fat: float
    calories: float
    portion_size: float = Field(alias="portionSize")
    category: str | None = None
    sub_category: str | None = Field(default=None, alias="subCategory")
    reference: FoodPayload | None = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, item: PlannedFoodItem) -> "PlannedFoodPayload":
        return cls(
            name=item.name,
            protein=item.protein_g,
            carbs=item.carbs_g,
            fat=item.fat_g,
            calories=item.calories,
            portion_size=item.portion_grams,
            category=item.category,
            sub_category=item.sub_category,
            reference=(
                FoodPayload.from_domain(item.reference)
                if item.reference is not None
                else None
            ),
        )

    def to_domain(self) -> PlannedFoodItem:
        return PlannedFoodItem(
            name=self.name,
            protein_g=self.protein,
            carbs_g=self.carbs,
            fat_g=self.fat,
            calories=self.calories,
            portion_grams=self.portion_size,
            category=self.category,
            sub_category=self.sub_category,
            reference=self.reference.to_domain() if self.reference else None,
        )


class MacroTotalsPayload(BaseModel):
    """Summed macros."""

    protein: float
    carbs: float
    fat: float
    calories: float


class MacroProgressPayload(BaseModel):
    """Percent of each target reached, capped at 100."""

    protein: int
    carbs: int
    fat: int
    calories: int


class PlannedMealPayload(BaseModel):
    """One meal slot with its foods."""

    id: int
    name: str
    meal_type: str = Field(alias="mealType")
    calorie_share: float = Field(ge=0, le=1, alias="calorieShare")
    foods: list[PlannedFoodPayload]
    totals: MacroTotalsPayload

    model_config = ConfigDict(populate_by_name=True)

    def to_domain(self) -> PlannedMeal:
        items = tuple(food.to_domain() for food in self.foods)
        return PlannedMeal(
            slot=MealSlot(
                id=self.id,
                name=self.name,
                meal_type=self.meal_type,
                calorie_share=self.calorie_share,
            ),
            items=items,
            totals=sum_items(items),
        )


class MealPlanResponse(BaseModel):
    """Generated plan with day totals and quality."""

    meals: list[PlannedMealPayload]
    totals: MacroTotalsPayload
    targets: TargetsPayload
    progress: MacroProgressPayload | None = None
    quality: PlanQuality | None = None
    message: str = ""
    error: str | None = None

    @classmethod
    def from_domain(
        cls, plan: MealPlanResult, targets: TargetVector
    ) -> "MealPlanResponse":
        return cls(
            meals=[
                PlannedMealPayload(
                    id=meal.slot.id,
                    name=meal.slot.name,
                    meal_type=meal.slot.meal_type,
                    calorie_share=meal.slot.calorie_share,
                    foods=[PlannedFoodPayload.from_domain(item) for item in meal.items],
                    totals=MacroTotalsPayload(
                        protein=meal.totals.protein_g,
                        carbs=meal.totals.carbs_g,
                        fat=meal.totals.fat_g,
                        calories=meal.totals.calories,
                    ),
                )
                for meal in plan.meals
            ],
            totals=MacroTotalsPayload(
                protein=plan.totals.protein_g,
                carbs=plan.totals.carbs_g,
                fat=plan.totals.fat_g,
                calories=plan.totals.calories,
            ),
            targets=TargetsPayload.from_domain(targets),
            progress=MacroProgressPayload(
                protein=target_percentage(plan.totals.protein_g, targets.protein_g),
                carbs=target_percentage(plan.totals.carbs_g, targets.carbs_g),
                fat=target_percentage(plan.totals.fat_g, targets.fat_g),
                calories=target_percentage(
                    plan.totals.calories, targets.target_calories
                ),
            ),
            quality=plan.quality,
            message=plan.message,
            error=plan.error,
        )

    def to_domain(self) -> MealPlanResult:
        """Rebuild the plan; meal and day totals are recomputed from the foods."""
        meals = tuple(meal.to_domain() for meal in self.meals)
        return MealPlanResult(
            meals=meals,
            totals=sum_items(item for meal in meals for item in meal.items),
            quality=self.quality,
            message=self.message,
            error=self.error,
        )


class ManualFoodPayload(BaseModel):
    """Macros entered by hand for a given portion."""

    name: str = Field(min_length=1)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    grams: float = Field(default=100, gt=0)


class ResizeEdit(BaseModel):
    """Change the portion of one planned food."""

    action: Literal["resize"]
    meal_id: int = Field(alias="mealId")
    index: int = Field(ge=0)
    grams: float

    model_config = ConfigDict(populate_by_name=True)


class ReplaceEdit(BaseModel):
    """Swap a planned food for a catalog food at the same portion."""

    action: Literal["replace"]
    meal_id: int = Field(alias="mealId")
    index: int = Field(ge=0)
    food_name: str = Field(alias="foodName")

    model_config = ConfigDict(populate_by_name=True)


class AddEdit(BaseModel):
    """Add a catalog food, or a manually entered one, to a meal."""

    action: Literal["add"]
    meal_id: int = Field(alias="mealId")
    food_name: str | None = Field(default=None, alias="foodName")
    grams: float = Field(default=100, gt=0)
    manual: ManualFoodPayload | None = None

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _one_food(self) -> "AddEdit":
        if (self.food_name is None) == (self.manual is None):
            msg = "provide exactly one of foodName or manual"
            raise ValueError(msg)
        return self


class RemoveEdit(BaseModel):
    """Drop one planned food."""

    action: Literal["remove"]
    meal_id: int = Field(alias="mealId")
    index: int = Field(ge=0)

    model_config = ConfigDict(populate_by_name=True)


PlanEdit = Annotated[
    ResizeEdit | ReplaceEdit | AddEdit | RemoveEdit, Field(discriminator="action")
]


class MealPlanEditRequest(BaseModel):
    """A previously returned plan plus one edit to apply to it."""

    plan: MealPlanResponse
    edit: PlanEdit
