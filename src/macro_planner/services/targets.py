"""Daily calorie and macro target calculation."""

import logging
import math
from dataclasses import dataclass, field

from macro_planner.domain.foods import (
    CARB_KCAL_PER_G,
    FAT_KCAL_PER_G,
    PROTEIN_KCAL_PER_G,
)
from macro_planner.domain.targets import MacroRatios, PersonalInfo, TargetVector
from macro_planner.rounding import round_int

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "veryActive": 1.9,
}

GOAL_ADJUSTMENTS: dict[str, float] = {
    "lose": 0.8,
    "maintain": 1.0,
    "gain": 1.15,
}

BASE_RATIOS: dict[str, MacroRatios] = {
    "lose": MacroRatios(protein=0.4, carbs=0.25, fat=0.35),
    "maintain": MacroRatios(protein=0.3, carbs=0.4, fat=0.3),
    "gain": MacroRatios(protein=0.3, carbs=0.45, fat=0.25),
}

GENDERS = frozenset({"male", "female"})
DIET_TYPES = frozenset({"balanced", "lowCarb", "lowFat"})

_MIN_REDUCED_RATIO = 0.15
_MAX_PROTEIN_RATIO = 0.4
_PROTEIN_BUMP = 0.05
_LOW_CARB_CUT = 0.2
_LOW_FAT_CUT = 0.15

_logger = logging.getLogger(__name__)


class InvalidPersonalInfoError(ValueError):
    """Raised when personal info cannot produce meaningful targets."""


@dataclass(frozen=True)
class TargetTables:
    """Lookup tables driving the target calculation."""

    activity_multipliers: dict[str, float] = field(
        default_factory=lambda: dict(ACTIVITY_MULTIPLIERS)
    )
    goal_adjustments: dict[str, float] = field(
        default_factory=lambda: dict(GOAL_ADJUSTMENTS)
    )
    base_ratios: dict[str, MacroRatios] = field(
        default_factory=lambda: dict(BASE_RATIOS)
    )


@dataclass
class TargetCalculator:
    """Derives BMR, TDEE and macro targets from personal info."""

    tables: TargetTables = field(default_factory=TargetTables)

    def calculate_targets(self, info: PersonalInfo) -> TargetVector:
        """Return the daily target vector for the given person."""
        self._validate(info)
        bmr = mifflin_st_jeor(info.gender, info.weight_kg, info.height_cm, info.age)
        tdee = bmr * self.tables.activity_multipliers[info.activity_level]
        target_calories = tdee * self.tables.goal_adjustments[info.goal]
        ratios = adjust_for_diet(self.tables.base_ratios[info.goal], info.diet_type)

        targets = TargetVector(
            target_calories=round_int(target_calories),
            protein_g=round_int(target_calories * ratios.protein / PROTEIN_KCAL_PER_G),
            carbs_g=round_int(target_calories * ratios.carbs / CARB_KCAL_PER_G),
            fat_g=round_int(target_calories * ratios.fat / FAT_KCAL_PER_G),
            bmr=round_int(bmr),
            tdee=round_int(tdee),
            ratios=ratios,
        )
        _logger.debug(
            "Calculated targets: calories=%s protein=%s carbs=%s fat=%s",
            targets.target_calories,
            targets.protein_g,
            targets.carbs_g,
            targets.fat_g,
        )
        return targets

    def _validate(self, info: PersonalInfo) -> None:
        for label, value in (
            ("age", info.age),
            ("weight_kg", info.weight_kg),
            ("height_cm", info.height_cm),
        ):
            if not isinstance(value, int | float) or not math.isfinite(value):
                msg = f"{label} must be a finite number, got {value!r}"
                raise InvalidPersonalInfoError(msg)
            if value <= 0:
                msg = f"{label} must be positive, got {value!r}"
                raise InvalidPersonalInfoError(msg)
        if info.gender not in GENDERS:
            msg = f"unknown gender: {info.gender!r}"
            raise InvalidPersonalInfoError(msg)
        if info.activity_level not in self.tables.activity_multipliers:
            msg = f"unknown activity level: {info.activity_level!r}"
            raise InvalidPersonalInfoError(msg)
        if info.goal not in self.tables.goal_adjustments:
            msg = f"unknown goal: {info.goal!r}"
            raise InvalidPersonalInfoError(msg)
        if info.goal not in self.tables.base_ratios:
            msg = f"no base macro ratios for goal: {info.goal!r}"
            raise InvalidPersonalInfoError(msg)
        if info.diet_type not in DIET_TYPES:
            msg = f"unknown diet type: {info.diet_type!r}"
            raise InvalidPersonalInfoError(msg)


def mifflin_st_jeor(
    gender: str, weight_kg: float, height_cm: float, age: float
) -> float:
    """Basal metabolic rate from the Mifflin-St Jeor equation."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == "male":
        return base + 5
    return base - 161


def adjust_for_diet(base: MacroRatios, diet_type: str) -> MacroRatios:
    """Shift base goal ratios toward a low-carb or low-fat split."""
    protein, carbs, fat = base.protein, base.carbs, base.fat
    if diet_type == "lowCarb":
        carbs = max(_MIN_REDUCED_RATIO, carbs - _LOW_CARB_CUT)
        protein = min(_MAX_PROTEIN_RATIO, protein + _PROTEIN_BUMP)
        fat = 1 - protein - carbs
    elif diet_type == "lowFat":
        fat = max(_MIN_REDUCED_RATIO, fat - _LOW_FAT_CUT)
        protein = min(_MAX_PROTEIN_RATIO, protein + _PROTEIN_BUMP)
        carbs = 1 - protein - fat
    return normalize_ratios(MacroRatios(protein=protein, carbs=carbs, fat=fat))


def normalize_ratios(ratios: MacroRatios) -> MacroRatios:
    """Clamp negative ratios to zero and rescale so they sum to one."""
    if min(ratios.protein, ratios.carbs, ratios.fat) >= 0:
        return ratios
    protein = max(0.0, ratios.protein)
    carbs = max(0.0, ratios.carbs)
    fat = max(0.0, ratios.fat)
    total = protein + carbs + fat
    _logger.warning(
        "Negative macro ratio clamped: protein=%s carbs=%s fat=%s",
        ratios.protein,
        ratios.carbs,
        ratios.fat,
    )
    if total == 0:
        return MacroRatios(protein=0.0, carbs=0.0, fat=0.0)
    return MacroRatios(protein=protein / total, carbs=carbs / total, fat=fat / total)
