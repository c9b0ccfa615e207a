"""Plan quality evaluation against daily targets."""

from dataclasses import dataclass

from macro_planner.domain.plans import MacroTotals, PlanQuality
from macro_planner.domain.targets import TargetVector
from macro_planner.rounding import round_int

EXCELLENT_LOW = 85
EXCELLENT_HIGH = 115
ACCEPTABLE_LOW = 70
ACCEPTABLE_HIGH = 130

_QUALITY_MESSAGES = {
    PlanQuality.EXCELLENT: "Excellent meal plan generated with balanced macros!",
    PlanQuality.ACCEPTABLE: "Meal plan generated successfully!",
    PlanQuality.POOR_FIT: (
        "Meal plan generated, but some macro targets were difficult to meet "
        "perfectly with available foods."
    ),
}


@dataclass(frozen=True)
class MacroPercentages:
    """Achieved macros as a percentage of target."""

    protein: float
    carbs: float
    fat: float
    calories: float


def macro_percentages(targets: TargetVector, totals: MacroTotals) -> MacroPercentages:
    """Return achieved/target * 100 for each macro and calories."""
    return MacroPercentages(
        protein=_percent(totals.protein_g, targets.protein_g),
        carbs=_percent(totals.carbs_g, targets.carbs_g),
        fat=_percent(totals.fat_g, targets.fat_g),
        calories=_percent(totals.calories, targets.target_calories),
    )


def evaluate_plan_quality(targets: TargetVector, totals: MacroTotals) -> PlanQuality:
    """Classify how well day totals match the targets."""
    percents = macro_percentages(targets, totals)
    values = (percents.protein, percents.carbs, percents.fat)
    if all(EXCELLENT_LOW < value < EXCELLENT_HIGH for value in values):
        return PlanQuality.EXCELLENT
    if any(value < ACCEPTABLE_LOW or value > ACCEPTABLE_HIGH for value in values):
        return PlanQuality.POOR_FIT
    return PlanQuality.ACCEPTABLE


def quality_message(quality: PlanQuality) -> str:
    """Caller-facing message for a quality classification."""
    return _QUALITY_MESSAGES[quality]


def target_percentage(current: float, target: float) -> int:
    """Progress toward a target, rounded and capped at 100."""
    if target == 0:
        return 0
    return min(round_int(current * 100 / target), 100)


def _percent(achieved: float, target: float) -> float:
    if target == 0:
        return 100.0 if achieved == 0 else 0.0
    return achieved * 100 / target
