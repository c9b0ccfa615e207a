"""Domain models for personal info and daily macro targets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PersonalInfo:
    """Biometrics and preferences used to derive targets."""

    gender: str
    age: float
    weight_kg: float
    height_cm: float
    activity_level: str = "moderate"
    goal: str = "maintain"
    diet_type: str = "balanced"


@dataclass(frozen=True)
class MacroRatios:
    """Share of daily calories from each macro."""

    protein: float
    carbs: float
    fat: float

    @property
    def total(self) -> float:
        return self.protein + self.carbs + self.fat


@dataclass(frozen=True)
class TargetVector:
    """Daily calorie and macro gram targets."""

    target_calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    bmr: float | None = None
    tdee: float | None = None
    ratios: MacroRatios | None = None
