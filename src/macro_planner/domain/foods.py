"""Domain models for the food catalog."""

from dataclasses import dataclass, field

MEAL_TYPES = frozenset({"breakfast", "lunch", "dinner", "snack"})

PROTEIN_KCAL_PER_G = 4
CARB_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9


@dataclass(frozen=True)
class FoodRef:
    """Catalog entry with macros per 100g."""

    name: str
    protein_g: float
    carbs_g: float
    fat_g: float
    calories: float
    category: str | None = None
    sub_category: str | None = None
    meal_types: frozenset[str] = field(default_factory=frozenset)

    def fits(self, meal_type: str) -> bool:
        """Return whether the food is suitable for a meal type."""
        return meal_type in self.meal_types

    @property
    def protein_density(self) -> float:
        """Protein grams per calorie."""
        return _per_calorie(self.protein_g, self.calories)

    @property
    def carb_density(self) -> float:
        """Carb grams per calorie."""
        return _per_calorie(self.carbs_g, self.calories)

    @property
    def fat_density(self) -> float:
        """Fat grams per calorie."""
        return _per_calorie(self.fat_g, self.calories)

    def calorie_ratios(self) -> tuple[float, float, float]:
        """Return the protein, carb and fat share of this food's calories."""
        return (
            _per_calorie(self.protein_g * PROTEIN_KCAL_PER_G, self.calories),
            _per_calorie(self.carbs_g * CARB_KCAL_PER_G, self.calories),
            _per_calorie(self.fat_g * FAT_KCAL_PER_G, self.calories),
        )


def _per_calorie(amount: float, calories: float) -> float:
    if calories == 0:
        return 0.0
    return amount / calories
