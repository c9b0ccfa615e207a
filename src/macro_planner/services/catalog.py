"""Food catalog loading and lookup."""

import json
import logging
from collections.abc import Iterable, Iterator
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from macro_planner.domain.foods import MEAL_TYPES, FoodRef

_DEFAULT_RESOURCE = "foods.json"

_logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when catalog data is malformed."""


class FoodRecord(BaseModel):
    """Raw catalog record as stored on disk."""

    name: str = Field(min_length=1)
    protein_g: float = Field(ge=0)
    carbs_g: float = Field(ge=0)
    fat_g: float = Field(ge=0)
    calories: float = Field(ge=0)
    category: str | None = None
    sub_category: str | None = None
    meal_types: list[str] = Field(default_factory=list)

    @field_validator("meal_types")
    @classmethod
    def _known_meal_types(cls, value: list[str]) -> list[str]:
        unknown = [tag for tag in value if tag not in MEAL_TYPES]
        if unknown:
            msg = f"unknown meal types: {unknown}"
            raise ValueError(msg)
        return value

    def to_food(self) -> FoodRef:
        return FoodRef(
            name=self.name,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fat_g=self.fat_g,
            calories=self.calories,
            category=self.category,
            sub_category=self.sub_category,
            meal_types=frozenset(self.meal_types),
        )


class FoodCatalog:
    """Ordered, read-only collection of foods."""

    def __init__(self, foods: Iterable[FoodRef]) -> None:
        self._foods = tuple(foods)
        self._by_name: dict[str, FoodRef] = {}
        for food in self._foods:
            if food.name in self._by_name:
                msg = f"duplicate food name in catalog: {food.name}"
                raise CatalogError(msg)
            self._by_name[food.name] = food

    def __iter__(self) -> Iterator[FoodRef]:
        return iter(self._foods)

    def __len__(self) -> int:
        return len(self._foods)

    @property
    def foods(self) -> tuple[FoodRef, ...]:
        return self._foods

    def get(self, name: str) -> FoodRef | None:
        """Return a food by exact name."""
        return self._by_name.get(name)

    def for_meal_type(self, meal_type: str) -> list[FoodRef]:
        """Return foods tagged for a meal type, in catalog order."""
        return [food for food in self._foods if food.fits(meal_type)]

    def search(
        self, query: str | None, limit: int = 5, meal_type: str | None = None
    ) -> list[FoodRef]:
        """Case-insensitive substring search over food names."""
        if not query or not query.strip():
            return []
        needle = query.strip().lower()
        results = [
            food
            for food in self._foods
            if needle in food.name.lower()
            and (meal_type is None or food.fits(meal_type))
        ]
        return results[:limit]


def load_food_catalog(path: str | Path | None = None) -> FoodCatalog:
    """Load the catalog from a JSON file or the packaged default."""
    if path is None:
        raw = (
            resources.files("macro_planner.data")
            .joinpath(_DEFAULT_RESOURCE)
            .read_text(encoding="utf-8")
        )
        source = _DEFAULT_RESOURCE
    else:
        raw = Path(path).read_text(encoding="utf-8")
        source = str(path)
    return parse_food_catalog(json.loads(raw), source=source)


def parse_food_catalog(
    payload: object, source: str = "<memory>"
) -> FoodCatalog:
    """Build a catalog from decoded JSON records."""
    if not isinstance(payload, list):
        msg = f"catalog {source} must be a list of food records"
        raise CatalogError(msg)
    foods: list[FoodRef] = []
    for index, record in enumerate(payload):
        try:
            foods.append(FoodRecord.model_validate(record).to_food())
        except ValidationError as exc:
            msg = f"invalid food record #{index} in {source}: {exc}"
            raise CatalogError(msg) from exc
    catalog = FoodCatalog(foods)
    _logger.info("Loaded food catalog: source=%s foods=%s", source, len(catalog))
    return catalog
