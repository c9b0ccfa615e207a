"""Tests for the food catalog."""

import json

import pytest

from macro_planner.services.catalog import (
    CatalogError,
    FoodCatalog,
    load_food_catalog,
    parse_food_catalog,
)
from tests.conftest import make_food


def test_default_catalog_loads_packaged_foods(default_catalog) -> None:
    assert len(default_catalog) == 35
    chicken = default_catalog.get("Chicken Breast")
    assert chicken is not None
    assert chicken.protein_g == 31
    assert chicken.calories == 165
    assert chicken.category == "lean protein"
    assert chicken.sub_category == "poultry"
    assert chicken.meal_types == frozenset({"lunch", "dinner"})


def test_every_meal_type_has_foods(default_catalog) -> None:
    for meal_type in ("breakfast", "lunch", "dinner", "snack"):
        assert default_catalog.for_meal_type(meal_type)


def test_for_meal_type_keeps_catalog_order(default_catalog) -> None:
    snacks = default_catalog.for_meal_type("snack")
    order = [food.name for food in default_catalog]

    assert [food.name for food in snacks] == [
        name for name in order if name in {food.name for food in snacks}
    ]


def test_search_is_case_insensitive_and_limited(default_catalog) -> None:
    results = default_catalog.search("PROTEIN")

    assert [food.name for food in results] == [
        "Protein Powder (Whey)",
        "Protein Bar",
    ]
    assert len(default_catalog.search("e", limit=5)) == 5
    assert default_catalog.search("   ") == []


def test_search_filters_by_meal_type(default_catalog) -> None:
    results = default_catalog.search("milk", meal_type="snack")

    assert {food.name for food in results} == {"Milk (Whole)", "Milk (Skim)"}
    assert default_catalog.search("milk", meal_type="dinner") == []


def test_duplicate_names_are_rejected() -> None:
    with pytest.raises(CatalogError, match="duplicate"):
        FoodCatalog([make_food("Egg", 13, 1, 11, 155), make_food("Egg", 1, 1, 1, 17)])


def test_invalid_record_is_rejected() -> None:
    payload = [
        {
            "name": "Mystery",
            "protein_g": -1,
            "carbs_g": 0,
            "fat_g": 0,
            "calories": 10,
            "meal_types": ["snack"],
        }
    ]

    with pytest.raises(CatalogError, match="#0"):
        parse_food_catalog(payload)


def test_unknown_meal_type_is_rejected() -> None:
    payload = [
        {
            "name": "Midnight Pizza",
            "protein_g": 11,
            "carbs_g": 33,
            "fat_g": 10,
            "calories": 266,
            "meal_types": ["midnight"],
        }
    ]

    with pytest.raises(CatalogError):
        parse_food_catalog(payload)


def test_non_list_payload_is_rejected() -> None:
    with pytest.raises(CatalogError, match="list"):
        parse_food_catalog({"foods": []})


def test_load_from_file(tmp_path) -> None:
    path = tmp_path / "foods.json"
    path.write_text(
        json.dumps(
            [
                {
                    "name": "Rice Cake",
                    "protein_g": 8,
                    "carbs_g": 82,
                    "fat_g": 3,
                    "calories": 387,
                    "category": "grain",
                    "meal_types": ["snack"],
                }
            ]
        ),
        encoding="utf-8",
    )

    catalog = load_food_catalog(path)

    rice_cake = catalog.get("Rice Cake")
    assert rice_cake is not None
    assert rice_cake.sub_category is None
    assert catalog.for_meal_type("snack") == [rice_cake]
