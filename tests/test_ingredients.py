"""
Tests for amount parsing, formatting and shopping-list consolidation.
"""

import pytest

from mise.models.entities import Ingredient
from mise.parsing.ingredients import (
    IngredientConsolidator,
    consolidate_ingredients,
    format_amount,
    normalize_name,
    parse_amount,
)


class TestParseAmount:
    @pytest.mark.parametrize(
        "text, value, unit",
        [
            ("1.5 kg", 1500, "g"),
            ("500g", 500, "g"),
            ("500 gramos", 500, "g"),
            ("1/2 kg", 500, "g"),
            ("1,5 litros", 1500, "ml"),
            ("1,5 kg", 1500, "g"),
            ("0,25 l", 250, "ml"),
            ("2 l", 2000, "ml"),
            ("250 ml", 250, "ml"),
            ("2 tazas", 2, "cup"),
            ("1 cup", 1, "cup"),
            ("3 cucharadas", 3, "tbsp"),
            ("1 cdta", 1, "tsp"),
            ("4 unidades", 4, "unit"),
            ("2 pieces", 2, "unit"),
            ("1 ramito", 1, "bunch"),
            ("3", 3, ""),
        ],
    )
    def test_known_units(self, text, value, unit):
        parsed = parse_amount(text)
        assert parsed.value == pytest.approx(value)
        assert parsed.unit == unit

    def test_imperial_mass_folds_to_grams(self):
        assert parse_amount("1 lb").value == pytest.approx(453.59)
        assert parse_amount("2 oz").value == pytest.approx(56.7)
        assert parse_amount("1 libra").unit == "g"

    @pytest.mark.parametrize(
        "text", ["to taste", "al gusto", "a pinch", "2 handfuls", "1/0 kg", "1,000 g", "2,500 ml"]
    )
    def test_unparsable_keeps_text_as_unit(self, text):
        parsed = parse_amount(text)
        assert parsed.value == 0
        assert parsed.unit == text


class TestFormatAmount:
    def test_grams_to_kilograms(self):
        assert format_amount(1500, "g") == "1.5 kg"

    def test_boundary_renders_larger_unit(self):
        assert format_amount(1000, "g") == "1 kg"
        assert format_amount(1000, "ml") == "1 L"

    def test_below_boundary(self):
        assert format_amount(999, "g") == "999 g"
        assert format_amount(2.5, "cup") == "2.5 cup"

    def test_zero_renders_unit(self):
        assert format_amount(0, "to taste") == "to taste"

    def test_no_unit(self):
        assert format_amount(3, "") == "3"


class TestConsolidate:
    def test_case_insensitive_merge(self):
        result = consolidate_ingredients(
            [Ingredient(name="Tomato", amount="500g"), Ingredient(name="tomato", amount="1/2 kg")]
        )

        assert len(result) == 1
        assert result[0].total_amount == pytest.approx(1000)
        assert result[0].amount == "1 kg"
        assert result[0].is_consolidated

    def test_first_seen_order_and_name(self, sample_ingredients):
        result = consolidate_ingredients(sample_ingredients)
        assert [r.name for r in result] == ["Tomato", "Onion"]
        assert result[0].sources == ["Salad", "Soup"]

    def test_incompatible_units_not_summed(self):
        result = consolidate_ingredients(
            [
                Ingredient(name="Milk", amount="1 cup", recipe_title="A"),
                Ingredient(name="milk", amount="200 ml", recipe_title="B", is_allergen=True),
            ]
        )

        milk = result[0]
        assert milk.total_amount == 1
        assert milk.unit == "cup"
        assert milk.sources == ["A", "B"]
        assert milk.is_allergen

    def test_thousands_grouping_not_summed_as_decimal(self):
        result = consolidate_ingredients(
            [Ingredient(name="Flour", amount="1,000 g"), Ingredient(name="flour", amount="500 g")]
        )

        flour = result[0]
        assert flour.unit == "1,000 g"
        assert flour.total_amount == 0

    def test_empty_unit_adopts_other(self):
        result = consolidate_ingredients(
            [Ingredient(name="Egg", amount="2"), Ingredient(name="egg", amount="3 units")]
        )
        assert result[0].unit == "unit"
        assert result[0].amount == "5 unit"

    def test_incremental_equals_one_shot(self, sample_ingredients):
        a, b, c = sample_ingredients
        one_shot = consolidate_ingredients([a, b, c])
        incremental = IngredientConsolidator().add([a, b]).add([c]).results

        assert [r.model_dump() for r in incremental] == [r.model_dump() for r in one_shot]

    def test_normalize_name(self):
        assert normalize_name("  Olive   OIL ") == "olive oil"
