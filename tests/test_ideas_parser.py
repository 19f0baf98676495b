"""
Tests for the recipe ideas parser.
"""

import pytest

from mise.models.entities import MealType, ProteinType
from mise.parsing.ideas import find_json_array, parse_ideas_response, strip_code_fence


class TestParseIdeasResponse:
    def test_fenced_block_uses_defaults(self):
        content = '```json\n[{"title":"Soup","description":"Quick soup"}]\n```'

        ideas = parse_ideas_response(content)

        assert len(ideas) == 1
        assert ideas[0].title == "Soup"
        assert ideas[0].protein_type == ProteinType.NONE
        assert ideas[0].meal_type == MealType.LUNCH

    def test_caller_context_is_merged(self):
        content = '[{"title":"Omelette","description":"Fluffy","proteinType":"egg"}]'

        ideas = parse_ideas_response(
            content,
            meal_type=MealType.BREAKFAST,
            vibes=["quick"],
            ingredients="eggs, spinach , ",
            servings=4,
        )

        idea = ideas[0]
        assert idea.meal_type == MealType.BREAKFAST
        assert idea.protein_type == ProteinType.EGG
        assert idea.vibes == ["quick"]
        assert idea.ingredients == ["eggs", "spinach"]
        assert idea.servings == 4
        assert idea.is_used is False

    def test_custom_default_meal_type(self):
        ideas = parse_ideas_response(
            '[{"title":"Cake","description":"Sweet"}]', default_meal_type=MealType.DESSERT
        )
        assert ideas[0].meal_type == MealType.DESSERT

    def test_unknown_protein_normalizes_to_none(self):
        ideas = parse_ideas_response('[{"title":"Stew","description":"Rich","proteinType":"lamb"}]')
        assert ideas[0].protein_type == ProteinType.NONE

    def test_invalid_elements_are_skipped(self):
        content = """[
            {"title": "Good", "description": "ok"},
            {"title": "", "description": "empty title"},
            {"title": "No description"},
            {"title": 5, "description": "numeric title"},
            "just a string"
        ]"""
        ideas = parse_ideas_response(content)
        assert [i.title for i in ideas] == ["Good"]

    def test_array_surrounded_by_chatter(self):
        content = 'Here you go!\n[{"title":"Tacos","description":"Crunchy"}]\nEnjoy [and cook well]'
        ideas = parse_ideas_response(content)
        assert [i.title for i in ideas] == ["Tacos"]

    def test_brackets_inside_strings(self):
        content = '[{"title":"Rice [fried]","description":"Uses \\"leftover\\" rice ] quickly"}] trailing ]'
        ideas = parse_ideas_response(content)
        assert ideas[0].title == "Rice [fried]"
        assert ideas[0].description == 'Uses "leftover" rice ] quickly'

    @pytest.mark.parametrize(
        "content",
        [
            "I cannot help with that.",
            "",
            "[not json at all]",
            '{"title": "Soup", "description": "object, not array"}',
            '[{"title": "Unclosed"',
        ],
    )
    def test_unusable_input_returns_empty(self, content):
        assert parse_ideas_response(content) == []


class TestHelpers:
    def test_strip_code_fence(self):
        assert strip_code_fence("```json\n[1]\n```") == "[1]"
        assert strip_code_fence("```\n[1]```") == "[1]"
        assert strip_code_fence("[1]") == "[1]"

    def test_find_json_array_nested(self):
        assert find_json_array('x [[1, 2], [3]] y') == "[[1, 2], [3]]"

    def test_find_json_array_missing(self):
        assert find_json_array("no array here") is None
