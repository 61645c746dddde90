import pytest

from foodshare.ai.parsing import parse_analysis, parse_recipe
from foodshare.core.errors import NoIngredientsDetected, ParseError

RECIPE = """
Recipe Name: Tomato Basil Pasta
Preparation Time: 10 minutes
Cooking Time: 20 minutes
Servings: 4

Ingredients:
- 400 g spaghetti
- 6 ripe tomatoes
- 1 bunch basil

Instructions:
1. Boil the pasta.
2. Simmer the chopped tomatoes.
3. Toss everything with **fresh** basil.

Tips:
- Save some pasta water.

Nutrition Facts:
- Calories:  520 kcal
- Protein: 18 g
"""


def test_parse_recipe_extracts_all_sections():
    recipe = parse_recipe(RECIPE)
    assert recipe.name == "Tomato Basil Pasta"
    assert recipe.prep_time == "10 minutes"
    assert recipe.cook_time == "20 minutes"
    assert recipe.servings == "4"
    assert recipe.ingredients == ["400 g spaghetti", "6 ripe tomatoes", "1 bunch basil"]
    assert recipe.instructions[0] == "Boil the pasta."
    assert len(recipe.instructions) == 3
    assert recipe.tips == ["Save some pasta water."]
    assert recipe.nutrition == ["Calories: 520 kcal", "Protein: 18 g"]


def test_parse_recipe_degrades_to_defaults():
    recipe = parse_recipe("Just mix everything and enjoy.")
    assert recipe.name == "Custom Recipe"
    assert recipe.servings == "2-4"
    assert recipe.ingredients == []
    assert recipe.instructions == []


def test_parse_recipe_handles_empty_text():
    assert parse_recipe("").name == "Custom Recipe"


def test_parse_analysis_is_case_insensitive():
    ingredients, suggestions = parse_analysis("INGREDIENTS: Carrot, Leek\nSuggestions: Soup")
    assert ingredients == ["Carrot", "Leek"]
    assert suggestions == ["Soup"]


def test_parse_analysis_empty_text():
    with pytest.raises(ParseError):
        parse_analysis("   ")


def test_parse_analysis_missing_ingredients():
    with pytest.raises(NoIngredientsDetected):
        parse_analysis("suggestions: soup")
