"""Lenient parsers for the line formats the prompts ask the model to use.

The model is told exactly how to answer but does not always comply, so
everything here tolerates missing sections. Only a missing ingredients line
in an image analysis is treated as a failure.
"""
from __future__ import annotations

import re
from typing import List, Tuple

from foodshare.core.errors import NoIngredientsDetected, ParseError

from .schemas import ParsedRecipe

DEFAULT_SUGGESTIONS = ["Simple stir-fry", "Basic salad", "Quick soup"]

_INGREDIENTS_LINE = re.compile(r"ingredients:(.*?)(?:\n|$)", re.IGNORECASE)
_SUGGESTIONS_LINE = re.compile(r"suggestions:(.*?)(?:\n|$)", re.IGNORECASE)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_analysis(text: str) -> Tuple[List[str], List[str]]:
    """Return ``(ingredients, suggestions)`` from an ``ingredients: ...`` / ``suggestions: ...`` reply."""
    if not text or not text.strip():
        raise ParseError("No analysis results received")

    ingredients_match = _INGREDIENTS_LINE.search(text)
    if not ingredients_match:
        raise NoIngredientsDetected("Invalid response format: ingredients not found")
    ingredients = _split_csv(ingredients_match.group(1))
    if not ingredients:
        raise NoIngredientsDetected()

    suggestions_match = _SUGGESTIONS_LINE.search(text)
    suggestions = _split_csv(suggestions_match.group(1)) if suggestions_match else list(DEFAULT_SUGGESTIONS)
    return ingredients, suggestions or ["No suggestions available"]


def _line(text: str, label: str) -> str | None:
    m = re.search(rf"{label}:?\s*([^\n]+)", text, re.IGNORECASE)
    return m.group(1).strip() if m else None


def _section(text: str, header: str, stop: str) -> List[str]:
    m = re.search(rf"{header}:?\s*(.*?)(?={stop}|\Z)", text, re.IGNORECASE | re.DOTALL)
    if not m:
        return []
    return [line.strip() for line in m.group(1).splitlines() if line.strip()]


_NUMBERED = re.compile(r"^\d+\.")


def parse_recipe(text: str) -> ParsedRecipe:
    """Best-effort extraction of the recipe template; missing parts keep their defaults."""
    recipe = ParsedRecipe()
    if not text:
        return recipe

    for field, label in (
        ("name", "Recipe Name"),
        ("prep_time", "Preparation Time"),
        ("cook_time", "Cooking Time"),
        ("servings", "Servings"),
    ):
        value = _line(text, label)
        if value:
            setattr(recipe, field, value)

    recipe.ingredients = [
        re.sub(r"^(?:-|\d+\.)\s*", "", line).strip()
        for line in _section(text, "Ingredients", "Instructions:")
        if line.startswith("-") or _NUMBERED.match(line)
    ]
    recipe.instructions = [
        re.sub(r"^\d+\.\s*", "", line).strip()
        for line in _section(text, "Instructions", "Tips:|Nutrition Facts:")
        if _NUMBERED.match(line)
    ]
    recipe.tips = [
        re.sub(r"^-\s*", "", line).strip()
        for line in _section(text, "Tips", "Nutrition Facts:")
        if line.startswith("-")
    ]

    nutrition: List[str] = []
    for line in _section(text, "Nutrition Facts", r"\Z"):
        if not (line.startswith("-") or _NUMBERED.match(line) or ":" in line):
            continue
        clean = re.sub(r"^(?:[-•*]|\d+\.)\s*", "", line).strip()
        if ":" in clean:
            key, value = clean.split(":", 1)
            clean = f"{key.strip()}: {value.strip()}"
        nutrition.append(clean)
    recipe.nutrition = nutrition

    recipe.ingredients = [i for i in recipe.ingredients if i]
    recipe.instructions = [i for i in recipe.instructions if i]
    recipe.tips = [t for t in recipe.tips if t]
    return recipe
