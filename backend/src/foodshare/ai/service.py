from __future__ import annotations

import base64
import logging
from typing import Callable, List, Optional, Sequence

from foodshare.core.config import Settings, get_settings
from foodshare.core.errors import InvalidInput, ParseError

from .client import GeminiClient, image_part, text_part
from .parsing import parse_analysis
from .retry import retry_with_backoff
from .schemas import AIAnalysisResult

logger = logging.getLogger(__name__)

ANALYSIS_CONFIDENCE = 0.95

ANALYSIS_PROMPT = """
You are a food analysis expert. Please analyze this food image and:
1. List all clearly visible ingredients
2. Suggest 3 possible recipes using these ingredients

Format your response exactly like this:
ingredients: ingredient1, ingredient2, ingredient3
suggestions: recipe1, recipe2, recipe3
""".strip()

RECIPE_TEMPLATE = """
You must follow this EXACT format in your response:

Recipe Name: {name}
Preparation Time: [time in minutes]
Cooking Time: [time in minutes]
Servings: [number]

Ingredients:
- [ingredient 1 with quantity]
- [ingredient 2 with quantity]
- [continue for all ingredients]

Instructions:
1. [first step]
2. [second step]
3. [continue numbering for all steps]

Tips:
- [cooking tip 1]
- [cooking tip 2]

Nutrition Facts:
- Calories: [amount]
- Protein: [amount]
- Carbs: [amount]
- Fat: [amount]
""".strip()

DISH_PREFIX = "dish name:"


def _with_retry(fn, settings: Settings, sleep: Optional[Callable[[float], None]]):
    return retry_with_backoff(
        fn,
        max_retries=settings.ai_max_retries,
        base_delay=settings.ai_base_delay,
        max_delay=settings.ai_max_delay,
        sleep=sleep,
    )


def validate_image(data: bytes, mime_type: Optional[str], max_bytes: int) -> None:
    if not (mime_type or "").startswith("image/"):
        raise InvalidInput("Invalid file type. Please upload an image.")
    if len(data) > max_bytes:
        raise InvalidInput(f"Image too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")
    if not data:
        raise InvalidInput("Image file is empty.")


def analyze_image(
    client: GeminiClient,
    data: bytes,
    mime_type: Optional[str],
    settings: Optional[Settings] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> AIAnalysisResult:
    """Detect ingredients in a photo and suggest dishes.

    Input is validated before any network call. Transient AI failures are
    retried with backoff; an answer without an ingredients line raises
    ``NoIngredientsDetected``.
    """
    settings = settings or get_settings()
    validate_image(data, mime_type, settings.max_image_bytes)

    encoded = base64.b64encode(data).decode("ascii")
    parts = [text_part(ANALYSIS_PROMPT), image_part(mime_type, encoded)]
    text = _with_retry(lambda: client.generate(parts), settings, sleep)

    try:
        ingredients, suggestions = parse_analysis(text)
    except ParseError:
        logger.warning("Non-standard analysis response: %r", (text or "")[:200])
        raise

    return AIAnalysisResult(
        ingredients=ingredients,
        confidence=ANALYSIS_CONFIDENCE,
        suggestions=suggestions,
    )


def build_recipe_prompt(ingredients: Sequence[str]) -> str:
    dish: Optional[str] = None
    others: List[str] = []
    for raw in ingredients:
        item = (raw or "").strip()
        if not item:
            continue
        if item.lower().startswith(DISH_PREFIX):
            dish = item[len(DISH_PREFIX):].strip() or dish
        else:
            others.append(item)

    if dish:
        head = f'Create a detailed recipe for "{dish}" using these ingredients: {", ".join(others)}'
        return f"{head}\n\n{RECIPE_TEMPLATE.format(name=dish)}"
    head = f"Create a detailed recipe using these ingredients: {', '.join(others)}"
    return f"{head}\n\n{RECIPE_TEMPLATE.format(name='[name of dish]')}"


def generate_recipe(
    client: GeminiClient,
    ingredients: Sequence[str],
    settings: Optional[Settings] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> str:
    """Raw recipe text in the template format; parse with ``parse_recipe``."""
    if not ingredients or not any((i or "").strip() for i in ingredients):
        raise InvalidInput("No ingredients provided for recipe generation")

    settings = settings or get_settings()
    prompt = build_recipe_prompt(ingredients)
    recipe = _with_retry(lambda: client.generate([text_part(prompt)]), settings, sleep)
    if not recipe:
        raise ParseError("No recipe generated")
    return recipe
