from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class AIAnalysisResult(BaseModel):
    ingredients: List[str]
    confidence: float
    suggestions: List[str]
    generated_recipe: Optional[str] = None


class ParsedRecipe(BaseModel):
    name: str = "Custom Recipe"
    prep_time: str = "N/A"
    cook_time: str = "N/A"
    servings: str = "2-4"
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)
    nutrition: List[str] = Field(default_factory=list)


class RecipeRequest(BaseModel):
    ingredients: List[str] = Field(..., description="Ingredient names; an entry 'dish name: <dish>' requests a specific dish")


class RecipeResponse(BaseModel):
    raw: str
    recipe: ParsedRecipe
