from datetime import datetime
from typing import List

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from foodshare.utils.clock import utcnow

from .users import new_id


class MealHistory(SQLModel, table=True):
    """Recipes a user cooked from scanned ingredients (most recent few kept)."""
    __tablename__ = "meal_history"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(index=True)
    ingredients: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    recipes: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    waste_reduced_kg: float = Field(default=0.0, ge=0)
    created_at: datetime = Field(default_factory=utcnow, index=True)


class MealHistoryCreate(SQLModel):
    user_id: str = Field(min_length=1)
    ingredients: List[str] = Field(default_factory=list)
    recipes: List[str] = Field(default_factory=list)
    waste_reduced_kg: float = Field(default=0.0, ge=0)


class MealHistoryRead(SQLModel):
    id: str
    user_id: str
    ingredients: List[str]
    recipes: List[str]
    waste_reduced_kg: float
    created_at: datetime
