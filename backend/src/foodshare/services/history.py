from __future__ import annotations

from typing import List

from sqlmodel import Session, select

from foodshare.models.history import MealHistory, MealHistoryCreate
from foodshare.utils.validators import require_text

from .listings import _commit


def add_meal(session: Session, data: MealHistoryCreate, keep: int = 10) -> MealHistory:
    """Record a cooked meal and drop everything beyond the newest ``keep`` entries."""
    user_id = require_text(data.user_id, "user_id")
    entry = MealHistory(
        user_id=user_id,
        ingredients=[i.strip() for i in data.ingredients if i and i.strip()],
        recipes=[r.strip() for r in data.recipes if r and r.strip()],
        waste_reduced_kg=data.waste_reduced_kg,
    )
    entry = _commit(session, entry)

    stale = session.exec(
        select(MealHistory)
        .where(MealHistory.user_id == user_id)
        .order_by(MealHistory.created_at.desc(), MealHistory.id.desc())
        .offset(keep)
    ).all()
    if stale:
        for row in stale:
            session.delete(row)
        session.commit()
    return entry


def list_meals(session: Session, user_id: str, limit: int = 10) -> List[MealHistory]:
    stmt = (
        select(MealHistory)
        .where(MealHistory.user_id == user_id)
        .order_by(MealHistory.created_at.desc(), MealHistory.id.desc())
        .limit(limit)
    )
    return list(session.exec(stmt).all())
