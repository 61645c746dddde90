from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from foodshare.core.config import get_settings
from foodshare.core.database import get_session
from foodshare.models.history import MealHistoryCreate, MealHistoryRead
from foodshare.services import history as history_service

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.post("/history", response_model=MealHistoryRead, status_code=status.HTTP_201_CREATED)
def add_history(payload: MealHistoryCreate, session: Session = Depends(get_session)):
    return history_service.add_meal(session, payload, keep=get_settings().meal_history_limit)


@router.get("/history", response_model=List[MealHistoryRead])
def list_history(user_id: str = Query(..., min_length=1), session: Session = Depends(get_session)):
    return history_service.list_meals(session, user_id, limit=get_settings().meal_history_limit)
