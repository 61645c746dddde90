from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from foodshare.core.database import get_session
from foodshare.models.claims import ClaimWithListing
from foodshare.models.users import UserCreate, UserRead, UserUpdate
from foodshare.schemas import ProfileResponse
from foodshare.services import claims as claim_service
from foodshare.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, session: Session = Depends(get_session)):
    return user_service.create_user(session, payload)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, session: Session = Depends(get_session)):
    return user_service.get_user(session, user_id)


@router.patch("/{user_id}", response_model=UserRead, summary="Update own profile fields")
def update_user(user_id: str, payload: UserUpdate, session: Session = Depends(get_session)):
    return user_service.update_user(session, user_id, payload)


@router.get("/{user_id}/profile", response_model=ProfileResponse)
def get_profile(user_id: str, session: Session = Depends(get_session)):
    """Registered users get live claim stats; demo ids resolve to the showcase profiles."""
    return ProfileResponse(profile=user_service.get_profile(session, user_id))


@router.get("/{user_id}/claims", response_model=List[ClaimWithListing])
def list_claims(user_id: str, session: Session = Depends(get_session)):
    return claim_service.list_user_claims(session, user_id)
