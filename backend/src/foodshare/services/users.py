from __future__ import annotations

from typing import Dict, Union

from sqlalchemy import func
from sqlmodel import Session, select

from foodshare.core.errors import InvalidInput, NotFound
from foodshare.models.claims import Claim
from foodshare.models.listings import FoodListing
from foodshare.models.restaurants import Restaurant
from foodshare.models.users import User, UserCreate, UserRole, UserUpdate
from foodshare.schemas import DemoProfile, DemoStats, ProfileStats, RegisteredProfile
from foodshare.utils.clock import utcnow
from foodshare.utils.validators import require_text

from .listings import _commit

# Showcase accounts for the landing page; never stored.
DEMO_PROFILES: Dict[str, DemoProfile] = {
    p.id: p
    for p in (
        DemoProfile(
            id="demo-1",
            name="Sarah Chen",
            role=UserRole.user,
            avatar="👩‍🍳",
            stats=DemoStats(food_saved_kg=12.5, recipes_generated=45, donations_received=8),
        ),
        DemoProfile(
            id="demo-2",
            name="Green Garden Cafe",
            role=UserRole.restaurant_admin,
            avatar="🌱",
            stats=DemoStats(donations_made=23, food_saved_kg=156.7),
        ),
        DemoProfile(
            id="demo-3",
            name="Mike Johnson",
            role=UserRole.user,
            avatar="👨‍💼",
            stats=DemoStats(food_saved_kg=8.2, recipes_generated=32, donations_received=5),
        ),
    )
}


def create_user(session: Session, data: UserCreate) -> User:
    username = require_text(data.username, "Username")
    if session.exec(select(User).where(User.username == username)).first():
        raise InvalidInput(f"Username '{username}' is already taken")
    if data.id and session.get(User, data.id):
        raise InvalidInput(f"User '{data.id}' already exists")
    payload = data.model_dump(exclude_none=True)
    payload["username"] = username
    return _commit(session, User(**payload))


def get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound(f"User '{user_id}' not found")
    return user


def update_user(session: Session, user_id: str, patch: UserUpdate) -> User:
    user = get_user(session, user_id)
    data = patch.model_dump(exclude_unset=True)
    if "username" in data:
        username = data["username"] = require_text(data["username"], "Username")
        taken = session.exec(
            select(User).where(User.username == username, User.id != user_id)
        ).first()
        if taken:
            raise InvalidInput(f"Username '{username}' is already taken")
    for k, v in data.items():
        setattr(user, k, v)
    user.updated_at = utcnow()
    return _commit(session, user)


def _count(session: Session, stmt) -> int:
    return int(session.exec(stmt).one())


def profile_stats(session: Session, user: User) -> ProfileStats:
    restaurant_ids = select(Restaurant.id).where(Restaurant.restaurant_admin_id == user.id)
    return ProfileStats(
        claims_total=_count(session, select(func.count()).select_from(Claim).where(Claim.user_id == user.id)),
        pickups_completed=_count(
            session,
            select(func.count())
            .select_from(Claim)
            .where(Claim.user_id == user.id, Claim.pickup_completed == True),  # noqa: E712
        ),
        restaurants_owned=_count(
            session,
            select(func.count()).select_from(Restaurant).where(Restaurant.restaurant_admin_id == user.id),
        ),
        listings_posted=_count(
            session,
            select(func.count()).select_from(FoodListing).where(FoodListing.restaurant_id.in_(restaurant_ids)),
        ),
    )


def get_profile(session: Session, user_id: str) -> Union[RegisteredProfile, DemoProfile]:
    user = session.get(User, user_id)
    if user is not None:
        return RegisteredProfile(
            id=user.id,
            username=user.username,
            role=user.role,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            stats=profile_stats(session, user),
        )
    if user_id in DEMO_PROFILES:
        return DEMO_PROFILES[user_id]
    raise NotFound(f"Profile '{user_id}' not found")
