"""Claiming food listings.

A listing goes ``available -> claimed`` exactly once. The only concurrency
guard is the conditional UPDATE (``... WHERE id = ? AND is_claimed = false``):
the database serializes writers to the row, and whoever updates zero rows
lost the race. The claim row is written afterwards in its own commit; if that
insert fails the listing is reverted with a best-effort write that is logged
and never retried.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from foodshare.core.errors import AlreadyClaimed, NotFound, PersistenceError, RaceLost
from foodshare.models.claims import Claim, ClaimWithListing
from foodshare.models.listings import FoodListing
from foodshare.models.restaurants import Restaurant
from foodshare.utils.clock import utcnow
from foodshare.utils.validators import require_text

from .feed import CLAIMS, LISTINGS, ChangeFeed, get_feed
from .listings import with_restaurant

logger = logging.getLogger(__name__)


def _load_listing(session: Session, listing_id: str) -> Optional[FoodListing]:
    return session.get(FoodListing, listing_id)


def _insert_claim(session: Session, listing_id: str, user_id: str, claimed_at: datetime) -> Claim:
    claim = Claim(food_listing_id=listing_id, user_id=user_id, claimed_at=claimed_at)
    session.add(claim)
    session.commit()
    session.refresh(claim)
    return claim


def _revert_claim(session: Session, listing_id: str) -> None:
    try:
        session.execute(
            update(FoodListing)
            .where(FoodListing.id == listing_id)
            .values(is_claimed=False, claimed_by_user_id=None, claimed_at=None, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.warning(
            "Could not revert listing %s after failed claim insert; it stays claimed without a claim row",
            listing_id,
            exc_info=True,
        )


def claim_listing(
    session: Session,
    listing_id: str,
    user_id: str,
    feed: Optional[ChangeFeed] = None,
) -> Tuple[FoodListing, Claim]:
    user_id = require_text(user_id, "user_id")

    listing = _load_listing(session, listing_id)
    if listing is None:
        raise NotFound("Food listing not found")
    if listing.is_claimed:
        raise AlreadyClaimed()

    now = utcnow()
    try:
        result = session.execute(
            update(FoodListing)
            .where(FoodListing.id == listing_id, FoodListing.is_claimed == False)  # noqa: E712
            .values(is_claimed=True, claimed_by_user_id=user_id, claimed_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            session.rollback()
            raise RaceLost()
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError("Failed to claim food listing") from e

    try:
        claim = _insert_claim(session, listing_id, user_id, now)
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning("Claim insert failed for listing %s, reverting: %s", listing_id, e)
        _revert_claim(session, listing_id)
        raise PersistenceError("Failed to create claim record") from e

    updated = session.get(FoodListing, listing_id)
    session.refresh(updated)
    logger.info("Listing %s claimed by %s (claim %s)", listing_id, user_id, claim.id)

    feed = feed or get_feed()
    feed.publish(LISTINGS, "update", listing_id)
    feed.publish(CLAIMS, "insert", claim.id)
    return updated, claim


def mark_pickup_completed(
    session: Session,
    claim_id: str,
    feed: Optional[ChangeFeed] = None,
) -> Claim:
    """Unconditional; calling it again only moves the completion timestamp."""
    claim = session.get(Claim, claim_id)
    if claim is None:
        raise NotFound("Claim not found")
    claim.pickup_completed = True
    claim.pickup_completed_at = utcnow()
    try:
        session.add(claim)
        session.commit()
        session.refresh(claim)
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError("Failed to mark pickup completed") from e
    (feed or get_feed()).publish(CLAIMS, "update", claim.id)
    return claim


def list_user_claims(session: Session, user_id: str) -> List[ClaimWithListing]:
    stmt = (
        select(Claim, FoodListing, Restaurant)
        .join(FoodListing, FoodListing.id == Claim.food_listing_id)
        .join(Restaurant, Restaurant.id == FoodListing.restaurant_id)
        .where(Claim.user_id == user_id)
        .order_by(Claim.claimed_at.desc())
    )
    return [
        ClaimWithListing.model_validate(
            {**claim.model_dump(), "food_listing": with_restaurant(listing, restaurant)}
        )
        for claim, listing, restaurant in session.exec(stmt).all()
    ]
