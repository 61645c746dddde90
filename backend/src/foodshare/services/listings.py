"""Restaurants and food listings: writes, discovery queries, counters."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, select

from foodshare.core.errors import InvalidInput, NotFound, PersistenceError
from foodshare.models.claims import Claim
from foodshare.models.listings import (
    FoodListing,
    FoodListingCreate,
    FoodListingWithRestaurant,
)
from foodshare.models.restaurants import Restaurant, RestaurantCreate, RestaurantUpdate
from foodshare.models.users import User, UserRole
from foodshare.schemas import FoodSharingStats, RestaurantStats
from foodshare.utils.clock import utcnow
from foodshare.utils.geo import filter_within_radius, format_distance, sort_by_distance
from foodshare.utils.validators import (
    require_text,
    validate_coordinates,
    validate_pickup_window,
    validate_radius,
)

from .feed import LISTINGS, RESTAURANTS, ChangeFeed, get_feed

logger = logging.getLogger(__name__)


def _commit(session: Session, row):
    """Commit one row; storage errors roll back and surface as PersistenceError."""
    try:
        session.add(row)
        session.commit()
        session.refresh(row)
        return row
    except IntegrityError as e:
        session.rollback()
        raise PersistenceError(f"Constraint error: {e.orig}") from e
    except OperationalError as e:
        session.rollback()
        raise PersistenceError(f"DB error: {e.orig}") from e


def with_restaurant(
    listing: FoodListing,
    restaurant: Restaurant,
    distance_km: Optional[float] = None,
) -> FoodListingWithRestaurant:
    return FoodListingWithRestaurant.model_validate(
        {
            **listing.model_dump(),
            "dietary_info": listing.dietary_info or [],
            "restaurant": restaurant.model_dump(),
            "distance_km": None if distance_km is None else round(distance_km, 3),
            "distance_label": None if distance_km is None else format_distance(distance_km),
        }
    )


def _listings_with_restaurants():
    return select(FoodListing, Restaurant).join(
        Restaurant, Restaurant.id == FoodListing.restaurant_id
    )


def _available(stmt, now: datetime):
    return stmt.where(
        FoodListing.is_claimed == False,  # noqa: E712
        FoodListing.pickup_end_time >= now,
    )


def _newest_first(stmt):
    return stmt.order_by(FoodListing.created_at.desc(), FoodListing.id.desc())


# ----------------------------
# Restaurants
# ----------------------------

def create_restaurant(
    session: Session,
    data: RestaurantCreate,
    feed: Optional[ChangeFeed] = None,
) -> Restaurant:
    owner = session.get(User, data.restaurant_admin_id)
    if not owner:
        raise NotFound(f"User '{data.restaurant_admin_id}' not found")
    if owner.role != UserRole.restaurant_admin:
        raise InvalidInput("Only restaurant admins can own restaurants")
    name = require_text(data.name, "Restaurant name")
    address = require_text(data.address, "Address")
    validate_coordinates(data.latitude, data.longitude)
    payload = data.model_dump()
    payload.update(name=name, address=address)
    restaurant = _commit(session, Restaurant(**payload))
    (feed or get_feed()).publish(RESTAURANTS, "insert", restaurant.id)
    return restaurant


def get_restaurant(session: Session, restaurant_id: str) -> Restaurant:
    restaurant = session.get(Restaurant, restaurant_id)
    if not restaurant:
        raise NotFound(f"Restaurant '{restaurant_id}' not found")
    return restaurant


def update_restaurant(
    session: Session,
    restaurant_id: str,
    patch: RestaurantUpdate,
    feed: Optional[ChangeFeed] = None,
) -> Restaurant:
    restaurant = get_restaurant(session, restaurant_id)
    data = patch.model_dump(exclude_unset=True)
    for key in ("name", "address"):
        if key in data:
            data[key] = require_text(data[key], key.capitalize())
    validate_coordinates(
        data.get("latitude", restaurant.latitude),
        data.get("longitude", restaurant.longitude),
    )
    for k, v in data.items():
        setattr(restaurant, k, v)
    restaurant.updated_at = utcnow()
    restaurant = _commit(session, restaurant)
    (feed or get_feed()).publish(RESTAURANTS, "update", restaurant.id)
    return restaurant


def set_restaurant_verified(
    session: Session,
    restaurant_id: str,
    verified: bool = True,
    feed: Optional[ChangeFeed] = None,
) -> Restaurant:
    restaurant = get_restaurant(session, restaurant_id)
    restaurant.is_verified = verified
    restaurant.updated_at = utcnow()
    restaurant = _commit(session, restaurant)
    (feed or get_feed()).publish(RESTAURANTS, "update", restaurant.id)
    return restaurant


def list_restaurants_by_admin(session: Session, admin_id: str) -> List[Restaurant]:
    stmt = (
        select(Restaurant)
        .where(Restaurant.restaurant_admin_id == admin_id)
        .order_by(Restaurant.created_at.asc())
    )
    return list(session.exec(stmt).all())


def list_verified_restaurants(session: Session) -> List[Restaurant]:
    stmt = (
        select(Restaurant)
        .where(Restaurant.is_verified == True)  # noqa: E712
        .order_by(Restaurant.name.asc())
    )
    return list(session.exec(stmt).all())


# ----------------------------
# Food listings
# ----------------------------

def create_listing(
    session: Session,
    data: FoodListingCreate,
    now: Optional[datetime] = None,
    feed: Optional[ChangeFeed] = None,
) -> FoodListing:
    get_restaurant(session, data.restaurant_id)
    food_item = require_text(data.food_item, "Food item")
    quantity = require_text(data.quantity, "Quantity")
    start, end = validate_pickup_window(data.pickup_start_time, data.pickup_end_time, now)

    payload = data.model_dump()
    payload.update(
        food_item=food_item,
        quantity=quantity,
        pickup_start_time=start,
        pickup_end_time=end,
        dietary_info=sorted({t.strip() for t in data.dietary_info if t and t.strip()}),
    )
    listing = _commit(session, FoodListing(**payload))
    logger.info("Listing %s created for restaurant %s", listing.id, listing.restaurant_id)
    (feed or get_feed()).publish(LISTINGS, "insert", listing.id)
    return listing


def get_listing(session: Session, listing_id: str) -> FoodListingWithRestaurant:
    row = session.exec(
        _listings_with_restaurants().where(FoodListing.id == listing_id)
    ).first()
    if not row:
        raise NotFound(f"Food listing '{listing_id}' not found")
    listing, restaurant = row
    return with_restaurant(listing, restaurant)


def list_available(
    session: Session, now: Optional[datetime] = None
) -> List[FoodListingWithRestaurant]:
    """Unclaimed listings whose pickup window has not ended, newest first."""
    stmt = _newest_first(_available(_listings_with_restaurants(), now or utcnow()))
    return [with_restaurant(l, r) for l, r in session.exec(stmt).all()]


def list_by_restaurant(session: Session, restaurant_id: str) -> List[FoodListingWithRestaurant]:
    stmt = _newest_first(
        _listings_with_restaurants().where(FoodListing.restaurant_id == restaurant_id)
    )
    return [with_restaurant(l, r) for l, r in session.exec(stmt).all()]


def search_listings(
    session: Session, query: str, now: Optional[datetime] = None
) -> List[FoodListingWithRestaurant]:
    q = (query or "").strip()
    if not q:
        return list_available(session, now)
    pattern = f"%{q}%"
    stmt = _available(_listings_with_restaurants(), now or utcnow()).where(
        or_(FoodListing.food_item.ilike(pattern), FoodListing.description.ilike(pattern))
    )
    return [with_restaurant(l, r) for l, r in session.exec(_newest_first(stmt)).all()]


def listings_near(
    session: Session,
    latitude: float,
    longitude: float,
    radius_km: float = 10.0,
    now: Optional[datetime] = None,
) -> List[FoodListingWithRestaurant]:
    """Available listings within ``radius_km`` of a point, closest first."""
    validate_coordinates(latitude, longitude)
    radius_km = validate_radius(radius_km)

    stmt = _available(_listings_with_restaurants(), now or utcnow())
    rows: List[Tuple[FoodListing, Restaurant]] = list(session.exec(stmt).all())
    def position(row: Tuple[FoodListing, Restaurant]) -> Tuple[float, float]:
        return row[1].latitude, row[1].longitude

    inside = filter_within_radius(rows, latitude, longitude, radius_km, position=position)
    nearby = sort_by_distance((row for row, _ in inside), latitude, longitude, position=position)
    return [with_restaurant(l, r, distance) for (l, r), distance in nearby]


# ----------------------------
# Counters
# ----------------------------

def _start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def food_sharing_stats(session: Session, now: Optional[datetime] = None) -> FoodSharingStats:
    now = now or utcnow()
    total = session.exec(select(func.count()).select_from(FoodListing)).one()
    claimed = session.exec(
        select(func.count()).select_from(FoodListing).where(FoodListing.is_claimed == True)  # noqa: E712
    ).one()
    total_claims = session.exec(select(func.count()).select_from(Claim)).one()
    month_claims = session.exec(
        select(func.count()).select_from(Claim).where(Claim.claimed_at >= _start_of_month(now))
    ).one()
    restaurants = session.exec(
        select(func.count()).select_from(Restaurant).where(Restaurant.is_verified == True)  # noqa: E712
    ).one()
    return FoodSharingStats(
        total_listings=int(total),
        available_listings=int(total - claimed),
        claimed_listings=int(claimed),
        total_claims=int(total_claims),
        this_month_claims=int(month_claims),
        active_restaurants=int(restaurants),
    )


def restaurant_stats(session: Session, admin_id: str) -> RestaurantStats:
    restaurant_ids = [r.id for r in list_restaurants_by_admin(session, admin_id)]
    if not restaurant_ids:
        return RestaurantStats()

    flags = session.exec(
        select(FoodListing.is_claimed).where(FoodListing.restaurant_id.in_(restaurant_ids))
    ).all()
    claimed = sum(1 for f in flags if f)
    return RestaurantStats(
        total_listings=len(flags),
        active_listings=len(flags) - claimed,
        claimed_listings=claimed,
        total_restaurants=len(restaurant_ids),
    )

