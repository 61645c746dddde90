from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from foodshare.core.database import get_session
from foodshare.models.listings import FoodListingWithRestaurant
from foodshare.models.restaurants import RestaurantCreate, RestaurantRead, RestaurantUpdate
from foodshare.schemas import RestaurantStats
from foodshare.services import listings as listing_service

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.post("", response_model=RestaurantRead, status_code=status.HTTP_201_CREATED)
def create_restaurant(payload: RestaurantCreate, session: Session = Depends(get_session)):
    return listing_service.create_restaurant(session, payload)


@router.get("", response_model=List[RestaurantRead], summary="Verified restaurants")
def list_restaurants(session: Session = Depends(get_session)):
    return listing_service.list_verified_restaurants(session)


@router.get("/by-admin/{admin_id}", response_model=List[RestaurantRead])
def list_by_admin(admin_id: str, session: Session = Depends(get_session)):
    return listing_service.list_restaurants_by_admin(session, admin_id)


@router.get("/by-admin/{admin_id}/stats", response_model=RestaurantStats)
def admin_stats(admin_id: str, session: Session = Depends(get_session)):
    return listing_service.restaurant_stats(session, admin_id)


@router.get("/{restaurant_id}", response_model=RestaurantRead)
def get_restaurant(restaurant_id: str, session: Session = Depends(get_session)):
    return listing_service.get_restaurant(session, restaurant_id)


@router.patch("/{restaurant_id}", response_model=RestaurantRead)
def update_restaurant(
    restaurant_id: str,
    payload: RestaurantUpdate,
    session: Session = Depends(get_session),
):
    return listing_service.update_restaurant(session, restaurant_id, payload)


@router.post("/{restaurant_id}/verify", response_model=RestaurantRead)
def verify_restaurant(
    restaurant_id: str,
    verified: bool = Query(True),
    session: Session = Depends(get_session),
):
    return listing_service.set_restaurant_verified(session, restaurant_id, verified)


@router.get(
    "/{restaurant_id}/listings",
    response_model=List[FoodListingWithRestaurant],
    summary="All listings of one restaurant, claimed or not",
)
def restaurant_listings(restaurant_id: str, session: Session = Depends(get_session)):
    listing_service.get_restaurant(session, restaurant_id)
    return listing_service.list_by_restaurant(session, restaurant_id)
