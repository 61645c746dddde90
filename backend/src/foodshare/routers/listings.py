from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlmodel import Session

from foodshare.core.config import get_settings
from foodshare.core.database import get_session
from foodshare.models.claims import ClaimRead, ClaimRequest
from foodshare.models.listings import (
    FoodListingCreate,
    FoodListingRead,
    FoodListingWithRestaurant,
)
from foodshare.schemas import FoodSharingStats, NearbyQuery, NearbyResponse
from foodshare.services import claims as claim_service
from foodshare.services import listings as listing_service

router = APIRouter(prefix="/listings", tags=["listings"])


class ClaimResponse(BaseModel):
    listing: FoodListingRead
    claim: ClaimRead


@router.post("", response_model=FoodListingRead, status_code=status.HTTP_201_CREATED)
def create_listing(payload: FoodListingCreate, session: Session = Depends(get_session)):
    return listing_service.create_listing(session, payload)


@router.get(
    "",
    response_model=List[FoodListingWithRestaurant],
    summary="Unclaimed listings whose pickup window has not ended",
)
def list_available(session: Session = Depends(get_session)):
    return listing_service.list_available(session)


@router.get("/search", response_model=List[FoodListingWithRestaurant])
def search(q: str = Query("", description="Matches food item or description"),
           session: Session = Depends(get_session)):
    return listing_service.search_listings(session, q)


@router.get("/near", response_model=NearbyResponse)
def near(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius_km: Optional[float] = Query(default=None, gt=0),
    session: Session = Depends(get_session),
):
    radius = radius_km or get_settings().default_radius_km
    items = listing_service.listings_near(session, lat, lon, radius)
    return NearbyResponse(
        query=NearbyQuery(latitude=lat, longitude=lon, radius_km=radius),
        listings=items,
    )


@router.get("/stats", response_model=FoodSharingStats)
def stats(session: Session = Depends(get_session)):
    return listing_service.food_sharing_stats(session)


@router.get("/{listing_id}", response_model=FoodListingWithRestaurant)
def get_listing(listing_id: str, session: Session = Depends(get_session)):
    return listing_service.get_listing(session, listing_id)


@router.post("/{listing_id}/claim", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
def claim(listing_id: str, payload: ClaimRequest, session: Session = Depends(get_session)):
    """Claim a listing for a user. 409 if it was already claimed or another claim won the race."""
    listing, claim_row = claim_service.claim_listing(session, listing_id, payload.user_id)
    return ClaimResponse(
        listing=FoodListingRead.model_validate(listing),
        claim=ClaimRead.model_validate(claim_row),
    )
