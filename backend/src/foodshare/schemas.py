from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from foodshare.models.listings import FoodListingWithRestaurant
from foodshare.models.users import UserRole


class FoodSharingStats(BaseModel):
    total_listings: int = 0
    available_listings: int = 0
    claimed_listings: int = 0
    total_claims: int = 0
    this_month_claims: int = 0
    active_restaurants: int = 0


class RestaurantStats(BaseModel):
    total_listings: int = 0
    active_listings: int = 0
    claimed_listings: int = 0
    total_restaurants: int = 0


class ProfileStats(BaseModel):
    claims_total: int = 0
    pickups_completed: int = 0
    restaurants_owned: int = 0
    listings_posted: int = 0


class RegisteredProfile(BaseModel):
    kind: Literal["registered"] = "registered"
    id: str
    username: str
    role: UserRole
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    stats: ProfileStats


class DemoStats(BaseModel):
    food_saved_kg: Optional[float] = None
    recipes_generated: Optional[int] = None
    donations_received: Optional[int] = None
    donations_made: Optional[int] = None


class DemoProfile(BaseModel):
    kind: Literal["demo"] = "demo"
    id: str
    name: str
    role: UserRole
    avatar: str
    stats: DemoStats = DemoStats()


class ProfileResponse(BaseModel):
    profile: Union[RegisteredProfile, DemoProfile] = Field(..., discriminator="kind")


class NearbyQuery(BaseModel):
    latitude: float
    longitude: float
    radius_km: float


class NearbyResponse(BaseModel):
    query: NearbyQuery
    listings: List[FoodListingWithRestaurant]

