from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from foodshare.utils.clock import utcnow

from .restaurants import RestaurantRead
from .users import new_id


class FoodListingBase(SQLModel):
    food_item: str
    description: Optional[str] = None
    quantity: str = Field(description="Free text, e.g. '5 portions'")
    pickup_start_time: datetime
    pickup_end_time: datetime
    dietary_info: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None


class FoodListing(FoodListingBase, table=True):
    __tablename__ = "food_listings"

    id: str = Field(default_factory=new_id, primary_key=True)
    restaurant_id: str = Field(foreign_key="restaurants.id", index=True)
    dietary_info: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=True)
    )
    pickup_start_time: datetime = Field(index=True)
    pickup_end_time: datetime = Field(index=True)
    is_claimed: bool = Field(default=False, index=True)
    claimed_by_user_id: Optional[str] = Field(default=None, index=True)
    claimed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)


class FoodListingCreate(FoodListingBase):
    restaurant_id: str


class FoodListingRead(FoodListingBase):
    id: str
    restaurant_id: str
    is_claimed: bool
    claimed_by_user_id: Optional[str] = None
    claimed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class FoodListingWithRestaurant(FoodListingRead):
    restaurant: RestaurantRead
    distance_km: Optional[float] = None
    distance_label: Optional[str] = None
