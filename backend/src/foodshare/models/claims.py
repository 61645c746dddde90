from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from foodshare.utils.clock import utcnow

from .listings import FoodListingWithRestaurant
from .users import new_id


class Claim(SQLModel, table=True):
    __tablename__ = "claims"

    id: str = Field(default_factory=new_id, primary_key=True)
    food_listing_id: str = Field(foreign_key="food_listings.id", index=True)
    user_id: str = Field(index=True)
    claimed_at: datetime = Field(default_factory=utcnow, index=True)
    pickup_completed: bool = False
    pickup_completed_at: Optional[datetime] = None
    notes: Optional[str] = None


class ClaimRead(SQLModel):
    id: str
    food_listing_id: str
    user_id: str
    claimed_at: datetime
    pickup_completed: bool
    pickup_completed_at: Optional[datetime] = None
    notes: Optional[str] = None


class ClaimRequest(SQLModel):
    user_id: str = Field(min_length=1)


class ClaimWithListing(ClaimRead):
    food_listing: FoodListingWithRestaurant
