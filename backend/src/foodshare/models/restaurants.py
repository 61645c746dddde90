from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from foodshare.utils.clock import utcnow

from .users import new_id


class RestaurantBase(SQLModel):
    name: str
    address: str
    latitude: float
    longitude: float
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    description: Optional[str] = None


class Restaurant(RestaurantBase, table=True):
    __tablename__ = "restaurants"

    id: str = Field(default_factory=new_id, primary_key=True)
    restaurant_admin_id: str = Field(foreign_key="users.id", index=True)
    is_verified: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class RestaurantCreate(RestaurantBase):
    restaurant_admin_id: str


class RestaurantRead(RestaurantBase):
    id: str
    restaurant_admin_id: str
    is_verified: bool
    created_at: datetime
    updated_at: datetime


class RestaurantUpdate(SQLModel):
    name: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    description: Optional[str] = None
