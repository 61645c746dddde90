from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import Field, SQLModel

from foodshare.utils.clock import utcnow


def new_id() -> str:
    return str(uuid4())


class UserRole(str, Enum):
    user = "user"
    restaurant_admin = "restaurant_admin"


class UserBase(SQLModel):
    username: str = Field(index=True, unique=True, min_length=1)
    role: UserRole = UserRole.user
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None


class User(UserBase, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class UserCreate(UserBase):
    # Identity comes from the auth provider; generated when absent.
    id: Optional[str] = None


class UserRead(UserBase):
    id: str
    created_at: datetime
    updated_at: datetime


class UserUpdate(SQLModel):
    username: Optional[str] = None
    role: Optional[UserRole] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
