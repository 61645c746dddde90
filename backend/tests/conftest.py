import tempfile
from contextlib import suppress
from datetime import timedelta
from pathlib import Path
from typing import AsyncIterator, Iterator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlmodel import Session, SQLModel, create_engine

from foodshare.core import database as core_database
from foodshare.core.database import get_session, get_session_factory
from foodshare.main import create_app
from foodshare.models.listings import FoodListing
from foodshare.models.restaurants import Restaurant
from foodshare.models.users import User, UserRole
from foodshare.services import feed as feed_module
from foodshare.utils.clock import utcnow


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def change_feed(monkeypatch) -> feed_module.ChangeFeed:
    # Fresh subscriber registry per test.
    feed = feed_module.ChangeFeed()
    monkeypatch.setattr(feed_module, "_feed", feed)
    return feed


@pytest.fixture(scope="function")
def test_app(monkeypatch) -> Iterator[FastAPI]:
    # Use a fresh SQLite DB file in a temp dir per test for isolation
    tmp = tempfile.TemporaryDirectory()
    db_path = Path(tmp.name) / "test.db"
    db_url = f"sqlite:///{db_path}"

    engine = create_engine(db_url, connect_args={"check_same_thread": False})

    # Initialize tables
    from foodshare import models  # noqa: F401
    SQLModel.metadata.create_all(engine)

    def _override_get_session():
        with Session(engine) as session:
            yield session

    def _override_session_factory():
        return lambda: Session(engine)

    # patch global engine/init_db so startup hooks operate on the test database
    monkeypatch.setattr(core_database, "engine", engine, raising=False)

    def _init_db():
        SQLModel.metadata.create_all(engine)

    monkeypatch.setattr(core_database, "init_db", _init_db, raising=False)

    app = create_app()
    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_session_factory] = _override_session_factory

    try:
        yield app
    finally:
        app.dependency_overrides.clear()
        with suppress(Exception):
            engine.dispose()
        tmp.cleanup()


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def db_session(test_app: FastAPI):
    override = test_app.dependency_overrides[get_session]
    generator = override()
    session = next(generator)
    try:
        yield session
    finally:
        with suppress(StopIteration):
            next(generator)


@pytest.fixture
def admin(db_session) -> User:
    user = User(username="green_garden", role=UserRole.restaurant_admin, full_name="Green Garden Cafe")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def restaurant(db_session, admin) -> Restaurant:
    # Manhattan, next to City Hall
    row = Restaurant(
        name="Green Garden Cafe",
        address="1 Centre St, New York",
        latitude=40.7128,
        longitude=-74.0060,
        restaurant_admin_id=admin.id,
        is_verified=True,
    )
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture
def make_listing(db_session, restaurant):
    """Insert listings directly, bypassing the future-start validation."""

    def _make(food_item="Vegetable lasagna", start_in_h=1, end_in_h=3, **overrides):
        now = utcnow()
        data = dict(
            restaurant_id=restaurant.id,
            food_item=food_item,
            quantity="6 portions",
            pickup_start_time=now + timedelta(hours=start_in_h),
            pickup_end_time=now + timedelta(hours=end_in_h),
            dietary_info=["vegetarian"],
        )
        data.update(overrides)
        listing = FoodListing(**data)
        db_session.add(listing)
        db_session.commit()
        db_session.refresh(listing)
        return listing

    return _make
