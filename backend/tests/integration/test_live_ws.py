from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from foodshare.services import listings as listing_service
from foodshare.services.feed import LISTINGS, RESTAURANTS
from foodshare.utils.clock import utcnow


def _listing_payload(restaurant_id, food_item="Sourdough loaves"):
    now = utcnow()
    return {
        "restaurant_id": restaurant_id,
        "food_item": food_item,
        "quantity": "8 loaves",
        "pickup_start_time": (now + timedelta(hours=1)).isoformat(),
        "pickup_end_time": (now + timedelta(hours=4)).isoformat(),
    }


def test_available_feed_pushes_snapshot_after_insert_and_claim(test_app, make_listing, restaurant, change_feed):
    existing = make_listing("Vegetable lasagna")

    with TestClient(test_app) as http:
        with http.websocket_connect("/ws/listings") as ws:
            first = ws.receive_json()
            assert first["sequence"] == 1
            assert [l["id"] for l in first["listings"]] == [existing.id]

            created = http.post("/listings", json=_listing_payload(restaurant.id))
            assert created.status_code == 201

            second = ws.receive_json()
            assert second["sequence"] == 2
            assert {l["id"] for l in second["listings"]} == {existing.id, created.json()["id"]}

            claimed = http.post(f"/listings/{existing.id}/claim", json={"user_id": "u1"})
            assert claimed.status_code == 201

            third = ws.receive_json()
            assert [l["id"] for l in third["listings"]] == [created.json()["id"]]

    # Subscriptions are dropped once the socket is gone
    assert change_feed.subscriber_count(LISTINGS) == 0


def test_restaurant_feed_keeps_claimed_listings(test_app, make_listing, restaurant):
    listing = make_listing("Falafel wraps")

    with TestClient(test_app) as http:
        with http.websocket_connect(f"/ws/restaurants/{restaurant.id}/listings") as ws:
            assert [l["id"] for l in ws.receive_json()["listings"]] == [listing.id]

            http.post(f"/listings/{listing.id}/claim", json={"user_id": "u1"})
            update = ws.receive_json()
            assert update["listings"][0]["is_claimed"] is True
            assert update["listings"][0]["restaurant"]["id"] == restaurant.id


def test_failed_first_snapshot_unsubscribes(test_app, change_feed, monkeypatch):
    def broken_list_available(session, now=None):
        raise RuntimeError("listing query failed")

    monkeypatch.setattr(listing_service, "list_available", broken_list_available)

    with TestClient(test_app) as http:
        with pytest.raises(RuntimeError):
            with http.websocket_connect("/ws/listings") as ws:
                ws.receive_json()

    assert change_feed.subscriber_count(LISTINGS) == 0
    assert change_feed.subscriber_count(RESTAURANTS) == 0
