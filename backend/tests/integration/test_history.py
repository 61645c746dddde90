import pytest

from foodshare.models.history import MealHistoryCreate
from foodshare.services import history as history_service


def test_history_keeps_newest_entries(db_session):
    for i in range(12):
        history_service.add_meal(
            db_session,
            MealHistoryCreate(user_id="u1", ingredients=["rice"], recipes=[f"Fried rice #{i}"]),
            keep=10,
        )
    history_service.add_meal(db_session, MealHistoryCreate(user_id="u2", recipes=["Soup"]), keep=10)

    meals = history_service.list_meals(db_session, "u1", limit=50)
    assert len(meals) == 10
    assert meals[0].recipes == ["Fried rice #11"]
    assert meals[-1].recipes == ["Fried rice #2"]
    assert len(history_service.list_meals(db_session, "u2")) == 1


@pytest.mark.asyncio
async def test_history_endpoints(client):
    resp = await client.post(
        "/recipes/history",
        json={
            "user_id": "u1",
            "ingredients": [" eggs ", "spinach", ""],
            "recipes": ["Frittata"],
            "waste_reduced_kg": 0.4,
        },
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["ingredients"] == ["eggs", "spinach"]

    listed = await client.get("/recipes/history", params={"user_id": "u1"})
    assert listed.status_code == 200
    assert [m["recipes"] for m in listed.json()] == [["Frittata"]]

    assert (await client.get("/recipes/history", params={"user_id": "nobody"})).json() == []


@pytest.mark.asyncio
async def test_history_rejects_negative_waste(client):
    resp = await client.post("/recipes/history", json={"user_id": "u1", "waste_reduced_kg": -1})
    assert resp.status_code == 422
