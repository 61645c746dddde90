import pytest

from foodshare.ai import GeminiClient, get_ai_client

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

RECIPE_TEXT = """Recipe Name: Tomato Basil Pasta
Preparation Time: 10 minutes
Cooking Time: 15 minutes
Servings: 2

Ingredients:
- 200g pasta
- 3 tomatoes

Instructions:
1. Boil the pasta.
2. Toss with tomatoes.

Tips:
- Save some pasta water.

Nutrition Facts:
- Calories: 450
"""


class FakeResponse:
    status_code = 200
    reason = "OK"
    text = ""

    def __init__(self, text):
        self._text = text

    def json(self):
        return {"candidates": [{"content": {"parts": [{"text": self._text}]}}]}


@pytest.fixture
def ai_calls(test_app, monkeypatch):
    calls = []
    replies = []

    def fake_post(url, params, json, timeout):
        calls.append(json)
        return FakeResponse(replies.pop(0))

    monkeypatch.setattr("foodshare.ai.client.requests.post", fake_post)
    test_app.dependency_overrides[get_ai_client] = lambda: GeminiClient(api_key="test-key")
    return calls, replies


@pytest.mark.asyncio
async def test_analyze_photo(client, ai_calls):
    calls, replies = ai_calls
    replies.append("ingredients: tomato, basil\nsuggestions: Bruschetta, Caprese salad")

    resp = await client.post("/ai/analyze", files={"file": ("fridge.png", PNG, "image/png")})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {
        "ingredients": ["tomato", "basil"],
        "confidence": 0.95,
        "suggestions": ["Bruschetta", "Caprese salad"],
        "generated_recipe": None,
    }
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_oversized_photo_is_rejected_before_any_ai_call(client, ai_calls):
    calls, _ = ai_calls
    big = b"\xff" * (10 * 1024 * 1024)

    resp = await client.post("/ai/analyze", files={"file": ("huge.jpg", big, "image/jpeg")})
    assert resp.status_code == 400
    assert "too large" in resp.json()["detail"]
    assert calls == []


@pytest.mark.asyncio
async def test_non_image_upload_is_rejected(client, ai_calls):
    calls, _ = ai_calls
    resp = await client.post("/ai/analyze", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400
    assert calls == []


@pytest.mark.asyncio
async def test_photo_without_ingredients_is_unprocessable(client, ai_calls):
    _, replies = ai_calls
    replies.append("I can only see a plate.")

    resp = await client.post("/ai/analyze", files={"file": ("plate.png", PNG, "image/png")})
    assert resp.status_code == 422
    assert resp.json()["error"] == "no_ingredients_detected"


@pytest.mark.asyncio
async def test_recipe_for_named_dish(client, ai_calls):
    calls, replies = ai_calls
    replies.append(RECIPE_TEXT)

    resp = await client.post(
        "/ai/recipe", json={"ingredients": ["dish name: Tomato Basil Pasta", "pasta", "tomato"]}
    )
    assert resp.status_code == 200, resp.text
    recipe = resp.json()["recipe"]
    assert recipe["name"] == "Tomato Basil Pasta"
    assert recipe["servings"] == "2"
    assert recipe["instructions"] == ["Boil the pasta.", "Toss with tomatoes."]

    prompt = calls[0]["contents"][0]["parts"][0]["text"]
    assert '"Tomato Basil Pasta"' in prompt
    assert "pasta, tomato" in prompt


@pytest.mark.asyncio
async def test_recipe_requires_ingredients(client, ai_calls):
    calls, _ = ai_calls
    resp = await client.post("/ai/recipe", json={"ingredients": ["  "]})
    assert resp.status_code == 400
    assert calls == []


@pytest.mark.asyncio
async def test_missing_api_key_is_bad_gateway(client, test_app, monkeypatch):
    def unexpected_post(*args, **kwargs):
        raise AssertionError("no request expected without an API key")

    monkeypatch.setattr("foodshare.ai.client.requests.post", unexpected_post)
    test_app.dependency_overrides[get_ai_client] = lambda: GeminiClient(api_key=None)

    resp = await client.post("/ai/recipe", json={"ingredients": ["rice"]})
    assert resp.status_code == 502
    assert resp.json()["error"] == "external_service_error"
