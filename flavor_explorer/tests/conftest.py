from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from flavor_explorer.api_client.foods_client import FoodsClient  # noqa: E402
from flavor_explorer.app import app  # noqa: E402
from flavor_explorer.catalog.config import CatalogConfig  # noqa: E402

FAST_CONFIG = CatalogConfig(debounce_seconds=0.02)

_CUISINES = ["Indian", "Italian", "Thai", "Mexican"]


def make_foods(count: int) -> list[dict]:
    foods = [
        {
            "name": f"Dish {i:02d}",
            "cuisine": _CUISINES[i % len(_CUISINES)],
            "rating": round(4.0 + (i * 0.3) % 6, 1),
            "price": 6.5 + i,
            "imageUrl": f"https://images.example/dish-{i}.jpg",
        }
        for i in range(count - 1)
    ]
    foods.append({
        "name": "Pad Thai",
        "cuisine": "Thai",
        "rating": 7.2,
        "price": 11.0,
        "imageUrl": "https://images.example/pad-thai.jpg",
    })
    return foods


class FakeFoodService:
    """In-memory stand-in for the remote food API."""

    def __init__(self, foods: list[dict]) -> None:
        self.foods = [dict(f) for f in foods]
        self.requests: list[httpx.Request] = []
        self.down = False

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def _ranked(self) -> list[dict]:
        return sorted(self.foods, key=lambda f: f["rating"], reverse=True)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        params = request.url.params
        if path == "/api/foods/leaderboard":
            return httpx.Response(200, json=self._ranked()[:5])

        if path == "/api/foods":
            items = self._ranked()
            if params.get("sort") == "price":
                items = sorted(self.foods, key=lambda f: f["price"])
            cuisine = params.get("cuisine", "").lower()
            if cuisine:
                items = [f for f in items if f["cuisine"].lower().startswith(cuisine)]
            search = params.get("search", "").lower()
            if search:
                items = [f for f in items if search in f["name"].lower()]
            offset = int(params.get("offset", "0"))
            limit = int(params.get("limit", "15"))
            return httpx.Response(200, json=items[offset:offset + limit])

        if path == "/api/foods/update-rating" and request.method == "POST":
            name = params.get("name")
            for food in self.foods:
                if food["name"] == name:
                    food["rating"] = float(params["rating"])
                    return httpx.Response(200, text=f"Rating for {name} updated")
            return httpx.Response(200, text=f"Food {name} not found")

        return httpx.Response(404, text=json.dumps({"detail": "Not Found"}))


@pytest.fixture
def food_service() -> FakeFoodService:
    return FakeFoodService(make_foods(20))


@pytest.fixture
def foods_client(food_service: FakeFoodService) -> FoodsClient:
    return FoodsClient(transport=food_service.transport())


@pytest.fixture
def app_client(foods_client: FoodsClient):
    with patch("flavor_explorer.app.foods_client", foods_client), \
            patch("flavor_explorer.app.catalog_config", FAST_CONFIG):
        with TestClient(app) as client:
            yield client
