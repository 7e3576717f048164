from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from ..catalog.models import FoodItem, SortKey
from .config import DEFAULT_API_CONFIG, ApiConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FOOD_LIST = TypeAdapter(list[FoodItem])


class FailureKind(str, Enum):
    transport = "transport"
    status = "status"
    decode = "decode"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: str

    def describe(self) -> str:
        if self.kind is FailureKind.transport:
            return f"Could not reach the food service ({self.detail})"
        if self.kind is FailureKind.status:
            return f"The food service returned an error ({self.detail})"
        return f"The food service sent an unreadable response ({self.detail})"


Result = Union[Ok[T], Failure]


@dataclass(frozen=True)
class FoodQuery:
    cuisine: str = ""
    search: str = ""
    sort: SortKey = SortKey.rating
    offset: int = 0
    limit: int = 15


def build_food_params(query: FoodQuery) -> list[tuple[str, str]]:
    """Query parameters for the list endpoint, empty filters left out."""
    params: list[tuple[str, str]] = []
    if query.cuisine:
        params.append(("cuisine", query.cuisine))
    if query.search:
        params.append(("search", query.search))
    sort = SortKey(query.sort).value
    if sort:
        params.append(("sort", sort))
    params.append(("offset", str(query.offset)))
    params.append(("limit", str(query.limit)))
    return params


def format_rating(rating: float) -> str:
    """Render a rating the way a browser stringifies a number: ``9``, ``8.5``."""
    value = float(rating)
    if value.is_integer():
        return str(int(value))
    return repr(value)


class FoodsClient:
    """Async client for the remote food service.

    Every call opens a short-lived ``httpx.AsyncClient`` so the client can be
    shared by stores living on different event loops. Errors never propagate:
    each call returns ``Ok`` or ``Failure``.
    """

    def __init__(
        self,
        config: ApiConfig = DEFAULT_API_CONFIG,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=self._transport,
        )

    async def list_foods(self, query: FoodQuery) -> Result[list[FoodItem]]:
        return await self._get_items(self.config.foods_path, build_food_params(query))

    async def leaderboard(self) -> Result[list[FoodItem]]:
        return await self._get_items(self.config.leaderboard_path)

    async def update_rating(self, name: str, rating: float) -> Result[str]:
        path = self.config.update_rating_path
        params = [("name", name), ("rating", format_rating(rating))]
        logger.debug("POST %s params=%s", path, params)
        try:
            async with self._client() as client:
                resp = await client.post(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Rating update for %r failed", name, exc_info=True)
            return Failure(FailureKind.transport, str(exc) or type(exc).__name__)

        # Whatever the server says is the confirmation, status included
        return Ok(resp.text)

    async def _get_items(
        self,
        path: str,
        params: list[tuple[str, str]] | None = None,
    ) -> Result[list[FoodItem]]:
        logger.debug("GET %s params=%s", path, params)
        try:
            async with self._client() as client:
                resp = await client.get(path, params=params)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Food service returned %s for %s", exc.response.status_code, path, exc_info=True)
            return Failure(FailureKind.status, f"HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.warning("Food service request to %s failed", path, exc_info=True)
            return Failure(FailureKind.transport, str(exc) or type(exc).__name__)

        try:
            items = _FOOD_LIST.validate_json(resp.content)
        except ValidationError as exc:
            logger.warning("Could not decode food list from %s", path, exc_info=True)
            return Failure(FailureKind.decode, f"{exc.error_count()} validation error(s)")

        return Ok(items)
