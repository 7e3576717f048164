from __future__ import annotations

import asyncio
import itertools
import logging
import math
from typing import Any, Coroutine

from ..api_client.foods_client import Failure, FoodQuery, FoodsClient, Result
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .debounce import Debouncer
from .models import CatalogState, FoodItem, SortKey
from .reducer import (
    Action,
    CuisineSettled,
    CuisineTyped,
    ErrorDismissed,
    LeaderboardFailed,
    LeaderboardLoaded,
    MessageDismissed,
    PageFailed,
    PageLoaded,
    PageRequested,
    RatingEdited,
    RatingFailed,
    RatingSubmitted,
    SearchSettled,
    SearchTyped,
    SortChanged,
    reduce,
)

logger = logging.getLogger(__name__)


def clamp_rating(value: float, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Rating must be a finite number, got {value!r}")
    return max(config.min_rating, min(config.max_rating, value))


class CatalogStore:
    """One catalog viewer: its state, its debounce timers and its fetches.

    State only changes through :meth:`dispatch`. When a dispatch changes the
    effective filters (debounced search, debounced cuisine, sort) a reset page
    fetch is started in the background, the same way for every trigger.
    In-flight fetches are never cancelled; the last one to finish wins.
    """

    def __init__(
        self,
        client: FoodsClient,
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ) -> None:
        self.client = client
        self.config = config
        self.state = CatalogState()
        self._page_ids = itertools.count(1)
        self._tasks: set[asyncio.Task] = set()
        self._input_seq: dict[str, int] = {}
        self._search_debouncer = Debouncer(config.debounce_seconds, self._settle_search)
        self._cuisine_debouncer = Debouncer(config.debounce_seconds, self._settle_cuisine)

    # ── State cycle ──────────────────────────────────────────────────────

    def dispatch(self, action: Action) -> CatalogState:
        before = self.state.filters.effective()
        self.state = reduce(self.state, action, self.config)
        if self.state.filters.effective() != before:
            self._spawn(self.fetch_page(reset=True))
        return self.state

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def settle(self) -> None:
        """Wait until every background fetch started so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def close(self) -> None:
        self._search_debouncer.cancel()
        self._cuisine_debouncer.cancel()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── Filters ──────────────────────────────────────────────────────────

    def _is_stale(self, field: str, seq: int | None) -> bool:
        """True when *seq* is older than an input already applied to *field*.

        Keystrokes can reach the server out of order; the browser numbers them
        so a late older one cannot replace a newer value.
        """
        if seq is None:
            return False
        if seq <= self._input_seq.get(field, -1):
            logger.debug("Dropping stale %s input #%d", field, seq)
            return True
        self._input_seq[field] = seq
        return False

    def set_search_input(self, value: str, seq: int | None = None) -> None:
        if self._is_stale("search", seq):
            return
        self.dispatch(SearchTyped(value))
        self._search_debouncer.call(value)

    def set_cuisine_input(self, value: str, seq: int | None = None) -> None:
        if self._is_stale("cuisine", seq):
            return
        self.dispatch(CuisineTyped(value))
        self._cuisine_debouncer.call(value)

    def set_sort(self, sort: SortKey | str) -> None:
        self.dispatch(SortChanged(SortKey(sort)))

    def _settle_search(self, value: str) -> None:
        self.dispatch(SearchSettled(value))

    def _settle_cuisine(self, value: str) -> None:
        self.dispatch(CuisineSettled(value))

    # ── Fetching ─────────────────────────────────────────────────────────

    async def mount(self) -> None:
        logger.info("Mounting catalog store")
        await asyncio.gather(self.fetch_page(reset=True), self.fetch_leaderboard())

    def fetch_page(self, reset: bool = True) -> Coroutine[Any, Any, Result[list[FoodItem]]]:
        """Start a page fetch for the filters and offset as they are right now.

        The query is fixed when this is called, not when the returned
        awaitable first runs, so a fetch spawned by a filter change asks for
        exactly that change.
        """
        request_id = next(self._page_ids)
        self.dispatch(PageRequested(request_id))

        filters = self.state.filters
        query = FoodQuery(
            cuisine=filters.cuisine,
            search=filters.search,
            sort=filters.sort,
            offset=0 if reset else self.state.page.offset,
            limit=self.config.page_size,
        )
        return self._run_page_fetch(query, reset, request_id)

    async def _run_page_fetch(
        self,
        query: FoodQuery,
        reset: bool,
        request_id: int,
    ) -> Result[list[FoodItem]]:
        result = await self.client.list_foods(query)
        if isinstance(result, Failure):
            self.dispatch(PageFailed(result.describe(), request_id))
        else:
            self.dispatch(PageLoaded(tuple(result.value), reset, request_id))
        return result

    async def load_more(self) -> Result[list[FoodItem]]:
        return await self.fetch_page(reset=False)

    async def fetch_leaderboard(self) -> Result[list[FoodItem]]:
        result = await self.client.leaderboard()
        if isinstance(result, Failure):
            self.dispatch(LeaderboardFailed(result.describe()))
        else:
            self.dispatch(LeaderboardLoaded(tuple(result.value)))
        return result

    # ── Rating editor ────────────────────────────────────────────────────

    def handle_rating_change(self, name: str, value: float) -> None:
        self.dispatch(RatingEdited(name, clamp_rating(value, self.config)))

    async def update_rating(self, name: str, rating: float | None = None) -> Result[str]:
        """Submit a rating, then reload the first page and the leaderboard.

        Without an explicit *rating* the pending edit is used, falling back to
        the item's current rating. Raises ``LookupError`` when neither exists.
        """
        if rating is None:
            rating = self.state.pending_ratings.get(name)
        if rating is None:
            item = self.state.find_item(name)
            if item is None:
                raise LookupError(f"No food named {name!r} in the current list")
            rating = item.rating
        rating = clamp_rating(rating, self.config)

        logger.info("Submitting rating %.1f for %r", rating, name)
        result = await self.client.update_rating(name, rating)
        if isinstance(result, Failure):
            self.dispatch(RatingFailed(result.describe()))
            return result

        self.dispatch(RatingSubmitted(result.value))
        await asyncio.gather(self.fetch_page(reset=True), self.fetch_leaderboard())
        return result

    def dismiss_message(self) -> None:
        self.dispatch(MessageDismissed())

    def dismiss_error(self) -> None:
        self.dispatch(ErrorDismissed())
