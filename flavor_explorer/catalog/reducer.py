"""
State transitions for the catalog.

Every change to ``CatalogState`` goes through :func:`reduce`, which takes the
current state and one action and returns a new state. Nothing here performs
I/O; the store runs the fetches and dispatches their outcomes as actions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import CatalogState, FoodItem, PageState, SortKey


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchTyped:
    value: str


@dataclass(frozen=True)
class CuisineTyped:
    value: str


@dataclass(frozen=True)
class SearchSettled:
    value: str


@dataclass(frozen=True)
class CuisineSettled:
    value: str


@dataclass(frozen=True)
class SortChanged:
    sort: SortKey


@dataclass(frozen=True)
class PageRequested:
    request_id: int


@dataclass(frozen=True)
class PageLoaded:
    items: tuple[FoodItem, ...]
    reset: bool
    request_id: int


@dataclass(frozen=True)
class PageFailed:
    error: str
    request_id: int


@dataclass(frozen=True)
class LeaderboardLoaded:
    entries: tuple[FoodItem, ...]


@dataclass(frozen=True)
class LeaderboardFailed:
    error: str


@dataclass(frozen=True)
class RatingEdited:
    name: str
    value: float


@dataclass(frozen=True)
class RatingSubmitted:
    message: str


@dataclass(frozen=True)
class RatingFailed:
    error: str


@dataclass(frozen=True)
class MessageDismissed:
    pass


@dataclass(frozen=True)
class ErrorDismissed:
    pass


Action = Union[
    SearchTyped,
    CuisineTyped,
    SearchSettled,
    CuisineSettled,
    SortChanged,
    PageRequested,
    PageLoaded,
    PageFailed,
    LeaderboardLoaded,
    LeaderboardFailed,
    RatingEdited,
    RatingSubmitted,
    RatingFailed,
    MessageDismissed,
    ErrorDismissed,
]


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


def _with_filters(state: CatalogState, **changes) -> CatalogState:
    return state.model_copy(update={"filters": state.filters.model_copy(update=changes)})


def _apply_page(
    state: CatalogState,
    action: PageLoaded,
    config: CatalogConfig,
) -> CatalogState:
    if action.reset:
        items = tuple(action.items)
    else:
        items = state.page.items + tuple(action.items)

    page = PageState(
        items=items,
        offset=len(items),
        has_more=len(action.items) == config.page_size,
    )
    return state.model_copy(update={
        "page": page,
        "page_request_applied": action.request_id,
        "page_out_of_order": action.request_id < state.page_request_applied,
    })


def reduce(
    state: CatalogState,
    action: Action,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> CatalogState:
    """Return the state that results from applying *action* to *state*."""
    if isinstance(action, SearchTyped):
        return _with_filters(state, search_input=action.value)
    if isinstance(action, CuisineTyped):
        return _with_filters(state, cuisine_input=action.value)
    if isinstance(action, SearchSettled):
        return _with_filters(state, search=action.value)
    if isinstance(action, CuisineSettled):
        return _with_filters(state, cuisine=action.value)
    if isinstance(action, SortChanged):
        return _with_filters(state, sort=SortKey(action.sort))

    if isinstance(action, PageRequested):
        return state.model_copy(update={"page_requests_issued": action.request_id})
    if isinstance(action, PageLoaded):
        return _apply_page(state, action, config)
    if isinstance(action, PageFailed):
        # Page untouched; only the error banner changes
        return state.model_copy(update={"error": action.error})

    if isinstance(action, LeaderboardLoaded):
        return state.model_copy(update={"leaderboard": tuple(action.entries)})
    if isinstance(action, LeaderboardFailed):
        return state.model_copy(update={"error": action.error})

    if isinstance(action, RatingEdited):
        pending = dict(state.pending_ratings)
        pending[action.name] = action.value
        return state.model_copy(update={"pending_ratings": pending})
    if isinstance(action, RatingSubmitted):
        return state.model_copy(update={"message": action.message})
    if isinstance(action, RatingFailed):
        return state.model_copy(update={"error": action.error})

    if isinstance(action, MessageDismissed):
        return state.model_copy(update={"message": ""})
    if isinstance(action, ErrorDismissed):
        return state.model_copy(update={"error": None})

    raise TypeError(f"Unknown action: {action!r}")
