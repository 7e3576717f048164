"""
HTML rendering for the catalog viewer.

Every function here maps state to markup and nothing else, so the same
state always renders the same page. Class names only mark structure; styling
is not part of the markup.
"""
from __future__ import annotations

from html import escape

from ..api_client.foods_client import format_rating
from ..catalog.config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from ..catalog.models import CatalogState, FoodItem, SortKey

TITLE = "Flavor Explorer"
EMPTY_RESULTS = "No foods match your current filters"
COPYRIGHT = "© 2025 Vikash Mall. All rights reserved."

SORT_LABELS = {
    SortKey.rating: "Rating (High → Low)",
    SortKey.price: "Price (Low → High)",
}

_SCRIPT = """
<script>
const refreshDelay = %(delay_ms)d;
let refreshTimer;
function post(url, data) {
  return fetch(url, {method: "POST", body: new URLSearchParams(data)});
}
function refreshLive() {
  clearTimeout(refreshTimer);
  refreshTimer = setTimeout(async () => {
    const res = await fetch("/view");
    if (!res.ok) return;
    const page = new DOMParser().parseFromString(await res.text(), "text/html");
    for (const id of ["live-top", "live-results"]) {
      document.getElementById(id).innerHTML = page.getElementById(id).innerHTML;
    }
  }, refreshDelay);
}
document.querySelectorAll("[data-filter]").forEach((input) => {
  // One request at a time per field, numbered so the server can drop stale ones
  let queue = Promise.resolve();
  let seq = 0;
  input.addEventListener("input", () => {
    const data = {value: input.value, seq: seq++};
    queue = queue
      .then(() => post("/filters/" + input.dataset.filter, data))
      .catch(() => {})
      .then(refreshLive);
  });
});
document.addEventListener("change", (event) => {
  const input = event.target;
  if (input.dataset && input.dataset.ratingFor !== undefined && input.value !== "") {
    post("/ratings/edit", {name: input.dataset.ratingFor, rating: input.value});
  }
});
</script>
"""


def _attr(value: object) -> str:
    return escape(str(value), quote=True)


def render_banners(state: CatalogState) -> str:
    parts: list[str] = []
    if state.message:
        parts.append(
            '<div class="banner message">'
            f"<span>{escape(state.message)}</span>"
            '<form method="post" action="/message/dismiss">'
            '<button type="submit" aria-label="Dismiss">&times;</button></form>'
            "</div>"
        )
    if state.error:
        parts.append(
            '<div class="banner error" role="alert">'
            f"<span>{escape(state.error)}</span>"
            '<form method="post" action="/error/dismiss">'
            '<button type="submit" aria-label="Dismiss">&times;</button></form>'
            "</div>"
        )
    return "".join(parts)


def _leaderboard_card(rank: int, food: FoodItem) -> str:
    return (
        '<div class="card">'
        f'<span class="rank">#{rank}</span>'
        f'<img src="{_attr(food.image_url)}" alt="{_attr(food.name)}">'
        f'<div class="name">{escape(food.name)}</div>'
        f'<div class="cuisine">{escape(food.cuisine)}</div>'
        f'<div class="rating">⭐ {food.rating:.1f}</div>'
        "</div>"
    )


def render_leaderboard(
    state: CatalogState,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> str:
    entries = state.leaderboard[: config.leaderboard_size]
    cards = "".join(_leaderboard_card(i + 1, food) for i, food in enumerate(entries))
    return (
        '<section class="leaderboard">'
        f"<h2>Top {config.leaderboard_size} Foods Overall</h2>"
        f'<div class="grid">{cards}</div>'
        "</section>"
    )


def render_filter_bar(state: CatalogState) -> str:
    filters = state.filters
    options = "".join(
        f'<option value="{key.value}"{" selected" if filters.sort is key else ""}>'
        f"{escape(label)}</option>"
        for key, label in SORT_LABELS.items()
    )
    return (
        '<section class="filters">'
        "<h2>Search &amp; Filter</h2>"
        "<div>"
        '<input type="text" name="value" data-filter="search" placeholder="Search by Name" '
        f'value="{_attr(filters.search_input)}">'
        '<div class="help">Searches for text in food names</div>'
        "</div>"
        "<div>"
        '<input type="text" name="value" data-filter="cuisine" placeholder="Filter by Cuisine" '
        f'value="{_attr(filters.cuisine_input)}">'
        '<div class="help">Enter cuisine prefix (e.g., &quot;I&quot; for Indian, Italian)</div>'
        "</div>"
        '<form method="post" action="/filters/sort">'
        f'<select name="sort" onchange="this.form.submit()">{options}</select>'
        '<div class="help">Choose how results are ordered</div>'
        "</form>"
        "</section>"
    )


def _food_row(index: int, food: FoodItem, state: CatalogState, config: CatalogConfig) -> str:
    stripe = "even" if index % 2 == 0 else "odd"
    shown = format_rating(state.rating_for(food))
    return (
        f'<tr class="{stripe}">'
        f"<td>{index + 1}</td>"
        f"<td>{escape(food.name)}</td>"
        f"<td>{escape(food.cuisine)}</td>"
        f"<td>{food.rating:.1f}</td>"
        f"<td>${food.price:.2f}</td>"
        f'<td><img src="{_attr(food.image_url)}" alt="{_attr(food.name)}"></td>'
        "<td>"
        '<form method="post" action="/ratings/submit">'
        f'<input type="hidden" name="name" value="{_attr(food.name)}">'
        f'<input type="number" name="rating" step="{config.rating_step}" '
        f'min="{format_rating(config.min_rating)}" max="{format_rating(config.max_rating)}" '
        f'value="{_attr(shown)}" data-rating-for="{_attr(food.name)}">'
        '<button type="submit">Update</button>'
        "</form>"
        "</td>"
        "</tr>"
    )


def render_results(
    state: CatalogState,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> str:
    items = state.page.items
    if items:
        rows = "".join(_food_row(i, food, state, config) for i, food in enumerate(items))
        body = (
            "<table>"
            "<thead><tr>"
            "<th>#</th><th>Name</th><th>Cuisine</th><th>Rating</th>"
            "<th>Price</th><th>Image</th><th>Update</th>"
            "</tr></thead>"
            f"<tbody>{rows}</tbody>"
            "</table>"
        )
    else:
        body = f'<div class="empty"><p>{EMPTY_RESULTS}</p></div>'

    load_more = ""
    if state.page.has_more:
        load_more = (
            '<form class="load-more" method="post" action="/load-more">'
            '<button type="submit">Load More</button>'
            "</form>"
        )
    return f'<section class="foods"><h2>Foods</h2>{body}{load_more}</section>'


def render_page(
    state: CatalogState,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> str:
    script = _SCRIPT % {"delay_ms": round(config.debounce_seconds * 1000) + 50}
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        f"<title>{TITLE}</title>"
        "</head><body>"
        f"<header><h1>{TITLE}</h1></header>"
        f'<div id="live-top">{render_banners(state)}{render_leaderboard(state, config)}</div>'
        f"{render_filter_bar(state)}"
        f'<div id="live-results">{render_results(state, config)}</div>'
        "<footer>"
        f"<p>{escape(COPYRIGHT)}</p>"
        "<p>Data provided by TheMealDB.</p>"
        "</footer>"
        f"{script}"
        "</body></html>"
    )
