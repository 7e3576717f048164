from __future__ import annotations

import logging
import os
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from starlette.middleware.sessions import SessionMiddleware

from .api_client.config import DEFAULT_API_CONFIG
from .api_client.foods_client import FoodsClient
from .catalog import sessions
from .catalog.config import DEFAULT_CATALOG_CONFIG
from .catalog.models import SortKey
from .catalog.store import CatalogStore
from .ui.render import render_page

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

# Module-level so tests can patch them
foods_client = FoodsClient(DEFAULT_API_CONFIG)
catalog_config = DEFAULT_CATALOG_CONFIG


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Flavor Explorer using food service at %s", foods_client.config.base_url)
    yield
    await sessions.close_all()


app = FastAPI(title="Flavor Explorer", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "flavor-explorer-secret-change-in-production"),
)


def _new_store() -> CatalogStore:
    return CatalogStore(foods_client, catalog_config)


def _viewer_id(request: Request) -> str:
    viewer_id = request.session.get("viewer_id")
    if not viewer_id:
        viewer_id = uuid.uuid4().hex
        request.session["viewer_id"] = viewer_id
    return viewer_id


async def current_store(request: Request) -> CatalogStore:
    """The store of this browser session, mounted on first use."""
    return await sessions.get_store(
        _viewer_id(request), _new_store, catalog_config.max_sessions
    )


def _back_to_view() -> RedirectResponse:
    return RedirectResponse(url="/view", status_code=303)


# ── Pages ────────────────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    # A full page load starts the viewer over: fresh filters, edits and pages
    store = await sessions.open_store(
        _viewer_id(request), _new_store, catalog_config.max_sessions
    )
    return HTMLResponse(content=render_page(store.state, store.config))


@app.get("/view", response_class=HTMLResponse)
async def view(store: CatalogStore = Depends(current_store)) -> HTMLResponse:
    await store.settle()
    return HTMLResponse(content=render_page(store.state, store.config))


@app.get("/state")
async def state(store: CatalogStore = Depends(current_store)) -> dict:
    await store.settle()
    return store.state.model_dump(mode="json", by_alias=True)


# ── Filters ──────────────────────────────────────────────────────────────


@app.post("/filters/search", status_code=204)
async def search_typed(
    value: str = Form(""),
    seq: int | None = Form(None, ge=0),
    store: CatalogStore = Depends(current_store),
) -> Response:
    store.set_search_input(value, seq)
    return Response(status_code=204)


@app.post("/filters/cuisine", status_code=204)
async def cuisine_typed(
    value: str = Form(""),
    seq: int | None = Form(None, ge=0),
    store: CatalogStore = Depends(current_store),
) -> Response:
    store.set_cuisine_input(value, seq)
    return Response(status_code=204)


@app.post("/filters/sort")
async def sort_changed(
    sort: SortKey = Form(...),
    store: CatalogStore = Depends(current_store),
) -> RedirectResponse:
    store.set_sort(sort)
    await store.settle()
    return _back_to_view()


@app.post("/load-more")
async def load_more(store: CatalogStore = Depends(current_store)) -> RedirectResponse:
    await store.load_more()
    return _back_to_view()


# ── Ratings ──────────────────────────────────────────────────────────────


@app.post("/ratings/edit", status_code=204)
async def rating_edited(
    name: str = Form(..., min_length=1),
    rating: float = Form(..., allow_inf_nan=False),
    store: CatalogStore = Depends(current_store),
) -> Response:
    store.handle_rating_change(name, rating)
    return Response(status_code=204)


@app.post("/ratings/submit")
async def rating_submitted(
    name: str = Form(..., min_length=1),
    rating: float | None = Form(None, allow_inf_nan=False),
    store: CatalogStore = Depends(current_store),
) -> RedirectResponse:
    try:
        if rating is not None:
            store.handle_rating_change(name, rating)
        await store.update_rating(name)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _back_to_view()


# ── Banners ──────────────────────────────────────────────────────────────


@app.post("/message/dismiss")
async def dismiss_message(store: CatalogStore = Depends(current_store)) -> RedirectResponse:
    store.dismiss_message()
    return _back_to_view()


@app.post("/error/dismiss")
async def dismiss_error(store: CatalogStore = Depends(current_store)) -> RedirectResponse:
    store.dismiss_error()
    return _back_to_view()
