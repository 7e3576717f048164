from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable

from .config import DEFAULT_CATALOG_CONFIG
from .store import CatalogStore

logger = logging.getLogger(__name__)

# Least recently used first
_stores: OrderedDict[str, CatalogStore] = OrderedDict()


async def _evict_over(limit: int) -> None:
    while len(_stores) > limit:
        viewer_id, store = _stores.popitem(last=False)
        logger.info("Evicting idle store for viewer %s", viewer_id)
        await store.close()


async def open_store(
    viewer_id: str,
    factory: Callable[[], CatalogStore],
    limit: int = DEFAULT_CATALOG_CONFIG.max_sessions,
) -> CatalogStore:
    """Replace the viewer's store with a freshly mounted one (a full page load).

    At most *limit* stores are kept; the least recently used ones are closed
    and dropped to make room.
    """
    previous = _stores.pop(viewer_id, None)
    if previous is not None:
        await previous.close()
    store = factory()
    _stores[viewer_id] = store
    await _evict_over(limit)
    await store.mount()
    return store


async def get_store(
    viewer_id: str,
    factory: Callable[[], CatalogStore],
    limit: int = DEFAULT_CATALOG_CONFIG.max_sessions,
) -> CatalogStore:
    """Return the viewer's store, mounting one if the viewer has none yet."""
    store = _stores.get(viewer_id)
    if store is None:
        logger.info("No store for viewer %s, mounting a new one", viewer_id)
        return await open_store(viewer_id, factory, limit)
    _stores.move_to_end(viewer_id)
    return store


def store_count() -> int:
    return len(_stores)


async def close_all() -> None:
    for store in list(_stores.values()):
        await store.close()
    _stores.clear()
