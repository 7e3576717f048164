from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogConfig:
    page_size: int = 15
    leaderboard_size: int = 5
    debounce_seconds: float = 0.3
    min_rating: float = 0.0
    max_rating: float = 10.0
    rating_step: float = 0.1
    max_sessions: int = 200


DEFAULT_CATALOG_CONFIG = CatalogConfig()
