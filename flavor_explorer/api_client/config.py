from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ApiConfig:
    base_url: str = os.getenv("FOOD_API_URL", "http://localhost:8080")
    timeout: float = float(os.getenv("FOOD_API_TIMEOUT", "10.0"))
    foods_path: str = "/api/foods"
    leaderboard_path: str = "/api/foods/leaderboard"
    update_rating_path: str = "/api/foods/update-rating"


DEFAULT_API_CONFIG = ApiConfig()
