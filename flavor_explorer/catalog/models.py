from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SortKey(str, Enum):
    rating = "rating"
    price = "price"


class FoodItem(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    cuisine: str
    rating: float
    price: float
    image_url: str = Field(default="", alias="imageUrl")


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    # What the user typed, shown in the inputs
    search_input: str = ""
    cuisine_input: str = ""
    # Debounced values sent to the API
    search: str = ""
    cuisine: str = ""
    sort: SortKey = SortKey.rating

    def effective(self) -> tuple[str, str, SortKey]:
        """The values a page fetch depends on."""
        return (self.search, self.cuisine, self.sort)


class PageState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[FoodItem, ...] = ()
    offset: int = Field(default=0, ge=0)
    has_more: bool = False


class CatalogState(BaseModel):
    model_config = ConfigDict(frozen=True)

    filters: FilterState = Field(default_factory=FilterState)
    page: PageState = Field(default_factory=PageState)
    leaderboard: tuple[FoodItem, ...] = ()
    pending_ratings: dict[str, float] = Field(default_factory=dict)
    message: str = ""
    error: str | None = None
    page_requests_issued: int = 0
    page_request_applied: int = 0
    # Set when a page response landed after a newer one (last write wins)
    page_out_of_order: bool = False

    def find_item(self, name: str) -> FoodItem | None:
        for item in self.page.items:
            if item.name == name:
                return item
        return None

    def rating_for(self, item: FoodItem) -> float:
        """Pending edit if there is one, else the last known rating."""
        return self.pending_ratings.get(item.name, item.rating)
