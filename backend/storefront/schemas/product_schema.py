# backend/storefront/schemas/product_schema.py
from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from storefront.config import settings


class BrandTier(str, Enum):
    A = "A"
    B = "B"
    C = "C"


class InventoryStatus(str, Enum):
    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"


class SortOption(str, Enum):
    POPULARITY = "popularity"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NEWEST = "newest"
    MOST_VIEWED = "most_viewed"
    BEST_SELLING = "best_selling"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]

    @classmethod
    def parse(cls, raw: str) -> "SortOption":
        """Accept either the wire value ("price_asc") or the display label ("Price: Low to High")."""
        for option in cls:
            if raw == option.value or raw == option.label:
                return option
        raise ValueError(f"Unknown sort option: {raw!r}")


_SORT_LABELS = {
    SortOption.POPULARITY: "Popularity",
    SortOption.PRICE_ASC: "Price: Low to High",
    SortOption.PRICE_DESC: "Price: High to Low",
    SortOption.NEWEST: "Newest",
    SortOption.MOST_VIEWED: "Most Viewed",
    SortOption.BEST_SELLING: "Best Selling",
}


class ProductStats(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)
    views_last_month: int = Field(0, ge=0)
    volume_sold_last_month: int = Field(0, ge=0)
    units_in_stock: int = Field(0, ge=0)
    days_of_inventory: int = Field(0, ge=0)
    cogs: float = Field(0.0, ge=0)


class Product(BaseModel):
    """One catalogue entry as delivered by a single fetch. Immutable."""

    model_config = ConfigDict(frozen=True, from_attributes=True)
    id: str
    name: str
    description: str = ""
    brand: str
    brand_tier: BrandTier = BrandTier.C
    category: str
    price: float = Field(ge=0)
    image: Optional[str] = None
    inventory_status: InventoryStatus = InventoryStatus.IN_STOCK
    is_pinned: bool = False
    created_at: datetime
    benefits: List[str] = []
    how_to_use: Optional[str] = None
    stats: Optional[ProductStats] = None

    @field_validator("benefits", mode="before")
    @classmethod
    def _none_benefits(cls, v):
        return v or []

    @property
    def is_purchasable(self) -> bool:
        return self.inventory_status != InventoryStatus.OUT_OF_STOCK


def _default_price_range() -> Tuple[float, float]:
    return (settings.DEFAULT_PRICE_MIN, settings.DEFAULT_PRICE_MAX)


class FilterSpec(BaseModel):
    """
    Brand/category/price restriction for the storefront grid.

    Empty `brands` or `categories` means no restriction on that axis.
    The price range is inclusive on both ends and is always applied.
    """

    model_config = ConfigDict(frozen=True)
    brands: FrozenSet[str] = frozenset()
    categories: FrozenSet[str] = frozenset()
    price_range: Tuple[float, float] = Field(default_factory=_default_price_range)

    @model_validator(mode="after")
    def _check_price_range(self):
        low, high = self.price_range
        if low < 0 or high < 0:
            raise ValueError("price_range bounds must be non-negative")
        if low > high:
            raise ValueError("price_range min must not exceed max")
        return self

    @field_serializer("brands", "categories")
    def _sorted(self, values: FrozenSet[str]) -> List[str]:
        return sorted(values)

    @property
    def active_count(self) -> int:
        return len(self.brands) + len(self.categories)


class ProductOut(BaseModel):
    """Wire shape for a product, with the purchasable flag the card buttons need."""

    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    description: str
    brand: str
    brand_tier: BrandTier
    category: str
    price: float
    image: Optional[str] = None
    inventory_status: InventoryStatus
    is_pinned: bool
    is_purchasable: bool
    created_at: datetime
    benefits: List[str] = []
    how_to_use: Optional[str] = None
    stats: Optional[ProductStats] = None
