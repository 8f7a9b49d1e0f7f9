"""Catalog Models - Pydantic models for products and product filters."""
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from chronos.services.money import to_decimal as _to_decimal

PLACEHOLDER_IMAGE = "https://via.placeholder.com/400x400?text=No+Image"

# Upper end of the price slider; a range ending here means "no limit"
PRICE_NO_LIMIT = Decimal("50000")

CASE_SIZE_BUCKETS = ("<38mm", "38-42mm", "42-46mm", ">46mm")


def parse_product_id(value) -> Optional[int]:
    """Accept ints and numeric strings (ids coming from URLs); anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class Product(BaseModel):
    """Normalized catalog product (immutable)."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    id: int
    name: str = ""
    brand: str = ""
    model: str = ""
    category: str = ""
    description: str = ""
    movement: str = ""
    case_material: str = ""
    band_material: str = ""
    water_resistance: str = ""
    price: Decimal = Decimal("0")
    original_price: Optional[Decimal] = None
    case_size: int = 0
    in_stock: bool = False
    stock_count: int = 0
    featured: bool = False
    images: tuple[str, ...] = (PLACEHOLDER_IMAGE,)
    band_options: tuple[str, ...] = ()
    tags: str = ""

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("original_price", mode="before")
    @classmethod
    def convert_original_price(cls, v):
        return _to_decimal(v) if v is not None else None

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.model}".strip() or self.name


class SortOption(str, Enum):
    """Sort orders offered by the catalog filter."""
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    NAME = "name"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortOption":
        """Map any value to a sort option; unknown values sort by default."""
        try:
            return cls(value)
        except ValueError:
            return cls.DEFAULT


class FilterSpec(BaseModel):
    """
    Caller-supplied catalog filter.

    Accepts both snake_case and camelCase keys, so the shape the web client
    sends (``caseSizes``, ``priceRange``, ``sortBy``) validates directly.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    brands: list[str] = []
    categories: list[str] = []
    movements: list[str] = []
    case_sizes: list[str] = []
    price_range: Optional[tuple[Decimal, Decimal]] = None
    sort_by: str = SortOption.DEFAULT.value

    @field_validator("brands", "categories", "movements", "case_sizes")
    @classmethod
    def dedupe(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @field_validator("price_range", mode="before")
    @classmethod
    def convert_price_range(cls, v):
        # Anything but a [min, max] pair is ignored
        if isinstance(v, (list, tuple)) and len(v) == 2:
            return (_to_decimal(v[0]), _to_decimal(v[1]))
        return None

    @field_validator("sort_by", mode="before")
    @classmethod
    def convert_sort_by(cls, v):
        if isinstance(v, SortOption):
            return v.value
        # Unknown or non-string sort values behave as the default order
        return v if isinstance(v, str) else SortOption.DEFAULT.value

    @property
    def sort_option(self) -> SortOption:
        return SortOption.parse(self.sort_by)

    @property
    def has_price_limit(self) -> bool:
        return self.price_range is not None and self.price_range[1] < PRICE_NO_LIMIT
