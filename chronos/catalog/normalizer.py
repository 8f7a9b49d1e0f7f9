"""
Catalog record normalizer.

Turns the loosely typed attribute bag returned by the record store into a
``Product``. Never raises: unparsable numbers become 0 (or None for the
original price), missing text becomes "", missing flags become False.
"""

import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from chronos.services.models import PLACEHOLDER_IMAGE, Product

# Column names in the product table
PRODUCT_FIELDS = [
    "Name",
    "brand_c",
    "model_c",
    "price_c",
    "original_price_c",
    "category_c",
    "description_c",
    "movement_c",
    "case_size_c",
    "case_material_c",
    "band_material_c",
    "water_resistance_c",
    "in_stock_c",
    "stock_count_c",
    "featured_c",
    "images_c",
    "band_options_c",
    "Tags",
]

_LEADING_DECIMAL = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)")
_LEADING_INTEGER = re.compile(r"^\s*([-+]?\d+)")

# Anything past this many integer digits is junk, not a price or a count
_MAX_DIGITS = 12


def _parse_decimal(value: Any) -> Optional[Decimal]:
    """Leading number of ``value`` as a non-negative Decimal, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, Decimal)):
            number = Decimal(value)
        elif isinstance(value, float):
            number = Decimal(str(value))
        else:
            match = _LEADING_DECIMAL.match(str(value))
            if not match:
                return None
            number = Decimal(match.group(1))
    except (InvalidOperation, ValueError):
        return None

    if not number.is_finite() or number < 0 or number.adjusted() >= _MAX_DIGITS:
        return None
    return number


def _parse_int(value: Any) -> int:
    """Leading integer of ``value`` (truncating), 0 if absent or negative."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float, Decimal)):
        number = _parse_decimal(value)
        return int(number) if number is not None else 0

    match = _LEADING_INTEGER.match(str(value))
    if not match or len(match.group(1).lstrip("+-")) > _MAX_DIGITS:
        return 0
    number = int(match.group(1))
    return number if number > 0 else 0


def _text(value: Any) -> str:
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def _lines(value: Any) -> tuple[str, ...]:
    """Split a newline-delimited field into trimmed, non-blank entries."""
    if isinstance(value, str):
        parts = value.split("\n")
    elif isinstance(value, (list, tuple)):
        parts = [p for p in value if isinstance(p, str)]
    else:
        return ()
    return tuple(p.strip() for p in parts if p.strip())


def normalize_product(raw: Optional[Mapping]) -> Optional[Product]:
    """
    Convert a raw catalog record into a Product.

    Args:
        raw: Record dict as returned by the record store, or None

    Returns:
        Product, or None when there is no record
    """
    if not isinstance(raw, Mapping):
        return None

    images = _lines(raw.get("images_c"))
    price = _parse_decimal(raw.get("price_c"))
    original_price = _parse_decimal(raw.get("original_price_c"))

    # Id is trusted as-is; construct skips validation so a bad Id cannot raise
    return Product.model_construct(
        id=raw.get("Id", raw.get("id")),
        name=_text(raw.get("Name")),
        brand=_text(raw.get("brand_c")),
        model=_text(raw.get("model_c")),
        category=_text(raw.get("category_c")),
        description=_text(raw.get("description_c")),
        movement=_text(raw.get("movement_c")),
        case_material=_text(raw.get("case_material_c")),
        band_material=_text(raw.get("band_material_c")),
        water_resistance=_text(raw.get("water_resistance_c")),
        price=price if price is not None else Decimal("0"),
        original_price=original_price if original_price else None,
        case_size=_parse_int(raw.get("case_size_c")),
        in_stock=bool(raw.get("in_stock_c")),
        stock_count=_parse_int(raw.get("stock_count_c")),
        featured=bool(raw.get("featured_c")),
        images=images or (PLACEHOLDER_IMAGE,),
        band_options=_lines(raw.get("band_options_c")),
        tags=_text(raw.get("Tags")),
    )


def normalize_products(records: Any) -> list[Product]:
    """Normalize a list of records, skipping entries that are not records."""
    if not isinstance(records, (list, tuple)):
        return []
    products = []
    for record in records:
        product = normalize_product(record)
        if product is not None:
            products.append(product)
    return products
