"""
Catalog query builders and client-side filters.

Everything the record store can evaluate is turned into a ``RecordQuery``
here. Case-size buckets are matched locally after normalization, because
the bucket labels do not map onto a single stored column predicate.
"""

from typing import Iterable

from chronos.catalog.normalizer import PRODUCT_FIELDS
from chronos.services.models import CASE_SIZE_BUCKETS, FilterSpec, Product, SortOption
from chronos.services.query import (
    Condition,
    ConditionGroup,
    GroupOperator,
    Operator,
    OrderBy,
    RecordQuery,
)

DEFAULT_PAGE_SIZE = 100
FACET_PAGE_SIZE = 200
FEATURED_LIMIT = 8
RELATED_LIMIT = 4

NEWEST_FIRST = OrderBy("Id", descending=True)

SORT_ORDERS = {
    SortOption.PRICE_LOW: OrderBy("price_c"),
    SortOption.PRICE_HIGH: OrderBy("price_c", descending=True),
    SortOption.NAME: OrderBy("brand_c"),
    SortOption.DEFAULT: NEWEST_FIRST,
}

# Boundaries are inclusive on both sides, so 38 and 42 fall in two buckets
CASE_SIZE_RULES = dict(zip(CASE_SIZE_BUCKETS, (
    lambda size: size < 38,
    lambda size: 38 <= size <= 42,
    lambda size: 42 <= size <= 46,
    lambda size: size > 46,
)))


def product_query(**kwargs) -> RecordQuery:
    """Query selecting every product column, newest first unless overridden."""
    kwargs.setdefault("order_by", [NEWEST_FIRST])
    return RecordQuery(fields=list(PRODUCT_FIELDS), **kwargs)


def all_products_query() -> RecordQuery:
    return product_query(limit=DEFAULT_PAGE_SIZE)


def category_query(category: str) -> RecordQuery:
    return product_query(where=[Condition.of("category_c", Operator.CONTAINS, category)])


def search_query(text: str) -> RecordQuery:
    """Case-insensitive substring match on brand, model or description."""
    group = ConditionGroup(
        conditions=(
            Condition.of("brand_c", Operator.CONTAINS, text),
            Condition.of("model_c", Operator.CONTAINS, text),
            Condition.of("description_c", Operator.CONTAINS, text),
        ),
        operator=GroupOperator.OR,
    )
    return product_query(where_groups=[group])


def featured_query(limit: int = FEATURED_LIMIT) -> RecordQuery:
    return product_query(
        where=[Condition.of("featured_c", Operator.EQUAL_TO, True)],
        limit=limit,
    )


def related_query(product: Product, limit: int = RELATED_LIMIT) -> RecordQuery:
    """Products sharing brand or category; two extra rows absorb the product itself."""
    group = ConditionGroup(
        conditions=(
            Condition.of("brand_c", Operator.EQUAL_TO, product.brand),
            Condition.of("category_c", Operator.EQUAL_TO, product.category),
        ),
        operator=GroupOperator.OR,
    )
    return product_query(where_groups=[group], limit=limit + 2)


def facet_query(field_name: str) -> RecordQuery:
    """Single-column query used to collect brands or categories."""
    return RecordQuery(fields=[field_name], limit=FACET_PAGE_SIZE)


def filter_query(spec: FilterSpec) -> RecordQuery:
    """
    Build the remote part of a catalog filter.

    Brand, category and movement sets become ExactMatch conditions, the price
    range becomes a pair of bounds unless it ends at the "no limit" ceiling,
    and the sort option picks the ordering. Case sizes are not included.
    """
    where = []
    if spec.brands:
        where.append(Condition.of("brand_c", Operator.EXACT_MATCH, *spec.brands))
    if spec.categories:
        where.append(Condition.of("category_c", Operator.EXACT_MATCH, *spec.categories))
    if spec.movements:
        where.append(Condition.of("movement_c", Operator.EXACT_MATCH, *spec.movements))

    if spec.has_price_limit:
        low, high = spec.price_range
        where.append(Condition.of("price_c", Operator.GREATER_THAN_OR_EQUAL_TO, low))
        where.append(Condition.of("price_c", Operator.LESS_THAN_OR_EQUAL_TO, high))

    return product_query(
        where=where,
        order_by=[SORT_ORDERS[spec.sort_option]],
        limit=DEFAULT_PAGE_SIZE,
    )


def matches_case_size(size: int, buckets: Iterable[str]) -> bool:
    """True if ``size`` falls in any of the bucket labels (unknown labels never match)."""
    return any(
        CASE_SIZE_RULES[label](size)
        for label in buckets
        if label in CASE_SIZE_RULES
    )


def apply_case_size_filter(products: list[Product], buckets: list[str]) -> list[Product]:
    """Keep products whose case size falls in one of the buckets; no buckets keeps all."""
    if not buckets:
        return products
    return [p for p in products if matches_case_size(p.case_size, buckets)]
