"""
Catalog Domain Service

Product listing, lookup, search, related products, filtering and facets.
Every operation returns normalized Products and degrades to an empty result
(None for single lookups) when the record store fails; failures go to the
FailureReporter instead of the caller.
"""

from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from chronos.catalog import filters
from chronos.catalog.normalizer import PRODUCT_FIELDS, normalize_product, normalize_products
from chronos.config import DEFAULT_PRODUCT_TABLE
from chronos.errors import (
    ERROR_FILTER_PRODUCTS,
    ERROR_INVALID_FILTER,
    ERROR_LOAD_BRANDS,
    ERROR_LOAD_CATEGORIES,
    ERROR_LOAD_CATEGORY,
    ERROR_LOAD_FEATURED,
    ERROR_LOAD_PRODUCT,
    ERROR_LOAD_PRODUCTS,
    ERROR_LOAD_RELATED,
    ERROR_SEARCH_PRODUCTS,
)
from chronos.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from chronos.observability import FailureReporter, get_tracer
from chronos.services.models import FilterSpec, Product, parse_product_id
from chronos.services.query import RecordQuery
from chronos.services.repositories import RecordStore

logger = get_logger(__name__)
tracer = get_tracer(__name__)


def _is_limit(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ProductService:
    """
    Catalog query engine.

    Provides:
    - Listing (all, by category, featured)
    - Lookup by id and related products
    - Text search over brand, model and description
    - Multi-criterion filter with a local case-size pass
    - Brand and category facets
    """

    def __init__(
        self,
        store: RecordStore,
        reporter: Optional[FailureReporter] = None,
        table: str = DEFAULT_PRODUCT_TABLE,
    ):
        self.store = store
        self.reporter = reporter or FailureReporter()
        self.table = table

    async def _fetch_records(self, query: RecordQuery, error_message: str) -> list[dict[str, Any]]:
        """Run a query; any failure is reported and becomes an empty list."""
        try:
            response = await self.store.fetch_records(self.table, query)
        except Exception as e:
            logger.error(f"{error_message}: {e}", exc_info=True)
            self.reporter.report(error_message, e)
            return []

        if not response.success:
            self.reporter.report(response.message or error_message)
            return []

        return response.data if isinstance(response.data, list) else []

    async def _fetch_products(self, query: RecordQuery, error_message: str) -> list[Product]:
        return normalize_products(await self._fetch_records(query, error_message))

    async def get_all(self) -> list[Product]:
        """Newest products, first page."""
        with tracer.start_as_current_span("catalog.get_all"):
            return await self._fetch_products(filters.all_products_query(), ERROR_LOAD_PRODUCTS)

    async def get_by_id(self, product_id: Union[int, str]) -> Optional[Product]:
        """
        Get a single product.

        Args:
            product_id: Product id (int or numeric string)

        Returns:
            Product, or None if unknown, invalid or the store failed
        """
        record_id = parse_product_id(product_id)
        if record_id is None:
            logger.warning(f"Ignoring invalid product id {sanitize_id_for_logging(product_id)}")
            return None

        with tracer.start_as_current_span("catalog.get_by_id") as span:
            span.set_attribute("product.id", record_id)
            try:
                response = await self.store.get_record_by_id(
                    self.table, record_id, RecordQuery(fields=list(PRODUCT_FIELDS))
                )
            except Exception as e:
                logger.error(f"Error fetching product {record_id}: {e}", exc_info=True)
                self.reporter.report(ERROR_LOAD_PRODUCT, e)
                return None

            if not response.success:
                self.reporter.report(response.message or ERROR_LOAD_PRODUCT)
                return None

            return normalize_product(response.data)

    async def get_by_category(self, category: str) -> list[Product]:
        with tracer.start_as_current_span("catalog.get_by_category"):
            return await self._fetch_products(filters.category_query(category), ERROR_LOAD_CATEGORY)

    async def search(self, text: str) -> list[Product]:
        """Case-insensitive substring search over brand, model and description."""
        text = text if isinstance(text, str) else ""
        logger.debug(f"Searching products for {sanitize_string_for_logging(text)}")
        with tracer.start_as_current_span("catalog.search"):
            return await self._fetch_products(filters.search_query(text), ERROR_SEARCH_PRODUCTS)

    async def get_featured(self, limit: int = filters.FEATURED_LIMIT) -> list[Product]:
        if not _is_limit(limit):
            logger.warning(f"Ignoring get_featured with limit {sanitize_id_for_logging(limit)}")
            return []
        with tracer.start_as_current_span("catalog.get_featured"):
            return await self._fetch_products(filters.featured_query(limit), ERROR_LOAD_FEATURED)

    async def get_related(
        self, product_id: Union[int, str], limit: int = filters.RELATED_LIMIT
    ) -> list[Product]:
        """
        Products sharing the brand or category of ``product_id``.

        The product itself is never part of the result.
        """
        if not _is_limit(limit):
            logger.warning(f"Ignoring get_related with limit {sanitize_id_for_logging(limit)}")
            return []

        with tracer.start_as_current_span("catalog.get_related"):
            current = await self.get_by_id(product_id)
            if current is None:
                return []

            candidates = await self._fetch_products(
                filters.related_query(current, limit), ERROR_LOAD_RELATED
            )
            exclude_id = parse_product_id(product_id)
            return [p for p in candidates if p.id != exclude_id][:limit]

    async def filter(self, spec: Union[FilterSpec, Mapping, None]) -> list[Product]:
        """
        Filter, sort and bucket the catalog.

        Args:
            spec: FilterSpec, or a mapping in the web client's camelCase shape

        Returns:
            Matching products in the requested order
        """
        if not isinstance(spec, FilterSpec):
            try:
                spec = FilterSpec.model_validate(spec or {})
            except ValidationError as e:
                logger.warning(f"Rejected product filter: {e.error_count()} errors")
                self.reporter.report(ERROR_INVALID_FILTER, e)
                return []

        with tracer.start_as_current_span("catalog.filter") as span:
            span.set_attribute("filter.sort", spec.sort_option.value)
            products = await self._fetch_products(filters.filter_query(spec), ERROR_FILTER_PRODUCTS)
            return filters.apply_case_size_filter(products, spec.case_sizes)

    async def _facet(self, field_name: str, error_message: str) -> list[str]:
        records = await self._fetch_records(filters.facet_query(field_name), error_message)
        values = {
            record.get(field_name)
            for record in records
            if isinstance(record, Mapping)
        }
        return sorted(v for v in values if isinstance(v, str) and v)

    async def get_brands(self) -> list[str]:
        """Distinct brands (first 200 records), alphabetical."""
        with tracer.start_as_current_span("catalog.get_brands"):
            return await self._facet("brand_c", ERROR_LOAD_BRANDS)

    async def get_categories(self) -> list[str]:
        """Distinct categories (first 200 records), alphabetical."""
        with tracer.start_as_current_span("catalog.get_categories"):
            return await self._facet("category_c", ERROR_LOAD_CATEGORIES)
