"""Catalog package: record normalizer, query builders, product service."""
from .normalizer import normalize_product, normalize_products
from .service import ProductService

__all__ = [
    "ProductService",
    "normalize_product",
    "normalize_products",
]
