"""
Common Error Constants

Centralized failure messages shown to users and written to logs.
"""

# Catalog errors
ERROR_LOAD_PRODUCTS = "Failed to load products"
ERROR_LOAD_PRODUCT = "Failed to load product"
ERROR_LOAD_CATEGORY = "Failed to load category products"
ERROR_SEARCH_PRODUCTS = "Failed to search products"
ERROR_LOAD_FEATURED = "Failed to load featured products"
ERROR_LOAD_RELATED = "Failed to load related products"
ERROR_FILTER_PRODUCTS = "Failed to filter products"
ERROR_INVALID_FILTER = "Invalid product filter"
ERROR_LOAD_BRANDS = "Failed to load brands"
ERROR_LOAD_CATEGORIES = "Failed to load categories"

# Store errors
ERROR_RECORD_NOT_FOUND = "Record not found"

# Cart errors
ERROR_CART_UNAVAILABLE = "Cart storage unavailable"
ERROR_CART_SYNC = "Failed to save cart to database"


class CartStorageError(Exception):
    """Local cart storage could not be read or written."""
