"""
Chronos Core Module

This package contains the storefront core:
- catalog: record normalization, query building, product queries
- cart: cart models, local storage, cart manager
- services: money helpers, record store, composition root
- observability: tracing and failure reporting

Note: Imports are lazy so that importing a leaf module (e.g. the normalizer)
does not pull in the Supabase and Redis clients.
"""

__all__ = [
    "Settings",
    "Storefront",
]


def __getattr__(name):
    """Lazy attribute access for the composition root."""
    if name == "Settings":
        from chronos.config import Settings
        return Settings
    elif name == "Storefront":
        from chronos.services.storefront import Storefront
        return Storefront
    raise AttributeError(f"module 'chronos' has no attribute '{name}'")
