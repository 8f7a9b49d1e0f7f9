"""
Storefront - composition root for the catalog and the cart.

Usage:
    from chronos.services.storefront import Storefront

    storefront = await Storefront.create()
    products = await storefront.catalog.filter({"brands": ["Seiko"]})
    cart = await storefront.cart.add_item(products[0], 1, "steel")
    await storefront.close()

Pass the instance to whatever needs it; there is no module-level singleton.
"""

from dataclasses import dataclass
from typing import Optional

from chronos.cart import CartManager, RedisCartStorage
from chronos.catalog import ProductService
from chronos.config import Settings
from chronos.db import create_redis, create_supabase
from chronos.logging import get_logger
from chronos.observability import FailureReporter, setup_tracing
from chronos.services.repositories import RecordStore, SupabaseRecordStore

logger = get_logger(__name__)


@dataclass
class Storefront:
    """Catalog and cart wired to the same record store and reporter."""
    catalog: ProductService
    cart: CartManager
    settings: Settings

    @classmethod
    def build(
        cls,
        store: RecordStore,
        redis,
        settings: Optional[Settings] = None,
        reporter: Optional[FailureReporter] = None,
    ) -> "Storefront":
        """Wire services around already-created clients."""
        settings = settings or Settings()
        reporter = reporter or FailureReporter()
        catalog = ProductService(store, reporter=reporter, table=settings.product_table)
        cart = CartManager(
            RedisCartStorage(redis, key=settings.cart_key),
            store=store,
            reporter=reporter,
            table=settings.cart_table,
        )
        return cls(catalog=catalog, cart=cart, settings=settings)

    @classmethod
    async def create(
        cls,
        settings: Optional[Settings] = None,
        reporter: Optional[FailureReporter] = None,
    ) -> "Storefront":
        """
        Async factory: read settings, create the Supabase and Redis clients.

        Raises:
            ValueError: if store or Redis credentials are missing
        """
        settings = settings or Settings.from_env()
        setup_tracing(settings)

        client = await create_supabase(settings)
        redis = create_redis(settings)
        logger.info("Storefront initialized")
        return cls.build(SupabaseRecordStore(client), redis, settings, reporter)

    async def close(self) -> None:
        """Let pending cart summaries finish."""
        await self.cart.drain()
