"""Cart manager service: local snapshot plus best-effort remote summary."""
import asyncio
import json
import time
from typing import Callable, Optional, Union

from chronos.config import DEFAULT_CART_TABLE
from chronos.errors import ERROR_CART_SYNC, ERROR_CART_UNAVAILABLE, CartStorageError
from chronos.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from chronos.observability import FailureReporter, get_tracer
from chronos.services.models import Product, parse_product_id
from chronos.services.money import to_float
from chronos.services.repositories import RecordStore

from .models import Cart, CartItem
from .storage import CartStorage

logger = get_logger(__name__)
tracer = get_tracer(__name__)


def _is_quantity(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CartManager:
    """
    Manages the shopping cart.

    Every operation reloads the cart from storage, works on that copy and
    writes the whole document back, so nothing is cached between calls.
    After each write a summary (subtotal, tax, total) is sent to the record
    store in a background task; that mirror never blocks or fails a call.

    Concurrent mutations are last-write-wins.
    """

    def __init__(
        self,
        storage: CartStorage,
        store: Optional[RecordStore] = None,
        reporter: Optional[FailureReporter] = None,
        table: str = DEFAULT_CART_TABLE,
    ):
        self.storage = storage
        self.store = store
        self.reporter = reporter or FailureReporter()
        self.table = table
        self._pending: set[asyncio.Task] = set()

    async def _load(self) -> Cart:
        """Read the cart; corrupted documents are cleared and replaced by an empty cart."""
        payload = await self.storage.load()
        if not payload:
            return Cart()

        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8")
            return Cart.from_dict(json.loads(payload))
        except (
            KeyError,
            TypeError,
            ValueError,  # includes JSONDecodeError and UnicodeDecodeError
            AttributeError,
            OverflowError,
            RecursionError,
        ) as e:
            logger.warning(f"Corrupted cart data, resetting: {e}")
            await self.storage.clear()
            return Cart()

    async def _persist(self, cart: Cart) -> None:
        await self.storage.save(json.dumps(cart.to_dict()))
        self._schedule_mirror(cart)

    async def _mutate(self, name: str, mutate: Callable[[Cart], bool]) -> Cart:
        """
        Reload, apply ``mutate`` to a copy, persist if it changed anything.

        Returns the updated cart; the loaded cart if the write failed; an
        empty cart if storage could not be read.
        """
        with tracer.start_as_current_span(f"cart.{name}"):
            try:
                loaded = await self._load()
            except CartStorageError as e:
                self.reporter.report(ERROR_CART_UNAVAILABLE, e)
                return Cart()

            updated = loaded.copy()
            if not mutate(updated):
                return updated

            try:
                await self._persist(updated)
            except CartStorageError as e:
                self.reporter.report(ERROR_CART_UNAVAILABLE, e)
                return loaded

            return updated

    def _schedule_mirror(self, cart: Cart) -> None:
        """Fire-and-forget summary write; the task is tracked so it is not collected early."""
        if self.store is None:
            return

        summary = {
            "Name": f"Cart-{int(time.time() * 1000)}",
            "subtotal_c": to_float(cart.subtotal),
            "tax_c": to_float(cart.tax),
            "total_c": to_float(cart.total),
        }
        task = asyncio.create_task(self._mirror_totals(summary))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _mirror_totals(self, summary: dict) -> None:
        try:
            response = await self.store.create_record(self.table, [summary])
        except Exception as e:
            logger.error(f"Error saving cart to database: {e}")
            return

        if not response.success:
            logger.error(f"{ERROR_CART_SYNC}: {response.message}")

    async def drain(self) -> None:
        """Wait for in-flight summary writes (shutdown, tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def get_cart(self) -> Cart:
        """Current cart (empty if storage is unavailable)."""
        with tracer.start_as_current_span("cart.get_cart"):
            try:
                return await self._load()
            except CartStorageError as e:
                self.reporter.report(ERROR_CART_UNAVAILABLE, e)
                return Cart()

    async def add_item(self, product: Product, quantity: int = 1, selected_band: str = "") -> Cart:
        """
        Add ``quantity`` units of a product/band combination.

        An existing line for the same (product, band) is incremented; stock
        count is not enforced. Non-positive quantities change nothing.
        """
        band = selected_band or ""
        product_id = parse_product_id(getattr(product, "id", None))
        if product_id is None or not _is_quantity(quantity) or quantity <= 0:
            logger.warning(
                f"Ignoring add_item for product {sanitize_id_for_logging(getattr(product, 'id', None))} "
                f"with quantity {sanitize_id_for_logging(quantity)}"
            )
            return await self._mutate("add_item", lambda cart: False)

        def mutate(cart: Cart) -> bool:
            existing = cart.find(product_id, band)
            if existing:
                existing.quantity += quantity
            else:
                cart.items.append(CartItem.from_product(product, product_id, quantity, band))
            return True

        logger.info(
            f"Adding {quantity} x product {product_id} "
            f"(band {sanitize_string_for_logging(band)}) to cart"
        )
        return await self._mutate("add_item", mutate)

    async def update_quantity(
        self, product_id: Union[int, str], quantity: int, selected_band: str = ""
    ) -> Cart:
        """
        Set the quantity of a line (absolute, not incremental).

        A quantity of zero or less removes the line. Unknown lines are left
        alone.
        """
        band = selected_band or ""
        parsed_id = parse_product_id(product_id)
        if parsed_id is None or not _is_quantity(quantity):
            logger.warning(f"Ignoring update_quantity for product {sanitize_id_for_logging(product_id)}")
            return await self._mutate("update_quantity", lambda cart: False)

        def mutate(cart: Cart) -> bool:
            existing = cart.find(parsed_id, band)
            if existing is None:
                return False
            if quantity <= 0:
                cart.items.remove(existing)
            else:
                existing.quantity = quantity
            return True

        return await self._mutate("update_quantity", mutate)

    async def remove_item(self, product_id: Union[int, str], selected_band: str = "") -> Cart:
        """Remove a line; removing an absent line is a no-op."""
        band = selected_band or ""
        parsed_id = parse_product_id(product_id)

        def mutate(cart: Cart) -> bool:
            existing = cart.find(parsed_id, band) if parsed_id is not None else None
            if existing is None:
                return False
            cart.items.remove(existing)
            return True

        return await self._mutate("remove_item", mutate)

    async def clear_cart(self) -> Cart:
        """Replace the cart with an empty one."""
        with tracer.start_as_current_span("cart.clear_cart"):
            cart = Cart()
            try:
                await self._persist(cart)
            except CartStorageError as e:
                self.reporter.report(ERROR_CART_UNAVAILABLE, e)
            return cart

    async def get_item_count(self) -> int:
        """Total units across all lines."""
        cart = await self.get_cart()
        return cart.item_count
