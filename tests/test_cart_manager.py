"""Tests for the cart manager"""
import json
import random
from decimal import Decimal

import pytest

from chronos.cart import CartManager, RedisCartStorage
from chronos.errors import ERROR_CART_UNAVAILABLE
from chronos.services.repositories import StoreResponse
from conftest import make_product

CART_KEY = "chronos-cart"


def assert_totals_consistent(cart):
    subtotal = sum((item.price * item.quantity for item in cart.items), Decimal("0"))
    assert cart.subtotal == subtotal
    assert abs(cart.tax - subtotal * Decimal("0.08")) < Decimal("0.0001")
    assert cart.total == cart.subtotal + cart.tax


@pytest.mark.asyncio
async def test_add_update_remove_scenario(cart_manager, sample_product):
    """Test the add, merge, zero-quantity walkthrough"""
    cart = await cart_manager.add_item(sample_product, 2, "black")
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2
    assert (cart.subtotal, cart.tax, cart.total) == (200, 16, 216)

    cart = await cart_manager.add_item(sample_product, 1, "black")
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3
    assert (cart.subtotal, cart.tax, cart.total) == (300, 24, 324)

    cart = await cart_manager.update_quantity(1, 0, "black")
    assert cart.items == []
    assert (cart.subtotal, cart.tax, cart.total) == (0, 0, 0)


@pytest.mark.asyncio
async def test_different_bands_are_distinct_lines(cart_manager, sample_product):
    await cart_manager.add_item(sample_product, 1, "black")
    cart = await cart_manager.add_item(sample_product, 1, "steel")

    assert [item.key for item in cart.items] == [(1, "black"), (1, "steel")]


@pytest.mark.asyncio
async def test_update_quantity_sets_value(cart_manager, sample_product):
    """Test update is absolute, not incremental"""
    await cart_manager.add_item(sample_product, 2)

    cart = await cart_manager.update_quantity("1", 5)

    assert cart.items[0].quantity == 5
    assert cart.subtotal == Decimal("500")


@pytest.mark.asyncio
async def test_update_missing_line_is_noop(cart_manager, sample_product, fake_redis):
    await cart_manager.add_item(sample_product, 1, "black")
    before = fake_redis.data[CART_KEY]

    cart = await cart_manager.update_quantity(1, 4, "steel")

    assert cart.items[0].quantity == 1
    assert fake_redis.data[CART_KEY] == before


@pytest.mark.asyncio
async def test_remove_item(cart_manager, sample_product):
    await cart_manager.add_item(sample_product, 1, "black")
    await cart_manager.add_item(make_product(2, price="50"), 1)

    cart = await cart_manager.remove_item(1, "black")

    assert [item.product_id for item in cart.items] == [2]
    assert cart.total == Decimal("54.00")


@pytest.mark.asyncio
async def test_remove_absent_is_noop(cart_manager, sample_product, reporter):
    """Test removing an absent line neither fails nor changes the cart"""
    await cart_manager.add_item(sample_product, 1)

    cart = await cart_manager.remove_item(99)
    cart = await cart_manager.remove_item("not-an-id")

    assert len(cart.items) == 1
    reporter.report.assert_not_called()


@pytest.mark.asyncio
async def test_clear_cart(cart_manager, sample_product, fake_redis):
    await cart_manager.add_item(sample_product, 3)

    cart = await cart_manager.clear_cart()

    assert cart.items == []
    assert (cart.subtotal, cart.tax, cart.total) == (0, 0, 0)
    assert json.loads(fake_redis.data[CART_KEY])["items"] == []


@pytest.mark.asyncio
async def test_get_item_count(cart_manager, sample_product):
    await cart_manager.add_item(sample_product, 2, "black")
    await cart_manager.add_item(make_product(2), 3)

    assert await cart_manager.get_item_count() == 5


@pytest.mark.asyncio
async def test_no_stock_cap(cart_manager):
    product = make_product(1, stock_count=1)

    cart = await cart_manager.add_item(product, 10)

    assert cart.items[0].quantity == 10


@pytest.mark.asyncio
async def test_non_positive_add_is_ignored(cart_manager, sample_product, fake_redis):
    cart = await cart_manager.add_item(sample_product, 0)

    assert cart.items == []
    assert CART_KEY not in fake_redis.data


@pytest.mark.asyncio
async def test_snapshot_fields_do_not_refresh(cart_manager):
    """Test a later price change does not touch the existing line"""
    await cart_manager.add_item(make_product(1, price="100"), 1)

    cart = await cart_manager.add_item(make_product(1, price="80"), 1)

    assert cart.items[0].price == Decimal("100")
    assert cart.subtotal == Decimal("200")


@pytest.mark.asyncio
async def test_reloads_state_each_call(cart_storage, record_store, sample_product):
    """Test two managers on the same storage see each other's writes"""
    first = CartManager(cart_storage, store=record_store)
    second = CartManager(cart_storage, store=record_store)

    await first.add_item(sample_product, 1)
    cart = await second.add_item(sample_product, 1)

    assert cart.items[0].quantity == 2


@pytest.mark.asyncio
async def test_returned_cart_is_a_copy(cart_manager, sample_product):
    cart = await cart_manager.add_item(sample_product, 1)
    cart.items[0].quantity = 50

    assert (await cart_manager.get_cart()).items[0].quantity == 1


@pytest.mark.asyncio
async def test_mirror_writes_summary(cart_manager, sample_product, record_store):
    """Test each write sends totals only to the cart table"""
    await cart_manager.add_item(sample_product, 2)
    await cart_manager.drain()

    table, records = record_store.created[0]
    assert table == "cart_c"
    summary = records[0]
    assert summary["Name"].startswith("Cart-")
    assert (summary["subtotal_c"], summary["tax_c"], summary["total_c"]) == (200.0, 16.0, 216.0)
    assert "items" not in summary


@pytest.mark.asyncio
async def test_mirror_failure_is_swallowed(cart_manager, sample_product, record_store, fake_redis, reporter):
    """Test a failing mirror never reaches the caller or the local write"""
    record_store.create_error = ConnectionError("down")

    cart = await cart_manager.add_item(sample_product, 1)
    await cart_manager.drain()

    assert cart.items[0].quantity == 1
    assert CART_KEY in fake_redis.data
    reporter.report.assert_not_called()


@pytest.mark.asyncio
async def test_mirror_logical_failure_is_logged(cart_manager, sample_product, record_store):
    record_store.create_response = StoreResponse.failed("no table")

    cart = await cart_manager.add_item(sample_product, 1)
    await cart_manager.drain()

    assert len(cart.items) == 1


@pytest.mark.asyncio
async def test_storage_unavailable(cart_manager, sample_product, fake_redis, reporter):
    """Test an unreachable store yields an empty cart instead of raising"""
    fake_redis.fail = True

    cart = await cart_manager.add_item(sample_product, 1)

    assert cart.items == []
    assert await cart_manager.get_item_count() == 0
    assert reporter.report.call_args[0][0] == ERROR_CART_UNAVAILABLE


@pytest.mark.asyncio
async def test_failed_save_returns_loaded_cart(cart_manager, sample_product, fake_redis, record_store):
    await cart_manager.add_item(sample_product, 1)
    await cart_manager.drain()

    async def broken_set(key, value, ex=None):
        raise ConnectionError("write failed")

    fake_redis.set = broken_set
    cart = await cart_manager.add_item(sample_product, 1)
    await cart_manager.drain()

    assert cart.items[0].quantity == 1
    assert len(record_store.created) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    "{not json",
    '{"items": [{"productId": 1, "quantity": Infinity}]}',
    '{"items": [{"productId": 1e400, "quantity": 1}]}',
    b'{"items": [\xff]}',
    "[" * 100000,
    '{"items": 5}',
    "[]",
])
async def test_corrupted_cart_is_reset(cart_manager, fake_redis, payload):
    fake_redis.data[CART_KEY] = payload

    cart = await cart_manager.get_cart()

    assert cart.items == []
    assert CART_KEY not in fake_redis.data


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    '{"items": [{"productId": 1, "quantity": Infinity}]}',
    b'\xff\xfe\xfd',
    "[" * 100000,
])
async def test_add_after_corrupted_cart(cart_manager, fake_redis, sample_product, payload):
    """Test a damaged document is replaced instead of failing the write"""
    fake_redis.data[CART_KEY] = payload

    cart = await cart_manager.add_item(sample_product, 1)

    assert cart.items[0].quantity == 1
    assert json.loads(fake_redis.data[CART_KEY])["items"][0]["quantity"] == 1


@pytest.mark.asyncio
async def test_stored_bytes_are_decoded(cart_manager, fake_redis):
    fake_redis.data[CART_KEY] = b'{"items": [{"productId": 1, "quantity": 2, "price": "10"}]}'

    cart = await cart_manager.get_cart()

    assert cart.items[0].quantity == 2


@pytest.mark.asyncio
async def test_ttl_passed_to_redis(fake_redis, sample_product):
    calls = []
    original_set = fake_redis.set

    async def recording_set(key, value, ex=None):
        calls.append(ex)
        await original_set(key, value, ex=ex)

    fake_redis.set = recording_set
    manager = CartManager(RedisCartStorage(fake_redis, ttl=3600))

    await manager.add_item(sample_product, 1)

    assert calls == [3600]


@pytest.mark.asyncio
async def test_totals_stay_consistent(cart_manager):
    """Test totals after a random sequence of mutations"""
    rng = random.Random(7)
    products = [make_product(i, price=f"{rng.randint(1, 500)}.{rng.randint(0, 99):02d}") for i in range(1, 5)]
    bands = ["", "black", "steel"]

    for _ in range(40):
        product = rng.choice(products)
        band = rng.choice(bands)
        action = rng.choice(["add", "update", "remove"])
        if action == "add":
            cart = await cart_manager.add_item(product, rng.randint(1, 3), band)
        elif action == "update":
            cart = await cart_manager.update_quantity(product.id, rng.randint(-1, 4), band)
        else:
            cart = await cart_manager.remove_item(product.id, band)

        assert_totals_consistent(cart)
        keys = [item.key for item in cart.items]
        assert len(keys) == len(set(keys))
        assert all(item.quantity > 0 for item in cart.items)

    await cart_manager.drain()
