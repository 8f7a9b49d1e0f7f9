"""Pytest configuration and fixtures"""
import os
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest

from chronos.cart import CartManager, RedisCartStorage
from chronos.catalog import ProductService
from chronos.observability import FailureReporter
from chronos.services.models import Product
from chronos.services.query import RecordQuery
from chronos.services.repositories import RecordStore, StoreResponse

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test_key")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")


class FakeRedis:
    """In-memory stand-in for the async Upstash client."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.fail = False

    async def get(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        if self.fail:
            raise ConnectionError("redis down")
        self.data[key] = value

    async def delete(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        self.data.pop(key, None)


class FakeRecordStore(RecordStore):
    """Scripted record store that remembers every call."""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self.records = records or []
        self.fetch_calls: List[tuple] = []
        self.created: List[tuple] = []
        self.fetch_response: Optional[StoreResponse] = None
        self.fetch_error: Optional[Exception] = None
        self.create_response: Optional[StoreResponse] = None
        self.create_error: Optional[Exception] = None

    async def fetch_records(self, table: str, query: RecordQuery) -> StoreResponse:
        self.fetch_calls.append((table, query))
        if self.fetch_error:
            raise self.fetch_error
        if self.fetch_response is not None:
            return self.fetch_response
        return StoreResponse.ok(list(self.records))

    async def get_record_by_id(self, table, record_id, query=None) -> StoreResponse:
        if self.fetch_error:
            raise self.fetch_error
        for record in self.records:
            if record.get("Id") == record_id:
                return StoreResponse.ok(record)
        return StoreResponse.failed("Record not found")

    async def create_record(self, table: str, records: list) -> StoreResponse:
        self.created.append((table, records))
        if self.create_error:
            raise self.create_error
        return self.create_response or StoreResponse.ok(records)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def record_store():
    return FakeRecordStore()


@pytest.fixture
def reporter():
    """Mock failure reporter"""
    return Mock(spec=FailureReporter)


@pytest.fixture
def product_service(record_store, reporter):
    return ProductService(record_store, reporter=reporter)


@pytest.fixture
def cart_storage(fake_redis):
    return RedisCartStorage(fake_redis)


@pytest.fixture
def cart_manager(cart_storage, record_store, reporter):
    return CartManager(cart_storage, store=record_store, reporter=reporter)


@pytest.fixture
def sample_record():
    """Raw product record as the store returns it"""
    return {
        "Id": 1,
        "Name": "SKX007",
        "brand_c": "Seiko",
        "model_c": "SKX007",
        "price_c": "299.99",
        "original_price_c": "349.00",
        "category_c": "Dive",
        "description_c": "Automatic dive watch",
        "movement_c": "Automatic",
        "case_size_c": "42",
        "case_material_c": "Stainless steel",
        "band_material_c": "Rubber",
        "water_resistance_c": "200m",
        "in_stock_c": True,
        "stock_count_c": "5",
        "featured_c": True,
        "images_c": "https://img.example/1.jpg\nhttps://img.example/2.jpg\n",
        "band_options_c": "Rubber\nJubilee",
        "Tags": "dive,automatic",
    }


def make_product(product_id: int = 1, price: str = "100", **kwargs) -> Product:
    """Product with sensible defaults for cart tests"""
    fields = {
        "id": product_id,
        "brand": "X",
        "model": f"Model {product_id}",
        "price": price,
        "in_stock": True,
        "stock_count": 3,
        "images": ("https://img.example/x.jpg",),
    }
    fields.update(kwargs)
    return Product(**fields)


@pytest.fixture
def sample_product():
    return make_product()
