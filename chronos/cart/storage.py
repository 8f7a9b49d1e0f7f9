"""Local cart storage: one JSON document under a single key."""
from abc import ABC, abstractmethod
from typing import Optional, Union

from chronos.db import RedisKeys
from chronos.errors import CartStorageError
from chronos.logging import get_logger

logger = get_logger(__name__)


class CartStorage(ABC):
    """Whole-document key-value storage for the cart.

    Implementations raise CartStorageError when the backend is unreachable.
    """

    @abstractmethod
    async def load(self) -> Optional[Union[str, bytes]]:
        """Return the stored JSON document (text or raw bytes), or None if there is none."""

    @abstractmethod
    async def save(self, payload: str) -> None:
        """Replace the stored document."""

    @abstractmethod
    async def clear(self) -> None:
        """Delete the stored document."""


class RedisCartStorage(CartStorage):
    """Cart document in (Upstash) Redis."""

    def __init__(self, redis, key: str = RedisKeys.CART, ttl: Optional[int] = None):
        self.redis = redis
        self.key = key
        self.ttl = ttl

    async def load(self) -> Optional[Union[str, bytes]]:
        try:
            data = await self.redis.get(self.key)
        except Exception as e:
            logger.error(f"Failed to get cart from Redis: {e}")
            raise CartStorageError(f"Cart storage unavailable: {e}") from e
        # Bytes are decoded by the reader so bad encodings count as corrupted data
        return data

    async def save(self, payload: str) -> None:
        try:
            if self.ttl:
                await self.redis.set(self.key, payload, ex=self.ttl)
            else:
                await self.redis.set(self.key, payload)
        except Exception as e:
            logger.error(f"Failed to save cart to Redis: {e}")
            raise CartStorageError(f"Cart storage unavailable: {e}") from e

    async def clear(self) -> None:
        try:
            await self.redis.delete(self.key)
        except Exception as e:
            logger.error(f"Failed to clear cart from Redis: {e}")
            raise CartStorageError(f"Cart storage unavailable: {e}") from e
