"""
Database Module - Supabase and Redis Clients

Factories for:
- Async Supabase client (remote record store)
- Async Upstash Redis client (local cart snapshot)

Clients are created per Storefront rather than cached in module globals, so
tests and multiple storefronts never share connections by accident.
"""

from supabase._async.client import AsyncClient, create_client as acreate_client
from upstash_redis.asyncio import Redis as AsyncRedis

from chronos.config import DEFAULT_CART_KEY, Settings


async def create_supabase(settings: Settings) -> AsyncClient:
    """
    Create an async Supabase client.

    Raises:
        ValueError: if SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing
    """
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return await acreate_client(settings.supabase_url, settings.supabase_key)


def create_redis(settings: Settings) -> AsyncRedis:
    """
    Create an async Upstash Redis client.

    Uses the standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    if not settings.redis_url or not settings.redis_token:
        raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
    return AsyncRedis(url=settings.redis_url, token=settings.redis_token)


class RedisKeys:
    """Redis keys used by the storefront."""

    # Whole cart document, JSON
    CART = DEFAULT_CART_KEY
