"""Redis client for the broker health check"""
import redis.asyncio as redis

from courtside.config.settings import get_settings


def redis_client() -> redis.Redis:
    """Short-lived client; the caller closes it with ``aclose()``"""
    return redis.Redis.from_url(get_settings().REDIS_URL, socket_connect_timeout=2)
