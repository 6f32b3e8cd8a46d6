import logging

import redis

import settings
from errors import StoreError

logger = logging.getLogger(__name__)


def get_connection(url: str = None) -> redis.Redis:
    """
    Open a Redis client for ``url`` (defaults to REDIS_URL) and check it
    answers. Closing the client is the caller's job.
    """
    url = url or settings.REDIS_URL
    client = redis.Redis.from_url(url, decode_responses=True)
    try:
        client.ping()
    except redis.RedisError as err:
        logger.error("Redis connection error: %s", err)
        client.close()
        raise StoreError(f"Cannot reach Redis at {url}") from err
    return client
