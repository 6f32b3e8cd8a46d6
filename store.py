import enum
import logging
import math
import threading
import time

import redis

from errors import StoreError

logger = logging.getLogger(__name__)


class KeyNamespace(enum.Enum):
    CAPTCHA    = 'captcha'
    EMAIL_CODE = 'emailcode'


def make_key(namespace: KeyNamespace, ident: str) -> str:
    """Build the store key for ``ident`` inside ``namespace``."""
    if not isinstance(namespace, KeyNamespace):
        raise TypeError(f"Expected KeyNamespace, got {type(namespace).__name__}")
    return f"{namespace.value}:{ident}"


class MemoryStore:
    """
    In-process key-value store with per-key expiry.

    Expired entries are dropped lazily on access. ``clock`` must return
    seconds from a monotonic source; tests pass a controllable one.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._data = {}
        self._lock = threading.Lock()

    def _live(self, key):
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    def get(self, key: str):
        with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be a positive number of seconds")
        with self._lock:
            self._data[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def ttl(self, key: str):
        """Whole seconds left before ``key`` expires (rounded up), or None."""
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return None
            return math.ceil(entry[1] - self._clock())

    def __len__(self):
        with self._lock:
            return sum(1 for key in list(self._data) if self._live(key))


class RedisStore:
    """Adapts a ``redis.Redis`` client to the store interface."""

    def __init__(self, client: redis.Redis):
        self._client = client

    @staticmethod
    def _decode(value):
        if isinstance(value, bytes):
            return value.decode('utf-8')
        return value

    def get(self, key: str):
        try:
            return self._decode(self._client.get(key))
        except redis.RedisError as err:
            logger.error("Redis GET %s failed: %s", key, err)
            raise StoreError(f"Store read failed for {key}") from err

    def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be a positive number of seconds")
        try:
            self._client.set(key, value, ex=ttl)
        except redis.RedisError as err:
            logger.error("Redis SET %s failed: %s", key, err)
            raise StoreError(f"Store write failed for {key}") from err

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as err:
            logger.error("Redis DEL %s failed: %s", key, err)
            raise StoreError(f"Store delete failed for {key}") from err

    def ttl(self, key: str):
        try:
            seconds = self._client.ttl(key)
        except redis.RedisError as err:
            logger.error("Redis TTL %s failed: %s", key, err)
            raise StoreError(f"Store TTL lookup failed for {key}") from err
        # -2: no such key, -1: key without expiry
        if seconds is None or seconds < 0:
            return None
        return int(seconds)

    def close(self) -> None:
        self._client.close()
