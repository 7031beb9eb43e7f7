from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol

import redis
from redis.exceptions import RedisError

from .errors import InfrastructureFailure


class KeyValueCache(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    def delete(self, key: str) -> bool: ...

    def is_alive(self) -> bool: ...


class MemoryCache:
    """Process-local TTL cache for tests and single-process deployments."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._values: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _cleanup(self) -> None:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._values.items() if expires_at <= now]
        for key in expired:
            self._values.pop(key, None)

    def get(self, key: str) -> str | None:
        with self._lock:
            self._cleanup()
            hit = self._values.get(key)
            return hit[1] if hit is not None else None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._cleanup()
            self._values[key] = (self._clock() + max(1, ttl_seconds), value)

    def delete(self, key: str) -> bool:
        with self._lock:
            self._cleanup()
            return self._values.pop(key, None) is not None

    def is_alive(self) -> bool:
        return True


class RedisCache:
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except RedisError as error:
            raise InfrastructureFailure("Cache unavailable.") from error

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._client.set(key, value, ex=max(1, ttl_seconds))
        except RedisError as error:
            raise InfrastructureFailure("Cache unavailable.") from error

    def delete(self, key: str) -> bool:
        try:
            return bool(self._client.delete(key))
        except RedisError as error:
            raise InfrastructureFailure("Cache unavailable.") from error

    def is_alive(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError:
            return False
