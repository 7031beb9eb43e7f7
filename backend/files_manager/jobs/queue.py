from __future__ import annotations

import json
import logging
import queue
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

import redis
from redis.exceptions import RedisError

from ..common.errors import InfrastructureFailure


logger = logging.getLogger(__name__)

THUMBNAIL_QUEUE = "thumbnails"
WELCOME_QUEUE = "welcome"


class JobError(Exception):
    """A job could not be completed. Jobs are never retried."""

    def __init__(self, message: str, *, permanent: bool = False) -> None:
        super().__init__(message)
        self.permanent = permanent


def _require_int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None or isinstance(value, bool):
        raise JobError(f"Missing {key}", permanent=True)
    try:
        return int(value)
    except (TypeError, ValueError) as error:
        raise JobError(f"Invalid {key}", permanent=True) from error


@dataclass(frozen=True)
class ThumbnailJob:
    file_id: int
    owner_id: int
    sizes: tuple[int, ...] = field(default=(500, 250, 100))

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["sizes"] = list(self.sizes)
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ThumbnailJob":
        raw_sizes = payload.get("sizes") or []
        if not isinstance(raw_sizes, list) or not raw_sizes:
            raise JobError("Missing sizes", permanent=True)
        try:
            sizes = tuple(int(size) for size in raw_sizes)
        except (TypeError, ValueError) as error:
            raise JobError("Invalid sizes", permanent=True) from error
        if any(size <= 0 for size in sizes):
            raise JobError("Invalid sizes", permanent=True)
        return cls(
            file_id=_require_int(payload, "file_id"),
            owner_id=_require_int(payload, "owner_id"),
            sizes=sizes,
        )


@dataclass(frozen=True)
class WelcomeJob:
    user_id: int

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "WelcomeJob":
        return cls(user_id=_require_int(payload, "user_id"))


class JobQueue(Protocol):
    name: str

    def enqueue(self, payload: dict[str, Any]) -> None: ...

    def dequeue(self, timeout: float | None = None) -> dict[str, Any] | None: ...

    def size(self) -> int: ...

    def is_alive(self) -> bool: ...


class MemoryJobQueue:
    """In-process queue. Jobs do not survive a restart."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._queue: queue.Queue[str] = queue.Queue()

    def enqueue(self, payload: dict[str, Any]) -> None:
        self._queue.put(json.dumps(payload))

    def dequeue(self, timeout: float | None = None) -> dict[str, Any] | None:
        try:
            if not timeout:
                raw = self._queue.get_nowait()
            else:
                raw = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        return json.loads(raw)

    def size(self) -> int:
        return self._queue.qsize()

    def is_alive(self) -> bool:
        return True


class RedisJobQueue:
    """Redis list used as a FIFO: producers LPUSH, workers BRPOP."""

    def __init__(self, client: redis.Redis, name: str) -> None:
        self._client = client
        self.name = name
        self.key = f"queue:{name}"

    def enqueue(self, payload: dict[str, Any]) -> None:
        try:
            self._client.lpush(self.key, json.dumps(payload))
        except RedisError as error:
            raise InfrastructureFailure("Job queue unavailable.") from error

    def dequeue(self, timeout: float | None = None) -> dict[str, Any] | None:
        if not timeout:
            raw = self._client.rpop(self.key)
        else:
            popped = self._client.brpop([self.key], timeout=timeout)
            raw = popped[1] if popped else None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.error("dropping undecodable job on %s: %r", self.name, raw)
            return None

    def size(self) -> int:
        return int(self._client.llen(self.key))

    def is_alive(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisError:
            return False


def build_queue(backend: str, name: str, redis_url: str) -> JobQueue:
    if backend == "memory":
        return MemoryJobQueue(name)
    if backend == "redis":
        return RedisJobQueue(redis.Redis.from_url(redis_url, decode_responses=True), name)
    raise ValueError(f"Unknown queue backend: {backend}")
