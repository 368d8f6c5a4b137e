"""
Keyed TTL store for pending bookings, reservations and user profiles.

A key is absent once ``ttl_seconds`` have passed since its last ``put``;
every ``put`` re-arms the window. There is no scan API: callers that need
"get all" keep their own list-valued index key.

``compare_and_swap`` and ``put_if_absent`` are the atomic primitives, used by
the lifecycle managers so that two racing confirmations mint tickets only
once and two racing creators both land in the index.
"""

import copy
import json
import logging
import time
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class TTLStore(ABC):
    """Interface shared by the in-memory and Redis backends."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def compare_and_swap(self, key: str, expected: Any, value: Any, ttl_seconds: int) -> bool:
        """Write ``value`` only if the live value equals ``expected``."""
        pass

    @abstractmethod
    def put_if_absent(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """Write ``value`` only if ``key`` holds no live value."""
        pass


class InMemoryTTLStore(TTLStore):
    """
    Dict-backed store with expiry timestamps, checked lazily on read.

    Values are deep-copied on the way in and out so the store stays the only
    place of record.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = RLock()
        self._data: Dict[str, Tuple[float, Any]] = {}

    def _live(self, key: str) -> Tuple[bool, Any]:
        entry = self._data.get(key)
        if entry is None:
            return False, None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return False, None
        return True, value

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            found, value = self._live(key)
            return copy.deepcopy(value) if found else default

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        with self._lock:
            self._data[key] = (self._clock() + ttl_seconds, copy.deepcopy(value))

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def compare_and_swap(self, key: str, expected: Any, value: Any, ttl_seconds: int) -> bool:
        with self._lock:
            found, current = self._live(key)
            if not found or current != expected:
                return False
            self._data[key] = (self._clock() + ttl_seconds, copy.deepcopy(value))
            return True

    def put_if_absent(self, key: str, value: Any, ttl_seconds: int) -> bool:
        with self._lock:
            found, _ = self._live(key)
            if found:
                return False
            self._data[key] = (self._clock() + ttl_seconds, copy.deepcopy(value))
            return True

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, (expires_at, _) in self._data.items() if now >= expires_at]
            for k in expired:
                del self._data[k]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for expires_at, _ in self._data.values() if self._clock() < expires_at)


class RedisTTLStore(TTLStore):
    """
    Redis/Valkey-backed store. Values are JSON documents with native ``EX``
    expiry; ``compare_and_swap`` runs as a WATCH/MULTI transaction.
    """

    def __init__(self, client, namespace: str = "tourism:"):
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "tourism:") -> "RedisTTLStore":
        import redis

        return cls(redis.Redis.from_url(url, decode_responses=True), namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._client.get(self._key(key))
        if raw is None:
            return default
        return json.loads(raw)

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._client.set(self._key(key), json.dumps(value), ex=ttl_seconds)

    def delete(self, key: str) -> None:
        self._client.delete(self._key(key))

    def compare_and_swap(self, key: str, expected: Any, value: Any, ttl_seconds: int) -> bool:
        full_key = self._key(key)
        payload = json.dumps(value)

        def _swap(pipe) -> bool:
            # Immediate-mode read while the key is watched
            raw = pipe.get(full_key)
            if raw is None or json.loads(raw) != expected:
                return False
            pipe.multi()
            pipe.set(full_key, payload, ex=ttl_seconds)
            return True

        return self._client.transaction(_swap, full_key, value_from_callable=True)

    def put_if_absent(self, key: str, value: Any, ttl_seconds: int) -> bool:
        return bool(self._client.set(self._key(key), json.dumps(value), ex=ttl_seconds, nx=True))


def create_store(backend: str = "memory", redis_url: Optional[str] = None) -> TTLStore:
    """Build the store named by ``CACHE_BACKEND``."""
    if backend == "memory":
        return InMemoryTTLStore()
    if backend in ("redis", "valkey"):
        logger.info(f"Using Redis TTL store at {redis_url}")
        return RedisTTLStore.from_url(redis_url)
    raise ValueError(f"Unsupported CACHE_BACKEND: {backend}")
