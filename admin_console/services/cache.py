from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Iterable
from typing import Any, Protocol, TypeVar

from admin_console.lifecycle.query import params_key

logger = logging.getLogger(__name__)

CacheKey = tuple[Hashable, ...]
T = TypeVar("T")

# moderation queue counts shown on the KYC screen
OVERVIEW_KEY: CacheKey = ("kyc", "overview")

# extra keys dropped alongside a collection's lists when one of its entities changes
RELATED_KEYS: dict[str, tuple[CacheKey, ...]] = {
    "kyc": (OVERVIEW_KEY,),
    "properties": (OVERVIEW_KEY,),
}


class CacheStore(Protocol):
    def get(self, key: CacheKey) -> Any | None: ...

    def set(self, key: CacheKey, value: Any) -> None: ...

    def invalidate(self, key: CacheKey) -> int: ...

    def keys(self) -> Iterable[CacheKey]: ...


def key_matches(key: CacheKey, prefix: CacheKey) -> bool:
    return key[: len(prefix)] == prefix


class InMemoryCacheStore:
    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    def get(self, key: CacheKey) -> Any | None:
        return self._entries.get(key)

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value

    def invalidate(self, key: CacheKey) -> int:
        matched = [existing for existing in self._entries if key_matches(existing, key)]
        for existing in matched:
            del self._entries[existing]
        return len(matched)

    def keys(self) -> Iterable[CacheKey]:
        return list(self._entries)


def list_key(collection: str, params: dict[str, Any]) -> CacheKey:
    return (collection, "list", params_key(params))


def detail_key(collection: str, entity_id: str) -> CacheKey:
    return (collection, "detail", entity_id)


class QueryCache:
    """Read-through cache for list pages and entity details.

    Entries are written only by fetches. A fetch that was already in flight
    when its key got invalidated still answers its callers but is not stored.
    Callers waiting on the same load can be cancelled independently.
    """

    def __init__(self, store: CacheStore | None = None) -> None:
        self.store: CacheStore = store if store is not None else InMemoryCacheStore()
        self._inflight: dict[CacheKey, asyncio.Task[Any]] = {}
        self._epochs: dict[CacheKey, int] = {}

    def peek(self, key: CacheKey) -> Any | None:
        return self.store.get(key)

    async def fetch(self, key: CacheKey, loader: Callable[[], Awaitable[T]]) -> T:
        cached = self.store.get(key)
        if cached is not None:
            return cached
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, loader, self._epochs.get(key, 0)))
            self._inflight[key] = task
        return await asyncio.shield(task)

    def invalidate(self, prefix: CacheKey) -> int:
        touched = set(self.store.keys()) | set(self._inflight)
        for key in touched:
            if key_matches(key, prefix):
                self._epochs[key] = self._epochs.get(key, 0) + 1
                self._inflight.pop(key, None)
        return self.store.invalidate(prefix)

    def invalidate_entity(self, collection: str, entity_id: str) -> None:
        dropped = self.invalidate((collection, "list"))
        dropped += self.invalidate(detail_key(collection, entity_id))
        for related in RELATED_KEYS.get(collection, ()):
            dropped += self.invalidate(related)
        logger.info(
            "cache invalidated collection=%s entity_id=%s entries=%s",
            collection,
            entity_id,
            dropped,
        )

    async def _load(self, key: CacheKey, loader: Callable[[], Awaitable[T]], started_epoch: int) -> T:
        try:
            value = await loader()
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]
        if self._epochs.get(key, 0) == started_epoch:
            self.store.set(key, value)
        else:
            logger.debug("discarding fetch invalidated while in flight key=%s", key)
        return value
