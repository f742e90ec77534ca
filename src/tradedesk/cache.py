"""In-process TTL cache shared by the exchange-client and price caches."""

from __future__ import annotations

import time
from typing import Callable, Generic, Hashable, Iterator, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """Mapping of key -> value that forgets entries ``ttl`` seconds after they were set.

    Expiry is lazy: an expired entry stays in memory until the next ``get``
    (or ``pop``) for its key. There is no locking; concurrent writers for
    the same key simply overwrite each other.
    """

    def __init__(self, ttl: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[K, tuple[V, float]] = {}

    def get(self, key: K) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: K, value: V) -> None:
        self._entries[key] = (value, self._clock() + self.ttl)

    def pop(self, key: K) -> V | None:
        """Remove ``key`` and return its value, expired or not."""
        entry = self._entries.pop(key, None)
        return entry[0] if entry else None

    def expired(self, key: K) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() >= entry[1]

    def values(self) -> Iterator[V]:
        """Iterate every stored value, including ones past their expiry."""
        for value, _ in list(self._entries.values()):
            yield value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and self._clock() < entry[1]

    def __len__(self) -> int:
        return len(self._entries)
