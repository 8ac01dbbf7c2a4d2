"""A persistent, rate-limit-aware cache in front of remote API calls."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .db import CacheEntry, CacheStore

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

RATE_LIMIT_HEADER = "x-ratelimit-limit"
RATE_REMAINING_HEADER = "x-ratelimit-remaining"


@dataclass
class RemoteResponse:
    """The payload of a remote call and the metadata (headers) that came with it."""

    data: Any
    meta: Mapping[str, str] = field(default_factory=dict)


def _header_int(headers: Mapping[str, str], name: str, default: int) -> int:
    """Read an integer header, keeping `default` when it is absent or not a number."""
    if name not in headers:
        return default
    try:
        return int(headers[name])
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric %s header %r", name, headers[name])
        return default


class RateLimitInfo:
    """The most recently reported rate limit of the remote service."""

    def __init__(self) -> None:
        """Initialize with an unknown (exhausted) quota."""
        self.limit: int = 0
        self.remaining: int = 0
        self.last_update: datetime = datetime.now()

    def read_from_response(self, meta: Mapping[str, str] | None) -> None:
        """Refresh from the rate limit headers of a response, if it has any."""
        if not meta:
            return
        headers = {str(k).lower(): v for k, v in meta.items()}
        self.limit = _header_int(headers, RATE_LIMIT_HEADER, self.limit)
        self.remaining = _header_int(headers, RATE_REMAINING_HEADER, self.remaining)
        self.last_update = datetime.now()

    def has_remaining(self) -> bool:
        """Check if the remote service will accept more calls."""
        return self.remaining > 0

    def to_status(self) -> str:
        """Summarize the rate limit."""
        return f"rate limit: {self.remaining} of {self.limit} @ {self.last_update:%Y-%m-%d %H:%M:%S}"


class StatCounter:
    """Thread-safe named counters."""

    def __init__(self) -> None:
        """Initialize with every counter at zero."""
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def count(self, name: str) -> int:
        """Increment a counter and return its new value."""
        with self._lock:
            self._counts[name] += 1
            return self._counts[name]

    def get(self, name: str) -> int:
        """Get the value of a counter."""
        with self._lock:
            return self._counts[name]

    def to_obj(self) -> dict[str, int]:
        """Return a snapshot of all counters."""
        with self._lock:
            return dict(self._counts)


class RemoteFetchCache:
    """Serve remote calls from a persistent store, calling out only on a miss.

    Concurrent calls for the same uncached key each call `fetch` and each store the result; the last write
    wins. Responses for a key are expected to be equivalent, so no single-flight locking is done here.

    """

    def __init__(self, store: CacheStore | str | Path = ":memory:") -> None:
        """Initialize the cache with a store, or the location of one."""
        if not isinstance(store, CacheStore):
            store = CacheStore(store)
        self.store: CacheStore = store
        self.rate: RateLimitInfo = RateLimitInfo()
        self.stats: StatCounter = StatCounter()

    def __enter__(self) -> RemoteFetchCache:
        """Open the underlying store."""
        self.store.__enter__()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        """Close the underlying store."""
        self.store.__exit__(exc_type, exc_val, exc_tb)

    @staticmethod
    def get_key(label: str, params: Mapping[str, Any] | None = None) -> str:
        """Hash a call label and its parameters, independent of parameter order."""
        ident = json.dumps([label, params or {}], sort_keys=True, separators=(",", ":"), default=str)
        return hashlib.sha1(ident.encode("utf-8")).hexdigest()  # noqa: S324

    def has_quota_remaining(self) -> bool:
        """Check if the last remote response reported calls remaining."""
        return self.rate.has_remaining()

    def get_or_fetch(
        self,
        label: str,
        params: Mapping[str, Any] | None,
        fetch: Callable[[], RemoteResponse],
    ) -> Any:  # noqa: ANN401
        """Return the stored payload for `(label, params)`, calling `fetch` and storing its payload on a miss.

        Errors raised by `fetch` propagate and nothing is stored.

        """
        key = self.get_key(label, params)
        self.stats.count("invoked")

        cached = self.store.get(key)
        if cached is not None:
            self.stats.count("store-hit")
            logger.debug("Cache hit for %s %s", label, key)
            return cached.data
        self.stats.count("store-miss")
        logger.debug("Cache miss for %s %s", label, key)

        self.stats.count("call-api")
        try:
            response = fetch()
        except Exception:
            self.stats.count("call-error")
            raise
        self.stats.count("call-success")
        self.rate.read_from_response(response.meta)
        logger.debug(self.rate.to_status())

        try:
            self.store.put(CacheEntry(label=label, key=key, data=response.data))
        except Exception:
            self.stats.count("store-set-error")
            logger.exception("Failed to store the result of %s", label)
        else:
            self.stats.count("store-set")
        return response.data
