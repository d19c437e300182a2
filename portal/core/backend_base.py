"""
Shared read-through caching and fan-out helpers for upstream backends.
"""
import asyncio
import logging
from abc import ABC
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TypeVar

import requests
from pydantic import TypeAdapter

from portal.core.cache_helper import CacheHelper
from portal.core.errors import UpstreamUnavailable

T = TypeVar("T")


class CachedBackend(ABC):
    """
    Base for LMS / intranet backends. Public read methods go through
    _cached(): cache hit returns the stored value, miss calls the upstream
    fetch, stores the normalized result with the method TTL and returns it.
    """

    source_name = "upstream"

    def __init__(self, cache: CacheHelper, logger: Optional[logging.Logger] = None):
        self.cache = cache
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def _cached(
        self,
        key: str,
        ttl_seconds: int,
        adapter: TypeAdapter,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            try:
                return adapter.validate_python(cached)
            except ValueError as e:
                self.logger.warning(f"Discarding malformed cache entry {key}: {e}")

        value = await fetch()
        self.cache.set(key, adapter.dump_python(value, mode="json"), ttl_seconds)
        return value

    async def _gather_tolerant(
        self,
        label: str,
        coros: Iterable[Awaitable[Optional[T]]],
    ) -> List[T]:
        """
        Run per-item fetches concurrently. Failed items are logged and dropped;
        None results (item legitimately absent) are dropped silently. Raises
        UpstreamUnavailable only if every item of a non-empty set failed.
        """
        results = await asyncio.gather(*coros, return_exceptions=True)
        kept: List[T] = []
        failures = 0
        for result in results:
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures += 1
                self.logger.error(f"{self.source_name}: {label} item failed: {result}")
                continue
            if result is not None:
                kept.append(result)

        if results and failures == len(results):
            raise UpstreamUnavailable(f"{self.source_name}: all {label} requests failed")
        if failures:
            self.logger.warning(
                f"{self.source_name}: {failures}/{len(results)} {label} requests failed, returning partial result"
            )
        return kept

    def _normalize(self, label: str, normalizer: Callable[[Any], T], raw: Any) -> T:
        """Map a raw upstream payload; an unexpected shape counts as an upstream failure."""
        try:
            return normalizer(raw)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(f"{self.source_name}: malformed {label} payload: {e}")
            raise UpstreamUnavailable(f"{self.source_name}: malformed {label} response") from e

    def close(self) -> None:
        """Release network resources. Mock backends hold none."""


class HttpBackendMixin:
    """Blocking requests calls pushed off the event loop, with a fixed timeout."""

    REQUEST_TIMEOUT = 10

    session: requests.Session
    source_name: str
    logger: logging.Logger

    async def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", self.REQUEST_TIMEOUT)
        try:
            return await asyncio.to_thread(self.session.request, method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            self.logger.error(f"{self.source_name}: network error on {method} {url}: {e}")
            raise UpstreamUnavailable(f"{self.source_name} request failed: {e}") from e

    def _json(self, response: requests.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"{self.source_name} response was not valid JSON for {url}") from e

    def close(self) -> None:
        self.session.close()
