"""Favicon fetching with a per-host on-disk cache.

One icon per host, stored as ``{icons_dir}/{host}.ico``.  Lookups go
memory cache -> the link's recorded path -> the host's cache file ->
network (``/favicon.ico`` on the host, then Google's s2 favicon service).

At most one network fetch per host is in flight; concurrent requests for
the same host return None rather than waiting.  A host whose fetch failed
is not retried until ``failure_cooldown`` seconds have passed.  Failures
never raise: the caller just gets None.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from functools import partial
from pathlib import Path
from urllib.parse import quote, urlsplit

import httpx
from anyio import to_thread
from loguru import logger

from arcmark.core.store.base import favicon_cache_path

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1"})
_FALLBACK_ENDPOINT = "https://www.google.com/s2/favicons?sz=64&domain_url="


class FaviconService:
    def __init__(
        self,
        client: httpx.AsyncClient,
        icons_dir: Path,
        *,
        timeout: float = 5.0,
        failure_cooldown: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._icons_dir = icons_dir
        self._timeout = timeout
        self._failure_cooldown = failure_cooldown
        self._clock = clock
        self._cache: dict[str, str] = {}
        self._in_flight: set[str] = set()
        self._failures: dict[str, float] = {}

    def cache_path(self, host: str) -> Path:
        return favicon_cache_path(self._icons_dir, host)

    async def favicon_path(self, url: str, cached_path: str | None = None) -> str | None:
        """Return a local file path holding the favicon for ``url``'s host, or None."""
        parts = urlsplit(url)
        host = parts.hostname
        if not host or host in _LOCAL_HOSTS:
            return None

        failed_at = self._failures.get(host)
        if failed_at is not None and self._clock() - failed_at < self._failure_cooldown:
            logger.debug("Skipping favicon fetch for {} due to cooldown", host)
            return None

        if host in self._cache:
            return self._cache[host]

        if cached_path and await to_thread.run_sync(Path(cached_path).is_file):
            self._cache[host] = cached_path
            return cached_path

        target = self.cache_path(host)
        if await to_thread.run_sync(target.is_file):
            self._cache[host] = str(target)
            return str(target)

        if host in self._in_flight:
            return None
        self._in_flight.add(host)
        try:
            return await self._fetch_and_store(host, parts.scheme or "https", target)
        finally:
            self._in_flight.discard(host)

    async def _fetch_and_store(self, host: str, scheme: str, target: Path) -> str | None:
        logger.debug("Fetching favicon for {}", host)
        origin = f"{scheme}://{host}"
        data = await self._fetch(f"{origin}/favicon.ico")
        if data is None:
            data = await self._fetch(_FALLBACK_ENDPOINT + quote(origin, safe=""))
        if data is None:
            self._failures[host] = self._clock()
            logger.debug("Favicon fetch failed for {}", host)
            return None

        try:
            await to_thread.run_sync(partial(_write_bytes, target, data))
        except OSError as exc:
            logger.warning("Failed to write favicon for {}: {}", host, exc)
            return None

        self._failures.pop(host, None)
        self._cache[host] = str(target)
        logger.debug("Favicon fetch succeeded for {}", host)
        return str(target)

    async def _fetch(self, url: str) -> bytes | None:
        try:
            response = await self._client.get(url, follow_redirects=True, timeout=self._timeout)
        except httpx.HTTPError as exc:
            logger.debug("Favicon fetch error {}: {}", url, exc)
            return None
        if not response.is_success or not response.content:
            return None
        return response.content


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
