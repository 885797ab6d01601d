# =============================================================================
# lib/fetch_guard.py - Guarded Data Fetching
# =============================================================================
# Wraps slow, synchronous Supabase reads so the API never hangs on them:
# - De-duplication: concurrent requests for the same key share one load
# - Memoisation: a successful result is reused for `ttl` seconds; expired
#   entries are pruned whenever a new value is stored
# - Timeouts: a load that outlives its deadline raises FetchTimeoutError
# - Retry: failures are never cached, so the next call loads again
#
# Usage:
#   from lib.fetch_guard import FetchGuard
#
#   library_guard = FetchGuard("exercise library", ttl=300, timeout=10)
#   rows = await library_guard.run("all", ExerciseService.load_library)
#
#   # Force a fresh load (e.g. after a profile edit)
#   rows = await library_guard.run("all", loader, force=True)
# =============================================================================

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, Callable

from app.exceptions import FetchTimeoutError

logger = logging.getLogger(__name__)


class FetchGuard:
    """
    Per-process guard around a family of related loads.

    Each guard is keyed: the user context guard uses the user ID, the
    library guard uses a constant. Plain callables run in a worker thread
    via asyncio.to_thread; coroutine functions are awaited directly.

    A timed-out loader thread cannot be killed. It finishes in the
    background and its result is discarded.
    """

    def __init__(self, name: str, ttl: float = 0.0, timeout: float = 10.0):
        self.name = name
        self.ttl = ttl
        self.timeout = timeout
        # key -> in-flight load shared by concurrent callers
        self._inflight: dict[str, asyncio.Task] = {}
        # key -> (loaded_at, value)
        self._cache: dict[str, tuple[float, Any]] = {}

    async def run(
        self,
        key: str,
        loader: Callable[[], Any],
        *,
        timeout: float | None = None,
        force: bool = False,
    ) -> Any:
        """
        Load `key`, reusing a cached or in-flight result when possible.

        Args:
            key: Cache / de-duplication key
            loader: Zero-argument callable (or coroutine function) doing the fetch
            timeout: Overrides the guard's default timeout
            force: Skip the cache and any in-flight load

        Returns:
            Whatever the loader returned

        Raises:
            FetchTimeoutError: If the load takes longer than the timeout
            Exception: Whatever the loader raised
        """
        if not force:
            cached = self._cache.get(key)
            if cached is not None and time.monotonic() - cached[0] < self.ttl:
                logger.debug(f"{self.name}: cache hit for {key}")
                return cached[1]

            inflight = self._inflight.get(key)
            if inflight is not None and not inflight.done():
                logger.debug(f"{self.name}: joining in-flight load for {key}")
                return await asyncio.shield(inflight)

        task = asyncio.ensure_future(self._load(key, loader, timeout or self.timeout))
        self._inflight[key] = task
        task.add_done_callback(lambda done: self._finished(key, done))
        return await asyncio.shield(task)

    def _finished(self, key: str, task: asyncio.Task) -> None:
        # Runs even when every awaiting caller was cancelled.
        # Reading the exception keeps asyncio from logging it as unretrieved.
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            task.exception()

    async def _load(self, key: str, loader: Callable[[], Any], timeout: float) -> Any:
        started = time.monotonic()
        if inspect.iscoroutinefunction(loader):
            pending = loader()
        else:
            pending = asyncio.to_thread(loader)

        try:
            value = await asyncio.wait_for(pending, timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{self.name}: load for {key} timed out after {timeout:g}s")
            raise FetchTimeoutError(self.name, timeout)

        if self.ttl > 0:
            now = time.monotonic()
            self._prune(now)
            self._cache[key] = (now, value)
        logger.debug(f"{self.name}: loaded {key} in {time.monotonic() - started:.2f}s")
        return value

    def invalidate(self, key: str) -> None:
        """Drop the cached value for a key so the next run reloads it."""
        self._cache.pop(key, None)

    def clear(self) -> None:
        """Forget all cached values and in-flight loads."""
        self._cache.clear()
        self._inflight.clear()

    def _prune(self, now: float) -> None:
        """Drop expired entries so keys that are never read again don't pile up."""
        expired = [k for k, (loaded_at, _) in self._cache.items() if now - loaded_at >= self.ttl]
        for key in expired:
            del self._cache[key]
