"""In-memory poster cache with single-flight, retrying fetches.

Each key has at most one fetch in flight. Callers subscribe to it through
:meth:`AssetCache.request`; cancelling a subscription only detaches that
caller, and the fetch itself stops once nobody is waiting for it.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Optional, Set

from .config import settings
from .errors import AssetFetchError
from .models import CacheEntry, CacheState
from .transport import Transport
from .utils.images import looks_like_image
from .utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

Callback = Callable[[CacheEntry], None]


class _Slot:
    __slots__ = ("key", "state", "attempt", "value", "error", "task", "subscribers")

    def __init__(self, key: str) -> None:
        self.key = key
        self.state = CacheState.PENDING
        self.attempt = 0
        self.value: Optional[bytes] = None
        self.error: Optional[str] = None
        self.task: Optional[asyncio.Task] = None
        self.subscribers: Set["AssetRequest"] = set()

    def snapshot(self) -> CacheEntry:
        return CacheEntry(
            key=self.key,
            state=self.state,
            attempt=self.attempt,
            value=self.value,
            error=self.error,
        )


class AssetRequest:
    """One caller's interest in a key. Await it for the terminal entry."""

    def __init__(
        self,
        cache: "AssetCache",
        key: str,
        future: asyncio.Future,
        callback: Optional[Callback] = None,
    ) -> None:
        self.key = key
        self._cache = cache
        self._future = future
        self._callback = callback

    @property
    def entry(self) -> CacheEntry:
        if self._future.done() and not self._future.cancelled():
            return self._future.result()
        current = self._cache.peek(self.key)
        return current or CacheEntry(key=self.key, state=CacheState.PENDING)

    def done(self) -> bool:
        return self._future.done()

    def cancelled(self) -> bool:
        return self._future.cancelled()

    def cancel(self) -> bool:
        """Stop waiting; other subscribers of the same key are unaffected."""
        return self._future.cancel()

    def __await__(self):
        return self._future.__await__()

    def _deliver(self, entry: CacheEntry) -> None:
        if self._future.done():
            return
        self._future.set_result(entry)
        if self._callback is not None:
            try:
                self._callback(entry)
            except Exception:
                logger.exception("Asset callback for %s raised", self.key)


class AssetCache:
    """Bounded key to bytes cache for remote images."""

    def __init__(
        self,
        transport: Transport,
        max_retries: int = settings.asset_max_retries,
        retry_delay: float = settings.asset_retry_delay,
        max_entries: Optional[int] = settings.asset_cache_size,
        validator: Callable[[bytes], bool] = looks_like_image,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive or None")
        self.transport = transport
        self.max_entries = max_entries
        self.validator = validator
        self.retry_policy = RetryPolicy(max_attempts=max_retries, delay=retry_delay, sleep=sleep)
        self._slots: "OrderedDict[str, _Slot]" = OrderedDict()

    async def __aenter__(self) -> "AssetCache":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    @property
    def max_retries(self) -> int:
        return self.retry_policy.max_attempts

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #
    def peek(self, key: str) -> Optional[CacheEntry]:
        slot = self._slots.get(key)
        return slot.snapshot() if slot is not None else None

    def get(self, key: str) -> Optional[bytes]:
        slot = self._slots.get(key)
        if slot is None or slot.state is not CacheState.RESOLVED:
            return None
        self._slots.move_to_end(key)
        return slot.value

    def in_flight(self, key: str) -> bool:
        slot = self._slots.get(key)
        return slot is not None and slot.task is not None and not slot.task.done()

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #
    def request(self, key: str, callback: Optional[Callback] = None) -> AssetRequest:
        """Subscribe to ``key`` without blocking. Must run inside an event loop."""
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        request = AssetRequest(self, key, future, callback)

        slot = self._slots.get(key)
        if slot is not None and slot.state is CacheState.RESOLVED:
            self._slots.move_to_end(key)
            request._deliver(slot.snapshot())
            return request

        if slot is None or slot.state is CacheState.FAILED:
            slot = _Slot(key)
            self._slots[key] = slot
            self._slots.move_to_end(key)
            slot.task = loop.create_task(self._run(slot))
            logger.debug("Started fetch for %s", key)

        slot.subscribers.add(request)
        future.add_done_callback(lambda _: self._detach(request))
        return request

    async def resolve(self, key: str) -> CacheEntry:
        """Wait for ``key`` to reach Resolved or Failed."""
        return await self.request(key)

    def cancel(self, key: str) -> bool:
        """Abandon the in-flight fetch for ``key`` and all of its waiters."""
        slot = self._slots.get(key)
        if slot is None or slot.state is not CacheState.PENDING:
            return False
        del self._slots[key]
        if slot.task is not None:
            slot.task.cancel()
        for request in list(slot.subscribers):
            request.cancel()
        slot.subscribers.clear()
        logger.debug("Cancelled fetch for %s", key)
        return True

    def reset(self, key: str) -> bool:
        """Forget ``key`` whatever its state."""
        if self.cancel(key):
            return True
        return self._slots.pop(key, None) is not None

    def clear(self) -> None:
        for key in list(self._slots):
            self.reset(key)

    async def aclose(self) -> None:
        tasks = [slot.task for slot in self._slots.values() if slot.task is not None and not slot.task.done()]
        self.clear()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    async def _run(self, slot: _Slot) -> None:
        def on_attempt(attempt: int) -> None:
            slot.attempt = attempt
            if attempt > 1:
                logger.info("Retrying %s (attempt %d/%d)", slot.key, attempt, self.max_retries)

        try:
            value = await self.retry_policy.run(lambda: self._fetch_once(slot), on_attempt=on_attempt)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            slot.state = CacheState.FAILED
            slot.error = str(exc) or type(exc).__name__
            logger.warning("Giving up on %s after %d attempts: %s", slot.key, slot.attempt, slot.error)
        else:
            slot.state = CacheState.RESOLVED
            slot.value = value
            slot.error = None
        finally:
            slot.task = None
        self._settle(slot)

    async def _fetch_once(self, slot: _Slot) -> bytes:
        try:
            data = await self.transport.fetch(slot.key)
            if not self.validator(data):
                raise AssetFetchError("payload is not image data", slot.key)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.info("Attempt %d for %s failed: %s", slot.attempt, slot.key, exc)
            raise
        return data

    def _settle(self, slot: _Slot) -> None:
        entry = slot.snapshot()
        subscribers = list(slot.subscribers)
        slot.subscribers.clear()
        if self._slots.get(slot.key) is slot:
            self._slots.move_to_end(slot.key)
        for request in subscribers:
            request._deliver(entry)
        self._evict_overflow()

    def _detach(self, request: AssetRequest) -> None:
        slot = self._slots.get(request.key)
        if slot is None or request not in slot.subscribers:
            return
        slot.subscribers.discard(request)
        if not slot.subscribers and slot.state is CacheState.PENDING:
            del self._slots[request.key]
            if slot.task is not None:
                slot.task.cancel()
            logger.debug("Last subscriber left %s; fetch cancelled", request.key)

    def _evict_overflow(self) -> None:
        """Trim settled entries, oldest first; Pending slots do not count against the bound."""
        if self.max_entries is None:
            return
        settled = [key for key, slot in self._slots.items() if slot.state is not CacheState.PENDING]
        for key in settled[: max(0, len(settled) - self.max_entries)]:
            del self._slots[key]
            logger.debug("Evicted %s", key)
