"""Basic retry policy helper."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterator, Optional, TypeVar

T = TypeVar("T")


class RetryPolicy:
    """Sequential async retry wrapper; ``backoff=1.0`` keeps the delay fixed."""

    def __init__(
        self,
        max_attempts: int = 3,
        delay: float = 2.0,
        backoff: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self.backoff = backoff
        self.sleep = sleep

    def delays(self) -> Iterator[float]:
        """Pauses taken between consecutive attempts."""
        delay = self.delay
        for _ in range(self.max_attempts - 1):
            yield delay
            delay *= self.backoff

    async def run(
        self,
        func: Callable[[], Awaitable[T]],
        on_attempt: Optional[Callable[[int], None]] = None,
    ) -> T:
        pauses = self.delays()
        attempt = 0
        while True:
            attempt += 1
            if on_attempt is not None:
                on_attempt(attempt)
            try:
                return await func()
            except asyncio.CancelledError:
                raise
            except Exception:
                if attempt >= self.max_attempts:
                    raise
                await self.sleep(next(pauses))
