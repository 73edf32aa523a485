"""Inter-request pacing towards the source site."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable


class RequestPacer:
    """Fixed pause between processed items; zero disables pacing."""

    def __init__(
        self,
        interval: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._sleep = sleep
        self.pauses = 0

    async def pause(self) -> None:
        if self.interval <= 0:
            return
        self.pauses += 1
        await self._sleep(self.interval)


__all__ = ["RequestPacer"]
