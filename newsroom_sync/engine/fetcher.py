"""Asynchronous HTTP fetching against the source site."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict

import httpx
import structlog

from ..config import FetchSettings
from ..errors import FetchError
from ..infra import UserAgentPool


@dataclass(slots=True)
class FetchRequest:
    """Input for the fetcher."""

    url: str
    headers: dict[str, str] | None = None
    timeout: float | None = None


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]


class Fetcher:
    """Issue page and image requests with a browser identification header."""

    def __init__(
        self,
        settings: FetchSettings,
        ua_pool: UserAgentPool | None = None,
        logger: structlog.BoundLogger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.ua_pool = ua_pool or UserAgentPool(settings.user_agent, settings.user_agents)
        self.logger = logger or structlog.get_logger("newsroom_sync.fetcher")
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=settings.page_timeout,
            verify=settings.verify_tls,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, request: FetchRequest) -> FetchResponse:
        """GET a page, raising :class:`FetchError` once attempts are exhausted.

        ``settings.retries`` extra attempts are made with a linear backoff;
        the default of zero means a single attempt.
        """
        timeout = request.timeout or self.settings.page_timeout
        attempts = self.settings.retries + 1
        last_reason = "no attempt made"
        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.get(
                    request.url, headers=self._headers(request.headers), timeout=timeout
                )
            except httpx.HTTPError as exc:
                last_reason = f"{type(exc).__name__}: {exc}"
            else:
                if not self._is_failure(response):
                    return FetchResponse(
                        url=str(response.url),
                        status_code=response.status_code,
                        text=response.text,
                        headers=dict(response.headers),
                    )
                last_reason = f"unexpected status {response.status_code}"
            self.logger.warning(
                "fetch_error", url=request.url, attempt=attempt, error=last_reason
            )
            if attempt < attempts:
                await self._sleep(self.settings.retry_backoff * attempt)
        raise FetchError(request.url, last_reason)

    async def download(self, url: str, destination: Path, timeout: float | None = None) -> int:
        """Stream ``url`` into ``destination`` and return the byte count."""

        timeout = timeout or self.settings.image_timeout
        written = 0
        try:
            async with self._client.stream(
                "GET", url, headers=self._headers(None), timeout=timeout
            ) as response:
                if self._is_failure(response):
                    raise FetchError(url, f"unexpected status {response.status_code}")
                with destination.open("wb") as stream:
                    async for chunk in response.aiter_bytes():
                        stream.write(chunk)
                        written += len(chunk)
        except httpx.HTTPError as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc
        except OSError as exc:
            raise FetchError(url, f"cannot write {destination.name}: {exc}") from exc
        return written

    def _headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers = {"User-Agent": self.ua_pool.get()}
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _is_failure(response: Any) -> bool:
        status_code = getattr(response, "status_code", 0)
        return status_code >= 400


__all__ = ["FetchRequest", "FetchResponse", "Fetcher"]
