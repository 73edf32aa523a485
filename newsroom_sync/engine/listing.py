"""Listing page discovery."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import structlog

from ..config import ListingSettings
from ..errors import FetchError
from .fetcher import FetchRequest, Fetcher
from .outcome import Outcome
from .parser import Parser
from .records import ListingCandidate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ListingExtractor:
    """Turn one listing page into ordered candidates.

    Never raises: a failed fetch or parse yields ``Outcome.failed([])`` so the other
    content types keep running.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        settings: ListingSettings,
        base_url: str,
        parser: Parser | None = None,
        logger: structlog.BoundLogger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.fetcher = fetcher
        self.settings = settings
        self.base_url = base_url
        self.parser = parser or Parser()
        self.logger = logger or structlog.get_logger("newsroom_sync.listing")
        self.clock = clock

    async def extract(self) -> Outcome[list[ListingCandidate]]:
        try:
            response = await self.fetcher.fetch(FetchRequest(url=self.settings.url))
        except FetchError as exc:
            self.logger.error("listing_fetch_failed", url=self.settings.url, error=exc.reason)
            return Outcome.failed([], exc.reason)

        try:
            parsed = self.parser.parse_listing(
                self.settings, response.text, self.base_url, self.clock()
            )
        except Exception as exc:  # noqa: BLE001
            self.logger.error("listing_parse_failed", url=self.settings.url, error=str(exc))
            return Outcome.failed([], f"parse: {exc}")
        if parsed.used_fallback:
            self.logger.warning(
                "listing_fallback_scan",
                url=self.settings.url,
                selector=self.settings.item_selector,
                candidates=len(parsed.candidates),
            )
            return Outcome.fallback(parsed.candidates, "primary_selector_empty")
        self.logger.info("listing_fetched", url=self.settings.url, candidates=len(parsed.candidates))
        return Outcome.ok(parsed.candidates)


__all__ = ["ListingExtractor"]
