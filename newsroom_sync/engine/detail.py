"""Detail page enrichment."""

from __future__ import annotations

import structlog

from ..config import DetailSettings
from ..errors import FetchError
from .fetcher import FetchRequest, Fetcher
from .outcome import Outcome
from .parser import Parser
from .records import DetailedContent


class DetailEnricher:
    """Fetch one detail page and extract its full content and images."""

    def __init__(
        self,
        fetcher: Fetcher,
        settings: DetailSettings,
        base_url: str,
        parser: Parser | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.settings = settings
        self.base_url = base_url
        self.parser = parser or Parser()
        self.logger = logger or structlog.get_logger("newsroom_sync.detail")

    async def enrich(self, url: str) -> Outcome[DetailedContent | None]:
        try:
            response = await self.fetcher.fetch(FetchRequest(url=url))
        except FetchError as exc:
            self.logger.error("detail_fetch_failed", url=url, error=exc.reason)
            return Outcome.failed(None, exc.reason)
        try:
            parsed = self.parser.parse_detail(self.settings, response.text, self.base_url)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("detail_parse_failed", url=url, error=str(exc))
            return Outcome.failed(None, f"parse: {exc}")

        content = parsed.content
        self.logger.info(
            "item_enriched",
            url=url,
            title=content.full_title,
            content_length=len(content.full_content_html),
            images=len(content.content_image_urls),
        )
        if not parsed.container_found:
            return Outcome.fallback(content, "content_container_missing")
        if not content.full_content_html.strip():
            return Outcome.fallback(content, "content_empty")
        return Outcome.ok(content)


__all__ = ["DetailEnricher"]
