"""DOM parsing for listing and detail pages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urljoin

from selectolax.lexbor import LexborHTMLParser, LexborNode

from ..config import DetailSettings, ListingSettings
from ..errors import ParseError
from .records import DetailedContent, ListingCandidate

_DAY_FIRST_DATE = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})")


@dataclass
class ListingParse:
    candidates: list[ListingCandidate]
    used_fallback: bool


@dataclass
class DetailParse:
    content: DetailedContent
    container_found: bool


def node_text(node: LexborNode | None) -> str:
    if node is None:
        return ""
    return (node.text() or "").strip()


def inner_html(node: LexborNode) -> str:
    return node.inner_html or ""


def resolve_url(base_url: str, href: str) -> str:
    """Join a scraped ``href`` onto ``base_url``.

    Raises :class:`ParseError` for references that cannot be a URL, such as
    an unterminated IPv6 host.
    """
    try:
        return urljoin(base_url, href)
    except ValueError as exc:
        raise ParseError(f"unresolvable link {href!r}: {exc}") from exc


def image_source(node: LexborNode) -> str | None:
    for attr in ("src", "data-src"):
        value = node.attributes.get(attr)
        if value and value.strip():
            return value.strip()
    return None


def parse_day_first(text: str, now: datetime) -> datetime:
    """Parse the first ``DD.MM.YYYY`` in ``text``; anything else means ``now``."""

    match = _DAY_FIRST_DATE.search(text or "")
    if not match:
        return now
    day, month, year = (int(group) for group in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return now


class Parser:
    """Parse listing and detail pages according to content type selectors."""

    def parse_listing(
        self,
        settings: ListingSettings,
        html: str,
        base_url: str,
        now: datetime,
    ) -> ListingParse:
        tree = LexborHTMLParser(html)
        items = tree.css(settings.item_selector)
        if not items:
            return ListingParse(self._scan_anchors(settings, tree, base_url, now), True)

        candidates: list[ListingCandidate] = []
        for ordinal, item in enumerate(items[: settings.max_items]):
            title = node_text(item.css_first(settings.title_selector))
            link = self._first_href(item, settings.link_selectors)
            if not title or len(title) <= settings.min_title_length or not link:
                continue
            try:
                resolved = resolve_url(base_url, link)
                thumbnail = self._thumbnail(item, settings, base_url)
            except ParseError:
                continue
            date_text = node_text(item.css_first(settings.date_selector))
            candidates.append(
                ListingCandidate(
                    ordinal=ordinal,
                    title=title[: settings.title_max_length],
                    link=resolved,
                    published_at=parse_day_first(date_text, now),
                    category=settings.category,
                    thumbnail_url=thumbnail,
                )
            )
        return ListingParse(candidates, False)

    def _scan_anchors(
        self,
        settings: ListingSettings,
        tree: LexborHTMLParser,
        base_url: str,
        now: datetime,
    ) -> list[ListingCandidate]:
        candidates: list[ListingCandidate] = []
        for anchor in tree.css("a"):
            if len(candidates) >= settings.fallback_max_items:
                break
            href = (anchor.attributes.get("href") or "").strip()
            text = node_text(anchor)
            if not href or len(text) <= settings.fallback_min_text_length:
                continue
            if not any(marker in href for marker in settings.fallback_path_markers):
                continue
            try:
                link = resolve_url(base_url, href)
            except ParseError:
                continue
            candidates.append(
                ListingCandidate(
                    ordinal=len(candidates),
                    title=text[: settings.title_max_length],
                    link=link,
                    published_at=now,
                    category=settings.fallback_category,
                )
            )
        return candidates

    @staticmethod
    def _thumbnail(item: LexborNode, settings: ListingSettings, base_url: str) -> str | None:
        if not settings.thumbnail_selector:
            return None
        node = item.css_first(settings.thumbnail_selector)
        src = image_source(node) if node is not None else None
        return resolve_url(base_url, src) if src else None

    @staticmethod
    def _image_urls(nodes: list[LexborNode], base_url: str, marker: str | None = None) -> list[str]:
        urls: list[str] = []
        for node in nodes:
            src = image_source(node)
            if not src or (marker is not None and marker not in src):
                continue
            try:
                urls.append(resolve_url(base_url, src))
            except ParseError:
                continue
        return urls

    @staticmethod
    def _first_href(item: LexborNode, selectors: list[str]) -> str | None:
        for selector in selectors:
            node = item.css_first(selector)
            if node is None:
                continue
            href = (node.attributes.get("href") or "").strip()
            if href:
                return href
        return None

    def parse_detail(self, settings: DetailSettings, html: str, base_url: str) -> DetailParse:
        tree = LexborHTMLParser(html)
        container = tree.css_first(settings.content_selector)

        full_content = ""
        for paragraph in tree.css(f"{settings.content_selector} {settings.paragraph_selector}"):
            markup = inner_html(paragraph)
            if markup:
                full_content += markup + "\n"
        if not full_content.strip() and container is not None:
            full_content = inner_html(container) or node_text(container)

        images = self._image_urls(tree.css(f"{settings.content_selector} img"), base_url)
        scope = settings.thumbnail_scope_selector
        for resolved in self._image_urls(
            tree.css(f"{scope} img" if scope else "img"), base_url, settings.thumbnail_marker
        ):
            if resolved not in images:
                images.append(resolved)

        content = DetailedContent(
            category=node_text(tree.css_first(settings.category_selector)),
            full_date=node_text(tree.css_first(settings.date_selector)),
            full_title=node_text(tree.css_first(settings.title_selector)),
            full_content_html=full_content,
            content_image_urls=images,
        )
        return DetailParse(content, container is not None)


__all__ = ["DetailParse", "ListingParse", "Parser", "inner_html", "parse_day_first", "resolve_url"]
