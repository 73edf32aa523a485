"""Runtime records flowing through one pipeline run."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from html import unescape
from typing import Any

_TAG = re.compile(r"<[^>]*>")
_MIN_DATE = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class ListingCandidate:
    """Summary-level entry parsed from a listing page."""

    ordinal: int
    title: str
    link: str
    published_at: datetime
    category: str
    thumbnail_url: str | None = None


@dataclass(slots=True)
class DetailedContent:
    """Fields extracted from a detail page; any of them may be empty."""

    category: str = ""
    full_date: str = ""
    full_title: str = ""
    full_content_html: str = ""
    content_image_urls: list[str] = field(default_factory=list)


@dataclass(slots=True)
class StoredImage:
    """Result of materialising one image.

    ``url`` is the public URL of the uploaded asset or, when nothing could be
    uploaded, the original ``source_url``.
    """

    url: str
    source_url: str
    key: str | None = None
    transcoded: bool = False
    original_size: int | None = None
    stored_size: int | None = None

    @classmethod
    def passthrough(cls, source_url: str) -> "StoredImage":
        return cls(url=source_url, source_url=source_url)

    @property
    def uploaded(self) -> bool:
        return self.key is not None


@dataclass(slots=True, frozen=True)
class PublishedRecord:
    """Unit written to a destination collection."""

    title: str
    link: str
    image_url: str
    content_images: tuple[str, ...]
    date: str
    full_date: str
    category: str
    full_content: str
    summary: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "imageUrl": self.image_url,
            "contentImages": list(self.content_images),
            "date": self.date,
            "fullDate": self.full_date,
            "category": self.category,
            "fullContent": self.full_content,
            "summary": self.summary,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PublishedRecord":
        images = payload.get("contentImages") or []
        return cls(
            title=str(payload.get("title") or ""),
            link=str(payload.get("link") or ""),
            image_url=str(payload.get("imageUrl") or ""),
            content_images=tuple(str(url) for url in images if url),
            date=str(payload.get("date") or ""),
            full_date=str(payload.get("fullDate") or ""),
            category=str(payload.get("category") or ""),
            full_content=str(payload.get("fullContent") or ""),
            summary=str(payload.get("summary") or ""),
        )

    @property
    def sort_key(self) -> datetime:
        return parse_timestamp(self.date) or _MIN_DATE


def normalise_title(title: str) -> str:
    return title.strip().lower()


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def strip_markup(html: str) -> str:
    return unescape(_TAG.sub("", html))


def build_summary(full_content: str, title: str, length: int = 200, title_length: int = 100) -> str:
    if full_content:
        return strip_markup(full_content)[:length] + "..."
    return f"{title[:title_length]}..."


def assemble_record(
    candidate: ListingCandidate,
    details: DetailedContent | None,
    images: list[str],
    *,
    summary_length: int = 200,
    title_summary_length: int = 100,
) -> PublishedRecord:
    """Merge listing, detail and image results; detail fields win when present.

    ``images`` holds the materialised first image followed by the remaining
    discovered URLs.
    """
    date = format_timestamp(candidate.published_at)
    full_content = details.full_content_html if details else ""
    if images:
        image_url = images[0]
    else:
        image_url = candidate.thumbnail_url or ""
    return PublishedRecord(
        title=(details.full_title if details else "") or candidate.title,
        link=candidate.link,
        image_url=image_url,
        content_images=tuple(images),
        date=date,
        full_date=(details.full_date if details else "") or date,
        category=(details.category if details else "") or candidate.category,
        full_content=full_content,
        summary=build_summary(full_content, candidate.title, summary_length, title_summary_length),
    )


def carry_forward(candidate: ListingCandidate, previous: dict[str, Any]) -> PublishedRecord:
    """Rebuild an already published record with the fresh listing link and date."""

    record = PublishedRecord.from_payload(previous)
    date = format_timestamp(candidate.published_at)
    return PublishedRecord(
        title=record.title or candidate.title,
        link=candidate.link,
        image_url=record.image_url or candidate.thumbnail_url or "",
        content_images=record.content_images,
        date=date,
        full_date=record.full_date or date,
        category=record.category or candidate.category,
        full_content=record.full_content,
        summary=record.summary or build_summary(record.full_content, candidate.title),
    )


def sort_records(records: list[PublishedRecord]) -> list[PublishedRecord]:
    """Newest first; ties keep listing order."""

    return sorted(records, key=lambda record: record.sort_key, reverse=True)


__all__ = [
    "DetailedContent",
    "ListingCandidate",
    "PublishedRecord",
    "StoredImage",
    "assemble_record",
    "build_summary",
    "carry_forward",
    "format_timestamp",
    "normalise_title",
    "parse_timestamp",
    "sort_records",
    "strip_markup",
]
